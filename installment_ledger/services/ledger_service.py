"""Ledger service: issue, edit, submit, settle and report on ledger entries"""

import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from installment_ledger.config import settings
from installment_ledger.domain.exceptions import InvalidPaymentError
from installment_ledger.domain.integrity import check_deletion
from installment_ledger.domain.ledger import (
    compute_total_value,
    create_entry,
    edit_installment_amount,
    edit_installment_due_date,
    update_header,
)
from installment_ledger.domain.models import (
    DeletionCheck,
    Installment,
    InstallmentRow,
    LedgerEntry,
    RebalanceWarning,
    ReconciliationSummary,
    ValidationResult,
)
from installment_ledger.domain.ports import InstallmentRepository
from installment_ledger.domain.reconciliation import summarize
from installment_ledger.domain.settlement import refresh_statuses, register_payment
from installment_ledger.domain.validation import validate_entry
from installment_ledger.infrastructure.observability.logging import (
    log_payment,
    log_rebalance_warning,
    log_validation_outcome,
)
from installment_ledger.infrastructure.observability.metrics import (
    record_payment,
    record_rebalance_warning,
    record_schedule,
    record_validation,
)
from installment_ledger.schemas import AmountEditInput, DueDateEditInput, EntryHeaderInput, PaymentInput
from installment_ledger.utils.date_utils import today_in

logger = logging.getLogger(__name__)


def _split_rows(rows: Sequence[Installment]) -> Tuple[Optional[Installment], List[Installment]]:
    down_payment_row = next((row for row in rows if row.is_down_payment), None)
    regular = sorted((row for row in rows if not row.is_down_payment), key=lambda row: row.number)
    return down_payment_row, regular


def _replace_row(entry: LedgerEntry, updated: Installment) -> LedgerEntry:
    if updated.is_down_payment:
        return replace(entry, down_payment_row=updated)
    return replace(
        entry,
        installments=[updated if inst.number == updated.number else inst for inst in entry.installments],
    )


class LedgerService:
    """Runs ledger entries through the engine and the persistence collaborator"""

    def __init__(
        self,
        repository: InstallmentRepository,
        tolerance_cents: Optional[int] = None,
        interval_months: Optional[int] = None,
        timezone: Optional[str] = None,
    ):
        self.repository = repository
        self.tolerance_cents = settings.balance_tolerance_cents if tolerance_cents is None else tolerance_cents
        self.interval_months = interval_months or settings.installment_interval_months
        self.timezone = timezone or settings.timezone

    def today(self) -> date:
        return today_in(self.timezone)

    def issue(self, header: EntryHeaderInput) -> LedgerEntry:
        """Build a new entry with its initial schedule (not persisted until submit)"""
        entry = create_entry(
            issue_date=header.issue_date,
            document_value=header.document_value,
            discount=header.discount,
            interest=header.interest,
            down_payment=header.down_payment,
            installment_count=header.installment_count,
            interval_months=self.interval_months,
            entry_id=header.entry_id,
            document_number=header.document_number,
            party_id=header.party_id,
        )
        record_schedule("issued", entry.installment_count)
        return entry

    def load(self, header: EntryHeaderInput) -> LedgerEntry:
        """
        Rebuild a stored entry from its header and persisted rows.

        Stored due dates count as user choices, so a later structural change
        re-splits amounts but keeps them.
        """
        if not header.entry_id:
            raise ValueError("entry_id is required to load a stored entry")

        down_payment_row, regular = _split_rows(self.repository.load_installments(header.entry_id))
        today = self.today()
        if down_payment_row is not None:
            down_payment_row = refresh_statuses([down_payment_row], today)[0]

        return LedgerEntry(
            issue_date=header.issue_date,
            document_value=header.document_value,
            discount=header.discount,
            interest=header.interest,
            total_value=compute_total_value(header.document_value, header.discount, header.interest),
            down_payment=header.down_payment,
            installments=refresh_statuses(regular, today),
            down_payment_row=down_payment_row,
            manually_overridden=bool(regular),
            entry_id=header.entry_id,
            document_number=header.document_number,
            party_id=header.party_id,
        )

    def change_header(self, entry: LedgerEntry, header: EntryHeaderInput, force: bool = False) -> LedgerEntry:
        """Apply edited header fields, regenerating the schedule where the policy requires"""
        updated = update_header(
            entry,
            document_value=header.document_value,
            discount=header.discount,
            interest=header.interest,
            down_payment=header.down_payment,
            installment_count=header.installment_count,
            issue_date=header.issue_date,
            force=force,
            interval_months=self.interval_months,
            today=self.today(),
        )
        if [inst.expected_amount for inst in updated.installments] != [
            inst.expected_amount for inst in entry.installments
        ]:
            record_schedule("header_change", updated.installment_count)
        return updated

    def edit_amount(self, entry: LedgerEntry, edit: AmountEditInput) -> Tuple[LedgerEntry, Optional[RebalanceWarning]]:
        entry, warning = edit_installment_amount(entry, edit.index, edit.amount, self.tolerance_cents, self.today())
        self._report_warning(entry, warning)
        return entry, warning

    def edit_due_date(self, entry: LedgerEntry, edit: DueDateEditInput) -> Tuple[LedgerEntry, Optional[RebalanceWarning]]:
        entry, warning = edit_installment_due_date(entry, edit.index, edit.due_date, self.today())
        self._report_warning(entry, warning)
        return entry, warning

    def validate(self, entry: LedgerEntry) -> ValidationResult:
        result = validate_entry(entry, self.tolerance_cents)
        error_codes = [issue.code for issue in result.errors]
        log_validation_outcome(entry.entry_id, result.ok, error_codes, len(result.warnings))
        record_validation(result.ok, error_codes)
        return result

    def submit(self, entry: LedgerEntry) -> Tuple[LedgerEntry, ValidationResult]:
        """
        Validate and persist the entry's rows.

        Flow:
        1. Validate; a rejected entry is returned untouched with its errors
        2. Assign a grouping id to entries stored for the first time
        3. Upsert every row (down payment first) and adopt the stored ids
        """
        result = self.validate(entry)
        if not result.ok:
            return entry, result

        entry_id = entry.entry_id or str(uuid.uuid4())
        stored = self.repository.upsert_installments(entry_id, entry.rows())
        down_payment_row, regular = _split_rows(stored)

        return (
            replace(entry, entry_id=entry_id, installments=regular, down_payment_row=down_payment_row),
            result,
        )

    def pay(self, entry: LedgerEntry, payment: PaymentInput) -> LedgerEntry:
        """Register a payment on one row and persist the updated schedule"""
        row = next((inst for inst in entry.rows() if inst.number == payment.installment_number), None)
        if row is None:
            raise InvalidPaymentError(f"Entry has no installment number {payment.installment_number}")

        paid = register_payment(row, payment.amount, payment.paid_on, self.today())
        entry = _replace_row(entry, paid)

        if entry.entry_id:
            stored = self.repository.upsert_installments(entry.entry_id, entry.rows())
            down_payment_row, regular = _split_rows(stored)
            entry = replace(entry, installments=regular, down_payment_row=down_payment_row)

        log_payment(entry.entry_id, paid.number, payment.amount.cents, paid.status.value)
        record_payment(paid.status.value)
        return entry

    def can_delete(self, entry: LedgerEntry, installment_number: int) -> DeletionCheck:
        payment_count = sum(1 for inst in entry.rows() if not inst.paid_amount.is_zero())
        return check_deletion(installment_number, entry.installment_count, payment_count)

    def summarize(self, items: Iterable[Union[LedgerEntry, InstallmentRow]]) -> ReconciliationSummary:
        return summarize(items)

    def _report_warning(self, entry: LedgerEntry, warning: Optional[RebalanceWarning]) -> None:
        if warning is None:
            return
        log_rebalance_warning(entry.entry_id, warning.code, warning.installment_number, warning.message)
        record_rebalance_warning(warning.code)
