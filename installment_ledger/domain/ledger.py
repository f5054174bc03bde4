"""Ledger entry lifecycle: header values, schedule (re)generation and user edits"""

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Tuple, Union

from installment_ledger.domain.exceptions import InvalidCountError
from installment_ledger.domain.installments import (
    build_down_payment_row,
    generate_schedule,
    regenerate_schedule,
    suggest_installment_count,
)
from installment_ledger.domain.models import LedgerEntry, RebalanceWarning
from installment_ledger.domain.money import Money, parse_money
from installment_ledger.domain.rebalancing import ONE_CENT, apply_amount_edit, apply_due_date_edit
from installment_ledger.domain.settlement import reclassify
from installment_ledger.utils.date_utils import add_months

logger = logging.getLogger(__name__)

MoneyInput = Union[Money, int, str, None]


def compute_total_value(document_value: Money, discount: Money, interest: Money) -> Money:
    """total = document value - discount + interest, never below zero"""
    return Money(max(0, document_value.cents - discount.cents + interest.cents))


def _clamp_discount(document_value: Money, discount: Money) -> Money:
    # A discount can't be larger than the document it applies to
    if discount > document_value:
        logger.info(
            "Discount clamped to document value",
            extra={"discount_cents": discount.cents, "document_value_cents": document_value.cents},
        )
        return document_value
    return discount


def _check_count(count: Optional[int]) -> None:
    if count is not None and (isinstance(count, bool) or not isinstance(count, int) or count < 0):
        raise InvalidCountError(f"Installment count must be a non-negative integer, got {count!r}")


def create_entry(
    issue_date: date,
    document_value: MoneyInput,
    discount: MoneyInput = None,
    interest: MoneyInput = None,
    down_payment: MoneyInput = None,
    installment_count: int = 0,
    interval_months: int = 1,
    entry_id: Optional[str] = None,
    document_number: Optional[str] = None,
    party_id: Optional[str] = None,
) -> LedgerEntry:
    """
    Issue a new ledger entry and generate its initial schedule.

    Flow:
    1. Parse header amounts into Money (strings in either locale, or cents)
    2. Clamp the discount to the document value and compute the total
    3. Build the down payment row (number 0) when there is one
    4. Split the remaining balance across the installments

    A positive balance with a count of 0 gets one installment; a zero balance
    (paid fully up front) gets none.
    """
    _check_count(installment_count)

    document = parse_money(document_value)
    discount_amount = _clamp_discount(document, parse_money(discount))
    interest_amount = parse_money(interest)
    down = parse_money(down_payment)

    total_value = compute_total_value(document, discount_amount, interest_amount)
    count = suggest_installment_count(total_value, down, installment_count)
    balance = total_value.subtract(down)

    installments = generate_schedule(balance, count, issue_date, interval_months) if count else []

    entry = LedgerEntry(
        issue_date=issue_date,
        document_value=document,
        discount=discount_amount,
        interest=interest_amount,
        total_value=total_value,
        down_payment=down,
        installments=installments,
        down_payment_row=build_down_payment_row(down, issue_date),
        entry_id=entry_id,
        document_number=document_number,
        party_id=party_id,
    )
    logger.debug(
        "Ledger entry created",
        extra={"total_cents": total_value.cents, "down_payment_cents": down.cents, "count": count},
    )
    return entry


def update_header(
    entry: LedgerEntry,
    document_value: MoneyInput = None,
    discount: MoneyInput = None,
    interest: MoneyInput = None,
    down_payment: MoneyInput = None,
    installment_count: Optional[int] = None,
    issue_date: Optional[date] = None,
    force: bool = False,
    interval_months: int = 1,
    today: Optional[date] = None,
) -> LedgerEntry:
    """
    Apply header changes and regenerate the schedule when required.

    Regeneration policy:
    - Balance or count changed (structural): amounts are re-split. Manually
      edited due dates survive for positions that still exist; payments
      follow the installment number; row ids survive when the count is
      unchanged.
    - Only the issue date changed: due dates are recomputed unless the
      schedule was manually overridden.
    - force=True: discard every manual edit and clear the override flag.

    Rows whose amount or due date changed are reclassified against `today`.

    Arguments left as None keep the entry's current value.
    """
    _check_count(installment_count)

    document = entry.document_value if document_value is None else parse_money(document_value)
    discount_amount = _clamp_discount(
        document, entry.discount if discount is None else parse_money(discount)
    )
    interest_amount = entry.interest if interest is None else parse_money(interest)
    down = entry.down_payment if down_payment is None else parse_money(down_payment)
    issued = entry.issue_date if issue_date is None else issue_date

    total_value = compute_total_value(document, discount_amount, interest_amount)
    requested = entry.installment_count if installment_count is None else installment_count
    count = suggest_installment_count(total_value, down, requested)
    balance = total_value.subtract(down)

    structural = force or balance != entry.balance or count != entry.installment_count
    installments = entry.installments
    overridden = entry.manually_overridden and not force

    if structural:
        installments = (
            regenerate_schedule(
                entry.installments,
                balance,
                count,
                issued,
                preserve_due_dates=overridden,
                interval_months=interval_months,
                today=today,
            )
            if count
            else []
        )
        logger.info(
            "Schedule regenerated",
            extra={"balance_cents": balance.cents, "count": count, "preserved_due_dates": overridden},
        )
    elif issued != entry.issue_date and not overridden:
        installments = [
            reclassify(replace(inst, due_date=add_months(issued, inst.number * interval_months)), today)
            for inst in entry.installments
        ]

    return replace(
        entry,
        issue_date=issued,
        document_value=document,
        discount=discount_amount,
        interest=interest_amount,
        total_value=total_value,
        down_payment=down,
        installments=installments,
        down_payment_row=build_down_payment_row(down, issued, existing=entry.down_payment_row, today=today),
        manually_overridden=overridden,
    )


def edit_installment_amount(
    entry: LedgerEntry,
    index: int,
    new_amount: MoneyInput,
    tolerance: int = ONE_CENT,
    today: Optional[date] = None,
) -> Tuple[LedgerEntry, Optional[RebalanceWarning]]:
    """Edit one installment's amount, rebalance, and mark the schedule as manually edited"""
    installments, warning = apply_amount_edit(
        entry.installments, index, new_amount, entry.balance, tolerance, today
    )
    return replace(entry, installments=installments, manually_overridden=True), warning


def edit_installment_due_date(
    entry: LedgerEntry,
    index: int,
    new_due_date: date,
    today: Optional[date] = None,
) -> Tuple[LedgerEntry, Optional[RebalanceWarning]]:
    """Edit one installment's due date and mark the schedule as manually edited"""
    installments, warning = apply_due_date_edit(
        entry.installments, index, new_due_date, entry.issue_date, today
    )
    return replace(entry, installments=installments, manually_overridden=True), warning
