"""Reconciliation report: header totals over ledger entries and installment rows"""

from typing import Iterable, List, Set, Union

from installment_ledger.domain.models import (
    InstallmentRow,
    LedgerEntry,
    ReconciliationSummary,
)
from installment_ledger.domain.money import Money


def flatten_entry(entry: LedgerEntry) -> List[InstallmentRow]:
    """One row per installment (down payment included), each repeating the entry header"""
    return [
        InstallmentRow(
            installment_number=inst.number,
            expected_amount=inst.expected_amount,
            paid_amount=inst.paid_amount,
            document_value=entry.document_value,
            discount=entry.discount,
            entry_id=entry.entry_id,
            document_number=entry.document_number,
            party_id=entry.party_id,
            issue_date=entry.issue_date,
        )
        for inst in entry.rows()
    ]


def summarize(items: Iterable[Union[LedgerEntry, InstallmentRow]]) -> ReconciliationSummary:
    """
    Aggregate entries/rows into display totals.

    Requirements:
    - document value and discount are counted ONCE per owning entry
    - installment value, paid and balance are counted once per row
    - rows are grouped by entry id, or by document number + party + issue
      date when the id is missing

    Example:
        Two rows of one entry (document 10.00, discount 1.00, installments
        6.00 / 4.00) → document_total 10.00, not 20.00
    """
    rows: List[InstallmentRow] = []
    for item in items:
        if isinstance(item, LedgerEntry):
            rows.extend(flatten_entry(item))
        else:
            rows.append(item)

    seen: Set[str] = set()
    document_total = 0
    discount_total = 0
    installment_total = 0
    paid_total = 0
    balance_total = 0

    for row in rows:
        key = row.group_key
        if key not in seen:
            seen.add(key)
            document_total += row.document_value.cents
            discount_total += row.discount.cents

        installment_total += row.expected_amount.cents
        paid_total += row.paid_amount.cents
        balance_total += row.balance.cents

    return ReconciliationSummary(
        document_total=Money(document_total),
        discount_total=Money(discount_total),
        installment_total=Money(installment_total),
        paid_total=Money(paid_total),
        balance_total=Money(balance_total),
        entry_count=len(seen),
        row_count=len(rows),
    )
