"""Installment schedule generation: balance splitting and due dates"""

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence

from installment_ledger.domain.exceptions import InvalidBalanceError, InvalidCountError
from installment_ledger.domain.models import DOWN_PAYMENT_NUMBER, Installment
from installment_ledger.domain.money import Money
from installment_ledger.domain.settlement import reclassify
from installment_ledger.utils.date_utils import add_months

logger = logging.getLogger(__name__)


def split_balance(balance: Money, count: int) -> List[Money]:
    """
    Split a balance into `count` installment amounts that sum to it exactly.

    Requirements:
    - Integer division, truncating
    - The last `remainder` installments get one extra cent each
    - Sum of the result equals the balance to the cent

    Args:
        balance: Amount left after the down payment (Money or integer cents)
        count: Number of installments (>= 1)

    Returns:
        List of Money, earliest installment first

    Example:
        10.00 over 3 → [3.33, 3.33, 3.34]
        1000 cents / 3 = 333 base, remainder 1
        Last installment: 333 + 1 = 334
    """
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise InvalidCountError(f"Installment count must be a positive integer, got {count!r}")
    if isinstance(balance, int) and not isinstance(balance, bool):
        balance = Money(balance)  # Negative cents raise InvalidBalanceError here
    if not isinstance(balance, Money):
        raise InvalidBalanceError(f"Balance must be Money or cents, got {type(balance).__name__}")

    base_amount = balance.cents // count
    remainder = balance.cents % count
    first_extra = count - remainder

    # Tail installments absorb the remainder; earlier ones are likely already fixed by edits
    return [Money(base_amount + (1 if i >= first_extra else 0)) for i in range(count)]


def generate_schedule(
    balance: Money,
    count: int,
    issue_date: date,
    interval_months: int = 1,
) -> List[Installment]:
    """
    Generate regular installments numbered 1..count.

    Installment i is due `i * interval_months` months after the issue date,
    clamped to month end (Jan 31 → Feb 28).
    """
    amounts = split_balance(balance, count)
    installments = [
        Installment(
            number=i,
            due_date=add_months(issue_date, i * interval_months),
            expected_amount=amount,
        )
        for i, amount in enumerate(amounts, start=1)
    ]
    logger.debug("Generated schedule", extra={"balance_cents": balance.cents, "count": count})
    return installments


def regenerate_schedule(
    existing: Sequence[Installment],
    balance: Money,
    count: int,
    issue_date: date,
    preserve_due_dates: bool = False,
    interval_months: int = 1,
    today: Optional[date] = None,
) -> List[Installment]:
    """
    Rebuild a schedule after a structural change.

    Rules:
    - Amounts are always re-split
    - Payment facts (paid amount, paid date, cancel flag) follow the
      installment number for every number that still exists
    - Row ids are kept only when the count is unchanged, so the persistence
      collaborator can update in place
    - With `preserve_due_dates`, manually chosen due dates survive for
      numbers that still exist
    - Status is recomputed for every row whose amount or due date changed
    """
    fresh = generate_schedule(balance, count, issue_date, interval_months)
    same_count = len(existing) == count
    by_number = {inst.number: inst for inst in existing}

    rebuilt = []
    for installment in fresh:
        previous = by_number.get(installment.number)
        if previous is None:
            rebuilt.append(installment)
            continue

        installment = replace(
            installment,
            id=previous.id if same_count else None,
            due_date=previous.due_date if preserve_due_dates else installment.due_date,
            paid_amount=previous.paid_amount,
            paid_date=previous.paid_date,
            status=previous.status,
            canceled=previous.canceled,
        )
        if (installment.expected_amount, installment.due_date) != (previous.expected_amount, previous.due_date):
            installment = reclassify(installment, today)
        rebuilt.append(installment)

    dropped = [inst.number for inst in existing if inst.number > count and not inst.paid_amount.is_zero()]
    if dropped:
        logger.warning(
            "Installments with recorded payments removed by regeneration",
            extra={"installment_numbers": dropped},
        )
    return rebuilt


def build_down_payment_row(
    amount: Money,
    issue_date: date,
    existing: Optional[Installment] = None,
    today: Optional[date] = None,
) -> Optional[Installment]:
    """Down payment row (number 0), due on the issue date; None when there is no down payment"""
    if amount.is_zero():
        return None
    if existing is not None:
        if (existing.expected_amount, existing.due_date) == (amount, issue_date):
            return existing
        return reclassify(replace(existing, expected_amount=amount, due_date=issue_date), today)
    return Installment(number=DOWN_PAYMENT_NUMBER, due_date=issue_date, expected_amount=amount)


def suggest_installment_count(total_value: Money, down_payment: Money, count: int) -> int:
    """
    Keep the installment count consistent with the remaining balance.

    - Balance appears while count is 0 → suggest a single installment
    - No balance left (paid up front) → no installments
    """
    balance = total_value.subtract(down_payment)
    if balance.is_zero():
        return 0
    if count <= 0:
        return 1
    return count
