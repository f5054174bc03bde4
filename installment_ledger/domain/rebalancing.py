"""Rebalancing of an installment schedule after a manual edit"""

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence, Tuple, Union

from installment_ledger.domain.models import Installment, RebalanceWarning
from installment_ledger.domain.money import Money, parse_money
from installment_ledger.domain.settlement import reclassify

logger = logging.getLogger(__name__)

ONE_CENT = 1

ADJUSTMENT_EXCEEDS_BALANCE = "adjustment_exceeds_balance"
LAST_INSTALLMENT_CORRECTED = "last_installment_corrected"
DUE_DATE_BEFORE_ISSUE = "due_date_before_issue"


def apply_amount_edit(
    installments: Sequence[Installment],
    index: int,
    new_amount: Union[Money, int, str],
    target_total: Money,
    tolerance: int = ONE_CENT,
    today: Optional[date] = None,
) -> Tuple[List[Installment], Optional[RebalanceWarning]]:
    """
    Apply a user's amount edit and rebalance so the schedule still sums to the target.

    Rules:
    - Edits before the last slot are absorbed by the last installment
    - If the last installment would go negative it is clamped to zero (warning)
    - Edits to the last (or only) slot cannot be absorbed: beyond the tolerance
      the edit is replaced by the value that restores the sum (warning)

    Args:
        installments: Regular installments in schedule order
        index: Position of the edited installment
        new_amount: Amount typed by the user (negative input is rejected)
        target_total: Balance the schedule must add up to (total - down payment)
        tolerance: Cents of drift accepted on a last-slot edit
        today: Reference date for reclassifying rows whose amount changed

    Returns:
        (updated installments, warning or None); the input is not mutated.
        Rows whose amount changed carry a recomputed status.

    Example:
        [5.00, 5.00, 5.00] target 15.00, edit #1 to 6.00 → [6.00, 5.00, 4.00]
    """
    amount = parse_money(new_amount)
    if not 0 <= index < len(installments):
        raise IndexError(f"Installment index {index} out of range for {len(installments)} installments")

    amounts = [inst.expected_amount.cents for inst in installments]
    amounts[index] = amount.cents
    difference = target_total.cents - sum(amounts)

    warning = None
    last = len(amounts) - 1

    if difference != 0:
        if index != last and len(amounts) > 1:
            absorbed = amounts[last] + difference
            if absorbed < 0:
                warning = RebalanceWarning(
                    code=ADJUSTMENT_EXCEEDS_BALANCE,
                    message=(
                        f"Adjustment exceeds remaining balance: installment "
                        f"{installments[last].number} would be {_signed(absorbed)} and was set to 0.00"
                    ),
                    installment_number=installments[last].number,
                )
            amounts[last] = absorbed
        elif abs(difference) > tolerance:
            required = amount.cents + difference
            amounts[index] = required
            warning = RebalanceWarning(
                code=LAST_INSTALLMENT_CORRECTED,
                message=(
                    f"Installment {installments[index].number} must be "
                    f"{_signed(max(0, required))} to match the balance of {target_total}"
                ),
                installment_number=installments[index].number,
                required_amount=Money(max(0, required)),
            )

    updated = []
    for inst, cents in zip(installments, amounts):
        corrected = Money(max(0, cents))
        if corrected == inst.expected_amount:
            updated.append(inst)
        else:
            updated.append(reclassify(replace(inst, expected_amount=corrected), today))

    if warning is not None:
        logger.info(
            "Rebalance adjusted schedule",
            extra={"warning_code": warning.code, "installment_number": warning.installment_number},
        )
    return updated, warning


def apply_due_date_edit(
    installments: Sequence[Installment],
    index: int,
    new_due_date: date,
    issue_date: date,
    today: Optional[date] = None,
) -> Tuple[List[Installment], Optional[RebalanceWarning]]:
    """Replace one due date and reclassify the row; a date before the issue date is kept but flagged"""
    if not 0 <= index < len(installments):
        raise IndexError(f"Installment index {index} out of range for {len(installments)} installments")

    updated = list(installments)
    updated[index] = reclassify(replace(installments[index], due_date=new_due_date), today)

    warning = None
    if new_due_date < issue_date:
        warning = RebalanceWarning(
            code=DUE_DATE_BEFORE_ISSUE,
            message=(
                f"Installment {installments[index].number} is due {new_due_date.isoformat()}, "
                f"before the issue date {issue_date.isoformat()}"
            ),
            installment_number=installments[index].number,
        )
    return updated, warning


def _signed(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}{Money(abs(cents))}"
