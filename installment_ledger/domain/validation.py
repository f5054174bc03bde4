"""Validation of a ledger entry before it is submitted"""

from installment_ledger.domain.exceptions import (
    DownPaymentExceedsTotalError,
    ImbalancedInstallmentsError,
    TotalValueMismatchError,
)
from installment_ledger.domain.ledger import compute_total_value
from installment_ledger.domain.models import LedgerEntry, ValidationIssue, ValidationResult
from installment_ledger.domain.rebalancing import DUE_DATE_BEFORE_ISSUE, ONE_CENT

TOTAL_VALUE_MISMATCH = "total_value_mismatch"
IMBALANCED_INSTALLMENTS = "imbalanced_installments"
DOWN_PAYMENT_EXCEEDS_TOTAL = "down_payment_exceeds_total"


def validate_entry(entry: LedgerEntry, tolerance: int = ONE_CENT) -> ValidationResult:
    """
    Check the entry's invariants without raising.

    Checks (in order):
    - total_value == max(0, document_value - discount + interest)
    - installments sum to total_value - down_payment (± tolerance cents)
    - down_payment <= total_value
    - due dates before the issue date are warnings, not errors

    Callers decide whether to block; ValidationResult.raise_for_errors()
    turns the first error back into its exception.
    """
    result = ValidationResult()

    expected_total = compute_total_value(entry.document_value, entry.discount, entry.interest)
    if entry.total_value != expected_total:
        error = TotalValueMismatchError(expected_total.cents, entry.total_value.cents)
        result.errors.append(ValidationIssue(code=TOTAL_VALUE_MISMATCH, message=str(error), error=error))

    if entry.installments:
        # Signed: a down payment above the total leaves a negative balance
        expected_balance = entry.total_value.cents - entry.down_payment.cents
        actual = sum(inst.expected_amount.cents for inst in entry.installments)
        if abs(expected_balance - actual) > tolerance:
            error = ImbalancedInstallmentsError(expected_balance, actual)
            result.errors.append(
                ValidationIssue(code=IMBALANCED_INSTALLMENTS, message=str(error), error=error)
            )

    if entry.down_payment > entry.total_value:
        error = DownPaymentExceedsTotalError(entry.down_payment.cents, entry.total_value.cents)
        result.errors.append(
            ValidationIssue(code=DOWN_PAYMENT_EXCEEDS_TOTAL, message=str(error), error=error)
        )

    for inst in entry.rows():
        if inst.due_date < entry.issue_date:
            result.warnings.append(
                ValidationIssue(
                    code=DUE_DATE_BEFORE_ISSUE,
                    message=(
                        f"Installment {inst.number} is due {inst.due_date.isoformat()}, "
                        f"before the issue date {entry.issue_date.isoformat()}"
                    ),
                    installment_number=inst.number,
                )
            )

    return result
