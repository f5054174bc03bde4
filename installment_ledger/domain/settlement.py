"""Settlement status classification and payment registration"""

from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional, Union

from installment_ledger.domain.exceptions import InvalidPaymentError, PaymentExceedsBalanceError
from installment_ledger.domain.models import Installment, InstallmentStatus
from installment_ledger.domain.money import Money, parse_money

PaymentInput = Union[Money, int, str]


def _payment_cents(value: PaymentInput) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value < 0:
        raise InvalidPaymentError(f"Paid amount cannot be negative: {value}")
    return parse_money(value, error=InvalidPaymentError).cents


def classify_status(
    expected_amount: Money,
    paid_amount: PaymentInput,
    due_date: date,
    today: Optional[date] = None,
    canceled: bool = False,
) -> InstallmentStatus:
    """
    Derive an installment's status from current facts.

    Transitions:
    - canceled → canceled (terminal)
    - nothing paid, due date passed → overdue
    - nothing paid, not yet due → pending
    - partly paid → partially_paid, whatever the due date
    - fully paid (or more) → paid

    Re-evaluated every time balances change; no transition history is kept.
    """
    paid_cents = _payment_cents(paid_amount)
    if today is None:
        today = date.today()

    if canceled:
        return InstallmentStatus.CANCELED
    if paid_cents == 0:
        return InstallmentStatus.OVERDUE if due_date < today else InstallmentStatus.PENDING
    if paid_cents < expected_amount.cents:
        return InstallmentStatus.PARTIALLY_PAID
    return InstallmentStatus.PAID


def reclassify(installment: Installment, today: Optional[date] = None) -> Installment:
    """Recompute the status from the installment's current amounts, due date and cancel flag"""
    status = classify_status(
        installment.expected_amount,
        installment.paid_amount,
        installment.due_date,
        today,
        installment.canceled,
    )
    return replace(installment, status=status)


def outstanding_balance(installment: Installment) -> Money:
    """What is still owed on the installment (never negative)"""
    return installment.expected_amount.subtract(installment.paid_amount)


def register_payment(
    installment: Installment,
    amount: PaymentInput,
    paid_on: date,
    today: Optional[date] = None,
) -> Installment:
    """
    Record a payment against an installment.

    Raises:
        InvalidPaymentError: amount is zero, negative or malformed, or the
            installment is canceled
    """
    payment = parse_money(amount, error=InvalidPaymentError)
    if payment.is_zero():
        raise InvalidPaymentError("Payment amount must be greater than zero")
    if installment.canceled:
        raise InvalidPaymentError(f"Installment {installment.number} is canceled")

    paid = replace(
        installment,
        paid_amount=installment.paid_amount + payment,
        paid_date=paid_on,
    )
    return reclassify(paid, today)


def adjust_payment(
    installment: Installment,
    previous_amount: PaymentInput,
    new_amount: PaymentInput,
    today: Optional[date] = None,
    tolerance: int = 1,
) -> Installment:
    """
    Change the value of one payment already recorded on the installment.

    The other payments stay as they are; the new total may not exceed the
    expected amount by more than the tolerance.
    """
    previous = parse_money(previous_amount, error=InvalidPaymentError)
    replacement = parse_money(new_amount, error=InvalidPaymentError)
    if replacement.is_zero():
        raise InvalidPaymentError("Payment amount must be greater than zero")
    if previous > installment.paid_amount:
        raise InvalidPaymentError(
            f"Payment of {previous} is larger than the {installment.paid_amount} recorded"
        )

    other_payments = installment.paid_amount.subtract(previous)
    if other_payments.cents + replacement.cents > installment.expected_amount.cents + tolerance:
        raise PaymentExceedsBalanceError(
            f"Payments would total {other_payments + replacement}, "
            f"above the installment amount of {installment.expected_amount}"
        )

    return reclassify(replace(installment, paid_amount=other_payments + replacement), today)


def reverse_payment(
    installment: Installment,
    amount: PaymentInput,
    today: Optional[date] = None,
) -> Installment:
    """Remove a recorded payment; the paid date is cleared once nothing is left"""
    payment = parse_money(amount, error=InvalidPaymentError)
    if payment > installment.paid_amount:
        raise InvalidPaymentError(
            f"Cannot reverse {payment}: only {installment.paid_amount} was paid"
        )

    remaining = installment.paid_amount.subtract(payment)
    reversed_ = replace(
        installment,
        paid_amount=remaining,
        paid_date=None if remaining.is_zero() else installment.paid_date,
    )
    return reclassify(reversed_, today)


def cancel_installment(installment: Installment) -> Installment:
    return replace(installment, canceled=True, status=InstallmentStatus.CANCELED)


def refresh_statuses(installments: Iterable[Installment], today: Optional[date] = None) -> List[Installment]:
    """Reclassify every installment against today's date"""
    return [reclassify(inst, today) for inst in installments]
