"""Unit tests for settlement status and payments"""

from datetime import date

import pytest

from installment_ledger.domain.exceptions import InvalidPaymentError, PaymentExceedsBalanceError
from installment_ledger.domain.models import Installment, InstallmentStatus
from installment_ledger.domain.money import Money
from installment_ledger.domain.settlement import (
    adjust_payment,
    cancel_installment,
    classify_status,
    outstanding_balance,
    refresh_statuses,
    register_payment,
    reverse_payment,
)

DUE = date(2024, 2, 10)
BEFORE_DUE = date(2024, 2, 1)
AFTER_DUE = date(2024, 2, 20)


@pytest.fixture
def installment():
    return Installment(number=1, due_date=DUE, expected_amount=Money(10000))


@pytest.mark.parametrize(
    "paid, today, expected",
    [
        (0, BEFORE_DUE, InstallmentStatus.PENDING),
        (0, DUE, InstallmentStatus.PENDING),  # Due today is not overdue yet
        (0, AFTER_DUE, InstallmentStatus.OVERDUE),
        (4000, BEFORE_DUE, InstallmentStatus.PARTIALLY_PAID),
        (4000, AFTER_DUE, InstallmentStatus.PARTIALLY_PAID),
        (10000, AFTER_DUE, InstallmentStatus.PAID),
        (12000, BEFORE_DUE, InstallmentStatus.PAID),
    ],
)
def test_classify_status(paid, today, expected):
    """Test status derivation from paid amount and due date"""
    assert classify_status(Money(10000), Money(paid), DUE, today) == expected


def test_classify_status_canceled_wins():
    assert classify_status(Money(10000), Money(0), DUE, AFTER_DUE, canceled=True) == InstallmentStatus.CANCELED


def test_classify_status_accepts_string_amount():
    assert classify_status(Money(10000), "40,00", DUE, BEFORE_DUE) == InstallmentStatus.PARTIALLY_PAID


@pytest.mark.parametrize("paid", [-1, "-10,00"])
def test_classify_status_rejects_negative_paid(paid):
    with pytest.raises(InvalidPaymentError):
        classify_status(Money(10000), paid, DUE, BEFORE_DUE)


def test_register_partial_then_full_payment(installment):
    partial = register_payment(installment, "40,00", BEFORE_DUE, today=BEFORE_DUE)

    assert partial.paid_amount == Money(4000)
    assert partial.paid_date == BEFORE_DUE
    assert partial.status == InstallmentStatus.PARTIALLY_PAID
    assert outstanding_balance(partial) == Money(6000)
    assert installment.paid_amount == Money(0)  # Input untouched

    paid = register_payment(partial, Money(6000), AFTER_DUE, today=AFTER_DUE)

    assert paid.status == InstallmentStatus.PAID
    assert paid.paid_date == AFTER_DUE
    assert outstanding_balance(paid).is_zero()


def test_register_payment_rejects_zero(installment):
    with pytest.raises(InvalidPaymentError):
        register_payment(installment, Money(0), BEFORE_DUE)


def test_register_payment_rejects_negative(installment):
    with pytest.raises(InvalidPaymentError):
        register_payment(installment, "-5,00", BEFORE_DUE)


def test_register_payment_on_canceled(installment):
    with pytest.raises(InvalidPaymentError):
        register_payment(cancel_installment(installment), Money(100), BEFORE_DUE)


def test_adjust_payment(installment):
    paid = register_payment(installment, Money(4000), BEFORE_DUE, today=BEFORE_DUE)

    adjusted = adjust_payment(paid, Money(4000), Money(10000), today=BEFORE_DUE)

    assert adjusted.paid_amount == Money(10000)
    assert adjusted.status == InstallmentStatus.PAID


def test_adjust_payment_over_expected_amount(installment):
    paid = register_payment(installment, Money(4000), BEFORE_DUE, today=BEFORE_DUE)

    with pytest.raises(PaymentExceedsBalanceError):
        adjust_payment(paid, Money(4000), Money(10002), today=BEFORE_DUE)


def test_adjust_payment_unknown_previous_amount(installment):
    paid = register_payment(installment, Money(4000), BEFORE_DUE, today=BEFORE_DUE)

    with pytest.raises(InvalidPaymentError):
        adjust_payment(paid, Money(5000), Money(1000), today=BEFORE_DUE)


def test_reverse_payment_clears_paid_date(installment):
    paid = register_payment(installment, Money(4000), BEFORE_DUE, today=BEFORE_DUE)

    reversed_ = reverse_payment(paid, Money(4000), today=AFTER_DUE)

    assert reversed_.paid_amount.is_zero()
    assert reversed_.paid_date is None
    assert reversed_.status == InstallmentStatus.OVERDUE


def test_reverse_payment_more_than_paid(installment):
    with pytest.raises(InvalidPaymentError):
        reverse_payment(installment, Money(1), today=BEFORE_DUE)


def test_cancel_installment(installment):
    canceled = cancel_installment(installment)

    assert canceled.canceled
    assert canceled.status == InstallmentStatus.CANCELED
    assert refresh_statuses([canceled], AFTER_DUE)[0].status == InstallmentStatus.CANCELED


def test_refresh_statuses(installment):
    statuses = [inst.status for inst in refresh_statuses([installment], AFTER_DUE)]

    assert statuses == [InstallmentStatus.OVERDUE]
