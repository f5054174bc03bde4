"""Unit tests for ledger entry creation, header updates and edits"""

import logging
from dataclasses import replace
from datetime import date

import pytest

from installment_ledger.domain.exceptions import InvalidCountError
from installment_ledger.domain.integrity import check_deletion
from installment_ledger.domain.ledger import (
    compute_total_value,
    create_entry,
    edit_installment_amount,
    edit_installment_due_date,
    update_header,
)
from installment_ledger.domain.models import InstallmentStatus
from installment_ledger.domain.money import Money
from installment_ledger.domain.rebalancing import LAST_INSTALLMENT_CORRECTED
from installment_ledger.domain.reconciliation import summarize
from installment_ledger.domain.settlement import register_payment

TODAY = date(2024, 2, 5)


@pytest.fixture
def entry():
    """R$ 1.000,00 - 100,00 + 10,00 = 910,00 total, 210,00 down, 3 installments"""
    return create_entry(
        issue_date=date(2024, 1, 10),
        document_value="1.000,00",
        discount="100,00",
        interest="10,00",
        down_payment="210,00",
        installment_count=3,
    )


def amounts(entry):
    return [inst.expected_amount.cents for inst in entry.installments]


def due_dates(entry):
    return [inst.due_date for inst in entry.installments]


def test_compute_total_value():
    assert compute_total_value(Money(100000), Money(10000), Money(1000)) == Money(91000)
    assert compute_total_value(Money(100), Money(500), Money(0)) == Money(0)  # Never negative


def test_create_entry(entry):
    """Test header math, down payment row and initial split"""
    assert entry.total_value == Money(91000)
    assert entry.balance == Money(70000)
    assert amounts(entry) == [23333, 23333, 23334]
    assert due_dates(entry) == [date(2024, 2, 10), date(2024, 3, 10), date(2024, 4, 10)]
    assert entry.down_payment_row.number == 0
    assert entry.down_payment_row.expected_amount == Money(21000)
    assert [row.number for row in entry.rows()] == [0, 1, 2, 3]
    assert not entry.manually_overridden


def test_create_entry_with_balance_and_no_count_gets_one_installment():
    entry = create_entry(date(2024, 1, 10), "500,00")

    assert entry.installment_count == 1
    assert amounts(entry) == [50000]
    assert entry.down_payment_row is None


def test_create_entry_paid_up_front_has_no_installments():
    entry = create_entry(date(2024, 1, 10), "500,00", down_payment="500,00", installment_count=3)

    assert entry.installments == []
    assert entry.down_payment_row.expected_amount == Money(50000)


def test_create_entry_clamps_discount():
    """Test a discount above the document value is clamped to it"""
    entry = create_entry(date(2024, 1, 10), "100,00", discount="150,00", interest="5,00")

    assert entry.discount == Money(10000)
    assert entry.total_value == Money(500)


@pytest.mark.parametrize("count", [-1, 2.5, True])
def test_create_entry_rejects_invalid_count(count):
    with pytest.raises(InvalidCountError):
        create_entry(date(2024, 1, 10), "100,00", installment_count=count)


def test_update_header_balance_change_resplits_and_keeps_identity(entry):
    """Test a new balance re-splits amounts while rows keep their ids"""
    entry = replace(
        entry,
        installments=[replace(inst, id=f"row-{inst.number}") for inst in entry.installments],
    )

    updated = update_header(entry, interest="20,00")

    assert updated.total_value == Money(92000)
    assert amounts(updated) == [23666, 23667, 23667]
    assert [inst.id for inst in updated.installments] == ["row-1", "row-2", "row-3"]
    assert sum(amounts(updated)) == updated.balance.cents


def test_update_header_count_change(entry):
    updated = update_header(entry, installment_count=2)

    assert amounts(updated) == [35000, 35000]
    assert due_dates(updated) == [date(2024, 2, 10), date(2024, 3, 10)]


def test_update_header_without_changes_keeps_schedule(entry):
    updated = update_header(entry)

    assert updated.installments == entry.installments


def test_update_header_keeps_manual_due_dates(entry):
    """Test a structural change re-splits amounts but keeps edited due dates"""
    edited, _ = edit_installment_due_date(entry, 0, date(2024, 2, 20))

    updated = update_header(edited, down_payment="110,00")

    assert updated.manually_overridden
    assert amounts(updated) == [26666, 26667, 26667]
    assert due_dates(updated)[0] == date(2024, 2, 20)


def test_update_header_force_discards_manual_edits(entry):
    edited, _ = edit_installment_due_date(entry, 0, date(2024, 2, 20))

    updated = update_header(edited, force=True)

    assert not updated.manually_overridden
    assert due_dates(updated) == [date(2024, 2, 10), date(2024, 3, 10), date(2024, 4, 10)]


def test_update_header_issue_date_only_recomputes_due_dates(entry):
    updated = update_header(entry, issue_date=date(2024, 1, 31))

    assert amounts(updated) == amounts(entry)
    assert due_dates(updated) == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
    assert updated.down_payment_row.due_date == date(2024, 1, 31)


def test_update_header_issue_date_only_keeps_overridden_dates(entry):
    edited, _ = edit_installment_amount(entry, 0, "250,00")

    updated = update_header(edited, issue_date=date(2024, 1, 31))

    assert due_dates(updated) == due_dates(entry)


def test_update_header_removes_down_payment_row(entry):
    updated = update_header(entry, down_payment="0")

    assert updated.down_payment_row is None
    assert updated.balance == Money(91000)
    assert sum(amounts(updated)) == 91000


def test_edit_installment_amount_marks_override(entry):
    updated, warning = edit_installment_amount(entry, 0, "250,00")

    assert warning is None
    assert amounts(updated) == [25000, 23333, 21667]
    assert updated.manually_overridden
    assert not entry.manually_overridden


def test_edit_installment_amount_last_slot_warning(entry):
    updated, warning = edit_installment_amount(entry, 2, "100,00")

    assert warning.code == LAST_INSTALLMENT_CORRECTED
    assert amounts(updated) == [23333, 23333, 23334]


@pytest.fixture
def paid_entry():
    """10,00 over two installments with #1 fully paid"""
    entry = create_entry(date(2024, 1, 10), "10,00", installment_count=2)
    first = register_payment(entry.installments[0], Money(500), date(2024, 2, 1), today=TODAY)
    return replace(entry, installments=[first, entry.installments[1]])


def test_header_change_reclassifies_paid_installment(paid_entry):
    """Test a paid installment whose amount grows becomes partially paid"""
    assert paid_entry.installments[0].status == InstallmentStatus.PAID

    updated = update_header(paid_entry, document_value=3000, today=TODAY)

    first = updated.installments[0]
    assert first.expected_amount == Money(1500)
    assert first.paid_amount == Money(500)
    assert first.paid_date == date(2024, 2, 1)
    assert first.status == InstallmentStatus.PARTIALLY_PAID


def test_amount_edit_reclassifies_paid_installment(paid_entry):
    updated, warning = edit_installment_amount(paid_entry, 0, 800, today=TODAY)

    assert warning is None
    assert updated.installments[0].expected_amount == Money(800)
    assert updated.installments[0].paid_amount == Money(500)
    assert updated.installments[0].status == InstallmentStatus.PARTIALLY_PAID
    assert updated.installments[1].expected_amount == Money(200)
    assert updated.installments[1].status == InstallmentStatus.PENDING


def test_count_change_keeps_payments_by_number(paid_entry):
    """Test money already received survives a change of installment count"""
    updated = update_header(paid_entry, installment_count=4, today=TODAY)

    assert amounts(updated) == [250, 250, 250, 250]
    first = updated.installments[0]
    assert first.paid_amount == Money(500)
    assert first.paid_date == date(2024, 2, 1)
    assert first.status == InstallmentStatus.PAID
    assert [inst.status for inst in updated.installments[1:]] == [InstallmentStatus.PENDING] * 3
    assert summarize([updated]).paid_total == Money(500)


def test_count_change_with_payment_blocks_deletion(paid_entry):
    updated = update_header(paid_entry, installment_count=1, today=TODAY)

    payment_count = sum(1 for inst in updated.rows() if not inst.paid_amount.is_zero())
    assert updated.installments[0].paid_amount == Money(500)
    assert updated.installments[0].status == InstallmentStatus.PARTIALLY_PAID
    assert not check_deletion(1, updated.installment_count, payment_count).allowed


def test_count_reduction_logs_dropped_payments(caplog):
    entry = create_entry(date(2024, 1, 10), "9,00", installment_count=3)
    last = register_payment(entry.installments[2], Money(300), date(2024, 2, 1), today=TODAY)
    entry = replace(entry, installments=entry.installments[:2] + [last])

    with caplog.at_level(logging.WARNING):
        updated = update_header(entry, installment_count=2, today=TODAY)

    assert updated.installment_count == 2
    assert "Installments with recorded payments removed by regeneration" in caplog.messages
