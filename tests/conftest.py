"""Pytest fixtures for testing"""

import uuid
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, List, Sequence

import pytest

from installment_ledger.domain.models import Installment
from installment_ledger.domain.money import Money
from installment_ledger.schemas import EntryHeaderInput
from installment_ledger.services.ledger_service import LedgerService


class InMemoryInstallmentRepository:
    """Repository double keeping rows per entry id, assigning ids on first store"""

    def __init__(self) -> None:
        self.rows: Dict[str, List[Installment]] = {}
        self.upsert_calls = 0

    def load_installments(self, entry_id: str) -> List[Installment]:
        stored = sorted(self.rows.get(entry_id, []), key=lambda row: row.number)
        return [replace(row) for row in stored]

    def upsert_installments(self, entry_id: str, installments: Sequence[Installment]) -> List[Installment]:
        self.upsert_calls += 1
        stored = [replace(inst, id=inst.id or str(uuid.uuid4())) for inst in installments]
        self.rows[entry_id] = stored
        return [replace(row) for row in stored]


def make_schedule(amounts: Sequence[int], first_due: date = date(2024, 2, 10)) -> List[Installment]:
    """Regular installments numbered from 1 with monthly-ish due dates"""
    return [
        Installment(
            number=i,
            due_date=first_due + timedelta(days=30 * (i - 1)),
            expected_amount=Money(cents),
        )
        for i, cents in enumerate(amounts, start=1)
    ]


@pytest.fixture
def issue_date() -> date:
    return date(2024, 1, 10)


@pytest.fixture
def repository() -> InMemoryInstallmentRepository:
    return InMemoryInstallmentRepository()


@pytest.fixture
def service(repository: InMemoryInstallmentRepository) -> LedgerService:
    """Service over the in-memory repository with fixed schedule rules"""
    return LedgerService(repository, tolerance_cents=1, interval_months=1, timezone="UTC")


@pytest.fixture
def header(issue_date: date) -> EntryHeaderInput:
    """R$ 1.000,00 document, R$ 100,00 discount, R$ 10,00 interest, R$ 210,00 down, 3 installments"""
    return EntryHeaderInput(
        issue_date=issue_date,
        document_value="1.000,00",
        discount="100,00",
        interest="10,00",
        down_payment="210,00",
        installment_count=3,
        document_number="NF-001",
        party_id="client-42",
    )


@pytest.fixture
def schedule():
    """Factory for regular installments from a list of cents"""
    return make_schedule
