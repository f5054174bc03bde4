"""Pydantic schemas for validating engine input and serializing its output"""

from datetime import date
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, PlainValidator

from installment_ledger.domain.exceptions import DomainException
from installment_ledger.domain.models import (
    Installment,
    LedgerEntry,
    RebalanceWarning,
    ReconciliationSummary,
    ValidationIssue,
)
from installment_ledger.domain.money import Money, parse_money
from installment_ledger.domain.settlement import outstanding_balance


def _to_money(value: object) -> Money:
    # Pydantic only reports ValueError as a field error
    try:
        return parse_money(value)  # type: ignore[arg-type]
    except DomainException as e:
        raise ValueError(str(e)) from e


MoneyField = Annotated[Money, PlainValidator(_to_money)]


class EntryHeaderInput(BaseModel):
    """Header fields of a document being issued or edited"""

    issue_date: date
    document_value: MoneyField = Field(..., description="Decimal string in either locale, or cents")
    discount: MoneyField = Field(default_factory=Money.zero)
    interest: MoneyField = Field(default_factory=Money.zero)
    down_payment: MoneyField = Field(default_factory=Money.zero)
    installment_count: int = Field(0, ge=0, description="Regular installments (excluding the down payment)")
    entry_id: Optional[str] = None
    document_number: Optional[str] = None
    party_id: Optional[str] = None


class AmountEditInput(BaseModel):
    """User edit of one installment's amount"""

    index: int = Field(..., ge=0, description="Position among the regular installments")
    amount: MoneyField


class DueDateEditInput(BaseModel):
    """User edit of one installment's due date"""

    index: int = Field(..., ge=0)
    due_date: date


class PaymentInput(BaseModel):
    """Payment against one installment"""

    installment_number: int = Field(..., ge=0)
    amount: MoneyField
    paid_on: date


class InstallmentSchema(BaseModel):
    """Single installment in a schedule"""

    number: int
    due_date: date
    expected_amount_cents: int
    paid_amount_cents: int
    balance_cents: int
    paid_date: Optional[date] = None
    status: str = "pending"

    @classmethod
    def from_domain(cls, installment: Installment) -> "InstallmentSchema":
        return cls(
            number=installment.number,
            due_date=installment.due_date,
            expected_amount_cents=installment.expected_amount.cents,
            paid_amount_cents=installment.paid_amount.cents,
            balance_cents=outstanding_balance(installment).cents,
            paid_date=installment.paid_date,
            status=installment.status.value,
        )


class NoticeSchema(BaseModel):
    """Warning or validation finding shown to the user"""

    code: str
    message: str
    installment_number: Optional[int] = None

    @classmethod
    def from_warning(cls, warning: RebalanceWarning) -> "NoticeSchema":
        return cls(code=warning.code, message=warning.message, installment_number=warning.installment_number)

    @classmethod
    def from_issue(cls, issue: ValidationIssue) -> "NoticeSchema":
        return cls(code=issue.code, message=issue.message, installment_number=issue.installment_number)


class EntrySchema(BaseModel):
    """Ledger entry header with its full schedule"""

    entry_id: Optional[str] = None
    issue_date: date
    document_value_cents: int
    discount_cents: int
    interest_cents: int
    total_value_cents: int
    down_payment_cents: int
    manually_overridden: bool
    installments: List[InstallmentSchema]

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "EntrySchema":
        return cls(
            entry_id=entry.entry_id,
            issue_date=entry.issue_date,
            document_value_cents=entry.document_value.cents,
            discount_cents=entry.discount.cents,
            interest_cents=entry.interest.cents,
            total_value_cents=entry.total_value.cents,
            down_payment_cents=entry.down_payment.cents,
            manually_overridden=entry.manually_overridden,
            installments=[InstallmentSchema.from_domain(inst) for inst in entry.rows()],
        )


class SummarySchema(BaseModel):
    """Reconciliation totals for a listing"""

    document_total_cents: int
    discount_total_cents: int
    installment_total_cents: int
    paid_total_cents: int
    balance_total_cents: int
    entry_count: int
    row_count: int
    net_total_cents: int

    @classmethod
    def from_domain(cls, summary: ReconciliationSummary) -> "SummarySchema":
        return cls(
            document_total_cents=summary.document_total.cents,
            discount_total_cents=summary.discount_total.cents,
            installment_total_cents=summary.installment_total.cents,
            paid_total_cents=summary.paid_total.cents,
            balance_total_cents=summary.balance_total.cents,
            entry_count=summary.entry_count,
            row_count=summary.row_count,
            net_total_cents=summary.net_total.cents,
        )
