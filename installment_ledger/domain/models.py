"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from installment_ledger.domain.exceptions import DomainException
from installment_ledger.domain.money import Money

DOWN_PAYMENT_NUMBER = 0


class InstallmentStatus(str, Enum):
    """Settlement status derived from payments and due date"""

    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELED = "canceled"


@dataclass
class Installment:
    """Single scheduled portion of a ledger entry (number 0 is the down payment)"""

    number: int
    due_date: date
    expected_amount: Money
    paid_amount: Money = field(default_factory=Money.zero)
    paid_date: Optional[date] = None
    status: InstallmentStatus = InstallmentStatus.PENDING
    canceled: bool = False
    id: Optional[str] = None  # Row identity owned by the persistence collaborator

    @property
    def is_down_payment(self) -> bool:
        return self.number == DOWN_PAYMENT_NUMBER


@dataclass
class LedgerEntry:
    """One financial document: header values plus its installment schedule"""

    issue_date: date
    document_value: Money
    discount: Money
    interest: Money
    total_value: Money
    down_payment: Money
    installments: List[Installment] = field(default_factory=list)  # number >= 1, ordered
    down_payment_row: Optional[Installment] = None
    manually_overridden: bool = False
    entry_id: Optional[str] = None  # Grouping identifier shared by all rows
    document_number: Optional[str] = None
    party_id: Optional[str] = None

    @property
    def balance(self) -> Money:
        """Amount the regular installments must cover"""
        return self.total_value.subtract(self.down_payment)

    @property
    def installment_count(self) -> int:
        return len(self.installments)

    def rows(self) -> List[Installment]:
        """Down payment row (if any) followed by the regular installments"""
        head = [self.down_payment_row] if self.down_payment_row is not None else []
        return head + list(self.installments)


@dataclass
class InstallmentRow:
    """Flattened persisted installment row as listed by the surrounding application"""

    installment_number: int
    expected_amount: Money
    paid_amount: Money
    document_value: Money
    discount: Money
    entry_id: Optional[str] = None
    document_number: Optional[str] = None
    party_id: Optional[str] = None
    issue_date: Optional[date] = None

    @property
    def balance(self) -> Money:
        return self.expected_amount.subtract(self.paid_amount)

    @property
    def group_key(self) -> str:
        """Owning entry identity, with a composite fallback when the id is missing"""
        if self.entry_id:
            return self.entry_id
        issued = self.issue_date.isoformat() if self.issue_date else ""
        return f"{self.document_number or ''}_{self.party_id or ''}_{issued}"


@dataclass
class RebalanceWarning:
    """Non-blocking notice that a value was auto-corrected or looks suspicious"""

    code: str  # adjustment_exceeds_balance | last_installment_corrected | due_date_before_issue
    message: str
    installment_number: int
    required_amount: Optional[Money] = None


@dataclass
class ValidationIssue:
    """One finding of entry validation, carrying the exception it stands for"""

    code: str
    message: str
    error: Optional[DomainException] = None
    installment_number: Optional[int] = None

    def __eq__(self, other: object) -> bool:
        # Exceptions compare by identity; compare findings by content instead
        if not isinstance(other, ValidationIssue):
            return NotImplemented
        return (self.code, self.message, self.installment_number) == (
            other.code,
            other.message,
            other.installment_number,
        )


@dataclass
class ValidationResult:
    """Outcome of validating a ledger entry"""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise the first hard error, if any"""
        for issue in self.errors:
            if issue.error is not None:
                raise issue.error


@dataclass
class ReconciliationSummary:
    """Header totals over a set of entries / installment rows"""

    document_total: Money
    discount_total: Money
    installment_total: Money
    paid_total: Money
    balance_total: Money
    entry_count: int
    row_count: int

    @property
    def net_total(self) -> Money:
        """Document total minus discounts, as shown beside the listing totals"""
        return self.document_total.subtract(self.discount_total)


@dataclass
class DeletionCheck:
    """Whether a row may be used to delete its whole document"""

    allowed: bool
    reason: Optional[str] = None
