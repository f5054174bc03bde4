"""Persistence collaborator contract consumed by the ledger service"""

from typing import List, Protocol, Sequence, runtime_checkable

from installment_ledger.domain.models import Installment


@runtime_checkable
class InstallmentRepository(Protocol):
    """
    Storage of an entry's installment rows, grouped by entry id.

    Implementations must keep a row's identity when it is updated at the
    same position (same installment number, id already set), and assign an
    id to rows stored for the first time.
    """

    def load_installments(self, entry_id: str) -> List[Installment]:
        """Rows of the entry ordered by installment number (down payment first)"""
        ...

    def upsert_installments(self, entry_id: str, installments: Sequence[Installment]) -> List[Installment]:
        """Insert or update rows; rows of the entry not in `installments` are removed"""
        ...
