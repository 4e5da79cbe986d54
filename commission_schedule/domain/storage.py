"""Storage contract the schedule reconciler depends on"""

from datetime import datetime
from typing import List, Optional, Protocol, Sequence
from commission_schedule.domain.models import Installment


class InstallmentStore(Protocol):
    """
    Persistence operations needed to reconcile a sale's schedule.

    Each call is durable on its own only once the caller commits; the store
    never commits, so a reconciliation run can share one transaction.
    """

    def load_active_installments(self, sale_id: int) -> List[Installment]:
        ...

    def get_installment(self, installment_id: int) -> Optional[Installment]:
        ...

    def insert_installments(self, installments: Sequence[Installment]) -> List[Installment]:
        ...

    def soft_delete_installments(
        self,
        installment_ids: Sequence[int],
        deleted_at: datetime,
        updated_at: datetime,
    ) -> None:
        ...

    def update_installment(self, installment: Installment) -> None:
        ...

    def purge_installments(self, installment_ids: Sequence[int]) -> None:
        ...
