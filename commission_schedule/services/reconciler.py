"""Keeps persisted commission installments consistent with their sale"""

import logging
import time
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence
from commission_schedule.domain.exceptions import InstallmentNotFoundError
from commission_schedule.domain.integrity import find_corrupt_installments
from commission_schedule.domain.models import Installment, Sale
from commission_schedule.domain.schedule import (
    DEFAULT_OFFSETS_DAYS,
    calculate_commission,
    commission_pay_date,
    generate_installments,
)
from commission_schedule.domain.storage import InstallmentStore
from commission_schedule.infrastructure.observability.logging import log_reconciliation
from commission_schedule.infrastructure.observability.metrics import (
    record_paid_status,
    record_purge,
    record_reconciliation,
)
from commission_schedule.utils.date_utils import utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ScheduleReconciler:
    """
    Regenerates and persists a sale's installment schedule.

    The reconciler never commits: every store call only flushes, and the
    caller commits once the whole sequence has succeeded. A failure at any
    step therefore rolls back the purge, the soft-delete and the insert
    together. Storage errors propagate unchanged; nothing is retried.
    """

    def __init__(
        self,
        store: InstallmentStore,
        clock: Clock = utc_now,
        offsets_days: Sequence[int] = DEFAULT_OFFSETS_DAYS,
        min_valid_year: int = 2000,
        max_valid_year: int = 2100,
    ):
        self.store = store
        self.clock = clock
        self.offsets_days = tuple(offsets_days)
        self.min_valid_year = min_valid_year
        self.max_valid_year = max_valid_year

    def reconcile_for_sale(self, sale: Sale, trigger: str = "update") -> List[Installment]:
        """
        Replace the sale's active schedule with a freshly generated one.

        Flow:
        1. Purge corrupt rows (missing/out-of-range dates, duplicate due dates)
        2. Load the clean active set
        3. Soft-delete every active row for the sale
        4. Generate the new schedule, carrying paid state by due date
        5. Insert the new rows
        """
        start_time = time.time()
        purged_count = self._purge_corrupt(sale.id)
        existing = self.store.load_active_installments(sale.id)

        now = self.clock()
        self.store.soft_delete_installments([inst.id for inst in existing], deleted_at=now, updated_at=now)

        installments = generate_installments(sale, existing, now, self.offsets_days)
        inserted = self.store.insert_installments(installments)

        self._report(sale.id, trigger, inserted, purged_count, start_time)
        return inserted

    def reconcile_for_new_sale(self, sale: Sale) -> List[Installment]:
        """Generate and insert the schedule for a sale that has none yet"""
        start_time = time.time()
        now = self.clock()
        inserted = self.store.insert_installments(generate_installments(sale, [], now, self.offsets_days))

        self._report(sale.id, "create", inserted, 0, start_time)
        return inserted

    def delete_schedule_for_sale(self, sale_id: int) -> int:
        """Soft-delete every active installment of a sale"""
        active = self.store.load_active_installments(sale_id)
        now = self.clock()
        self.store.soft_delete_installments([inst.id for inst in active], deleted_at=now, updated_at=now)

        record_reconciliation("delete", 0)
        logger.info("Schedule deleted", extra={"sale_id": sale_id, "deleted_count": len(active)})
        return len(active)

    def update_installment_paid_status(
        self,
        installment_id: int,
        paid: bool,
        paid_at: Optional[datetime] = None,
    ) -> Installment:
        """
        Toggle a single installment's paid flag without regenerating.

        Paid with no timestamp is stamped with the current time; unpaid always
        clears the timestamp.
        """
        installment = self.store.get_installment(installment_id)
        if installment is None:
            raise InstallmentNotFoundError(installment_id)

        now = self.clock()
        updated = replace(
            installment,
            is_paid=paid,
            paid_at=(paid_at or now) if paid else None,
            updated_at=now,
        )
        self.store.update_installment(updated)

        record_paid_status(paid)
        return updated

    def update_installment_details(
        self,
        installment_id: int,
        sale: Sale,
        due_date: date,
        amount: Decimal,
        is_paid: bool,
        paid_at: Optional[datetime] = None,
    ) -> Installment:
        """
        Overwrite an installment's due date, amount and paid state by hand.

        Pay-date and commission are always derived: the pay-date from the new
        due date, the commission from the new amount at the owning sale's
        percent. The paid timestamp follows the same rule as a paid-status
        toggle.
        """
        current = self.store.get_installment(installment_id)
        if current is None or current.sale_id != sale.id:
            raise InstallmentNotFoundError(installment_id)

        now = self.clock()
        updated = replace(
            current,
            due_date=due_date,
            pay_date=commission_pay_date(due_date),
            amount=amount,
            commission=calculate_commission(amount, sale.commission_percent),
            is_paid=is_paid,
            paid_at=(paid_at or now) if is_paid else None,
            updated_at=now,
        )
        self.store.update_installment(updated)
        return updated

    def ensure_schedules(self, sales: Iterable[Sale]) -> int:
        """Generate schedules for active sales that have no active installments"""
        backfilled = 0
        for sale in sales:
            if sale.is_deleted or self.store.load_active_installments(sale.id):
                continue

            now = self.clock()
            inserted = self.store.insert_installments(generate_installments(sale, [], now, self.offsets_days))
            record_reconciliation("backfill", len(inserted))
            backfilled += 1

        return backfilled

    def _purge_corrupt(self, sale_id: int) -> int:
        corrupt = find_corrupt_installments(
            self.store.load_active_installments(sale_id),
            self.min_valid_year,
            self.max_valid_year,
        )
        if not corrupt:
            return 0

        self.store.purge_installments([installment_id for installment_id, _ in corrupt])
        for installment_id, reason in corrupt:
            record_purge(reason)
            logger.warning(
                "Purged corrupt installment",
                extra={"sale_id": sale_id, "installment_id": installment_id, "reason": reason},
            )
        return len(corrupt)

    def _report(
        self,
        sale_id: int,
        trigger: str,
        inserted: List[Installment],
        purged_count: int,
        start_time: float,
    ) -> None:
        duration_ms = (time.time() - start_time) * 1000
        record_reconciliation(trigger, len(inserted))
        log_reconciliation(
            sale_id=sale_id,
            trigger=trigger,
            generated_count=len(inserted),
            preserved_paid_count=sum(1 for inst in inserted if inst.is_paid),
            purged_count=purged_count,
            duration_ms=duration_ms,
        )
