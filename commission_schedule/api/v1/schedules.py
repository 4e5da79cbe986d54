"""POST /v1/schedules/backfill - repair schedules across all sales"""

import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from commission_schedule.api.v1.schemas import BackfillResponse
from commission_schedule.api.v1.sales import storage_unavailable
from commission_schedule.api.dependencies import (
    get_clock,
    get_installment_repository,
    get_reconciler,
    get_request_id,
    get_sale_repository,
)
from commission_schedule.infrastructure.database.session import get_db
from commission_schedule.infrastructure.database.repositories import InstallmentRepository, SaleRepository
from commission_schedule.services.reconciler import Clock, ScheduleReconciler

router = APIRouter()


@router.post("/schedules/backfill", response_model=BackfillResponse)
def backfill_schedules(
    request: Request,
    db: Session = Depends(get_db),
    sales: SaleRepository = Depends(get_sale_repository),
    installments: InstallmentRepository = Depends(get_installment_repository),
    reconciler: ScheduleReconciler = Depends(get_reconciler),
    clock: Clock = Depends(get_clock),
):
    """
    Bring every sale's schedule back in line.

    Flow:
    1. Remove installments whose sale row is gone
    2. Deactivate installments still attached to deleted sales
    3. Generate schedules for active sales with no active installments
    """
    request_id = get_request_id(request)

    try:
        orphans_purged = installments.purge_orphaned_installments()
        stale_deactivated = installments.soft_delete_for_deleted_sales(clock())
        sales_backfilled = reconciler.ensure_schedules(sales.list_active_sales())
        db.commit()
    except SQLAlchemyError as e:
        raise storage_unavailable(db, e, request_id)

    logging.info(
        "Schedules backfilled",
        extra={
            "request_id": request_id,
            "orphans_purged": orphans_purged,
            "stale_deactivated": stale_deactivated,
            "sales_backfilled": sales_backfilled,
        },
    )
    return BackfillResponse(
        orphans_purged=orphans_purged,
        stale_deactivated=stale_deactivated,
        sales_backfilled=sales_backfilled,
    )
