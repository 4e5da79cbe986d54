"""Direct installment edits that bypass schedule regeneration"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from commission_schedule.api.v1.schemas import InstallmentSchema, InstallmentUpdateRequest, PaidStatusRequest
from commission_schedule.api.v1.sales import storage_unavailable, to_installment_schema
from commission_schedule.api.dependencies import (
    get_installment_repository,
    get_reconciler,
    get_request_id,
    get_sale_repository,
)
from commission_schedule.domain.exceptions import InstallmentNotFoundError
from commission_schedule.infrastructure.database.session import get_db
from commission_schedule.infrastructure.database.repositories import InstallmentRepository, SaleRepository
from commission_schedule.services.reconciler import ScheduleReconciler

router = APIRouter()


@router.patch("/installments/{installment_id}/paid", response_model=InstallmentSchema)
def set_paid_status(
    installment_id: int,
    request_body: PaidStatusRequest,
    request: Request,
    db: Session = Depends(get_db),
    sales: SaleRepository = Depends(get_sale_repository),
    reconciler: ScheduleReconciler = Depends(get_reconciler),
):
    """Mark a single installment paid or unpaid"""
    request_id = get_request_id(request)

    try:
        installment = reconciler.update_installment_paid_status(
            installment_id,
            paid=request_body.paid,
            paid_at=request_body.paid_at,
        )
        db.commit()

    except InstallmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except SQLAlchemyError as e:
        raise storage_unavailable(db, e, request_id)

    return to_installment_schema(installment, sales.get_active_sale(installment.sale_id))


@router.put("/installments/{installment_id}", response_model=InstallmentSchema)
def update_installment(
    installment_id: int,
    request_body: InstallmentUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    sales: SaleRepository = Depends(get_sale_repository),
    installments: InstallmentRepository = Depends(get_installment_repository),
    reconciler: ScheduleReconciler = Depends(get_reconciler),
):
    """
    Edit an installment's due date, amount and paid state by hand.

    Pay-date and commission are recomputed from the edit. The edit is
    overwritten the next time the sale is regenerated.
    """
    request_id = get_request_id(request)

    try:
        current = installments.get_installment(installment_id)
        sale = sales.get_active_sale(current.sale_id) if current else None
        if sale is None:
            raise InstallmentNotFoundError(installment_id)

        installment = reconciler.update_installment_details(installment_id, sale, **request_body.model_dump())
        db.commit()

    except InstallmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except SQLAlchemyError as e:
        raise storage_unavailable(db, e, request_id)

    return to_installment_schema(installment, sale)
