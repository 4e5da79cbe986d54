"""Sale lifecycle endpoints - every mutation reconciles the commission schedule"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from commission_schedule.api.v1.schemas import InstallmentSchema, SaleRequest, SaleResponse
from commission_schedule.api.dependencies import (
    get_clock,
    get_installment_repository,
    get_reconciler,
    get_request_id,
    get_sale_repository,
)
from commission_schedule.config import settings
from commission_schedule.domain.exceptions import SaleNotFoundError
from commission_schedule.domain.models import Installment, Sale
from commission_schedule.domain.schedule import installment_number
from commission_schedule.infrastructure.database.session import get_db
from commission_schedule.infrastructure.database.repositories import InstallmentRepository, SaleRepository
from commission_schedule.infrastructure.observability.metrics import storage_failures_counter
from commission_schedule.services.reconciler import Clock, ScheduleReconciler

router = APIRouter()


def to_installment_schema(installment: Installment, sale: Sale | None = None) -> InstallmentSchema:
    number = 0
    if sale is not None and installment.due_date is not None:
        number = installment_number(sale.sale_date, installment.due_date, settings.schedule_offsets_days)

    return InstallmentSchema(
        installment_id=installment.id,
        installment_number=number,
        due_date=installment.due_date,
        pay_date=installment.pay_date,
        amount=installment.amount,
        commission=installment.commission,
        is_paid=installment.is_paid,
        paid_at=installment.paid_at,
    )


def to_sale_response(sale: Sale, installments: List[Installment]) -> SaleResponse:
    return SaleResponse(
        sale_id=sale.id,
        client_id=sale.client_id,
        contact_id=sale.contact_id,
        invoice_number=sale.invoice_number,
        sale_date=sale.sale_date,
        amount=sale.amount,
        commission_percent=sale.commission_percent,
        installments=[to_installment_schema(inst, sale) for inst in installments],
    )


def storage_unavailable(db: Session, error: SQLAlchemyError, request_id: str) -> HTTPException:
    """Roll back the request's transaction and build the 503 to raise"""
    storage_failures_counter.inc()
    db.rollback()
    logging.error(f"Storage error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=503, detail="Storage unavailable")


@router.post("/sales", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    request_body: SaleRequest,
    request: Request,
    db: Session = Depends(get_db),
    sales: SaleRepository = Depends(get_sale_repository),
    reconciler: ScheduleReconciler = Depends(get_reconciler),
    clock: Clock = Depends(get_clock),
):
    """
    Record a sale and generate its commission schedule.

    The sale row and its installments are committed together.
    """
    request_id = get_request_id(request)

    try:
        sale = sales.create_sale(
            Sale(id=None, **request_body.model_dump()),
            now=clock(),
        )
        installments = reconciler.reconcile_for_new_sale(sale)
        db.commit()
    except SQLAlchemyError as e:
        raise storage_unavailable(db, e, request_id)

    logging.info("Sale created", extra={"request_id": request_id, "sale_id": sale.id})
    return to_sale_response(sale, installments)


@router.get("/sales/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    sales: SaleRepository = Depends(get_sale_repository),
    installments: InstallmentRepository = Depends(get_installment_repository),
):
    """Retrieve an active sale with its active installments"""
    sale = sales.get_active_sale(sale_id)
    if sale is None:
        raise HTTPException(status_code=404, detail=str(SaleNotFoundError(sale_id)))

    return to_sale_response(sale, installments.load_active_installments(sale_id))


@router.put("/sales/{sale_id}", response_model=SaleResponse)
def update_sale(
    sale_id: int,
    request_body: SaleRequest,
    request: Request,
    regenerate_schedule: bool = Query(True, description="Rebuild the installment schedule"),
    db: Session = Depends(get_db),
    sales: SaleRepository = Depends(get_sale_repository),
    installments: InstallmentRepository = Depends(get_installment_repository),
    reconciler: ScheduleReconciler = Depends(get_reconciler),
    clock: Clock = Depends(get_clock),
):
    """
    Edit a sale and, unless told otherwise, reconcile its schedule.

    Installments whose due date survives the edit keep their paid state.
    """
    request_id = get_request_id(request)

    try:
        sale = sales.update_sale(
            Sale(id=sale_id, **request_body.model_dump()),
            now=clock(),
        )
        if sale is None:
            raise SaleNotFoundError(sale_id)

        if regenerate_schedule:
            schedule = reconciler.reconcile_for_sale(sale, trigger="update")
        else:
            schedule = installments.load_active_installments(sale_id)
        db.commit()

    except SaleNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except SQLAlchemyError as e:
        raise storage_unavailable(db, e, request_id)

    return to_sale_response(sale, schedule)


@router.delete("/sales/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(
    sale_id: int,
    request: Request,
    db: Session = Depends(get_db),
    sales: SaleRepository = Depends(get_sale_repository),
    reconciler: ScheduleReconciler = Depends(get_reconciler),
    clock: Clock = Depends(get_clock),
):
    """Soft-delete a sale together with its schedule"""
    request_id = get_request_id(request)

    try:
        if not sales.soft_delete_sale(sale_id, now=clock()):
            raise SaleNotFoundError(sale_id)
        reconciler.delete_schedule_for_sale(sale_id)
        db.commit()

    except SaleNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except SQLAlchemyError as e:
        raise storage_unavailable(db, e, request_id)
