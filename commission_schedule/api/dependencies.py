"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from commission_schedule.config import settings
from commission_schedule.infrastructure.database.repositories import InstallmentRepository, SaleRepository
from commission_schedule.infrastructure.database.session import get_db
from commission_schedule.services.reconciler import Clock, ScheduleReconciler
from commission_schedule.utils.date_utils import utc_now


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> Clock:
    """Provide the clock used to stamp created/updated/paid timestamps"""
    return utc_now


def get_sale_repository(db: Session = Depends(get_db)) -> SaleRepository:
    return SaleRepository(db)


def get_installment_repository(db: Session = Depends(get_db)) -> InstallmentRepository:
    return InstallmentRepository(db)


def get_reconciler(
    installments: InstallmentRepository = Depends(get_installment_repository),
    clock: Clock = Depends(get_clock),
) -> ScheduleReconciler:
    """Provide a reconciler bound to the request's session"""
    return ScheduleReconciler(
        installments,
        clock=clock,
        offsets_days=settings.schedule_offsets_days,
        min_valid_year=settings.min_valid_year,
        max_valid_year=settings.max_valid_year,
    )
