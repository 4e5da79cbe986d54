"""GET /v1/pay-calendar - commission due per pay-date"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from commission_schedule.api.v1.schemas import PayCalendarResponse, PayDateRangeResponse, PayDateSummarySchema
from commission_schedule.api.v1.sales import to_installment_schema
from commission_schedule.api.dependencies import get_clock, get_installment_repository, get_sale_repository
from commission_schedule.domain.calendar import commission_totals, month_bounds, summarize_by_pay_date
from commission_schedule.infrastructure.database.repositories import InstallmentRepository, SaleRepository
from commission_schedule.services.reconciler import Clock

router = APIRouter()


@router.get("/pay-calendar", response_model=PayCalendarResponse)
def get_pay_calendar(
    start: Optional[date] = Query(None, description="First pay-date (default: start of current month)"),
    end: Optional[date] = Query(None, description="Last pay-date (default: end of start's month)"),
    installments: InstallmentRepository = Depends(get_installment_repository),
    sales: SaleRepository = Depends(get_sale_repository),
    clock: Clock = Depends(get_clock),
):
    """
    List installments paid out between two dates.

    Returns:
        Installments ordered by pay-date, per-pay-date commission totals,
        and paid vs. unpaid commission for the window
    """
    if start is None:
        start = month_bounds(clock().date())[0]
    if end is None:
        end = month_bounds(start)[1]
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")

    window = installments.get_active_between(start, end)
    sales_by_id = sales.get_active_sales_by_id(inst.sale_id for inst in window)
    totals = commission_totals(window)

    return PayCalendarResponse(
        start=start,
        end=end,
        installments=[to_installment_schema(inst, sales_by_id.get(inst.sale_id)) for inst in window],
        pay_dates=[
            PayDateSummarySchema(
                pay_date=summary.pay_date,
                total_commission=summary.total_commission,
                installment_count=summary.installment_count,
            )
            for summary in summarize_by_pay_date(window)
        ],
        paid_commission=totals.paid_commission,
        unpaid_commission=totals.unpaid_commission,
        paid_count=totals.paid_count,
        unpaid_count=totals.unpaid_count,
    )


@router.get("/pay-calendar/range", response_model=PayDateRangeResponse)
def get_pay_date_range(installments: InstallmentRepository = Depends(get_installment_repository)):
    """Earliest and latest pay-date with anything scheduled"""
    min_pay_date, max_pay_date = installments.get_pay_date_range()
    return PayDateRangeResponse(min_pay_date=min_pay_date, max_pay_date=max_pay_date)
