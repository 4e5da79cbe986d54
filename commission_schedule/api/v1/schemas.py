"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional


class SaleRequest(BaseModel):
    """Request body for POST /v1/sales and PUT /v1/sales/{sale_id}"""

    client_id: int = Field(..., gt=0, description="Owning client identifier")
    contact_id: int = Field(..., gt=0, description="Contact who closed the sale")
    invoice_number: str = Field("", max_length=100)
    sale_date: date
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2, description="Sale amount")
    commission_percent: Decimal = Field(
        ..., ge=0, max_digits=9, decimal_places=4, description="Commission percent (10 = 10%)"
    )


class InstallmentSchema(BaseModel):
    """Single installment in a sale's commission schedule"""

    installment_id: int
    installment_number: int = Field(0, description="1-based position in the cadence, 0 if edited off it")
    due_date: Optional[date]
    pay_date: Optional[date]
    amount: Decimal
    commission: Decimal
    is_paid: bool
    paid_at: Optional[datetime] = None


class SaleResponse(BaseModel):
    """Sale with its active commission schedule"""

    sale_id: int
    client_id: int
    contact_id: int
    invoice_number: str
    sale_date: date
    amount: Decimal
    commission_percent: Decimal
    installments: List[InstallmentSchema]


class PaidStatusRequest(BaseModel):
    """Request body for PATCH /v1/installments/{installment_id}/paid"""

    paid: bool
    paid_at: Optional[datetime] = Field(None, description="Defaults to now when marking paid")


class InstallmentUpdateRequest(BaseModel):
    """
    Request body for PUT /v1/installments/{installment_id}

    Pay-date and commission are derived from these fields, never sent.
    """

    due_date: date
    amount: Decimal = Field(..., ge=0, max_digits=28, decimal_places=10)
    is_paid: bool = False
    paid_at: Optional[datetime] = None


class PayDateSummarySchema(BaseModel):
    """Commission due on one pay-date"""

    pay_date: date
    total_commission: Decimal
    installment_count: int


class PayCalendarResponse(BaseModel):
    """Response for GET /v1/pay-calendar"""

    start: date
    end: date
    installments: List[InstallmentSchema]
    pay_dates: List[PayDateSummarySchema]
    paid_commission: Decimal
    unpaid_commission: Decimal
    paid_count: int
    unpaid_count: int


class PayDateRangeResponse(BaseModel):
    """Response for GET /v1/pay-calendar/range"""

    min_pay_date: Optional[date] = None
    max_pay_date: Optional[date] = None


class BackfillResponse(BaseModel):
    """Response for POST /v1/schedules/backfill"""

    orphans_purged: int
    stale_deactivated: int
    sales_backfilled: int
