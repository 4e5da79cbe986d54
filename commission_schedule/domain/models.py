"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Sale:
    """Recorded transaction that generates a commission obligation"""

    id: Optional[int]
    client_id: int
    contact_id: int
    invoice_number: str
    sale_date: date
    amount: Decimal
    commission_percent: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None


@dataclass
class Installment:
    """Single scheduled commission disbursement derived from a sale"""

    sale_id: Optional[int]
    due_date: Optional[date]
    pay_date: Optional[date]
    amount: Decimal
    commission: Decimal
    is_paid: bool = False
    paid_at: Optional[datetime] = None  # set only while is_paid is True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    id: Optional[int] = None


@dataclass
class PayDateSummary:
    """Commission due on a single pay-date"""

    pay_date: date
    total_commission: Decimal
    installment_count: int


@dataclass
class CommissionTotals:
    """Paid vs. unpaid commission across a set of installments"""

    paid_commission: Decimal
    unpaid_commission: Decimal
    paid_count: int
    unpaid_count: int
