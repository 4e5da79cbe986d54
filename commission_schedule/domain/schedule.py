"""Commission installment schedule generation"""

from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence
from commission_schedule.domain.models import Installment, Sale
from commission_schedule.utils.date_utils import as_date, last_day_of_month

DEFAULT_OFFSETS_DAYS = (25, 30, 35)

# Due dates on or before this day of the month are paid out mid-month
MID_MONTH_PAYOUT_DAY = 15

CENTS = Decimal("0.01")


def commission_pay_date(due_date: date) -> date:
    """
    Map an installment due date to its payroll cutoff.

    Due on day 1-15 → paid the 15th of that month.
    Due on day 16+  → paid the last day of that month.
    """
    if due_date.day <= MID_MONTH_PAYOUT_DAY:
        return due_date.replace(day=MID_MONTH_PAYOUT_DAY)
    return last_day_of_month(due_date)


def split_amount(amount: Decimal, count: int) -> Decimal:
    """Equal share of a sale amount; the remainder is not redistributed"""
    return Decimal(amount) / count


def calculate_commission(amount: Decimal, commission_percent: Decimal) -> Decimal:
    """Commission on an installment, rounded to cents with halves away from zero"""
    commission = Decimal(amount) * (Decimal(commission_percent) / 100)
    return commission.quantize(CENTS, rounding=ROUND_HALF_UP)


def installment_number(
    sale_date: date,
    due_date: date,
    offsets_days: Sequence[int] = DEFAULT_OFFSETS_DAYS,
) -> int:
    """1-based position of `due_date` in the sale's cadence, or 0 when off-cadence"""
    days = (as_date(due_date) - as_date(sale_date)).days
    for position, offset in enumerate(offsets_days, start=1):
        if offset == days:
            return position
    return 0


def generate_installments(
    sale: Sale,
    existing_installments: Iterable[Installment],
    now: datetime,
    offsets_days: Sequence[int] = DEFAULT_OFFSETS_DAYS,
) -> List[Installment]:
    """
    Derive the installment schedule for a sale.

    Requirements:
    - One installment per offset, due `sale_date + offset` days (default 25/30/35)
    - Each installment is `amount / len(offsets_days)`, no remainder redistribution
    - Commission rounded to cents, half away from zero
    - Paid flag and paid timestamp carried over from an existing installment
      with the same due date; anything else starts unpaid

    Args:
        sale: Sale to schedule (amount and percent are not validated here)
        existing_installments: Currently active installments for the sale
        now: Timestamp stamped on created_at/updated_at of new rows
        offsets_days: Day offsets from the sale date

    Returns:
        New (unsaved) Installment objects in offset order

    Example:
        Sale 999.00 @ 10% on 2024-01-01 →
        2024-01-26 (pay 2024-01-31), 2024-01-31 (pay 2024-01-31),
        2024-02-05 (pay 2024-02-15); 333.00 each, commission 33.30
    """
    if not offsets_days:
        return []

    # First row per due date wins
    existing_by_date: Dict[date, Installment] = {}
    for inst in existing_installments:
        if inst.due_date is None:
            continue
        existing_by_date.setdefault(as_date(inst.due_date), inst)

    sale_date = as_date(sale.sale_date)
    amount = split_amount(sale.amount, len(offsets_days))
    commission = calculate_commission(amount, sale.commission_percent)

    installments = []
    for offset in offsets_days:
        due_date = sale_date + timedelta(days=offset)
        previous = existing_by_date.get(due_date)

        installments.append(
            Installment(
                sale_id=sale.id,
                due_date=due_date,
                pay_date=commission_pay_date(due_date),
                amount=amount,
                commission=commission,
                is_paid=previous.is_paid if previous else False,
                paid_at=previous.paid_at if previous else None,
                created_at=now,
                updated_at=now,
            )
        )

    return installments
