"""Pay calendar aggregation over installment schedules"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple
from commission_schedule.domain.models import CommissionTotals, Installment, PayDateSummary
from commission_schedule.utils.date_utils import last_day_of_month


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last calendar day of the month containing `day`"""
    return day.replace(day=1), last_day_of_month(day)


def summarize_by_pay_date(installments: Iterable[Installment]) -> List[PayDateSummary]:
    """Group installments by pay-date, ordered chronologically"""
    totals: Dict[date, Decimal] = defaultdict(Decimal)
    counts: Dict[date, int] = defaultdict(int)

    for inst in installments:
        if inst.pay_date is None:
            continue
        totals[inst.pay_date] += inst.commission
        counts[inst.pay_date] += 1

    return [
        PayDateSummary(pay_date=pay_date, total_commission=totals[pay_date], installment_count=counts[pay_date])
        for pay_date in sorted(totals)
    ]


def commission_totals(installments: Iterable[Installment]) -> CommissionTotals:
    """Sum commission separately for paid and unpaid installments"""
    paid_commission = Decimal("0")
    unpaid_commission = Decimal("0")
    paid_count = 0
    unpaid_count = 0

    for inst in installments:
        if inst.is_paid:
            paid_commission += inst.commission
            paid_count += 1
        else:
            unpaid_commission += inst.commission
            unpaid_count += 1

    return CommissionTotals(
        paid_commission=paid_commission,
        unpaid_commission=unpaid_commission,
        paid_count=paid_count,
        unpaid_count=unpaid_count,
    )
