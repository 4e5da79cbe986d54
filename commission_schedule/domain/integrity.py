"""Integrity checks for persisted installments"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple
from commission_schedule.domain.models import Installment

# Reasons reported alongside purged installment ids
MISSING_DATE = "missing_date"
OUT_OF_RANGE = "out_of_range"
DUPLICATE = "duplicate"


def _year_in_range(value: Optional[date], min_year: int, max_year: int) -> bool:
    return value is not None and min_year <= value.year <= max_year


def find_corrupt_installments(
    installments: Iterable[Installment],
    min_valid_year: int = 2000,
    max_valid_year: int = 2100,
) -> List[Tuple[int, str]]:
    """
    Identify stored installments that must be removed before regeneration.

    Checks run in order, each on what survived the previous one:
    1. Missing due date or pay-date
    2. Due date or pay-date year outside [min_valid_year, max_valid_year]
    3. Duplicate due dates - the lowest id is kept

    Returns:
        (installment_id, reason) pairs; rows without an id are never reported
    """
    corrupt: List[Tuple[int, str]] = []
    survivors: List[Installment] = []

    for inst in installments:
        if inst.id is None:
            continue
        if inst.due_date is None or inst.pay_date is None:
            corrupt.append((inst.id, MISSING_DATE))
        elif not (
            _year_in_range(inst.due_date, min_valid_year, max_valid_year)
            and _year_in_range(inst.pay_date, min_valid_year, max_valid_year)
        ):
            corrupt.append((inst.id, OUT_OF_RANGE))
        else:
            survivors.append(inst)

    by_due_date: Dict[date, List[Installment]] = defaultdict(list)
    for inst in survivors:
        by_due_date[inst.due_date].append(inst)

    for group in by_due_date.values():
        ordered = sorted(group, key=lambda i: i.id)
        corrupt.extend((dup.id, DUPLICATE) for dup in ordered[1:])

    return corrupt
