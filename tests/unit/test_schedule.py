"""Unit tests for commission schedule generation"""

import pytest
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from commission_schedule.domain.models import Installment
from commission_schedule.domain.schedule import (
    calculate_commission,
    commission_pay_date,
    generate_installments,
    installment_number,
    split_amount,
)


def test_generate_installments_cadence(sample_sale, now):
    """Three installments due 25, 30 and 35 days after the sale"""
    installments = generate_installments(sample_sale, [], now)

    assert len(installments) == 3
    assert [inst.due_date for inst in installments] == [
        sample_sale.sale_date + timedelta(days=25),
        sample_sale.sale_date + timedelta(days=30),
        sample_sale.sale_date + timedelta(days=35),
    ]


def test_generate_installments_reference_scenario(sample_sale, now):
    """999.00 at 10% on 2024-01-01"""
    installments = generate_installments(sample_sale, [], now)

    assert [(inst.due_date, inst.pay_date) for inst in installments] == [
        (date(2024, 1, 26), date(2024, 1, 31)),
        (date(2024, 1, 31), date(2024, 1, 31)),
        (date(2024, 2, 5), date(2024, 2, 15)),
    ]
    assert all(inst.amount == Decimal("333.00") for inst in installments)
    assert all(inst.commission == Decimal("33.30") for inst in installments)
    assert all(inst.sale_id == sample_sale.id for inst in installments)


def test_generate_installments_new_rows_unpaid_and_stamped(sample_sale, now):
    installments = generate_installments(sample_sale, [], now)

    assert all(inst.is_paid is False and inst.paid_at is None for inst in installments)
    assert all(inst.created_at == now and inst.updated_at == now for inst in installments)
    assert all(inst.id is None for inst in installments)


def test_generate_installments_ignores_time_of_day(sample_sale, now):
    sale = replace(sample_sale, sale_date=datetime(2024, 1, 1, 23, 59))
    installments = generate_installments(sale, [], now)

    assert installments[0].due_date == date(2024, 1, 26)


def test_amount_split_has_no_drift(sample_sale, now):
    """Each amount is A/3 and identical across repeated calls"""
    sale = replace(sample_sale, amount=Decimal("1000.00"))
    first = generate_installments(sale, [], now)
    second = generate_installments(sale, [], now)

    expected = Decimal("1000.00") / 3
    assert all(inst.amount == expected for inst in first)
    assert [inst.amount for inst in first] == [inst.amount for inst in second]


def test_amount_split_keeps_remainder_unredistributed():
    """Sum may differ from the sale amount by the division remainder"""
    share = split_amount(Decimal("100.00"), 3)

    assert share == Decimal("100.00") / 3
    assert abs(share * 3 - Decimal("100.00")) < Decimal("0.02")


@pytest.mark.parametrize(
    "amount, percent, expected",
    [
        (Decimal("333.33"), Decimal("10"), Decimal("33.33")),
        (Decimal("0.05"), Decimal("10"), Decimal("0.01")),  # 0.005 rounds up, not to even
        (Decimal("0.25"), Decimal("10"), Decimal("0.03")),  # 0.025 → 0.03, banker's would give 0.02
        (Decimal("-0.05"), Decimal("10"), Decimal("-0.01")),  # away from zero on the negative side
        (Decimal("500"), Decimal("0"), Decimal("0.00")),
        (Decimal("100"), Decimal("150"), Decimal("150.00")),
    ],
)
def test_calculate_commission_rounds_half_away_from_zero(amount, percent, expected):
    assert calculate_commission(amount, percent) == expected


@pytest.mark.parametrize(
    "due_date, expected",
    [
        (date(2024, 3, 1), date(2024, 3, 15)),
        (date(2024, 3, 15), date(2024, 3, 15)),
        (date(2024, 3, 16), date(2024, 3, 31)),
        (date(2024, 4, 20), date(2024, 4, 30)),
        (date(2024, 2, 20), date(2024, 2, 29)),  # leap year
        (date(2023, 2, 20), date(2023, 2, 28)),
        (date(2100, 2, 16), date(2100, 2, 28)),  # century, not a leap year
    ],
)
def test_commission_pay_date(due_date, expected):
    assert commission_pay_date(due_date) == expected


def test_carry_over_paid_state_for_matching_due_date(sample_sale, now):
    paid_at = datetime(2024, 2, 1, 12, 0)
    existing = generate_installments(sample_sale, [], now)
    existing[1] = replace(existing[1], is_paid=True, paid_at=paid_at)

    regenerated = generate_installments(replace(sample_sale, commission_percent=Decimal("20")), existing, now)

    assert regenerated[1].is_paid is True
    assert regenerated[1].paid_at == paid_at
    assert regenerated[1].commission == Decimal("66.60")
    assert not regenerated[0].is_paid and regenerated[0].paid_at is None
    assert not regenerated[2].is_paid and regenerated[2].paid_at is None


def test_no_carry_over_when_due_dates_shift(sample_sale, now):
    existing = [
        replace(inst, is_paid=True, paid_at=now)
        for inst in generate_installments(sample_sale, [], now)
    ]

    shifted = replace(sample_sale, sale_date=date(2024, 1, 2))
    regenerated = generate_installments(shifted, existing, now)

    assert all(not inst.is_paid and inst.paid_at is None for inst in regenerated)


def test_carry_over_first_duplicate_wins(sample_sale, now):
    due = date(2024, 1, 26)
    existing = [
        Installment(sale_id=1, due_date=due, pay_date=date(2024, 1, 31), amount=Decimal("1"),
                    commission=Decimal("0.10"), is_paid=True, paid_at=now, id=5),
        Installment(sale_id=1, due_date=due, pay_date=date(2024, 1, 31), amount=Decimal("1"),
                    commission=Decimal("0.10"), is_paid=False, id=9),
    ]

    regenerated = generate_installments(sample_sale, existing, now)

    assert regenerated[0].is_paid is True


def test_existing_rows_without_due_date_are_ignored(sample_sale, now):
    existing = [
        Installment(sale_id=1, due_date=None, pay_date=None, amount=Decimal("1"),
                    commission=Decimal("0.10"), is_paid=True, paid_at=now, id=1),
    ]

    regenerated = generate_installments(sample_sale, existing, now)

    assert all(not inst.is_paid for inst in regenerated)


def test_custom_offsets(sample_sale, now):
    installments = generate_installments(sample_sale, [], now, offsets_days=[10, 40])

    assert [inst.due_date for inst in installments] == [date(2024, 1, 11), date(2024, 2, 10)]
    assert all(inst.amount == Decimal("499.50") for inst in installments)


def test_empty_offsets_produce_no_installments(sample_sale, now):
    assert generate_installments(sample_sale, [], now, offsets_days=[]) == []


def test_degenerate_sale_is_computed_not_rejected(sample_sale, now):
    """Validation is the caller's job; zero amounts pass straight through"""
    installments = generate_installments(replace(sample_sale, amount=Decimal("0")), [], now)

    assert len(installments) == 3
    assert all(inst.amount == 0 and inst.commission == 0 for inst in installments)


def test_installment_number():
    sale_date = date(2024, 1, 1)

    assert installment_number(sale_date, date(2024, 1, 26)) == 1
    assert installment_number(sale_date, date(2024, 1, 31)) == 2
    assert installment_number(sale_date, date(2024, 2, 5)) == 3
    assert installment_number(sale_date, date(2024, 2, 6)) == 0
