from decimal import Decimal

from app.money import percent, round_half_up, split_platform_fee, to_minor_units


def test_round_half_up_rounds_ties_away_from_zero() -> None:
    assert round_half_up(Decimal("4.25"), 1) == Decimal("4.3")
    assert round_half_up(Decimal("2.5")) == Decimal("3")
    assert round_half_up(Decimal("3.6")) == Decimal("4")


def test_to_minor_units() -> None:
    assert to_minor_units(Decimal("19.99")) == 1999
    assert to_minor_units(Decimal("0.00")) == 0
    assert to_minor_units(Decimal("15")) == 1500


def test_split_platform_fee_half_up() -> None:
    # 15 * 0.30 = 4.5, which half-to-even would round down to 4
    assert split_platform_fee(15, Decimal("0.30")) == (5, 10)
    assert split_platform_fee(4999, Decimal("0.30")) == (1500, 3499)


def test_split_platform_fee_parts_sum_to_amount() -> None:
    for amount in (1, 7, 333, 1999, 10001):
        fee, earning = split_platform_fee(amount, Decimal("0.30"))
        assert fee + earning == amount


def test_percent() -> None:
    assert percent(1, 3) == 33
    assert percent(2, 3) == 67
    assert percent(3, 3) == 100
    assert percent(0, 0) == 0
