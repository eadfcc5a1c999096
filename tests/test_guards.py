import math

from guards import clamp01, is_count, is_num, mean, safe_div


def test_clamp01_bounds_and_non_finite():
    assert clamp01(-0.3) == 0.0
    assert clamp01(1.7) == 1.0
    assert clamp01(0.42) == 0.42
    assert clamp01(math.nan) == 0.0
    assert clamp01(math.inf) == 0.0
    assert clamp01(None) == 0.0


def test_safe_div_floors_denominator_at_one():
    assert safe_div(7, 0) == safe_div(7, 1) == 7.0
    assert safe_div(7, -5) == safe_div(7, 1)
    # Floor is 1, not epsilon: fractional denominators are lifted too.
    assert safe_div(3, 0.5) == 3.0
    assert safe_div(3, 4) == 0.75


def test_safe_div_non_finite_operands_are_zero():
    assert safe_div(math.nan, 4) == 0.0
    assert safe_div(8, math.inf) == 8.0
    assert safe_div(None, 2) == 0.0


def test_mean_ignores_non_finite_members():
    assert math.isclose(mean([0.2, 0.4, math.nan, math.inf]), 0.3)
    assert mean([]) == 0.0
    assert mean([math.nan, None]) == 0.0
    assert mean(x for x in (1, 2, 3)) == 2.0


def test_number_checks_reject_booleans():
    assert is_num(3)
    assert is_num(0.5)
    assert not is_num(True)
    assert not is_num("3")
    assert not is_num(math.nan)
    assert is_count(4)
    assert is_count(4.0)
    assert not is_count(4.5)
    assert not is_count(False)


def test_integers_beyond_float_range_are_not_numbers():
    huge = 10**400
    assert not is_num(huge)
    assert not is_count(huge)
    assert clamp01(huge) == 0.0
    assert safe_div(huge, 2) == 0.0
    assert safe_div(6, huge) == 6.0
    assert mean([huge, 0.5]) == 0.5
