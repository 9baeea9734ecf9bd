import math

from app.utils.amounts import extract_number, is_finite, safe_ratio


def test_extract_number_reads_asset_strings():
    assert extract_number("123.456 HIVE") == 123.456
    assert extract_number("0.000000 VESTS") == 0.0
    assert extract_number("42 HBD") == 42.0


def test_extract_number_without_digits_is_zero():
    for value in ("", "HIVE", "n/a", "-", ".", None):
        assert extract_number(value) == 0


def test_extract_number_uses_first_run_only():
    assert extract_number("1.5 HIVE and 7 more") == 1.5
    assert extract_number("1.2.3") == 1.2


def test_extract_number_passes_numbers_through():
    assert extract_number(7) == 7.0
    assert extract_number(2.5) == 2.5


def test_safe_ratio_mirrors_float_division():
    assert safe_ratio(1, 4) == 0.25
    assert math.isinf(safe_ratio(3, 0))
    assert safe_ratio(-3, 0) == -math.inf
    assert math.isnan(safe_ratio(0, 0))


def test_is_finite():
    assert is_finite(1.0)
    assert not is_finite(None)
    assert not is_finite(math.inf)
    assert not is_finite(math.nan)
