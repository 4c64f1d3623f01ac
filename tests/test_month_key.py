from decimal import Decimal

import pytest

from core.exceptions import ValidationError
from rent.utils import MonthKey


@pytest.mark.parametrize('text', ['2024-3', '2024-12', '2050-1'])
def test_parse_then_format(text):
    assert str(MonthKey.parse(text)) == text


def test_zero_padded_month_is_accepted():
    assert MonthKey.parse('2024-03') == MonthKey(2024, 3)


@pytest.mark.parametrize('text', ['2024/3', '2024-', 'March 2024', '', None, '2024-13', '2019-5'])
def test_parse_rejects(text):
    with pytest.raises(ValidationError):
        MonthKey.parse(text)


def test_of_reports_both_fields():
    with pytest.raises(ValidationError) as exc:
        MonthKey.of(2010, 14)
    assert set(exc.value.details) == {'month', 'year'}


def test_of_accepts_strings():
    assert MonthKey.of('2024', '7') == MonthKey(2024, 7)


def test_label():
    assert MonthKey(2024, 3).label() == 'March 2024'


def test_ordering():
    assert MonthKey(2023, 12) < MonthKey(2024, 1)


@pytest.mark.parametrize('month', [3.7, Decimal('3.5'), float('inf'), float('nan')])
def test_of_rejects_fractional_month(month):
    with pytest.raises(ValidationError) as exc:
        MonthKey.of(2024, month)
    assert set(exc.value.details) == {'month'}


def test_of_rejects_fractional_year():
    with pytest.raises(ValidationError) as exc:
        MonthKey.of(2024.5, 3)
    assert set(exc.value.details) == {'year'}


def test_of_accepts_integral_numbers():
    assert MonthKey.of(2024.0, Decimal('3')) == MonthKey(2024, 3)
