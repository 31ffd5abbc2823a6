# nosec B101


import pytest
from datetime import timedelta

from domain.validation.currency import (
    is_iso4217_currency,
    parse_currency_code,
    parse_period,
    validate_period_limits,
)
from domain.exceptions.currency import InvalidCurrencyError, InvalidPeriodError


# ============================================================================
# TEST: parse_currency_code()
# ============================================================================

@pytest.mark.parametrize('raw, expected', [
    ('USD', 'USD'),
    ('usd', 'USD'),
    ('  eur ', 'EUR'),
    ('gBp', 'GBP'),
])
def test_parse_currency_code_normalizes(raw, expected):
    assert parse_currency_code(raw) == expected


@pytest.mark.parametrize('raw', [None, '', '   '])
def test_parse_currency_code_rejects_empty(raw):
    with pytest.raises(InvalidCurrencyError) as exc_info:
        parse_currency_code(raw)

    assert 'cannot be null or empty' in str(exc_info.value)


@pytest.mark.parametrize('raw', ['US', 'USDX', 'XXX', 'ABC', '123'])
def test_parse_currency_code_rejects_unknown_codes(raw):
    with pytest.raises(InvalidCurrencyError) as exc_info:
        parse_currency_code(raw)

    assert exc_info.value.code == raw
    assert f'Invalid currency code: {raw}' in str(exc_info.value)


def test_iso4217_lookup_is_case_sensitive():
    assert is_iso4217_currency('JPY')
    assert not is_iso4217_currency('jpy')


# ============================================================================
# TEST: parse_period()
# ============================================================================

@pytest.mark.parametrize('raw, amount, unit, duration', [
    ('12H', 12, 'H', timedelta(hours=12)),
    ('7d', 7, 'D', timedelta(days=7)),
    (' 1M ', 1, 'M', timedelta(days=30)),
    ('6M', 6, 'M', timedelta(days=180)),
    ('1Y', 1, 'Y', timedelta(days=365)),
])
def test_parse_period_valid(raw, amount, unit, duration):
    period = parse_period(raw)

    assert period.amount == amount
    assert period.unit == unit
    assert period.duration == duration
    assert period.text == f'{amount}{unit}'


@pytest.mark.parametrize('raw', ['', None, 'abc', '7W', 'D7', '-1D', '1.5D', '7 D'])
def test_parse_period_rejects_malformed(raw):
    with pytest.raises(InvalidPeriodError):
        parse_period(raw)


@pytest.mark.parametrize('raw', ['0D', '0H', '00Y'])
def test_parse_period_rejects_zero_amount(raw):
    with pytest.raises(InvalidPeriodError) as exc_info:
        parse_period(raw)

    assert 'positive' in str(exc_info.value)


# ============================================================================
# TEST: validate_period_limits()
# ============================================================================

@pytest.mark.parametrize('raw', ['12H', '8760H', '1D', '365D', '1M', '12M', '1Y'])
def test_period_limits_accept_bounds(raw):
    period = parse_period(raw)
    assert validate_period_limits(period) is period


@pytest.mark.parametrize('raw', ['11H', '8761H', '366D', '13M', '2Y'])
def test_period_limits_reject_out_of_range(raw):
    with pytest.raises(InvalidPeriodError):
        validate_period_limits(parse_period(raw))
