"""Boundary parsing for currency codes and trend periods.

Both parsers raise typed errors and run before any cache, provider or store
access, so a malformed request is never partially processed.
"""

import re
from datetime import timedelta

from domain.exceptions.currency import InvalidCurrencyError, InvalidPeriodError
from domain.models.period import Period

# Active ISO 4217 alphabetic codes, plus precious metals and SDR.
ISO_4217_CODES = frozenset(
	"""
	AED AFN ALL AMD ANG AOA ARS AUD AWG AZN BAM BBD BDT BGN BHD BIF BMD BND BOB
	BRL BSD BTN BWP BYN BZD CAD CDF CHF CLF CLP CNY COP CRC CUC CUP CVE CZK DJF
	DKK DOP DZD EGP ERN ETB EUR FJD FKP GBP GEL GHS GIP GMD GNF GTQ GYD HKD HNL
	HTG HUF IDR ILS INR IQD IRR ISK JMD JOD JPY KES KGS KHR KMF KPW KRW KWD KYD
	KZT LAK LBP LKR LRD LSL LYD MAD MDL MGA MKD MMK MNT MOP MRU MUR MVR MWK MXN
	MYR MZN NAD NGN NIO NOK NPR NZD OMR PAB PEN PGK PHP PKR PLN PYG QAR RON RSD
	RUB RWF SAR SBD SCR SDG SEK SGD SHP SLE SLL SOS SRD SSP STN SVC SYP SZL THB
	TJS TMT TND TOP TRY TTD TWD TZS UAH UGX USD UYU UZS VES VND VUV WST XAF XCD
	XOF XPF YER ZAR ZMW ZWL XAU XAG XPT XPD XDR
	""".split()
)

PERIOD_PATTERN = re.compile(r'^(\d+)([HDMY])$')

PERIOD_UNITS = {
	'H': timedelta(hours=1),
	'D': timedelta(days=1),
	'M': timedelta(days=30),
	'Y': timedelta(days=365),
}

MIN_HOURS = 12
MAX_DAYS = 365
MAX_MONTHS = 12
MAX_YEARS = 1


def is_iso4217_currency(code: str) -> bool:
	return code in ISO_4217_CODES


def parse_currency_code(code: str | None) -> str:
	"""Trim and uppercase ``code``; raise InvalidCurrencyError unless it is ISO 4217."""
	if code is None or not code.strip():
		raise InvalidCurrencyError(code)

	normalized = code.strip().upper()
	if len(normalized) != 3 or not is_iso4217_currency(normalized):
		raise InvalidCurrencyError(code)
	return normalized


def parse_period(period: str | None) -> Period:
	if period is None or not period.strip():
		raise InvalidPeriodError(period, 'period cannot be empty')

	normalized = period.strip().upper()
	match = PERIOD_PATTERN.match(normalized)
	if not match:
		raise InvalidPeriodError(period)

	amount = int(match.group(1))
	unit = match.group(2)
	if amount <= 0:
		raise InvalidPeriodError(period, 'amount must be positive')

	return Period(amount=amount, unit=unit, duration=PERIOD_UNITS[unit] * amount)


def validate_period_limits(period: Period) -> Period:
	"""Request limits for the public trends endpoint."""
	limits = {
		'H': MIN_HOURS <= period.amount <= 24 * MAX_DAYS,
		'D': period.amount <= MAX_DAYS,
		'M': period.amount <= MAX_MONTHS,
		'Y': period.amount == MAX_YEARS,
	}
	if not limits[period.unit]:
		raise InvalidPeriodError(
			period.text,
			f'supported range is {MIN_HOURS}H-{24 * MAX_DAYS}H, 1D-{MAX_DAYS}D, '
			f'1M-{MAX_MONTHS}M or {MAX_YEARS}Y',
		)
	return period
