from .base import BaseHTTPProvider, ExchangeRateProvider
from .currencyapi import CurrencyAPIProvider
from .fixerio import FixerIOProvider
from .openexchange import OpenExchangeProvider

__all__ = [
	'BaseHTTPProvider',
	'ExchangeRateProvider',
	'CurrencyAPIProvider',
	'FixerIOProvider',
	'OpenExchangeProvider',
]
