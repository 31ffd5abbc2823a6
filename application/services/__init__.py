from .conversion_service import ConversionService
from .currency_service import CurrencyService
from .maintenance_service import MaintenanceService
from .provider_aggregator import ProviderAggregator
from .rate_service import RateService
from .trends_service import TrendsService

__all__ = [
	'ConversionService',
	'CurrencyService',
	'MaintenanceService',
	'ProviderAggregator',
	'RateService',
	'TrendsService',
]
