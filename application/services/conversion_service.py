import logging
from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from application.services.currency_service import CurrencyService
from application.services.rate_service import RateService
from domain.exceptions.currency import RateNotAvailableError
from domain.models.currency import ConvertedAmount
from domain.validation.currency import parse_currency_code

logger = logging.getLogger(__name__)

AMOUNT_SCALE = Decimal('0.000001')
SAME_CURRENCY_SOURCE = 'same-currency'


class ConversionService:
	def __init__(
		self,
		rate_service: RateService,
		currency_service: CurrencyService | None = None,
		clock: Callable[[], datetime] = datetime.now,
	):
		self.rate_service = rate_service
		self.currency_service = currency_service
		self._clock = clock

	async def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> ConvertedAmount:
		# Codes are normalized for lookup only; the response echoes them as sent.
		source_code = parse_currency_code(from_currency)
		target_code = parse_currency_code(to_currency)
		logger.info(f'Converting {amount} {source_code} to {target_code}')

		if source_code == target_code:
			return ConvertedAmount(
				original_amount=amount,
				from_currency=from_currency,
				to_currency=to_currency,
				converted_amount=amount,
				exchange_rate=Decimal('1'),
				source=SAME_CURRENCY_SOURCE,
				timestamp=self._clock(),
			)

		if self.currency_service is not None:
			await self.currency_service.validate_supported(source_code, target_code)

		details = await self.rate_service.get_rate_details(source_code, target_code)
		if details is None:
			raise RateNotAvailableError(source_code, target_code)
		rate = details.rate

		converted_amount = (amount * rate).quantize(AMOUNT_SCALE, rounding=ROUND_HALF_UP)
		logger.info(
			f'Conversion successful: {amount} {source_code} = {converted_amount} {target_code} '
			f'(rate: {rate} from {details.source})'
		)

		return ConvertedAmount(
			original_amount=amount,
			from_currency=from_currency,
			to_currency=to_currency,
			converted_amount=converted_amount,
			exchange_rate=rate,
			source=details.source,
			timestamp=self._clock(),
		)
