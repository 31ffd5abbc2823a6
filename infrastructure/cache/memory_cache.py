import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

from domain.models.currency import CachedRate, CurrencyPair
from infrastructure.monitoring.logger import log_cache_operation

logger = logging.getLogger(__name__)


class RateCache:
	"""In-process rate cache with one TTL for every pair and expiry on read.

	There is no background sweep: an expired entry stays in the map until the
	next ``get`` for its pair, or a ``clear``.
	"""

	def __init__(self, ttl: timedelta, clock: Callable[[], datetime] = datetime.now):
		self.ttl = ttl
		self._clock = clock
		self._entries: dict[CurrencyPair, CachedRate] = {}
		self._lock = threading.Lock()

	def put(self, pair: CurrencyPair, rate: Decimal, source: str) -> CachedRate:
		entry = CachedRate(rate=rate, source=source, observed_at=self._clock())
		with self._lock:
			self._entries[pair] = entry
		logger.debug(f'Cached rate {pair}: {rate} from {source}')
		return entry

	def get(self, pair: CurrencyPair) -> CachedRate | None:
		now = self._clock()
		with self._lock:
			entry = self._entries.get(pair)
			if entry is None:
				hit = False
			elif now - entry.observed_at >= self.ttl:
				del self._entries[pair]
				entry = None
				hit = False
				logger.debug(f'Removed expired rate for {pair}')
			else:
				hit = True

		log_cache_operation('get', str(pair), hit)
		return entry

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()
		logger.info('Currency rate cache cleared')

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)
