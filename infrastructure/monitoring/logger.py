import json
import logging
import sys
import traceback
from datetime import datetime
from decimal import Decimal
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

PROVIDER_LOGGER_NAME = 'rates.providers'
CACHE_LOGGER_NAME = 'rates.cache'


class CustomJSONEncoder(json.JSONEncoder):
	def default(self, o):
		if isinstance(o, datetime):
			return o.isoformat()
		if isinstance(o, Decimal):
			return str(o)
		return super().default(o)


class JSONFormatter(logging.Formatter):
	"""
	Custom formatter that outputs structured JSON logs.
	"""

	def format(self, record: logging.LogRecord) -> str:
		log_entry = {
			'timestamp': datetime.fromtimestamp(record.created).isoformat(),
			'level': record.levelname,
			'logger': record.name,
			'message': record.getMessage(),
			'module': record.module,
			'function': record.funcName,
			'line': record.lineno,
		}

		if record.exc_info and record.exc_info[0] is not None:
			log_entry['exception'] = {
				'type': record.exc_info[0].__name__,
				'message': str(record.exc_info[1]),
				'traceback': traceback.format_exception(*record.exc_info),
			}

		if hasattr(record, 'extra_data'):
			log_entry['data'] = record.extra_data

		return json.dumps(log_entry, ensure_ascii=False, cls=CustomJSONEncoder)


class AppLogger:
	"""
	Centralized logging configuration for the application.
	"""

	def __init__(
		self,
		console_level: str = 'INFO',
		log_directory: str = 'logs',
		to_file: bool = False,
		file_level: str = 'DEBUG',
		max_file_size: int = 10 * 1024 * 1024,
		backup_count: int = 5,
	):
		self.console_level = logging.getLevelName(console_level.upper())
		if not isinstance(self.console_level, int):
			self.console_level = logging.INFO
		self.file_level = logging.getLevelName(file_level.upper())
		self.log_directory = Path(log_directory)
		self.to_file = to_file
		self.max_file_size = max_file_size
		self.backup_count = backup_count

	def setup(self) -> None:
		root_logger = logging.getLogger()
		root_logger.handlers.clear()
		root_logger.setLevel(logging.DEBUG if self.to_file else self.console_level)

		logging.getLogger('httpx').setLevel(logging.WARNING)
		logging.getLogger('aiosqlite').setLevel(logging.WARNING)

		self._setup_console_handler(root_logger)
		if self.to_file:
			self.log_directory.mkdir(exist_ok=True)
			self._setup_file_handler(root_logger, 'system', 'app.log', self.file_level)
			self._setup_file_handler(root_logger, 'errors', 'errors.log', logging.WARNING)

	def _setup_console_handler(self, logger: logging.Logger) -> None:
		console_handler = logging.StreamHandler(sys.stdout)
		console_handler.setLevel(self.console_level)
		console_format = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'
		console_handler.setFormatter(logging.Formatter(console_format, datefmt='%H:%M:%S'))
		logger.addHandler(console_handler)

	def _setup_file_handler(
		self, logger: logging.Logger, subdirectory: str, filename: str, level: int
	) -> None:
		log_dir = self.log_directory / subdirectory
		log_dir.mkdir(exist_ok=True)

		file_handler = RotatingFileHandler(
			log_dir / filename,
			maxBytes=self.max_file_size,
			backupCount=self.backup_count,
			encoding='utf-8',
		)
		file_handler.setLevel(level)
		file_handler.setFormatter(JSONFormatter())
		logger.addHandler(file_handler)


def configure_logging(level: str = 'INFO', log_directory: str = 'logs', to_file: bool = False) -> None:
	AppLogger(console_level=level, log_directory=log_directory, to_file=to_file).setup()


def log_provider_call(
	provider_name: str,
	success: bool,
	duration_ms: float,
	error_message: str | None = None,
	rate_count: int | None = None,
) -> None:
	logger = logging.getLogger(PROVIDER_LOGGER_NAME)
	data: dict[str, Any] = {
		'provider': provider_name,
		'success': success,
		'response_time_ms': round(duration_ms, 2),
	}
	if rate_count is not None:
		data['rate_count'] = rate_count
	if error_message:
		data['error_message'] = error_message

	message = f'Provider call to {provider_name}: {"SUCCESS" if success else "FAILED"}'
	if success:
		logger.info(message, extra={'extra_data': data})
	else:
		logger.warning(f'{message} ({error_message})', extra={'extra_data': data})


def log_cache_operation(operation: str, cache_key: str, hit: bool) -> None:
	logger = logging.getLogger(CACHE_LOGGER_NAME)
	if not logger.isEnabledFor(logging.DEBUG):
		return
	logger.debug(
		f'Cache {operation} for {cache_key}: {"HIT" if hit else "MISS"}',
		extra={'extra_data': {'operation': operation, 'cache_key': cache_key, 'hit': hit}},
	)
