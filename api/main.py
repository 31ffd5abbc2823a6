import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.dependencies import cleanup_dependencies, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import currency, health
from config.settings import get_settings
from infrastructure.monitoring.logger import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_DIRECTORY, settings.LOG_TO_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	logger.info('Starting Currency Converter API...')

	deps = init_dependencies(settings)
	await deps.db.create_tables()
	logger.info('Database tables created')

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	await cleanup_dependencies()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
	logger.error(f'Unhandled exception: {exc}', exc_info=True)
	return JSONResponse(
		status_code=500,
		content={'title': 'Internal server error', 'detail': 'An unexpected error occurred'},
	)


app.include_router(currency.router)
app.include_router(health.router)
register_exception_handlers(app)
