import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codestats.config import settings
from codestats.routes.views import views_bp
from codestats.services.code_stats_service import (
    CodeStatsExtension,
    get_code_stats_extension,
    set_code_stats_extension,
)

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(), logging.FileHandler(settings.LOG_FILE)]
    )


def create_app(extension: CodeStatsExtension = None) -> FastAPI:
    """Build the API app. Pass an extension to run against custom collaborators."""
    if extension is not None:
        set_code_stats_extension(extension)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """FastAPI lifespan event handler for startup and shutdown."""
        # Startup
        logger.info('Application starting up')
        await get_code_stats_extension().activate()

        yield

        # Shutdown
        logger.info('Application shutting down - releasing view providers')
        try:
            await get_code_stats_extension().deactivate()
        except Exception as e:
            logger.error(f'Error deactivating code stats insights: {e}')
        logger.info('Application shutdown complete')

    app = FastAPI(title='Code Stats Insights API', version='1.0.0', lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=['*'],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.include_router(views_bp)

    @app.get('/api/health')
    async def health():
        extension = get_code_stats_extension()
        return {
            'status': 'ok' if extension.is_active else 'inactive',
            'insights': extension.reconciler.live_ids(),
        }

    return app


def main():
    configure_logging()
    logger.info(f'Starting Code Stats Insights API on {settings.HOST}:{settings.PORT}')
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == '__main__':
    main()
