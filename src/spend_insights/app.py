from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from spend_insights.api.routes import insights, upload
from spend_insights.core import settings
from spend_insights.logger import get_logger, setup_logging
from spend_insights.manager import SpendingSession

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing session...")
        settings.log_environment()
        app.state.session = SpendingSession()
        yield
        app.state.session.reset()
        logger.info("Service shutting down.")

    app = FastAPI(title="Spend Insights", lifespan=lifespan)

    app.include_router(upload.router)
    app.include_router(insights.router)

    return app


app = create_app()
