# redirector/main.py

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from redirector.classifier import Classifier
from redirector.config import Settings, settings as default_settings
from redirector.routes import router
import logging

# Configure logging
logging.basicConfig(
    level=default_settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""

        # Startup
        logger.info("Starting store redirect gateway...")

        # Patterns are compiled once here; a broken one stops startup
        try:
            patterns = settings.version_patterns()
        except ValueError as e:
            logger.error(f"Startup failed: {e}")
            raise

        thresholds = settings.thresholds()
        app.state.settings = settings
        app.state.classifier = Classifier(thresholds, patterns)

        logger.info(
            f"Thresholds: iOS >= {thresholds.min_ios_version}, "
            f"Android >= {thresholds.min_android_version}, "
            f"Android strict mode {'on' if thresholds.android_strict_mode else 'off'}"
        )
        logger.info(f"Store redirect gateway ready on port {settings.port}")

        yield

        # Shutdown
        logger.info("Shutting down...")

    app = FastAPI(
        title="Store Redirect Gateway",
        description="Redirects mobile visitors to the matching app store listing",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Register routes
    app.include_router(router)

    return app


app = create_app()
