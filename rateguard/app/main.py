from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from rateguard.app.core.config import settings
from rateguard.app.core.logging import get_logger, setup_logging
from rateguard.app.core.redis import create_redis_client
from rateguard.app.middleware.protect import ProtectMiddleware
from rateguard.app.services.protect import ProtectConfig, VerificationEngine


def create_app(engine: Optional[VerificationEngine] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        engine: Verification engine to use (built from settings if omitted)

    Returns:
        Configured FastAPI application instance
    """
    setup_logging()
    logger = get_logger(__name__)

    if engine is None:
        # The client connects on its first command
        engine = VerificationEngine(
            create_redis_client(settings.redis_url),
            ProtectConfig.from_settings(settings),
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan context manager.

        Closes the engine's Redis client on shutdown.
        """
        logger.info(
            "Application startup complete",
            extra={
                "fail_closed": settings.fail_closed,
                "response_format": settings.response_format,
            }
        )
        yield
        await engine.close()
        logger.info("Application shutdown complete")

    app = FastAPI(title="rateguard", lifespan=lifespan)
    app.state.engine = engine
    app.add_middleware(ProtectMiddleware, engine=engine)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


# Create the application instance
app = create_app()
