"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from walletlink.api.dependencies import cleanup_dependencies
from walletlink.api.routes import router
from walletlink.api.websocket import ws_router
from walletlink.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Default hop budget: {settings.default_hop_budget} (max {settings.max_hop_budget})")
    if not settings.helius_api_key.get_secret_value():
        logger.warning("HELIUS_API_KEY is not set, Solana lookups will come back empty")
    if not settings.etherscan_api_key.get_secret_value():
        logger.warning("ETHERSCAN_API_KEY is not set, Ethereum lookups may be throttled")

    yield

    logger.info("Shutting down WalletLink...")
    await cleanup_dependencies()
    logger.info("Cleanup complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Checks whether two Solana or Ethereum wallets are linked by real "
            "transfers, ignoring common-sender noise such as airdrops."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )

    allowed_origins = ["*"]
    if settings.allowed_origins:
        allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]

    # Credentials are never allowed with a wildcard origin
    allow_credentials = "*" not in allowed_origins
    if not allow_credentials and not settings.debug:
        logger.warning("CORS: Using wildcard origins in production is not recommended")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.include_router(router)
    app.include_router(ws_router)

    @app.get("/api", tags=["root"])
    async def api_info() -> dict[str, str]:
        """API information endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": f"{settings.api_prefix}/health",
            "websocket": "/ws/relationship",
        }

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "walletlink.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )
