"""
Main FastAPI application for the Automagixx chatbot.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import admin, analytics, chat, widget
from .services import Services, get_services, initialize_services
from .middleware.metrics import MetricsMiddleware, metrics_endpoint
from .middleware.rate_limit import RateLimitMiddleware
from config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Automagixx chatbot server starting up...")

    # Initialize database (if configured)
    if settings.database_url:
        try:
            from database.session import init_db
            await init_db(settings.database_url)
        except Exception as e:
            logger.warning(f"Database init failed (conversation log kept in memory): {e}")

    initialize_services()
    services = get_services()
    logger.info(f"Automagixx chatbot server ready on port {settings.api_port}, "
                f"active chatbots: {services.config_store.count()}")
    yield
    logger.info("Automagixx chatbot server shutting down...")

    if settings.database_url:
        from database.session import close_db
        await close_db()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Automagixx Chatbot API",
        description="Multi-tenant chatbot configuration and message orchestration.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Prometheus metrics middleware
    app.add_middleware(MetricsMiddleware)

    # Rate limiting middleware
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=settings.rate_limit_per_minute,
        admin_api_key=settings.admin_api_key,
    )

    # --- Admin ---
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    # --- Chat ---
    app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])

    # --- Analytics ---
    app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])

    # --- Widget ---
    app.include_router(widget.router, tags=["Widget"])

    # --- Prometheus metrics endpoint ---
    app.get("/metrics", tags=["Monitoring"])(metrics_endpoint)

    # Health check
    @app.get("/health", tags=["Monitoring"])
    async def health(services: Services = Depends(get_services)):
        return {
            "status": "ok",
            "chatbots": services.config_store.count() if services.config_store else 0,
            "timestamp": datetime.utcnow().isoformat(),
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    _settings = get_settings()
    uvicorn.run(app, host=_settings.api_host, port=_settings.api_port)
