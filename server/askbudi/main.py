# server/askbudi/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app
from sqlalchemy import text

from askbudi.config import settings
from askbudi.database import Database
from askbudi.errors import install_error_handlers
from askbudi.routes import (
    account_router,
    auth_router,
    billing_router,
    keys_router,
    libraries_router,
)
from askbudi.schemas import HealthResponse
from askbudi.timeutil import utcnow

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings.validate_secrets()
    app.state.database.create_all()
    yield
    # Shutdown
    app.state.database.dispose()


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application around a store handle.

    Without an explicit ``database`` one is built from ``settings.database_url``.
    """
    app = FastAPI(
        title=settings.service_name,
        description="API keys, usage quotas and library documentation gateway",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.database = database or Database(settings.database_url)

    install_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount("/metrics", make_asgi_app())

    app.include_router(auth_router)
    app.include_router(keys_router)
    app.include_router(account_router)
    app.include_router(libraries_router)
    app.include_router(billing_router)

    @app.get("/v1/health", response_model=HealthResponse)
    def health(request: Request):
        """Health check endpoint. Reports ``degraded`` when the store is unreachable."""
        status, database_status = "healthy", "connected"
        try:
            with request.app.state.database.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            status, database_status = "degraded", "error"

        return HealthResponse(
            status=status,
            version=settings.version,
            database=database_status,
            timestamp=utcnow(),
            service=settings.service_name,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
