# Main application file



import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from pos_admin.database import create_datastore
from pos_admin.core.config import settings
from pos_admin.core.errors import PosError
from pos_admin.core.rate_limiter import limiter
from pos_admin.routers import (
    auth,
    categories,
    dashboard,
    exports,
    products,
    reports,
    sales,
)
from pos_admin.seed import seed_demo_data

API_VERSION = "1.0.0"


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.datastore.dispose()
    logger.info("Database connection closed")


def create_app(database_url: str | None = None, seed: bool | None = None) -> FastAPI:

    # APP INIT

    app = FastAPI(
        title="POS Admin API",
        description="Point-of-sale administration backend: catalog, sales and reporting",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # DATASTORE (one per application, never module-global)

    datastore = create_datastore(database_url)
    datastore.create_all()
    app.state.datastore = datastore
    logger.info(f"Connected to database {datastore.engine.url.render_as_string(hide_password=True)}")

    if settings.SEED_DEMO_DATA if seed is None else seed:
        seed_demo_data(datastore)


    # CORS (Token-based auth)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )


    # RATE LIMITING

    app.state.limiter = limiter
    app.add_exception_handler(
        RateLimitExceeded,
        _rate_limit_exceeded_handler
    )


    # ERROR HANDLING

    @app.exception_handler(PosError)
    async def handle_pos_error(request: Request, error: PosError):
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {error.message}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, error: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "error": "server_error", "message": "Internal server error"},
        )


    # REQUEST LOGGING MIDDLEWARE

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = round((time.time() - start_time) * 1000, 2)

        logger.info(
            f"{request.method} {request.url.path} "
            f"Status: {response.status_code} "
            f"Time: {duration}ms"
        )

        return response


    # ROUTERS

    app.include_router(auth.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(sales.router)
    app.include_router(dashboard.router)
    app.include_router(reports.router)
    app.include_router(exports.router)


    # HEALTH

    @app.get("/api/health")
    def health():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": API_VERSION,
        }

    return app


app = create_app()
