"""
FastAPI application for the multi-tenant FAQ chatbot backend.

Provides REST API endpoints for:
- Chatbot FAQ search scoped to a school domain
- Category listings for the chatbot menu
- FAQ administration (API key protected)
- Health checks

Architecture:
- Lifespan management for the database connection pool
- Per-request FAQ store/engine built from the shared pool
- Core errors mapped to HTTP status codes by exception handlers

Run with:
    uvicorn api.main:app --reload  # Development
    uvicorn api.main:app --host 0.0.0.0 --port 8000 --workers 4  # Production
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from api.routers import chatbot, faqs, health
from api.utils.connection_pool import get_connection_pool, close_connection_pool
from core.config import get_api_settings
from core.exceptions import (
    FaqValidationError,
    NotFoundError,
    StorageUnavailableError,
)
from utils.logger import get_logger, set_log_level

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: initialize the connection pool and store it in app.state.
    Shutdown: close the pool.
    """
    logger.info("=" * 80)
    logger.info("Starting FastAPI application...")
    logger.info("=" * 80)

    try:
        settings = get_api_settings()
        set_log_level(settings.LOG_LEVEL)
        logger.info(
            f"API Configuration: host={settings.HOST}, port={settings.PORT}, "
            f"workers={settings.WORKERS}, log_level={settings.LOG_LEVEL}"
        )

        logger.info(
            f"Initializing connection pool: min={settings.POOL_MIN_SIZE}, "
            f"max={settings.POOL_MAX_SIZE}, timeout={settings.POOL_TIMEOUT}s"
        )
        app.state.connection_pool = get_connection_pool(
            min_conn=settings.POOL_MIN_SIZE,
            max_conn=settings.POOL_MAX_SIZE,
            timeout=settings.POOL_TIMEOUT,
        )
        logger.info("✓ Connection pool initialized")

        logger.info("FastAPI application startup complete!")
        logger.info("API Documentation: http://localhost:8000/docs")

        yield

    except Exception as e:
        logger.error(f"Failed to initialize application: {e}", exc_info=True)
        raise

    finally:
        logger.info("Shutting down FastAPI application...")
        try:
            if hasattr(app.state, "connection_pool"):
                close_connection_pool()
                logger.info("✓ Connection pool closed")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}", exc_info=True)


app = FastAPI(
    title="FAQ Chatbot API",
    description=(
        "Multi-tenant FAQ chatbot backend.\n\n"
        "- **Chatbot**: public, domain-scoped FAQ search and category menus\n"
        "- **FAQs**: administration endpoints (require `X-API-Key` header)\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
    )


@app.exception_handler(FaqValidationError)
async def validation_handler(request: Request, exc: FaqValidationError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path}: validation failed: {exc}")
    return JSONResponse(
        status_code=422, content={"detail": str(exc)}
    )


@app.exception_handler(StorageUnavailableError)
async def storage_handler(
    request: Request, exc: StorageUnavailableError
) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path}: storage unavailable: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "FAQ storage is unavailable"},
    )


app.include_router(
    health.router,
    prefix="/health",
    tags=["Health"],
)
app.include_router(
    chatbot.router,
    prefix="/api/v1/chatbot",
    tags=["Chatbot"],
)
app.include_router(
    faqs.router,
    prefix="/api/v1/faqs",
    tags=["FAQs"],
)


@app.get("/", include_in_schema=False)
def root():
    """Redirect root to API documentation."""
    return RedirectResponse(url="/docs")


# CORS for the embeddable chatbot widget on school sites
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


if __name__ == "__main__":
    import uvicorn

    settings = get_api_settings()
    uvicorn.run(
        "api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
