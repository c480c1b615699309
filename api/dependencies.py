"""
Dependency injection for FastAPI endpoints.

Provides reusable dependencies for:
- API key authentication (admin endpoints)
- FAQ store access backed by the shared connection pool
- Search engine and FAQ service construction
"""

from fastapi import Depends, Header, HTTPException, status, Request
from typing import Annotated
from core.config import get_api_settings
from core.faq_search import FaqSearchEngine
from core.faq_service import FaqService
from core.storage_faq import FaqStorageClient, FaqStore
from utils.logger import get_logger

logger = get_logger(__name__)


async def verify_api_key(
    x_api_key: Annotated[
        str, Header(description="API authentication key", alias="X-API-Key")
    ],
) -> str:
    """
    Dependency to verify API key from X-API-Key header.

    Supports multiple keys via API_ALLOWED_API_KEYS environment variable
    (comma-separated list).

    Raises:
        HTTPException: 401 Unauthorized if API key is invalid or missing
        HTTPException: 500 Internal Server Error if API keys not configured
    """
    try:
        settings = get_api_settings()
    except Exception as e:
        logger.error(f"Failed to load API settings: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API configuration error",
        )

    valid_keys = set()

    if settings.API_KEY:
        valid_keys.add(settings.API_KEY.get_secret_value())

    if settings.ALLOWED_API_KEYS:
        additional_keys = [
            k.strip() for k in settings.ALLOWED_API_KEYS.split(",") if k.strip()
        ]
        valid_keys.update(additional_keys)

    if not valid_keys:
        logger.error("No API keys configured (API_API_KEY is empty)")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not properly configured",
        )

    if x_api_key not in valid_keys:
        # Log attempt without exposing full key
        logger.warning(
            f"Invalid API key attempt: {x_api_key[:8]}*** (length: {len(x_api_key)})"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    logger.debug(f"API key validated successfully: {x_api_key[:8]}***")
    return x_api_key


def get_faq_store(request: Request) -> FaqStore:
    """
    Dependency to create a FAQ store with the shared connection pool.

    Raises:
        HTTPException: 500 Internal Server Error if connection pool not initialized
    """
    try:
        connection_pool = request.app.state.connection_pool
    except AttributeError:
        logger.error("Connection pool not found in app.state (not initialized)")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Connection pool not initialized",
        )
    return FaqStorageClient(connection_pool=connection_pool)


def get_search_engine(
    store: Annotated[FaqStore, Depends(get_faq_store)],
) -> FaqSearchEngine:
    """Dependency providing a FaqSearchEngine over the request's store."""
    return FaqSearchEngine(store)


def get_faq_service(
    store: Annotated[FaqStore, Depends(get_faq_store)],
) -> FaqService:
    """Dependency providing a FaqService over the request's store."""
    return FaqService(store)
