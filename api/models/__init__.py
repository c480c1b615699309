"""Pydantic models for FastAPI request and response validation."""

from api.models.requests import (
    ChatbotQueryRequest,
    CreateFaqRequest,
    UpdateFaqRequest,
)
from api.models.responses import (
    ChatbotResponse,
    CategoriesResponse,
    DeleteResponse,
    HealthResponse,
)

__all__ = [
    "ChatbotQueryRequest",
    "CreateFaqRequest",
    "UpdateFaqRequest",
    "ChatbotResponse",
    "CategoriesResponse",
    "DeleteResponse",
    "HealthResponse",
]
