"""
Pydantic response models for the chatbot and FAQ admin endpoints.
"""

from pydantic import BaseModel, Field
from typing import List, Literal
from datetime import datetime

from core.schemas import Faq, FaqCategory


class ChatbotResponse(BaseModel):
    """
    Chatbot search response.

    total_results counts the returned FAQs (at most 20), not every match.
    """

    faqs: List[Faq] = Field(
        ..., description="Matching FAQs, newest first (empty list if none)"
    )
    suggested_categories: List[FaqCategory] = Field(
        ...,
        description="Categories with active FAQs for this school, independent of the query",
        examples=[["admissions", "campus_life"]],
    )
    total_results: int = Field(
        ..., description="Number of FAQs returned", examples=[3]
    )
    latency_ms: int = Field(
        ..., description="Query processing latency in milliseconds", examples=[12]
    )


class CategoriesResponse(BaseModel):
    """Categories available in the chatbot menu for a school."""

    school_domain: str = Field(..., examples=["acme.edu"])
    categories: List[FaqCategory] = Field(..., examples=[["admissions"]])


class DeleteResponse(BaseModel):
    """Result of a delete request."""

    success: bool = Field(..., description="True if a FAQ was deleted")


class HealthResponse(BaseModel):
    """
    Health check response with component status.

    Used by monitoring systems and load balancers to verify service health.
    """

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ..., description="Overall health status", examples=["healthy"]
    )
    timestamp: datetime = Field(..., description="Health check timestamp")
    checks: dict = Field(
        ...,
        description="Individual component health checks",
        examples=[
            {
                "database": {"status": "healthy", "pool_size": 10, "pool_available": 8},
            }
        ],
    )
