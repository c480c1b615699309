"""
Pydantic request models for the chatbot and FAQ admin endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from core.schemas import FaqCategory


class ChatbotQueryRequest(BaseModel):
    """
    Public chatbot search request.

    The query may be empty or contain only short words; the search then
    returns the school's FAQs filtered by category alone.
    """

    school_domain: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Domain identifying the school",
        examples=["acme.edu"],
    )
    query: str = Field(
        default="",
        max_length=1000,
        description="Free-text question from the end user",
        examples=["admission requirements"],
    )
    category: Optional[FaqCategory] = Field(
        default=None,
        description="Optional category restriction",
        examples=["admissions"],
    )

    @field_validator("school_domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        """Strip surrounding whitespace and reject blank domains."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("school_domain cannot be empty or whitespace only")
        return stripped


class CreateFaqRequest(BaseModel):
    """
    Admin request to create a FAQ.

    Keywords are derived from the question and answer when omitted or empty.
    """

    school_id: int = Field(..., ge=1, examples=[1])
    category: FaqCategory = Field(..., examples=["campus_life"])
    question: str = Field(
        ..., min_length=1, examples=["What dining options exist on campus?"]
    )
    answer: str = Field(
        ..., min_length=1, examples=["Multiple cafeterias serve various cuisines."]
    )
    keywords: Optional[List[str]] = Field(default=None, examples=[["dining", "food"]])
    created_by: int = Field(
        ..., ge=1, description="ID of the admin user creating the FAQ", examples=[1]
    )


class UpdateFaqRequest(BaseModel):
    """
    Admin partial update. Omitted fields are left unchanged.

    Supplying keywords (even an empty list) stores them as given; otherwise
    keywords are re-derived when question or answer changes.
    """

    category: Optional[FaqCategory] = None
    question: Optional[str] = Field(default=None, min_length=1)
    answer: Optional[str] = Field(default=None, min_length=1)
    keywords: Optional[List[str]] = None
    is_active: Optional[bool] = None
