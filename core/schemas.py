from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError
from datetime import datetime, timezone

from core.exceptions import FaqValidationError


class FaqCategory(str, Enum):
    """Closed set of FAQ topics. Declaration order is the display order."""

    ADMISSIONS = "admissions"
    ACADEMIC_PROGRAMS = "academic_programs"
    CAMPUS_LIFE = "campus_life"
    CONTACT_SUPPORT = "contact_support"
    GENERAL_INFO = "general_info"


CATEGORY_ORDER = {category: index for index, category in enumerate(FaqCategory)}


# Tenant
class School(BaseModel):
    """
    Schema for a tenant as read from the schools table.
    Only id, domain and is_active are used by search.
    """
    id: int
    name: str = ""
    domain: str = Field(..., description="Unique domain used to scope chatbot queries.")
    is_active: bool = True


# FAQ entry
class Faq(BaseModel):
    """
    Schema for a stored FAQ entry.
    Used by: storage_faq.py, storage_memory.py, faq_search.py
    """
    id: int
    school_id: int = Field(..., description="Owning school. Immutable after creation.")
    category: FaqCategory
    question: str
    answer: str
    keywords: List[str] = Field(default_factory=list, description="Normalized search keywords, insertion ordered.")
    is_active: bool = True
    created_by: int = Field(..., description="ID of the admin user that created the entry.")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# Chatbot search result
class SearchResult(BaseModel):
    """
    Composite chatbot answer. Not persisted.
    total_results is the length of faqs (after the result cap).
    """
    faqs: List[Faq] = Field(default_factory=list)
    suggested_categories: List[FaqCategory] = Field(default_factory=list)
    total_results: int = 0


# Write inputs
class CreateFaqInput(BaseModel):
    school_id: int
    category: FaqCategory
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    keywords: Optional[List[str]] = None


class UpdateFaqInput(BaseModel):
    """Partial update. Fields left as None are not changed."""
    id: int
    category: Optional[FaqCategory] = None
    question: Optional[str] = Field(default=None, min_length=1)
    answer: Optional[str] = Field(default=None, min_length=1)
    keywords: Optional[List[str]] = None
    is_active: Optional[bool] = None


def parse_input(model, data):
    """
    Coerce a dict (or an existing model) into the given input model.

    Raises:
        FaqValidationError: If the data fails validation
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise FaqValidationError(str(e)) from e
