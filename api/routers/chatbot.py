"""
Public chatbot endpoints.

1. POST /search - term search scoped to a school domain
2. GET /{school_domain}/categories - categories with active FAQs
3. GET /{school_domain}/faqs - FAQs of one category (chatbot menu)

No authentication required; results only ever include active FAQs of
active schools.
"""

from fastapi import APIRouter, Depends
from typing import Annotated, List
import time

from api.dependencies import get_search_engine
from api.models.requests import ChatbotQueryRequest
from api.models.responses import ChatbotResponse, CategoriesResponse
from core.faq_search import FaqSearchEngine, normalize_domain
from core.schemas import Faq, FaqCategory
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/search",
    response_model=ChatbotResponse,
    summary="Chatbot FAQ Search",
    description="Search a school's active FAQs. Matches any query word of three or more characters as a case-insensitive substring of the question, answer or keywords.",
)
def search_faqs(
    request: ChatbotQueryRequest,
    engine: Annotated[FaqSearchEngine, Depends(get_search_engine)],
) -> ChatbotResponse:
    """
    Search FAQs for a school.

    **Request:**
    - `school_domain`: Domain of the school
    - `query`: Free-text question (words of two characters or fewer are ignored)
    - `category`: Optional category filter

    **Response:**
    - `faqs`: Up to 20 matches, newest first
    - `suggested_categories`: All categories with active FAQs for the school
    - `total_results`: Number of FAQs returned
    """
    start_time = time.time()

    result = engine.search(
        school_domain=request.school_domain,
        query=request.query,
        category=request.category,
    )

    latency_ms = int((time.time() - start_time) * 1000)
    logger.info(
        f"Chatbot search for '{request.school_domain}': "
        f"{result.total_results} results, {latency_ms}ms latency"
    )

    return ChatbotResponse(
        faqs=result.faqs,
        suggested_categories=result.suggested_categories,
        total_results=result.total_results,
        latency_ms=latency_ms,
    )


@router.get(
    "/{school_domain}/categories",
    response_model=CategoriesResponse,
    summary="Available Categories",
)
def list_categories(
    school_domain: str,
    engine: Annotated[FaqSearchEngine, Depends(get_search_engine)],
) -> CategoriesResponse:
    """Categories that currently have active FAQs for the school (empty if unknown)."""
    school_domain = normalize_domain(school_domain)
    categories = engine.available_categories(school_domain)
    return CategoriesResponse(school_domain=school_domain, categories=categories)


@router.get(
    "/{school_domain}/faqs",
    response_model=List[Faq],
    summary="FAQs by Category",
)
def list_faqs_by_category(
    school_domain: str,
    category: FaqCategory,
    engine: Annotated[FaqSearchEngine, Depends(get_search_engine)],
) -> List[Faq]:
    """All active FAQs of a school in the given category, newest first."""
    return engine.faqs_by_category(school_domain, category)
