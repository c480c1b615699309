"""
Chatbot-facing FAQ search.

FaqSearchEngine answers public chatbot queries for a tenant identified by
domain:
- search: term search with optional category filter, capped at MAX_RESULTS,
  plus tenant-wide suggested categories
- available_categories: categories that currently have active content
- faqs_by_category: category menu listing

Matching is case-insensitive substring matching on question, answer and
keywords (see core.search_planner). No edit-distance or phonetic matching
is performed.
"""

from typing import List, Optional, Union

from core.exceptions import FaqValidationError
from core.keywords import tokenize_query
from core.schemas import Faq, FaqCategory, SearchResult
from core.search_planner import plan_search
from core.storage_faq import FaqStore
from utils.logger import get_logger, PerformanceLogger

logger = get_logger(__name__)

MAX_RESULTS = 20


def normalize_domain(school_domain: str) -> str:
    """Strip surrounding whitespace so every entry point resolves the same tenant."""
    return school_domain.strip()


def coerce_category(
    category: Optional[Union[FaqCategory, str]],
) -> Optional[FaqCategory]:
    """
    Convert a category name to FaqCategory.

    Raises:
        FaqValidationError: If the name is not a known category
    """
    if category is None or isinstance(category, FaqCategory):
        return category
    try:
        return FaqCategory(category)
    except ValueError as e:
        raise FaqValidationError(f"Unknown category: {category!r}") from e


class FaqSearchEngine:
    """
    Tenant-scoped FAQ search over an injected FaqStore.

    The engine holds no state besides the store; every call reflects the
    store's current contents.

    Example:
        >>> engine = FaqSearchEngine(store)
        >>> result = engine.search("acme.edu", "admission requirements")
        >>> result.total_results
        1
    """

    def __init__(self, store: FaqStore):
        self.store = store

    def search(
        self,
        school_domain: str,
        query: str,
        category: Optional[Union[FaqCategory, str]] = None,
    ) -> SearchResult:
        """
        Run a chatbot search.

        Args:
            school_domain: Tenant domain
            query: Free-text query. Terms of two characters or fewer are ignored;
                   a query with no usable terms matches on filters alone.
            category: Optional category restriction

        Returns:
            SearchResult with at most MAX_RESULTS FAQs (newest first), the
            tenant's suggested categories and the returned count

        Raises:
            FaqValidationError: If category is unknown
            StorageUnavailableError: If the store fails (no partial result)
        """
        category = coerce_category(category)
        school_domain = normalize_domain(school_domain)
        terms = tokenize_query(query)

        logger.info(
            f"Chatbot search: domain='{school_domain}', query='{query[:50]}', "
            f"terms={len(terms)}, category={category.value if category else None}"
        )

        with PerformanceLogger(logger, f"Chatbot search for '{school_domain}'"):
            predicate = plan_search(school_domain, terms, category)
            faqs = self.store.query_faqs(predicate, limit=MAX_RESULTS)
            suggested = self.available_categories(school_domain)

        logger.info(
            f"Chatbot search completed: {len(faqs)} results, "
            f"{len(suggested)} suggested categories"
        )

        return SearchResult(
            faqs=faqs,
            suggested_categories=suggested,
            total_results=len(faqs),
        )

    def available_categories(self, school_domain: str) -> List[FaqCategory]:
        """
        Categories with at least one active FAQ for an active school.

        Returns an empty list when the domain is unknown, the school is
        inactive, or it has no active FAQ.
        """
        school_domain = normalize_domain(school_domain)
        categories = self.store.distinct_categories(plan_search(school_domain))
        logger.debug(f"Available categories for '{school_domain}': {categories}")
        return categories

    def faqs_by_category(
        self, school_domain: str, category: Union[FaqCategory, str]
    ) -> List[Faq]:
        """Active FAQs of an active school in one category, newest first (uncapped)."""
        category = coerce_category(category)
        if category is None:
            raise FaqValidationError("Category is required")

        school_domain = normalize_domain(school_domain)
        faqs = self.store.query_faqs(plan_search(school_domain, category=category))
        logger.debug(
            f"Category listing for '{school_domain}' / {category.value}: {len(faqs)} FAQs"
        )
        return faqs
