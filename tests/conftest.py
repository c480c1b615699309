"""
Pytest configuration and shared fixtures.
"""

import os

# Keep test runs from writing rotating log files into the repository
os.environ.setdefault("LOG_FILES", "0")

import itertools
import pytest
from datetime import datetime, timedelta, timezone

from core.faq_search import FaqSearchEngine
from core.faq_service import FaqService
from core.schemas import FaqCategory
from core.storage_memory import InMemoryFaqStore


@pytest.fixture
def clock():
    """Deterministic clock: every call is one minute after the previous one."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = itertools.count()
    return lambda: base + timedelta(minutes=next(ticks))


@pytest.fixture
def store(clock):
    """Empty in-memory FAQ store."""
    return InMemoryFaqStore(clock=clock)


@pytest.fixture
def acme(store):
    """Active school with domain acme.edu."""
    return store.add_school("acme.edu", name="Acme University")


@pytest.fixture
def engine(store):
    return FaqSearchEngine(store)


@pytest.fixture
def service(store):
    return FaqService(store)


@pytest.fixture
def admissions_faq(service, acme):
    """The admissions FAQ used throughout the search scenarios."""
    return service.create_faq(
        {
            "school_id": acme.id,
            "category": FaqCategory.ADMISSIONS,
            "question": "What are the admission requirements?",
            "answer": "A diploma and test scores.",
            "keywords": ["admission", "requirements", "diploma"],
        },
        created_by=1,
    )


@pytest.fixture
def faq_data():
    """Valid create payload without a school_id."""
    return {
        "category": "campus_life",
        "question": "What dining options exist on campus?",
        "answer": "Multiple cafeterias serve various cuisines.",
    }
