"""
In-memory FaqStore.

Mirrors FaqStorageClient semantics (ordering, predicate matching, partial
updates) without a database. Like rows read from PostgreSQL, every record
handed out is a fresh copy, so callers cannot change stored state by
mutating a result. Used by the test suite and for local experimentation.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from core.schemas import CATEGORY_ORDER, Faq, FaqCategory, School
from core.search_planner import FaqPredicate
from core.storage_faq import UPDATABLE_FAQ_FIELDS
from utils.logger import get_logger

logger = get_logger(__name__)


def _detached(record):
    return record.model_copy(deep=True)


class InMemoryFaqStore:
    """Thread-safe dict-backed store for schools and FAQs."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._schools: Dict[int, School] = {}
        self._faqs: Dict[int, Faq] = {}
        self._next_school_id = 1
        self._next_faq_id = 1

    def add_school(
        self, domain: str, name: str = "", is_active: bool = True
    ) -> School:
        """Register a school. Schools are owned by the admin subsystem; this is a seeding helper."""
        with self._lock:
            if any(s.domain == domain for s in self._schools.values()):
                raise ValueError(f"Domain already registered: {domain}")
            school = School(
                id=self._next_school_id,
                name=name or domain,
                domain=domain,
                is_active=is_active,
            )
            self._schools[school.id] = school
            self._next_school_id += 1
            return _detached(school)

    def set_school_active(self, school_id: int, is_active: bool) -> None:
        with self._lock:
            school = self._schools[school_id]
            self._schools[school_id] = school.model_copy(update={"is_active": is_active})

    def remove_school(self, school_id: int) -> None:
        with self._lock:
            self._schools.pop(school_id, None)

    def find_school_by_domain(self, domain: str) -> Optional[School]:
        with self._lock:
            for school in self._schools.values():
                if school.domain == domain:
                    return _detached(school)
            return None

    def find_school_by_id(self, school_id: int) -> Optional[School]:
        with self._lock:
            school = self._schools.get(school_id)
            return _detached(school) if school is not None else None

    def get_faq_by_id(self, faq_id: int) -> Optional[Faq]:
        with self._lock:
            faq = self._faqs.get(faq_id)
            return _detached(faq) if faq is not None else None

    def _matching(self, predicate: FaqPredicate) -> List[Faq]:
        matched = [
            faq
            for faq in self._faqs.values()
            if predicate.matches(faq, self._schools.get(faq.school_id))
        ]
        return sorted(matched, key=lambda f: (f.created_at, f.id), reverse=True)

    def query_faqs(
        self, predicate: FaqPredicate, limit: Optional[int] = None
    ) -> List[Faq]:
        with self._lock:
            faqs = [_detached(f) for f in self._matching(predicate)]
        return faqs if limit is None else faqs[:limit]

    def distinct_categories(self, predicate: FaqPredicate) -> List[FaqCategory]:
        with self._lock:
            categories = {faq.category for faq in self._matching(predicate)}
        return sorted(categories, key=CATEGORY_ORDER.__getitem__)

    def list_faqs_for_school(self, school_id: int) -> List[Faq]:
        with self._lock:
            faqs = [
                _detached(f) for f in self._faqs.values() if f.school_id == school_id
            ]
        return sorted(faqs, key=lambda f: (f.created_at, f.id), reverse=True)

    def insert_faq(self, fields: Dict[str, Any]) -> Faq:
        with self._lock:
            now = self._clock()
            faq = Faq(
                id=self._next_faq_id,
                school_id=fields["school_id"],
                category=fields["category"],
                question=fields["question"],
                answer=fields["answer"],
                keywords=list(fields["keywords"]),
                is_active=fields.get("is_active", True),
                created_by=fields["created_by"],
                created_at=now,
                updated_at=now,
            )
            self._faqs[faq.id] = faq
            self._next_faq_id += 1
        logger.debug(f"Inserted FAQ {faq.id} into memory store")
        return _detached(faq)

    def update_faq(self, faq_id: int, fields: Dict[str, Any]) -> Optional[Faq]:
        with self._lock:
            current = self._faqs.get(faq_id)
            if current is None:
                return None
            changes = {k: fields[k] for k in UPDATABLE_FAQ_FIELDS if k in fields}
            if "category" in changes:
                changes["category"] = FaqCategory(changes["category"])
            if "keywords" in changes:
                changes["keywords"] = list(changes["keywords"])
            changes["updated_at"] = self._clock()
            updated = current.model_copy(update=changes, deep=True)
            self._faqs[faq_id] = updated
            return _detached(updated)

    def delete_faq(self, faq_id: int) -> bool:
        with self._lock:
            return self._faqs.pop(faq_id, None) is not None
