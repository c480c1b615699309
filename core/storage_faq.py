"""
Storage client for schools and FAQ entries.

Defines the FaqStore protocol consumed by the search engine and the FAQ
service, and its PostgreSQL implementation. Rows are converted to the
pydantic models in core.schemas before leaving this module.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from psycopg import sql
from psycopg.types.json import Jsonb

from core.schemas import Faq, FaqCategory, School
from core.search_planner import FaqPredicate
from core.storage_base import BaseStorageClient
from utils.logger import get_logger, PerformanceLogger

logger = get_logger(__name__)

FAQ_COLUMNS = (
    "id",
    "school_id",
    "category",
    "question",
    "answer",
    "keywords",
    "is_active",
    "created_by",
    "created_at",
    "updated_at",
)

SCHOOL_COLUMNS = ("id", "name", "domain", "is_active")

# Columns an update may touch. school_id and created_by are immutable.
UPDATABLE_FAQ_FIELDS = ("category", "question", "answer", "keywords", "is_active")


class FaqStore(Protocol):
    """Record store capabilities required by the FAQ core."""

    def find_school_by_domain(self, domain: str) -> Optional[School]: ...

    def find_school_by_id(self, school_id: int) -> Optional[School]: ...

    def get_faq_by_id(self, faq_id: int) -> Optional[Faq]: ...

    def query_faqs(
        self, predicate: FaqPredicate, limit: Optional[int] = None
    ) -> List[Faq]: ...

    def distinct_categories(self, predicate: FaqPredicate) -> List[FaqCategory]: ...

    def list_faqs_for_school(self, school_id: int) -> List[Faq]: ...

    def insert_faq(self, fields: Dict[str, Any]) -> Faq: ...

    def update_faq(self, faq_id: int, fields: Dict[str, Any]) -> Optional[Faq]: ...

    def delete_faq(self, faq_id: int) -> bool: ...


def _columns(names: Sequence[str], alias: Optional[str] = None) -> sql.Composable:
    if alias:
        return sql.SQL(", ").join(sql.Identifier(alias, name) for name in names)
    return sql.SQL(", ").join(sql.Identifier(name) for name in names)


def _row_to_faq(row) -> Faq:
    return Faq(
        id=row[0],
        school_id=row[1],
        category=row[2],
        question=row[3],
        answer=row[4],
        keywords=list(row[5] or []),
        is_active=row[6],
        created_by=row[7],
        created_at=row[8],
        updated_at=row[9],
    )


def _row_to_school(row) -> School:
    return School(id=row[0], name=row[1], domain=row[2], is_active=row[3])


def _db_value(field: str, value: Any) -> Any:
    if field == "keywords":
        return Jsonb(list(value))
    if field == "category":
        return FaqCategory(value).value
    return value


class FaqStorageClient(BaseStorageClient):
    """
    PostgreSQL-backed FaqStore.

    Reads join faqs to schools so tenant domain and school.is_active can be
    filtered in the same statement. Ordering is created_at descending with
    id descending as the tie-break.
    """

    def find_school_by_domain(self, domain: str) -> Optional[School]:
        """
        Look up a school by its unique domain.

        Args:
            domain: School domain (e.g., "acme.edu")

        Returns:
            School if found, None otherwise
        """
        logger.debug(f"Fetching school for domain: {domain}")

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL("SELECT {} FROM schools WHERE domain = %s").format(
                        _columns(SCHOOL_COLUMNS)
                    ),
                    (domain,),
                )
                row = cur.fetchone()
                return _row_to_school(row) if row else None

    def find_school_by_id(self, school_id: int) -> Optional[School]:
        """Look up a school by primary key. Returns None if absent."""
        logger.debug(f"Fetching school {school_id}")

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL("SELECT {} FROM schools WHERE id = %s").format(
                        _columns(SCHOOL_COLUMNS)
                    ),
                    (school_id,),
                )
                row = cur.fetchone()
                return _row_to_school(row) if row else None

    def get_faq_by_id(self, faq_id: int) -> Optional[Faq]:
        """Fetch a single FAQ regardless of its active flag."""
        logger.debug(f"Fetching FAQ {faq_id}")

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL("SELECT {} FROM faqs WHERE id = %s").format(
                        _columns(FAQ_COLUMNS)
                    ),
                    (faq_id,),
                )
                row = cur.fetchone()
                return _row_to_faq(row) if row else None

    def query_faqs(
        self, predicate: FaqPredicate, limit: Optional[int] = None
    ) -> List[Faq]:
        """
        Fetch FAQs matching a predicate, newest first.

        Args:
            predicate: Tenant/category/term filter from plan_search
            limit: Optional maximum number of rows

        Returns:
            List of Faq ordered by created_at DESC, id DESC

        Example:
            >>> client = FaqStorageClient()
            >>> faqs = client.query_faqs(plan_search("acme.edu", ["tuition"]), limit=20)
        """
        where, params = predicate.to_sql()
        query = sql.SQL(
            "SELECT {columns} FROM faqs f "
            "JOIN schools s ON s.id = f.school_id "
            "WHERE {where} "
            "ORDER BY f.created_at DESC, f.id DESC"
        ).format(columns=_columns(FAQ_COLUMNS, alias="f"), where=where)

        if limit is not None:
            query = query + sql.SQL(" LIMIT %s")
            params = params + [limit]

        with PerformanceLogger(logger, f"FAQ query for '{predicate.school_domain}'"):
            with self.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    faqs = [_row_to_faq(row) for row in cur.fetchall()]

        logger.debug(
            f"FAQ query returned {len(faqs)} rows "
            f"(domain={predicate.school_domain}, terms={len(predicate.terms)}, limit={limit})"
        )
        return faqs

    def distinct_categories(self, predicate: FaqPredicate) -> List[FaqCategory]:
        """
        Distinct categories among FAQs matching a predicate.

        The category column is a PostgreSQL enum, so ORDER BY follows the
        enum declaration order.
        """
        where, params = predicate.to_sql()
        query = sql.SQL(
            "SELECT DISTINCT f.category FROM faqs f "
            "JOIN schools s ON s.id = f.school_id "
            "WHERE {where} "
            "ORDER BY f.category"
        ).format(where=where)

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                categories = [FaqCategory(row[0]) for row in cur.fetchall()]

        logger.debug(
            f"Found {len(categories)} categories for '{predicate.school_domain}'"
        )
        return categories

    def list_faqs_for_school(self, school_id: int) -> List[Faq]:
        """All FAQs of a school, including inactive ones, newest first."""
        logger.debug(f"Listing FAQs for school {school_id}")

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL(
                        "SELECT {} FROM faqs WHERE school_id = %s "
                        "ORDER BY created_at DESC, id DESC"
                    ).format(_columns(FAQ_COLUMNS)),
                    (school_id,),
                )
                return [_row_to_faq(row) for row in cur.fetchall()]

    def insert_faq(self, fields: Dict[str, Any]) -> Faq:
        """
        Insert a FAQ row and return it as stored.

        Args:
            fields: school_id, category, question, answer, keywords,
                    is_active, created_by

        Returns:
            The created Faq (with id and timestamps)
        """
        logger.info(
            f"Inserting FAQ for school {fields['school_id']} "
            f"(category={fields['category']})"
        )
        names = (
            "school_id",
            "category",
            "question",
            "answer",
            "keywords",
            "is_active",
            "created_by",
        )
        values = [_db_value(name, fields[name]) for name in names]

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL(
                        "INSERT INTO faqs ({names}) VALUES ({placeholders}) RETURNING {columns}"
                    ).format(
                        names=_columns(names),
                        placeholders=sql.SQL(", ").join(sql.Placeholder() * len(names)),
                        columns=_columns(FAQ_COLUMNS),
                    ),
                    values,
                )
                faq = _row_to_faq(cur.fetchone())

        logger.info(f"Created FAQ {faq.id} with {len(faq.keywords)} keywords")
        return faq

    def update_faq(self, faq_id: int, fields: Dict[str, Any]) -> Optional[Faq]:
        """
        Apply a partial update to a FAQ.

        Only keys in UPDATABLE_FAQ_FIELDS are written; updated_at is always
        refreshed.

        Returns:
            The updated Faq, or None if no row has that id
        """
        logger.info(f"Updating FAQ {faq_id} (fields={sorted(fields)})")

        updates = []
        params: List[Any] = []
        for name in UPDATABLE_FAQ_FIELDS:
            if name in fields:
                updates.append(sql.SQL("{} = %s").format(sql.Identifier(name)))
                params.append(_db_value(name, fields[name]))

        updates.append(sql.SQL("updated_at = NOW()"))
        params.append(faq_id)

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL(
                        "UPDATE faqs SET {updates} WHERE id = %s RETURNING {columns}"
                    ).format(
                        updates=sql.SQL(", ").join(updates),
                        columns=_columns(FAQ_COLUMNS),
                    ),
                    params,
                )
                row = cur.fetchone()

        if row is None:
            logger.warning(f"No FAQ found with id {faq_id}")
            return None
        return _row_to_faq(row)

    def delete_faq(self, faq_id: int) -> bool:
        """
        Delete a FAQ by id.

        Returns:
            True if deleted, False if not found
        """
        logger.info(f"Deleting FAQ {faq_id}")

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM faqs WHERE id = %s", (faq_id,))
                deleted = cur.rowcount > 0

        if deleted:
            logger.info(f"Deleted FAQ {faq_id}")
        else:
            logger.warning(f"No FAQ found with id {faq_id}")
        return deleted
