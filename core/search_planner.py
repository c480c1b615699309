"""
Search planning for tenant-scoped FAQ queries.

A FaqPredicate describes which FAQ rows a chatbot query may return:

    school.domain = <domain> AND faq.is_active AND school.is_active
    [AND faq.category = <category>]
    [AND (term_1 matches OR term_2 matches OR ...)]

where a term matches when it is a case-insensitive substring of the
question, the answer, or the JSON text of the keyword list.

The predicate renders to SQL for the PostgreSQL store and can also be
evaluated directly against models for the in-memory store, so both stores
share one definition of "matches".
"""

import json
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from psycopg import sql

from core.schemas import Faq, FaqCategory, School


def escape_like(term: str) -> str:
    """Escape LIKE/ILIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def keywords_text(keywords: List[str]) -> str:
    """Textual form of a keyword list, identical to PostgreSQL's jsonb::text."""
    return json.dumps(keywords, ensure_ascii=False)


@dataclass(frozen=True)
class FaqPredicate:
    """Immutable filter over FAQ rows joined to their school."""

    school_domain: str
    category: Optional[FaqCategory] = None
    terms: Tuple[str, ...] = ()

    def to_sql(self) -> Tuple[sql.Composable, List]:
        """
        Render the predicate as a WHERE clause body.

        Column references use the aliases ``f`` (faqs) and ``s`` (schools).

        Returns:
            Tuple of (composable clause, positional parameters)
        """
        clauses: List[sql.Composable] = [
            sql.SQL("s.domain = %s"),
            sql.SQL("f.is_active = TRUE"),
            sql.SQL("s.is_active = TRUE"),
        ]
        params: List = [self.school_domain]

        if self.category is not None:
            clauses.append(sql.SQL("f.category = %s"))
            params.append(self.category.value)

        if self.terms:
            term_tests = []
            for term in self.terms:
                pattern = f"%{escape_like(term)}%"
                term_tests.append(
                    sql.SQL(
                        "(f.question ILIKE %s OR f.answer ILIKE %s OR f.keywords::text ILIKE %s)"
                    )
                )
                params.extend([pattern, pattern, pattern])
            clauses.append(sql.SQL("({})").format(sql.SQL(" OR ").join(term_tests)))

        return sql.SQL(" AND ").join(clauses), params

    def matches(self, faq: Faq, school: Optional[School]) -> bool:
        """Evaluate the predicate against a FAQ and its (possibly missing) school."""
        if school is None or school.id != faq.school_id:
            return False
        if school.domain != self.school_domain:
            return False
        if not (faq.is_active and school.is_active):
            return False
        if self.category is not None and faq.category != self.category:
            return False
        if not self.terms:
            return True

        fields = (
            faq.question.lower(),
            faq.answer.lower(),
            keywords_text(faq.keywords).lower(),
        )
        return any(term.lower() in field for term in self.terms for field in fields)


def plan_search(
    school_domain: str,
    terms: Iterable[str] = (),
    category: Optional[FaqCategory] = None,
) -> FaqPredicate:
    """
    Build the predicate for a chatbot search.

    Args:
        school_domain: Domain identifying the tenant
        terms: Search terms from tokenize_query (empty means filter-only)
        category: Optional category restriction

    Returns:
        FaqPredicate combining tenant, active flags, category and terms

    Example:
        >>> plan_search("acme.edu", ["tuition"], FaqCategory.ADMISSIONS)
        FaqPredicate(school_domain='acme.edu', category=<FaqCategory.ADMISSIONS: 'admissions'>, terms=('tuition',))
    """
    return FaqPredicate(
        school_domain=school_domain,
        category=category,
        terms=tuple(terms),
    )
