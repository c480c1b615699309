"""
Tests for the PostgreSQL FAQ storage client and its base connection handling.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, patch, MagicMock

import psycopg
from psycopg.types.json import Jsonb

from core.exceptions import StorageUnavailableError
from core.schemas import Faq, FaqCategory, School
from core.search_planner import plan_search
from core.storage_faq import FaqStorageClient

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)

FAQ_ROW = (
    5,
    1,
    "admissions",
    "What are the admission requirements?",
    "A diploma and test scores.",
    ["admission", "requirements"],
    True,
    3,
    CREATED,
    CREATED,
)


@pytest.fixture
def mock_settings():
    """Mock settings for database connection."""
    with patch("core.storage_base.get_database_settings") as mock:
        settings = Mock()
        settings.HOST = "localhost"
        settings.PORT = 5432
        settings.USER = "test_user"
        settings.PASSWORD.get_secret_value.return_value = "test_password"
        settings.NAME = "test_db"
        mock.return_value = settings
        yield settings


@pytest.fixture
def client(mock_settings):
    """FaqStorageClient in CLI mode with mocked settings."""
    return FaqStorageClient()


@pytest.fixture
def mock_cursor(client):
    """Patch get_connection to hand out a MagicMock cursor."""
    cursor = MagicMock()
    with patch.object(client, "get_connection") as mock_get_conn:
        mock_conn = MagicMock()
        mock_conn.__enter__.return_value = mock_conn
        mock_conn.__exit__.return_value = None
        mock_conn.cursor.return_value.__enter__.return_value = cursor
        mock_get_conn.return_value = mock_conn
        yield cursor


def executed_sql(cursor, call_index=-1) -> str:
    query = cursor.execute.call_args_list[call_index][0][0]
    return query if isinstance(query, str) else query.as_string(None)


class TestBaseConnection:
    """Connection handling inherited from BaseStorageClient."""

    def test_init(self, client):
        assert client.db_host == "localhost"
        assert client.db_user == "test_user"
        assert client.db_password == "test_password"
        assert client.db_name == "test_db"
        assert client.db_port == 5432

    def test_init_validates_configuration(self, mock_settings):
        mock_settings.HOST = ""

        with pytest.raises(ValueError, match="DB_HOST is not configured"):
            FaqStorageClient()

    def test_get_connection_commits_and_closes(self, client):
        with patch("core.storage_base.psycopg.connect") as mock_connect:
            mock_conn = MagicMock()
            mock_conn.closed = False
            mock_connect.return_value = mock_conn

            with client.get_connection() as conn:
                assert conn == mock_conn

            mock_conn.commit.assert_called_once()
            assert mock_conn.close.called

    def test_operational_error_becomes_storage_unavailable(self, client):
        with patch("core.storage_base.psycopg.connect") as mock_connect:
            mock_connect.side_effect = psycopg.OperationalError("connection refused")

            with pytest.raises(StorageUnavailableError, match="Unable to connect"):
                with client.get_connection():
                    pass

    def test_query_error_rolls_back(self, client):
        with patch("core.storage_base.psycopg.connect") as mock_connect:
            mock_conn = MagicMock()
            mock_conn.closed = False
            mock_connect.return_value = mock_conn

            with pytest.raises(StorageUnavailableError) as exc_info:
                with client.get_connection():
                    raise psycopg.errors.UndefinedTable("relation faqs does not exist")

            mock_conn.rollback.assert_called_once()
            mock_conn.commit.assert_not_called()
            assert isinstance(exc_info.value, ConnectionError)
            assert isinstance(exc_info.value.__cause__, psycopg.Error)

    def test_pooled_connection(self):
        pool = MagicMock()
        pooled_conn = MagicMock()
        pool.get_connection.return_value.__enter__.return_value = pooled_conn
        client = FaqStorageClient(connection_pool=pool)

        with client.get_connection() as conn:
            assert conn is pooled_conn

        pooled_conn.commit.assert_called_once()

    def test_pooled_error_becomes_storage_unavailable(self):
        pool = MagicMock()
        pooled_conn = MagicMock()
        pool.get_connection.return_value.__enter__.return_value = pooled_conn
        client = FaqStorageClient(connection_pool=pool)

        with pytest.raises(StorageUnavailableError):
            with client.get_connection():
                raise psycopg.OperationalError("server closed the connection")

        pooled_conn.rollback.assert_called_once()

    def test_each_block_uses_its_own_connection(self, client):
        with patch("core.storage_base.psycopg.connect") as mock_connect:
            first, second = MagicMock(), MagicMock()
            first.closed = second.closed = False
            mock_connect.side_effect = [first, second]

            with client.get_connection() as conn:
                assert conn is first
            with client.get_connection() as conn:
                assert conn is second

            first.close.assert_called_once()
            second.close.assert_called_once()
            assert mock_connect.call_count == 2


class TestSchools:
    def test_find_school_by_domain(self, client, mock_cursor):
        mock_cursor.fetchone.return_value = (1, "Acme", "acme.edu", True)

        school = client.find_school_by_domain("acme.edu")

        assert school == School(id=1, name="Acme", domain="acme.edu", is_active=True)
        assert "WHERE domain = %s" in executed_sql(mock_cursor)
        assert mock_cursor.execute.call_args[0][1] == ("acme.edu",)

    def test_find_school_by_id_missing(self, client, mock_cursor):
        mock_cursor.fetchone.return_value = None

        assert client.find_school_by_id(9) is None
        assert mock_cursor.execute.call_args[0][1] == (9,)


class TestFaqQueries:
    def test_get_faq_by_id(self, client, mock_cursor):
        mock_cursor.fetchone.return_value = FAQ_ROW

        faq = client.get_faq_by_id(5)

        assert isinstance(faq, Faq)
        assert faq.id == 5
        assert faq.category == FaqCategory.ADMISSIONS
        assert faq.keywords == ["admission", "requirements"]
        assert faq.created_by == 3

    def test_query_faqs(self, client, mock_cursor):
        mock_cursor.fetchall.return_value = [FAQ_ROW]
        predicate = plan_search("acme.edu", ["admission"], FaqCategory.ADMISSIONS)

        faqs = client.query_faqs(predicate, limit=20)

        assert [f.id for f in faqs] == [5]
        query = executed_sql(mock_cursor)
        assert "JOIN schools s ON s.id = f.school_id" in query
        assert "ORDER BY f.created_at DESC, f.id DESC" in query
        assert query.rstrip().endswith("LIMIT %s")
        params = mock_cursor.execute.call_args[0][1]
        assert params == ["acme.edu", "admissions"] + ["%admission%"] * 3 + [20]

    def test_query_faqs_without_limit(self, client, mock_cursor):
        mock_cursor.fetchall.return_value = []

        assert client.query_faqs(plan_search("acme.edu")) == []
        assert "LIMIT" not in executed_sql(mock_cursor)
        assert mock_cursor.execute.call_args[0][1] == ["acme.edu"]

    def test_distinct_categories(self, client, mock_cursor):
        mock_cursor.fetchall.return_value = [("admissions",), ("campus_life",)]

        categories = client.distinct_categories(plan_search("acme.edu"))

        assert categories == [FaqCategory.ADMISSIONS, FaqCategory.CAMPUS_LIFE]
        query = executed_sql(mock_cursor)
        assert "SELECT DISTINCT f.category" in query
        assert "ILIKE" not in query

    def test_list_faqs_for_school(self, client, mock_cursor):
        mock_cursor.fetchall.return_value = [FAQ_ROW]

        faqs = client.list_faqs_for_school(1)

        assert len(faqs) == 1
        assert "is_active" not in executed_sql(mock_cursor).split("WHERE")[1]


class TestFaqWrites:
    def test_insert_faq(self, client, mock_cursor):
        mock_cursor.fetchone.return_value = FAQ_ROW

        faq = client.insert_faq(
            {
                "school_id": 1,
                "category": FaqCategory.ADMISSIONS,
                "question": "What are the admission requirements?",
                "answer": "A diploma and test scores.",
                "keywords": ["admission", "requirements"],
                "is_active": True,
                "created_by": 3,
            }
        )

        assert faq.id == 5
        assert "INSERT INTO" in executed_sql(mock_cursor)
        values = mock_cursor.execute.call_args[0][1]
        assert values[1] == "admissions"
        assert isinstance(values[4], Jsonb)
        assert values[4].obj == ["admission", "requirements"]

    def test_update_faq_partial(self, client, mock_cursor):
        mock_cursor.fetchone.return_value = FAQ_ROW

        faq = client.update_faq(5, {"is_active": False})

        assert faq.id == 5
        set_clause = executed_sql(mock_cursor).split("RETURNING")[0]
        assert '"is_active" = %s' in set_clause
        assert "updated_at = NOW()" in set_clause
        assert '"question"' not in set_clause
        assert mock_cursor.execute.call_args[0][1] == [False, 5]

    def test_update_faq_ignores_immutable_fields(self, client, mock_cursor):
        mock_cursor.fetchone.return_value = FAQ_ROW

        client.update_faq(5, {"school_id": 2, "created_by": 9, "answer": "New."})

        query = executed_sql(mock_cursor)
        assert '"school_id"' not in query.split("RETURNING")[0]
        assert mock_cursor.execute.call_args[0][1] == ["New.", 5]

    def test_update_faq_missing(self, client, mock_cursor):
        mock_cursor.fetchone.return_value = None

        assert client.update_faq(5, {"is_active": False}) is None

    def test_delete_faq(self, client, mock_cursor):
        mock_cursor.rowcount = 1
        assert client.delete_faq(5) is True
        mock_cursor.execute.assert_called_once_with("DELETE FROM faqs WHERE id = %s", (5,))

    def test_delete_faq_missing(self, client, mock_cursor):
        mock_cursor.rowcount = 0
        assert client.delete_faq(5) is False
