"""
Database Bootstrap Script

Creates the PostgreSQL objects the FAQ chatbot needs: the faq_category enum
type and the schools and faqs tables.

Usage:
    python -m utils.bootstrap_db                # Normal setup
    python -m utils.bootstrap_db --dry-run      # Check current status without changes
    python -m utils.bootstrap_db --full-reset   # Drop all tables and rebuild
"""

import argparse
import sys
from contextlib import contextmanager
from typing import Dict, Any

import psycopg
from psycopg import Connection, sql

from core.config import get_database_settings
from core.schemas import FaqCategory

TABLES = ["schools", "faqs"]
CATEGORY_TYPE = "faq_category"


class DatabaseBootstrap:
    """
    Handles database initialization and schema management.
    """

    def __init__(self, dry_run: bool = False):
        """
        Args:
            dry_run: If True, only check status without making changes
        """
        settings = get_database_settings()
        self.db_host = settings.HOST
        self.db_user = settings.USER
        self.db_password = settings.PASSWORD.get_secret_value()
        self.db_name = settings.NAME
        self.db_port = settings.PORT
        self.dry_run = dry_run

        self._connection_params = {
            "host": self.db_host,
            "user": self.db_user,
            "password": self.db_password,
            "dbname": self.db_name,
            "port": self.db_port,
        }

    @contextmanager
    def get_connection(self):
        """Get a database connection with automatic cleanup."""
        conn = None
        try:
            conn = psycopg.connect(**self._connection_params)
            yield conn
            if not self.dry_run:
                conn.commit()
        except psycopg.Error as e:
            if conn:
                conn.rollback()
            raise ConnectionError(f"Database error: {e}") from e
        finally:
            if conn and not conn.closed:
                conn.close()

    def check_table_exists(self, conn: Connection, table_name: str) -> bool:
        """Check if a table exists in the public schema."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_schema = 'public'
                    AND table_name = %s
                );
                """,
                (table_name,),
            )
            result = cur.fetchone()
            return result[0] if result else False

    def check_type_exists(self, conn: Connection, type_name: str) -> bool:
        """Check if a user-defined type (e.g., an enum) exists."""
        with conn.cursor() as cur:
            cur.execute(
                "SELECT EXISTS (SELECT FROM pg_type WHERE typname = %s);",
                (type_name,),
            )
            result = cur.fetchone()
            return result[0] if result else False

    def get_table_info(self, conn: Connection, table_name: str) -> Dict[str, Any]:
        """
        Get column information and row count for a table.

        Returns:
            Dictionary with "columns" and "row_count"
        """
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT column_name, data_type, is_nullable, column_default
                FROM information_schema.columns
                WHERE table_schema = 'public' AND table_name = %s
                ORDER BY ordinal_position;
                """,
                (table_name,),
            )
            columns = cur.fetchall()

            try:
                cur.execute(
                    sql.SQL("SELECT COUNT(*) FROM {}").format(
                        sql.Identifier(table_name)
                    )
                )
                row_count = cur.fetchone()[0]  # type: ignore
            except psycopg.Error:
                row_count = 0

            return {"columns": columns, "row_count": row_count}

    def create_category_type(self, conn: Connection) -> None:
        """Create the faq_category enum in FaqCategory declaration order."""
        exists = self.check_type_exists(conn, CATEGORY_TYPE)

        if exists:
            print(f"  [OK] Type '{CATEGORY_TYPE}' already exists")
            return
        if self.dry_run:
            print(f"  [->] Would create type '{CATEGORY_TYPE}'")
            return

        with conn.cursor() as cur:
            cur.execute(
                sql.SQL("CREATE TYPE {} AS ENUM ({})").format(
                    sql.Identifier(CATEGORY_TYPE),
                    sql.SQL(", ").join(sql.Literal(c.value) for c in FaqCategory),
                )
            )
        print(f"  [OK] Created type '{CATEGORY_TYPE}'")

    def _create_table(
        self, conn: Connection, table_name: str, create_table_sql: str, create_index_sql: str
    ) -> None:
        exists = self.check_table_exists(conn, table_name)

        if self.dry_run:
            if exists:
                info = self.get_table_info(conn, table_name)
                print(
                    f"  [OK] Table '{table_name}' already exists ({info['row_count']} rows)"
                )
                print(f"    Columns: {len(info['columns'])}")
            else:
                print(f"  -> Would create table '{table_name}'")
            return

        if exists:
            print(f"  [OK] Table '{table_name}' already exists")
            return

        with conn.cursor() as cur:
            cur.execute(create_table_sql)
            cur.execute(create_index_sql)

        print(f"  [OK] Created table '{table_name}' with indexes")

    def create_schools_table(self, conn: Connection) -> None:
        """Create the schools table (tenants, keyed by unique domain)."""
        self._create_table(
            conn,
            "schools",
            """
            CREATE TABLE schools (
                id SERIAL PRIMARY KEY,
                name TEXT NOT NULL,
                domain TEXT NOT NULL UNIQUE,
                location TEXT,
                contact_email TEXT,
                contact_phone TEXT,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """,
            "CREATE INDEX idx_schools_active ON schools(is_active);",
        )

    def create_faqs_table(self, conn: Connection) -> None:
        """
        Create the faqs table.

        school_id is not a foreign key: school deletion and cascading are
        handled by the administration service.
        """
        self._create_table(
            conn,
            "faqs",
            """
            CREATE TABLE faqs (
                id SERIAL PRIMARY KEY,
                school_id INTEGER NOT NULL,
                category faq_category NOT NULL,
                question TEXT NOT NULL CHECK (length(question) > 0),
                answer TEXT NOT NULL CHECK (length(answer) > 0),
                keywords JSONB NOT NULL DEFAULT '[]'::jsonb,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                created_by INTEGER NOT NULL,
                created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """,
            """
            CREATE INDEX idx_faqs_school_active ON faqs(school_id, is_active);
            CREATE INDEX idx_faqs_school_category ON faqs(school_id, category);
            CREATE INDEX idx_faqs_created_at ON faqs(created_at DESC, id DESC);
            """,
        )

    def drop_all_tables(self, conn: Connection) -> None:
        """Drop the FAQ tables and the category type."""
        if self.dry_run:
            print("  -> Would drop the following tables:")
            for table in TABLES:
                if self.check_table_exists(conn, table):
                    info = self.get_table_info(conn, table)
                    print(f"    - {table} ({info['row_count']} rows)")
            return

        with conn.cursor() as cur:
            for table in reversed(TABLES):
                if self.check_table_exists(conn, table):
                    cur.execute(
                        sql.SQL("DROP TABLE IF EXISTS {} CASCADE").format(
                            sql.Identifier(table)
                        )
                    )
                    print(f"  [OK] Dropped table '{table}'")
            cur.execute(
                sql.SQL("DROP TYPE IF EXISTS {}").format(sql.Identifier(CATEGORY_TYPE))
            )
            print(f"  [OK] Dropped type '{CATEGORY_TYPE}'")

    def setup_database(self, full_reset: bool = False) -> None:
        """
        Set up the database with all required types and tables.

        Args:
            full_reset: If True, drop all tables before recreating them
        """
        try:
            with self.get_connection() as conn:
                if self.dry_run:
                    print("\n=== DRY RUN MODE - No changes will be made ===\n")

                print(f"Connected to database: {self.db_name}@{self.db_host}")
                print()

                if full_reset:
                    print("[!] FULL RESET MODE - Dropping all tables...")
                    self.drop_all_tables(conn)
                    print()

                print("Setting up types...")
                self.create_category_type(conn)
                print()

                print("Setting up tables...")
                self.create_schools_table(conn)
                self.create_faqs_table(conn)
                print()

                if self.dry_run:
                    print("=== DRY RUN COMPLETE - No changes were made ===")
                else:
                    print("[OK] Database setup complete!")

        except ConnectionError as e:
            print(f"[X] Error connecting to database: {e}")
            sys.exit(1)

    def check_status(self) -> None:
        """Print which types and tables exist, with row counts."""
        try:
            with self.get_connection() as conn:
                print(f"\n=== Database Status: {self.db_name}@{self.db_host} ===\n")

                print("Types:")
                exists = self.check_type_exists(conn, CATEGORY_TYPE)
                status = "[OK] Exists" if exists else "[X] Does not exist"
                print(f"  {CATEGORY_TYPE}: {status}")
                print()

                print("Tables:")
                for table in TABLES:
                    if self.check_table_exists(conn, table):
                        info = self.get_table_info(conn, table)
                        print(
                            f"  {table}: [OK] Exists ({info['row_count']} rows, {len(info['columns'])} columns)"
                        )
                    else:
                        print(f"  {table}: [X] Does not exist")
                print()

        except ConnectionError as e:
            print(f"[X] Error connecting to database: {e}")
            sys.exit(1)


def main():
    """Main entry point for the bootstrap script."""
    parser = argparse.ArgumentParser(
        description="Bootstrap the PostgreSQL database for the FAQ chatbot backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m utils.bootstrap_db                    # Normal setup
  python -m utils.bootstrap_db --dry-run          # Show what would be done
  python -m utils.bootstrap_db --full-reset       # Drop all tables and rebuild
  python -m utils.bootstrap_db --status           # Check current database status
        """,
    )
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    parser.add_argument("--full-reset", action="store_true", help="Drop all tables and rebuild (WARNING: deletes all data!)")
    parser.add_argument("--status", action="store_true", help="Display current database status")

    args = parser.parse_args()

    if args.full_reset and not args.dry_run:
        print("[!] WARNING: Full reset will delete all data in the database!")
        response = input("Are you sure you want to continue? (yes/no): ")
        if response.lower() != "yes":
            print("Aborted.")
            sys.exit(0)

    bootstrap = DatabaseBootstrap(dry_run=args.dry_run)

    if args.status:
        bootstrap.check_status()
    else:
        bootstrap.setup_database(full_reset=args.full_reset)


if __name__ == "__main__":
    main()
