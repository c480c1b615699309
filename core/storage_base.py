"""
Base storage module for PostgreSQL database operations.

This module provides a base class with common database connection management,
error handling, and logging for all storage clients.
"""

from contextlib import contextmanager
from core.config import get_database_settings
from core.exceptions import StorageUnavailableError
import psycopg
from utils.logger import get_logger

logger = get_logger(__name__)


class BaseStorageClient:
    """
    Base class for all PostgreSQL storage operations.

    Provides common functionality for database connection management,
    error handling and logging. Connections are scoped to each
    get_connection() block; the client itself holds none.

    Supports both connection pooling (for API mode) and individual
    connections (for CLI mode). Every psycopg failure surfaces as
    StorageUnavailableError.
    """

    def __init__(self, connection_pool=None):
        """
        Initialize the storage client with database configuration.

        Args:
            connection_pool: Optional DatabaseConnectionPool instance for API mode.
                           If None, creates individual connections (CLI mode).

        Raises:
            ValueError: If required database configuration is missing
        """
        logger.info(f"Initializing {self.__class__.__name__}")
        try:
            self._connection_pool = connection_pool

            if self._connection_pool is None:
                # CLI mode: Store connection params for individual connections
                settings = get_database_settings()

                if not settings.HOST:
                    raise ValueError("DB_HOST is not configured")
                if not settings.USER:
                    raise ValueError("DB_USER is not configured")
                if not settings.NAME:
                    raise ValueError("DB_NAME is not configured")

                self.db_host = settings.HOST
                self.db_user = settings.USER
                self.db_password = settings.PASSWORD.get_secret_value()
                self.db_name = settings.NAME
                self.db_port = settings.PORT
                self._connection_params = {
                    "host": self.db_host,
                    "user": self.db_user,
                    "password": self.db_password,
                    "dbname": self.db_name,
                    "port": self.db_port,
                }
                logger.info(
                    f"{self.__class__.__name__} configured for {self.db_host}:{self.db_port}/{self.db_name} (CLI mode)"
                )
                logger.debug(f"Database user: {self.db_user}")
            else:
                logger.info(
                    f"{self.__class__.__name__} configured with connection pool (API mode)"
                )
        except Exception as e:
            logger.error(f"Failed to initialize {self.__class__.__name__}: {str(e)}")
            raise

    @contextmanager
    def get_connection(self):
        """
        Get a database connection with automatic cleanup.

        Uses connection pool if available (API mode), otherwise creates
        individual connection (CLI mode). Commits on success, rolls back
        on error.

        Yields:
            Connection: PostgreSQL connection object

        Raises:
            StorageUnavailableError: If the database is unreachable or a query fails

        Example:
            >>> with client.get_connection() as conn:
            ...     with conn.cursor() as cur:
            ...         cur.execute("SELECT 1")
        """
        if self._connection_pool:
            try:
                with self._connection_pool.get_connection() as conn:
                    try:
                        logger.debug("Using pooled database connection")
                        yield conn
                        conn.commit()
                        logger.debug("Transaction committed successfully")
                    except psycopg.Error:
                        conn.rollback()
                        logger.warning("Transaction rolled back due to error")
                        raise
                    except Exception as e:
                        conn.rollback()
                        logger.error(
                            f"Unexpected error during database operation: {str(e)}"
                        )
                        raise
            except psycopg.Error as e:
                logger.error(f"Database error: {str(e)}")
                raise StorageUnavailableError(f"Database error: {e}") from e
        else:
            conn = None
            try:
                logger.debug(f"Connecting to database {self.db_name}@{self.db_host}")
                conn = psycopg.connect(**self._connection_params)
                logger.debug("Database connection established successfully")
                yield conn
                conn.commit()
                logger.debug("Transaction committed successfully")
            except psycopg.OperationalError as e:
                if conn:
                    conn.rollback()
                logger.error(f"Database connection error: {str(e)}")
                raise StorageUnavailableError(f"Unable to connect to database: {e}") from e
            except psycopg.Error as e:
                if conn:
                    conn.rollback()
                    logger.warning("Transaction rolled back due to error")
                logger.error(f"Database error: {str(e)}")
                raise StorageUnavailableError(f"Database error: {e}") from e
            except Exception as e:
                if conn:
                    conn.rollback()
                logger.error(f"Unexpected error during database operation: {str(e)}")
                raise
            finally:
                if conn and not conn.closed:
                    conn.close()
                    logger.debug("Database connection closed")
