"""
Database connection pooling for the FastAPI application.

Wraps psycopg_pool.ConnectionPool so concurrent chatbot and admin requests
share a bounded set of PostgreSQL connections.
"""

from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool
from core.config import get_database_settings
from typing import Optional
from utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseConnectionPool:
    """
    Connection pool wrapper for PostgreSQL using psycopg3.

    Args:
        min_size: Minimum number of connections to keep open
        max_size: Maximum number of connections allowed in the pool
        timeout: Seconds to wait for a free connection before PoolTimeout

    Example:
        >>> pool = DatabaseConnectionPool(min_size=2, max_size=10)
        >>> store = FaqStorageClient(connection_pool=pool)
        >>> pool.close()
    """

    def __init__(self, min_size: int = 2, max_size: int = 10, timeout: float = 30.0):
        settings = get_database_settings()

        conninfo = make_conninfo(
            host=settings.HOST,
            port=settings.PORT,
            dbname=settings.NAME,
            user=settings.USER,
            password=settings.PASSWORD.get_secret_value(),
        )

        self.pool = ConnectionPool(
            conninfo=conninfo,
            min_size=min_size,
            max_size=max_size,
            timeout=timeout,
            open=True,
        )

        logger.info(
            f"Connection pool initialized for {settings.HOST}:{settings.PORT}/{settings.NAME}: "
            f"min={min_size}, max={max_size}, timeout={timeout}s"
        )

    def get_connection(self):
        """
        Get a connection from the pool (context manager).

        Raises:
            PoolTimeout: If no connection is available within timeout period
        """
        return self.pool.connection()

    def close(self):
        """Close the connection pool and all connections."""
        self.pool.close()
        logger.info("Connection pool closed")

    def get_stats(self) -> dict:
        """
        Pool statistics for the health endpoint.

        Returns:
            Dictionary with pool_size, pool_available and requests_waiting
        """
        try:
            stats = self.pool.get_stats()
            return {
                "pool_size": stats.get("pool_size", 0),
                "pool_available": stats.get("pool_available", 0),
                "requests_waiting": stats.get("requests_waiting", 0),
            }
        except Exception as e:
            logger.error(f"Failed to get pool stats: {e}")
            return {"error": str(e)}


_pool: Optional[DatabaseConnectionPool] = None


def get_connection_pool(
    min_conn: int = 2, max_conn: int = 10, timeout: float = 30.0
) -> DatabaseConnectionPool:
    """
    Get or create the process-wide connection pool.

    Arguments are only used when the pool is first created.
    """
    global _pool
    if _pool is None:
        _pool = DatabaseConnectionPool(
            min_size=min_conn, max_size=max_conn, timeout=timeout
        )
    return _pool


def close_connection_pool():
    """Close and discard the process-wide connection pool."""
    global _pool
    if _pool is not None:
        _pool.close()
        _pool = None
