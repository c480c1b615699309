"""
Health check endpoints for monitoring and orchestration.

Provides two endpoints:
1. /health/ - Detailed health check with component status
2. /health/ready - Simple readiness probe for Kubernetes/orchestration
"""

from fastapi import APIRouter, Request, Response, status as http_status
from datetime import datetime, timezone

from api.models.responses import HealthResponse
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/",
    response_model=HealthResponse,
    summary="Health Check",
    description="Detailed health check with component status. No authentication required (for monitoring systems).",
)
def health_check(request: Request) -> HealthResponse:
    """
    Detailed health check endpoint for monitoring and load balancers.

    **Overall Status:**
    - `healthy`: Connection pool has idle connections
    - `degraded`: Pool exhausted (requests will wait) or stats unavailable
    - `unhealthy`: Pool missing or empty
    """
    checks = {}
    overall_status = "healthy"

    try:
        pool = request.app.state.connection_pool
        pool_stats = pool.get_stats()

        if "error" in pool_stats:
            raise RuntimeError(pool_stats["error"])

        pool_size = pool_stats.get("pool_size", 0)
        pool_available = pool_stats.get("pool_available", 0)

        if pool_size == 0:
            pool_status = "unhealthy"
            overall_status = "unhealthy"
        elif pool_available == 0:
            pool_status = "degraded"
            overall_status = "degraded"
        else:
            pool_status = "healthy"

        checks["database"] = {
            "status": pool_status,
            "pool_size": pool_size,
            "pool_available": pool_available,
            "requests_waiting": pool_stats.get("requests_waiting", 0),
        }
        logger.debug(
            f"Database pool health check: size={pool_size}, available={pool_available}"
        )
    except AttributeError:
        checks["database"] = {
            "status": "unhealthy",
            "error": "Connection pool not initialized",
        }
        overall_status = "unhealthy"
        logger.error("Database pool health check failed: pool not found in app.state")
    except Exception as e:
        checks["database"] = {"status": "degraded", "error": str(e)}
        overall_status = "degraded"
        logger.error(f"Database pool health check failed: {e}")

    logger.info(f"Health check completed: overall_status={overall_status}")

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get(
    "/ready",
    summary="Readiness Check",
    description="Simple readiness probe. Returns 200 if ready, 503 if not.",
    status_code=http_status.HTTP_200_OK,
    responses={
        200: {
            "description": "Service is ready to accept traffic",
            "content": {"application/json": {"example": {"status": "ready"}}},
        },
        503: {
            "description": "Service is not ready",
            "content": {"application/json": {"example": {"status": "not ready"}}},
        },
    },
)
def readiness_check(request: Request, response: Response):
    """Returns 200 once the connection pool is initialized, 503 otherwise."""
    try:
        _ = request.app.state.connection_pool

        logger.debug("Readiness check passed: connection pool initialized")
        return {"status": "ready"}

    except AttributeError as e:
        logger.error(f"Readiness check failed: {e}")
        response.status_code = http_status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not ready", "error": str(e)}
