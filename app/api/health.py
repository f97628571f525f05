import logging
from typing import Callable, Dict

from fastapi import APIRouter
from sqlalchemy import inspect

from app.database import engine
from app.utils.cache import redis_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

REQUIRED_TABLES = ("products", "users")


def _check_database() -> None:
    tables = set(inspect(engine).get_table_names())
    missing = [name for name in REQUIRED_TABLES if name not in tables]
    if missing:
        raise RuntimeError(f"missing tables: {', '.join(missing)}")


def _check_redis() -> None:
    redis_client.ping()


PROBES: Dict[str, Callable[[], None]] = {
    "database": _check_database,
    "redis": _check_redis,
}


@router.get(
    "/",
    summary="Liveness check",
    description="Report that the API process is up."
)
def health_check():
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="""
    Probe the database (product and user tables present) and the Redis
    cache. Every probe is run; a failing one is reported with its error.
    """
)
def readiness_check():
    checks = {}
    for name, probe in PROBES.items():
        try:
            probe()
            checks[name] = True
        except Exception as e:
            logger.warning(f"Readiness probe '{name}' failed: {e}")
            checks[name] = False
            checks[f"{name}_error"] = str(e)

    ready = all(checks[name] for name in PROBES)
    return {
        "status": "ready" if ready else "not_ready",
        "checks": checks
    }
