"""Health checks: liveness (process up) and readiness (dependencies reachable)."""
from typing import Any, Dict

from app import db


def check_live() -> Dict[str, Any]:
    """Liveness: app process is running."""
    return {"status": "ok", "check": "live"}


def check_ready() -> Dict[str, Any]:
    """Readiness: DB is reachable."""
    db_ok = db.db_available and db.ping()
    return {
        "status": "ok" if db_ok else "degraded",
        "check": "ready",
        "database": "up" if db_ok else "down",
    }
