# utils/db.py
"""
Shared SQLAlchemy engine for the lead performance app.

One engine per process, created on first use:
- MySQL (default driver pymysql): QueuePool sized from APP settings,
  pre-ping so stale connections are replaced transparently
- SQLite (local runs, tests): plain engine, nothing to tune

check_db_connection() is the landing-page health check; the record
store (utils.lead_performance.queries) asks get_db_engine() for the engine.
"""

import logging
import threading
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.pool import QueuePool

from .config import config

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


# ==================== ENGINE ====================

def get_db_engine() -> Engine:
    """
    Process-wide engine, built lazily.

    Raises:
        ValueError: if no database is configured
    """
    global _engine

    if _engine is None:
        with _engine_lock:
            # another thread may have built it while we waited
            if _engine is None:
                _engine = _build_engine(config.get_db_url())

    return _engine


def _build_engine(url: str) -> Engine:
    masked = config.get_masked_db_url()

    if make_url(url).get_backend_name() == "sqlite":
        logger.info(f"🔌 Opening SQLite database {masked}")
        return create_engine(url)

    settings = config.app_config
    pool_size = settings.get("DB_POOL_SIZE", 5)
    pool_recycle = settings.get("DB_POOL_RECYCLE", 3600)

    logger.info(
        f"🔌 Connecting to {masked} (pool_size={pool_size}, recycle={pool_recycle}s)"
    )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
    )


# ==================== HEALTH ====================

def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Run SELECT 1 against the lead database.

    Returns:
        (True, None) when reachable, otherwise (False, message for the UI)
    """
    try:
        with get_db_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except ValueError as e:
        logger.error(f"❌ Lead database not configured: {e}")
        return False, str(e)
    except OperationalError as e:
        logger.error(f"❌ Lead database unreachable: {e}")
        return False, "Cannot reach the lead database. Check the network / VPN and the DB settings."
    except SQLAlchemyError as e:
        logger.error(f"❌ Lead database error: {e}")
        return False, f"Database error: {e}"
    return True, None


def reset_db_engine():
    """Dispose the engine; the next get_db_engine() call builds a new one."""
    global _engine

    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
            _engine = None
            logger.info("🔄 Lead database engine disposed")


def get_connection_pool_status() -> Dict[str, Any]:
    """Pool counters for the debug panel on the landing page."""
    if _engine is None:
        return {"status": "not_initialized"}

    pool = _engine.pool
    if not isinstance(pool, QueuePool):
        return {"status": "active", "pool": type(pool).__name__}

    return {
        "status": "active",
        "pool_size": pool.size(),
        "checked_in": pool.checkedin(),
        "checked_out": pool.checkedout(),
        "overflow": pool.overflow(),
    }


__all__ = [
    'get_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'get_connection_pool_status',
]
