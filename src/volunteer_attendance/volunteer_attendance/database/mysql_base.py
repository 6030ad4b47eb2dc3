from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

import mysql.connector

from ..core.exceptions import ConflictError, PersistenceError, StoreTimeoutError
from .connection import DatabaseConnection

# ER_DUP_ENTRY, ER_LOCK_DEADLOCK
_CONFLICT_CODES = {1062, 1213}
# ER_LOCK_WAIT_TIMEOUT, ER_QUERY_TIMEOUT (max_execution_time exceeded)
_TIMEOUT_CODES = {1205, 3024}


def translate_error(e: mysql.connector.Error) -> PersistenceError:
    """Map a driver error onto the domain taxonomy so services never see mysql types."""
    errno = getattr(e, "errno", None)
    if errno in _CONFLICT_CODES:
        return ConflictError(f"Concurrent update conflict ({errno})")
    if errno in _TIMEOUT_CODES:
        return StoreTimeoutError(f"Database operation timed out ({errno})")
    return PersistenceError(f"Database error ({errno})")


def _apply_timeouts(cur, timeout_ms: int) -> None:
    cur.execute("SET SESSION innodb_lock_wait_timeout = %s", (max(1, int(timeout_ms) // 1000),))
    cur.execute("SET SESSION max_execution_time = %s", (int(timeout_ms),))


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """Short-lived connection + cursor; commits on success, rolls back on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            _apply_timeouts(cur, conn_factory.timeout_ms)
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        _safe_rollback(conn)
        raise translate_error(e) from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


@contextmanager
def db_transaction(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """Explicit transaction for read-then-write sequences that rely on row locks."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            conn.start_transaction()
            _apply_timeouts(cur, conn_factory.timeout_ms)
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        _safe_rollback(conn)
        raise translate_error(e) from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        # Connection already broken; closing it below discards the transaction.
        pass


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
