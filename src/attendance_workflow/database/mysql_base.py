from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector

from ..core.exceptions import DependencyError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Connection owned by the enclosing db_transaction(), if any.
_active_connection: ContextVar[Optional[Any]] = ContextVar("active_connection", default=None)


def _rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        logger.exception("Rollback failed")


def _as_dependency_error(exc: mysql.connector.Error) -> DependencyError:
    return DependencyError(f"Database error: {exc.msg}")


@contextmanager
def db_transaction(conn_factory: DatabaseConnection) -> Iterator[Any]:
    """One connection, one commit: every db_cursor() opened inside joins it.

    Nested calls join the outer transaction. Connector failures other than
    integrity violations surface as DependencyError.
    """

    outer = _active_connection.get()
    if outer is not None:
        yield outer
        return

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise DependencyError(f"Database unavailable: {exc.msg}") from exc

    token = _active_connection.set(conn)
    try:
        yield conn
        conn.commit()
    except mysql.connector.IntegrityError:
        _rollback(conn)
        raise
    except mysql.connector.Error as exc:
        logger.warning("Rolling back unit of work: %s", exc.msg)
        _rollback(conn)
        raise _as_dependency_error(exc) from exc
    except Exception:
        logger.debug("Rolling back unit of work")
        _rollback(conn)
        raise
    finally:
        _active_connection.reset(token)
        conn.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    joined = _active_connection.get()
    if joined is not None:
        cur = joined.cursor(dictionary=dictionary)
        try:
            yield joined, cur
        finally:
            cur.close()
        return

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise DependencyError(f"Database unavailable: {exc.msg}") from exc
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError:
        _rollback(conn)
        raise
    except mysql.connector.Error as exc:
        _rollback(conn)
        raise _as_dependency_error(exc) from exc
    except Exception:
        _rollback(conn)
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def fetch_count(cur) -> int:
    row = cur.fetchone()
    if not row:
        return 0
    if isinstance(row, dict):
        return int(next(iter(row.values())) or 0)
    return int(row[0] or 0)


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, datetime):
        return value.time()

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
