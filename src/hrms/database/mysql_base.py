from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import mysql.connector

from ..core.exceptions import DatabaseError, DomainError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


# MySQL error for a duplicate UNIQUE/PRIMARY key.
ER_DUP_ENTRY = 1062


@contextmanager
def db_operation(
    conn_factory: DatabaseConnection,
    operation: str,
    *,
    dictionary: bool = True,
    on_duplicate: Optional[Callable[[], DomainError]] = None,
):
    """``db_cursor`` that reports connector failures as ``DatabaseError``.

    ``on_duplicate`` builds the domain error raised when a unique key rejects
    the write.
    """
    try:
        with db_cursor(conn_factory, dictionary=dictionary) as handles:
            yield handles
    except mysql.connector.IntegrityError as err:
        if on_duplicate is not None and err.errno == ER_DUP_ENTRY:
            raise on_duplicate() from err
        logger.error("Database operation '%s' failed: %s", operation, err)
        raise DatabaseError(operation, err) from err
    except mysql.connector.Error as err:
        logger.error("Database operation '%s' failed: %s", operation, err)
        raise DatabaseError(operation, err) from err


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def new_id() -> str:
    return str(uuid.uuid4())


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """DATETIME columns hold naive UTC."""

    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def as_optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None
