from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.enums import ChangeAction
from ..core.exceptions import ConflictError, RemoteUnavailableError
from ..realtime.change_feed import ChangeEvent, ChangeFeed
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection + cursor, commit on success, roll back on error.

    Driver errors are translated at this boundary: integrity violations become
    ConflictError, everything else RemoteUnavailableError.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise RemoteUnavailableError(f"Cannot connect to database: {e}", cause=e) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        raise ConflictError("This record already exists") from e
    except mysql.connector.Error as e:
        _safe_rollback(conn)
        raise RemoteUnavailableError(f"Database error: {e}", cause=e) from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        logger.debug("Rollback failed on a broken connection")


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


class MySQLRepository:
    """Shared plumbing: connection factory plus change-feed publishing."""

    table: str = ""

    def __init__(self, conn_factory: DatabaseConnection, feed: Optional[ChangeFeed] = None):
        self._conn_factory = conn_factory
        self._feed = feed

    def _publish(self, action: ChangeAction, row: dict, *, table: Optional[str] = None) -> None:
        if self._feed is not None:
            self._feed.publish(ChangeEvent(table=table or self.table, action=action, row=row))
