from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector

from ..core.exceptions import TransactionError


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise connector failures as ``TransactionError``."""

    try:
        yield
    except mysql.connector.Error as exc:
        raise TransactionError(f"{action} failed: {exc}") from exc


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
