"""Cursor-based pagination over BIGSERIAL primary keys.

Lists are ordered by id DESC; the cursor is the last id of the previous page,
wrapped as opaque Base64 JSON. Services fetch limit+1 rows to detect has_more
without a COUNT(*) query.
"""

import base64
import json
from typing import TypeVar

T = TypeVar("T")


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


def split_page(rows: list[T], limit: int) -> tuple[list[T], bool]:
    """Trim a limit+1 fetch to one page and report whether more rows exist."""
    return rows[:limit], len(rows) > limit
