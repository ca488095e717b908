# -*- coding: utf-8 -*-
"""Chat — DB storage helpers (append-only messages)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def append_message(
    *,
    sender_id: str,
    recipient_id: str,
    text: Optional[str] = None,
    file_url: Optional[str] = None,
    file_name: Optional[str] = None,
    file_type: Optional[str] = None,
    created_at: Optional[str] = None,
) -> Dict[str, Any]:
    message = {
        "id": str(uuid4()),
        "sender_id": sender_id,
        "recipient_id": recipient_id,
        "text": text,
        "file_url": file_url,
        "file_name": file_name,
        "file_type": file_type,
        "created_at": created_at or _utc_now(),
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO messages (id, sender_id, recipient_id, text, file_url, file_name, file_type, created_at)
            VALUES (:id, :sender_id, :recipient_id, :text, :file_url, :file_name, :file_type, :created_at)
            """,
            message,
        )
    return message


def list_messages_between(*, sender_id: str, recipient_id: str) -> List[Dict[str, Any]]:
    """Messages sent by `sender_id` to `recipient_id` (one half of a conversation)."""
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT * FROM messages
            WHERE sender_id = ? AND recipient_id = ?
            ORDER BY created_at ASC
            """,
            (sender_id, recipient_id),
        ).fetchall()
        return [dict(r) for r in rows]
