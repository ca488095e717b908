# -*- coding: utf-8 -*-
"""Chat — merging the sent/received message streams into one timeline.

A conversation is watched through two independent queries: messages I sent to
the contact and messages the contact sent to me. Each query delivers whole
snapshots at its own cadence. `ConversationReducer` is the single owner of the
merged list; both feeds push `SubscriptionUpdate`s into one `asyncio.Queue`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

PRIMARY_SOURCE = "sent"
SECONDARY_SOURCE = "received"


@dataclass(frozen=True)
class SubscriptionUpdate:
    source: str
    docs: Sequence[Mapping[str, Any]]


def _created_at_value(message: Mapping[str, Any]) -> Any:
    if "created_at" in message:
        return message.get("created_at")
    return message.get("createdAt")


def to_datetime(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a message timestamp into a datetime in `tz` (system local time when None).

    Accepts datetimes, ISO-8601 strings and epoch milliseconds. Naive values are
    taken to already be local wall-clock time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz) if tz is not None else dt
    return dt.astimezone(tz)


def _epoch_ms(dt: datetime) -> int:
    return int(round(dt.timestamp() * 1000))


def _sort_key(message: Mapping[str, Any]) -> float:
    dt = to_datetime(_created_at_value(message))
    # Pending writes without a server timestamp stay at the end.
    return dt.timestamp() if dt is not None else float("inf")


def merge_messages(
    existing: Sequence[Mapping[str, Any]],
    incoming: Sequence[Mapping[str, Any]],
    is_primary: bool,
) -> List[Dict[str, Any]]:
    """Fold one query snapshot into the working list.

    The primary query's snapshot replaces the list outright. A secondary snapshot
    first drops every entry whose id it carries, then appends its own entries, so
    redelivering the same batch never duplicates messages. The result is sorted
    by creation time (stable for equal timestamps).
    """
    if is_primary:
        merged = [dict(m) for m in incoming]
    else:
        incoming_ids = {m.get("id") for m in incoming if m.get("id") is not None}
        merged = [dict(m) for m in existing if m.get("id") not in incoming_ids]
        merged.extend(dict(m) for m in incoming)
    merged.sort(key=_sort_key)
    return merged


def group_messages_by_date(
    messages: Sequence[Mapping[str, Any]],
    tz: Optional[tzinfo] = None,
) -> List[Dict[str, Any]]:
    grouped: List[Dict[str, Any]] = []
    current: Optional[date] = None
    for message in messages:
        dt = to_datetime(_created_at_value(message), tz)
        if dt is not None and dt.date() != current:
            ms = _epoch_ms(dt)
            grouped.append({"type": "separator", "date": ms, "id": f"separator_{ms}"})
            current = dt.date()
        item = dict(message)
        item["type"] = "message"
        grouped.append(item)
    return grouped


class ConversationReducer:
    """Owns the merged message list for one open conversation."""

    def __init__(
        self,
        listener: Optional[Callable[[List[Dict[str, Any]]], None]] = None,
        tz: Optional[tzinfo] = None,
        primary_source: str = PRIMARY_SOURCE,
    ) -> None:
        self._messages: List[Dict[str, Any]] = []
        self._listener = listener
        self._tz = tz
        self._primary_source = primary_source

    @property
    def messages(self) -> List[Dict[str, Any]]:
        return list(self._messages)

    def grouped(self) -> List[Dict[str, Any]]:
        return group_messages_by_date(self._messages, tz=self._tz)

    def apply(self, update: SubscriptionUpdate) -> List[Dict[str, Any]]:
        is_primary = update.source == self._primary_source
        self._messages = merge_messages(self._messages, update.docs, is_primary)
        return self.grouped()

    async def consume(self, queue: "asyncio.Queue[Optional[SubscriptionUpdate]]") -> List[Dict[str, Any]]:
        """Apply queued updates until a `None` sentinel arrives."""
        while True:
            update = await queue.get()
            try:
                if update is None:
                    break
                grouped = self.apply(update)
                logger.debug("Applied %s snapshot (%d docs)", update.source, len(update.docs))
                if self._listener is not None:
                    self._listener(grouped)
            finally:
                queue.task_done()
        return self.grouped()


def should_group_messages(
    first: Optional[Mapping[str, Any]],
    second: Optional[Mapping[str, Any]],
    threshold_minutes: float = 5,
) -> bool:
    """Same sender and at most `threshold_minutes` apart."""
    if not first or not second:
        return False
    sender_a = first.get("sender_id", first.get("senderId"))
    sender_b = second.get("sender_id", second.get("senderId"))
    if sender_a != sender_b:
        return False
    a = to_datetime(_created_at_value(first))
    b = to_datetime(_created_at_value(second))
    if a is None or b is None:
        return False
    return abs(b.timestamp() - a.timestamp()) / 60.0 <= threshold_minutes


def format_message_time(timestamp: Any, tz: Optional[tzinfo] = None) -> str:
    dt = to_datetime(timestamp, tz)
    if dt is None:
        return ""
    return dt.strftime("%I:%M %p")


def format_message_date(
    timestamp: Any,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    dt = to_datetime(timestamp, tz)
    if dt is None:
        return ""
    today = (to_datetime(now, tz) if now is not None else datetime.now(tz)).date()
    if dt.date() == today:
        return "Today"
    if dt.date() == today - timedelta(days=1):
        return "Yesterday"
    return f"{dt:%A}, {dt:%B} {dt.day}, {dt.year}"
