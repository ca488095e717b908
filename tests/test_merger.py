# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import unittest
from datetime import datetime, timedelta, timezone

from dietitian.chat.merger import (
    ConversationReducer,
    SubscriptionUpdate,
    format_message_date,
    format_message_time,
    group_messages_by_date,
    merge_messages,
    should_group_messages,
    to_datetime,
)


def _ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


class TestMergeMessages(unittest.TestCase):
    def test_merged_list_is_sorted_by_creation_time(self) -> None:
        merged = merge_messages([], [{"id": "1", "created_at": 10}, {"id": "2", "created_at": 5}], True)
        self.assertEqual([m["id"] for m in merged], ["2", "1"])

    def test_secondary_redelivery_does_not_duplicate(self) -> None:
        sent = [{"id": "a", "created_at": 1000}]
        received = [{"id": "b", "created_at": 2000}]
        once = merge_messages(sent, received, False)
        twice = merge_messages(once, received, False)
        self.assertEqual([m["id"] for m in twice], ["a", "b"])

    def test_secondary_replaces_updated_entry(self) -> None:
        existing = [{"id": "b", "created_at": None, "text": "pending"}]
        merged = merge_messages(existing, [{"id": "b", "created_at": 2000, "text": "delivered"}], False)
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0]["text"], "delivered")

    def test_equal_timestamps_keep_relative_order(self) -> None:
        existing = [{"id": "a", "created_at": 1000}, {"id": "b", "created_at": 1000}]
        incoming = [{"id": "c", "created_at": 1000}, {"id": "d", "created_at": 500}]
        merged = merge_messages(existing, incoming, False)
        self.assertEqual([m["id"] for m in merged], ["d", "a", "b", "c"])

        primary = merge_messages([], [{"id": "x", "created_at": 7}, {"id": "y", "created_at": 7}], True)
        self.assertEqual([m["id"] for m in primary], ["x", "y"])

    def test_messages_without_id_are_not_dropped(self) -> None:
        existing = [{"id": None, "created_at": 1, "text": "draft"}, {"id": "a", "created_at": 2}]
        merged = merge_messages(existing, [{"id": None, "created_at": 3, "text": "other draft"}], False)
        self.assertEqual([m.get("text") for m in merged], ["draft", None, "other draft"])

    def test_primary_snapshot_replaces_list(self) -> None:
        merged = merge_messages([{"id": "old", "created_at": 1}], [{"id": "new", "created_at": 2}], True)
        self.assertEqual([m["id"] for m in merged], ["new"])

    def test_undated_messages_sort_last(self) -> None:
        merged = merge_messages(
            [],
            [{"id": "x", "created_at": None}, {"id": "y", "createdAt": "2024-03-01T10:00:00Z"}],
            True,
        )
        self.assertEqual([m["id"] for m in merged], ["y", "x"])


class TestGrouping(unittest.TestCase):
    def test_separator_per_calendar_day(self) -> None:
        day1_a = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        day1_b = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        day2 = datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)
        messages = [
            {"id": "1", "created_at": day1_a.isoformat()},
            {"id": "2", "created_at": _ms(day1_b)},
            {"id": "3", "created_at": day2},
        ]
        grouped = group_messages_by_date(messages, tz=timezone.utc)
        self.assertEqual(
            [item["type"] for item in grouped],
            ["separator", "message", "message", "separator", "message"],
        )
        self.assertEqual(grouped[0]["date"], _ms(day1_a))
        self.assertEqual(grouped[0]["id"], f"separator_{_ms(day1_a)}")
        self.assertEqual(grouped[3]["date"], _ms(day2))

    def test_undated_message_gets_no_separator(self) -> None:
        grouped = group_messages_by_date([{"id": "p", "created_at": None}], tz=timezone.utc)
        self.assertEqual(grouped, [{"id": "p", "created_at": None, "type": "message"}])

    def test_to_datetime_inputs(self) -> None:
        expected = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        self.assertEqual(to_datetime("2024-03-01T10:00:00Z", timezone.utc), expected)
        self.assertEqual(to_datetime(_ms(expected), timezone.utc), expected)
        self.assertIsNone(to_datetime("not a date"))
        self.assertIsNone(to_datetime(True))


class TestConversationReducer(unittest.TestCase):
    def test_consume_applies_updates_in_order(self) -> None:
        seen = []
        reducer = ConversationReducer(listener=seen.append, tz=timezone.utc)
        sent = [{"id": "s1", "created_at": "2024-03-01T10:00:00Z"}]
        received = [{"id": "r1", "created_at": "2024-03-01T09:00:00Z"}]

        async def scenario():
            queue = asyncio.Queue()
            queue.put_nowait(SubscriptionUpdate(source="sent", docs=sent))
            queue.put_nowait(SubscriptionUpdate(source="received", docs=received))
            queue.put_nowait(SubscriptionUpdate(source="received", docs=received))
            queue.put_nowait(None)
            result = await reducer.consume(queue)
            await queue.join()
            return result

        grouped = asyncio.run(scenario())
        self.assertEqual(len(seen), 3)
        self.assertEqual([m["id"] for m in reducer.messages], ["r1", "s1"])
        self.assertEqual([item["type"] for item in grouped], ["separator", "message", "message"])


class TestMessageFormatting(unittest.TestCase):
    def test_should_group_messages(self) -> None:
        base = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        a = {"sender_id": "u1", "created_at": base}
        b = {"sender_id": "u1", "created_at": base + timedelta(minutes=3)}
        c = {"sender_id": "u1", "created_at": base + timedelta(minutes=10)}
        d = {"sender_id": "u2", "created_at": base + timedelta(minutes=1)}
        self.assertTrue(should_group_messages(a, b))
        self.assertFalse(should_group_messages(a, c))
        self.assertFalse(should_group_messages(a, d))
        self.assertFalse(should_group_messages(a, None))

    def test_format_message_time(self) -> None:
        ts = datetime(2024, 3, 1, 14, 5, tzinfo=timezone.utc)
        self.assertEqual(format_message_time(ts, tz=timezone.utc), "02:05 PM")
        self.assertEqual(format_message_time(None), "")

    def test_format_message_date(self) -> None:
        now = datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(format_message_date(now - timedelta(hours=2), now=now, tz=timezone.utc), "Today")
        self.assertEqual(format_message_date(now - timedelta(days=1), now=now, tz=timezone.utc), "Yesterday")
        self.assertEqual(
            format_message_date(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc), now=now, tz=timezone.utc),
            "Friday, March 1, 2024",
        )


if __name__ == "__main__":
    unittest.main()
