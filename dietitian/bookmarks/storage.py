# -*- coding: utf-8 -*-
"""Bookmarks — remote (SQLite) store, local JSON cache, and the service joining them.

Signed-in users read and write the remote store and keep a local copy for
offline use. Without a user only the local file is touched. On sign-in local
entries are uploaded unless the remote store already has them.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..app_db import db_conn
from ..config import settings
from ..meals.extractor import nutrient_amount

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _key(recipe_id: Any) -> str:
    return str(recipe_id)


def bookmark_from_recipe(recipe: Mapping[str, Any], now: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": recipe.get("id"),
        "title": recipe.get("title") or recipe.get("name"),
        "image": recipe.get("image"),
        "calories": nutrient_amount(recipe, "Calories"),
        "dateBookmarked": now or _utc_now(),
    }


def _as_bookmark(item: Mapping[str, Any]) -> Dict[str, Any]:
    # Already-shaped bookmarks (from a client's local cache) pass through.
    if "dateBookmarked" in item and "nutrition" not in item:
        out = dict(item)
        out["dateBookmarked"] = out.get("dateBookmarked") or _utc_now()
        return out
    return bookmark_from_recipe(item)


class LocalBookmarkStore:
    """Bookmarks kept in a single JSON file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path or settings.local_bookmarks_path)

    def list(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Local bookmark file %s is corrupt; ignoring it", self.path)
            return []
        return [b for b in data if isinstance(b, dict)] if isinstance(data, list) else []

    def replace_all(self, bookmarks: Iterable[Mapping[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([dict(b) for b in bookmarks], ensure_ascii=False, indent=2), encoding="utf-8")

    def add(self, recipe: Mapping[str, Any]) -> Dict[str, Any]:
        bookmarks = self.list()
        for existing in bookmarks:
            if _key(existing.get("id")) == _key(recipe.get("id")):
                return existing
        bookmark = _as_bookmark(recipe)
        bookmarks.append(bookmark)
        self.replace_all(bookmarks)
        return bookmark

    def remove(self, recipe_id: Any) -> None:
        self.replace_all(b for b in self.list() if _key(b.get("id")) != _key(recipe_id))

    def contains(self, recipe_id: Any) -> bool:
        return any(_key(b.get("id")) == _key(recipe_id) for b in self.list())


def get_remote_bookmark(*, user_id: str, recipe_id: Any) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT payload_json FROM bookmarks WHERE user_id = ? AND recipe_id = ?",
            (user_id, _key(recipe_id)),
        ).fetchone()
    return json.loads(row["payload_json"]) if row else None


def put_remote_bookmark(*, user_id: str, bookmark: Mapping[str, Any]) -> None:
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT OR REPLACE INTO bookmarks (user_id, recipe_id, payload_json, date_bookmarked)
            VALUES (?, ?, ?, ?)
            """,
            (
                user_id,
                _key(bookmark.get("id")),
                json.dumps(dict(bookmark), ensure_ascii=False),
                bookmark.get("dateBookmarked") or _utc_now(),
            ),
        )


def delete_remote_bookmark(*, user_id: str, recipe_id: Any) -> None:
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "DELETE FROM bookmarks WHERE user_id = ? AND recipe_id = ?",
            (user_id, _key(recipe_id)),
        )


def list_remote_bookmarks(user_id: str) -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT payload_json FROM bookmarks WHERE user_id = ? ORDER BY date_bookmarked ASC",
            (user_id,),
        ).fetchall()
    return [json.loads(r["payload_json"]) for r in rows]


class BookmarkService:
    def __init__(self, user_id: Optional[str], local: Optional[LocalBookmarkStore] = None) -> None:
        self.user_id = user_id
        self.local = local or LocalBookmarkStore()

    def add(self, recipe: Mapping[str, Any]) -> Dict[str, Any]:
        if not self.user_id:
            return self.local.add(recipe)
        bookmark = _as_bookmark(recipe)
        put_remote_bookmark(user_id=self.user_id, bookmark=bookmark)
        self.local.add(bookmark)
        return bookmark

    def remove(self, recipe_id: Any) -> None:
        if self.user_id:
            delete_remote_bookmark(user_id=self.user_id, recipe_id=recipe_id)
        self.local.remove(recipe_id)

    def is_bookmarked(self, recipe_id: Any) -> bool:
        if not self.user_id:
            return self.local.contains(recipe_id)
        return get_remote_bookmark(user_id=self.user_id, recipe_id=recipe_id) is not None

    def list(self) -> List[Dict[str, Any]]:
        if not self.user_id:
            return self.local.list()
        try:
            bookmarks = list_remote_bookmarks(self.user_id)
        except sqlite3.Error as exc:
            logger.warning("Bookmark store unavailable, serving local copy: %s", exc)
            return self.local.list()
        self.local.replace_all(bookmarks)
        return bookmarks

    def sync_on_login(self, pending: Optional[Iterable[Mapping[str, Any]]] = None) -> int:
        """Upload local bookmarks missing remotely; returns how many were uploaded."""
        if not self.user_id:
            return 0
        uploaded = 0
        for item in (pending if pending is not None else self.local.list()):
            if item.get("id") is None:
                continue
            if get_remote_bookmark(user_id=self.user_id, recipe_id=item["id"]) is not None:
                continue
            put_remote_bookmark(user_id=self.user_id, bookmark=_as_bookmark(item))
            uploaded += 1
        if uploaded:
            logger.info("Synced %d local bookmarks for %s", uploaded, self.user_id)
        return uploaded


def user_cache_path(user_id: str) -> Path:
    return settings.data_root / "users" / user_id / "bookmarks.json"
