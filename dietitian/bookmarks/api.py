# -*- coding: utf-8 -*-
"""Bookmark endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..auth.security import get_current_user
from .storage import BookmarkService, LocalBookmarkStore, user_cache_path

router = APIRouter(prefix="/api/bookmarks", tags=["Bookmarks"])


class Bookmark(BaseModel):
    id: Any
    title: Optional[str] = None
    image: Optional[str] = None
    calories: float = 0.0
    dateBookmarked: Optional[str] = None


class BookmarkStatus(BaseModel):
    recipe_id: str
    bookmarked: bool


class BookmarkSyncRequest(BaseModel):
    bookmarks: List[Dict[str, Any]] = Field(default_factory=list)


class BookmarkSyncResponse(BaseModel):
    uploaded: int
    bookmarks: List[Bookmark]


def _service(user: dict) -> BookmarkService:
    return BookmarkService(user["id"], LocalBookmarkStore(user_cache_path(user["id"])))


@router.get("", response_model=List[Bookmark], summary="List bookmarks")
def list_bookmarks(user: dict = Depends(get_current_user)):
    return _service(user).list()


@router.post("", response_model=Bookmark, summary="Bookmark a recipe")
def add_bookmark(recipe: Dict[str, Any], user: dict = Depends(get_current_user)):
    return _service(user).add(recipe)


@router.post("/sync", response_model=BookmarkSyncResponse, summary="Upload bookmarks saved while signed out")
def sync_bookmarks(request: BookmarkSyncRequest, user: dict = Depends(get_current_user)):
    service = _service(user)
    uploaded = service.sync_on_login(request.bookmarks)
    return BookmarkSyncResponse(uploaded=uploaded, bookmarks=service.list())


@router.get("/{recipe_id}", response_model=BookmarkStatus, summary="Is a recipe bookmarked")
def bookmark_status(recipe_id: str, user: dict = Depends(get_current_user)):
    return BookmarkStatus(recipe_id=recipe_id, bookmarked=_service(user).is_bookmarked(recipe_id))


@router.delete("/{recipe_id}", response_model=BookmarkStatus, summary="Remove a bookmark")
def remove_bookmark(recipe_id: str, user: dict = Depends(get_current_user)):
    _service(user).remove(recipe_id)
    return BookmarkStatus(recipe_id=recipe_id, bookmarked=False)
