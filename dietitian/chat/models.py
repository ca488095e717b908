# -*- coding: utf-8 -*-
"""Chat — Pydantic models."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class ChatMessage(BaseModel):
    type: Literal["message"] = "message"
    id: str
    sender_id: str
    recipient_id: str
    text: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    created_at: str


class DateSeparator(BaseModel):
    type: Literal["separator"] = "separator"
    id: str
    date: int


class ConversationResponse(BaseModel):
    contact_id: str
    count: int
    items: list[Union[ChatMessage, DateSeparator]]


class MessageCreateRequest(BaseModel):
    text: Optional[str] = Field(default=None, max_length=10_000)
    # Attachments are uploaded elsewhere; only the resulting reference is stored here.
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None

    @model_validator(mode="after")
    def _require_content(self) -> "MessageCreateRequest":
        if not (self.text and self.text.strip()) and not self.file_url:
            raise ValueError("message needs text or an attachment")
        return self


class Contact(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    photo_url: Optional[str] = None
    user_type: str


class ContactListResponse(BaseModel):
    count: int
    items: list[Contact]
