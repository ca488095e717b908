# -*- coding: utf-8 -*-
"""Chat — doctor/patient messaging endpoints."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..auth.security import get_current_user, is_doctor
from ..auth.storage import get_user_by_id
from ..patients.storage import is_assigned, list_assigned_patients
from .merger import PRIMARY_SOURCE, SECONDARY_SOURCE, ConversationReducer, SubscriptionUpdate
from .models import (
    ChatMessage,
    Contact,
    ContactListResponse,
    ConversationResponse,
    DateSeparator,
    MessageCreateRequest,
)
from .storage import append_message, list_messages_between

router = APIRouter(prefix="/api/chat", tags=["Chat"])


def _contact(row: Dict[str, Any]) -> Contact:
    return Contact(
        id=row["id"],
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        email=row.get("email") or "",
        photo_url=row.get("photo_url"),
        user_type=row.get("user_type") or "patient",
    )


def _require_contact(user: Dict[str, Any], contact_id: str) -> Dict[str, Any]:
    contact = get_user_by_id(contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    if is_doctor(user):
        allowed = is_assigned(doctor_id=user["id"], patient_id=contact_id)
    else:
        allowed = user.get("assigned_doctor_id") == contact_id or is_assigned(
            doctor_id=contact_id, patient_id=user["id"]
        )
    if not allowed:
        raise HTTPException(status_code=403, detail="You can only message your doctor or assigned patients")
    return contact


@router.get("/contacts", response_model=ContactListResponse, summary="List chat contacts")
def list_contacts(user: dict = Depends(get_current_user)):
    if is_doctor(user):
        items = [_contact(p) for p in list_assigned_patients(user["id"])]
    else:
        doctor: Optional[Dict[str, Any]] = None
        if user.get("assigned_doctor_id"):
            doctor = get_user_by_id(user["assigned_doctor_id"])
        items = [_contact(doctor)] if doctor else []
    return ContactListResponse(count=len(items), items=items)


@router.get("/conversations/{contact_id}", response_model=ConversationResponse, summary="Get a conversation")
async def get_conversation(contact_id: str, user: dict = Depends(get_current_user)):
    _require_contact(user, contact_id)

    queue: asyncio.Queue = asyncio.Queue()
    # Primary (sent) first: its snapshot replaces the working list.
    await queue.put(
        SubscriptionUpdate(PRIMARY_SOURCE, list_messages_between(sender_id=user["id"], recipient_id=contact_id))
    )
    await queue.put(
        SubscriptionUpdate(SECONDARY_SOURCE, list_messages_between(sender_id=contact_id, recipient_id=user["id"]))
    )
    await queue.put(None)
    grouped = await ConversationReducer().consume(queue)

    items = [DateSeparator(**i) if i["type"] == "separator" else ChatMessage(**i) for i in grouped]
    return ConversationResponse(contact_id=contact_id, count=len(items), items=items)


@router.post("/conversations/{contact_id}/messages", response_model=ChatMessage, summary="Send a message")
def send_message(
    contact_id: str,
    request: MessageCreateRequest,
    user: dict = Depends(get_current_user),
):
    _require_contact(user, contact_id)
    message = append_message(
        sender_id=user["id"],
        recipient_id=contact_id,
        text=request.text.strip() if request.text else None,
        file_url=request.file_url,
        file_name=request.file_name,
        file_type=request.file_type,
    )
    return ChatMessage(**message)
