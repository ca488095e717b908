# -*- coding: utf-8 -*-
"""Assistant chat endpoint."""

from __future__ import annotations

import logging
from typing import List, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..auth.security import get_current_user
from .client import UNAVAILABLE_ANSWER, AssistantUnavailableError, ask_assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["Assistant"])


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=8000)


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=4000)
    history: List[ChatTurn] = Field(default_factory=list)


class AskResponse(BaseModel):
    answer: str
    available: bool


@router.post("/ask", response_model=AskResponse, summary="Ask the nutrition assistant")
def ask(request: AskRequest, user: dict = Depends(get_current_user)):
    try:
        answer = ask_assistant(request.question, [t.model_dump() for t in request.history])
    except AssistantUnavailableError as exc:
        logger.info("Assistant unavailable for %s: %s", user["id"], exc)
        return AskResponse(answer=UNAVAILABLE_ANSWER, available=False)
    return AskResponse(answer=answer, available=True)
