# -*- coding: utf-8 -*-
"""Auth — bearer token verification + FastAPI helpers.

Tokens are minted by the upstream identity provider (HS256, `sub` = user id).
This module only verifies them and loads the mirrored profile.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from ..config import settings
from .storage import get_user_by_id

_HEADER = {"alg": "HS256", "typ": "JWT"}


class TokenError(ValueError):
    pass


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _segment(obj: Dict[str, Any]) -> str:
    return _b64(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _signature(head: str, body: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), f"{head}.{body}".encode("ascii"), hashlib.sha256).digest()


def encode_claims(claims: Dict[str, Any], secret: str) -> str:
    head, body = _segment(_HEADER), _segment(claims)
    return ".".join((head, body, _b64(_signature(head, body, secret))))


def verify_claims(token: str, secret: str) -> Dict[str, Any]:
    try:
        head, body, sig = token.split(".")
    except ValueError as exc:
        raise TokenError("token must have three segments") from exc
    if not hmac.compare_digest(_signature(head, body, secret), _unb64(sig)):
        raise TokenError("signature mismatch")
    claims = json.loads(_unb64(body))
    if not isinstance(claims, dict):
        raise TokenError("claims are not an object")
    return claims


def create_access_token(*, user_id: str, ttl_days: Optional[int] = None) -> str:
    issued = datetime.now(timezone.utc)
    days = settings.token_ttl_days if ttl_days is None else ttl_days
    claims = {
        "sub": user_id,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(days=int(days))).timestamp()),
    }
    return encode_claims(claims, settings.jwt_secret)


def decode_token(token: str) -> Dict[str, Any]:
    # binascii/json/unicode decode errors are all ValueError subclasses.
    try:
        claims = verify_claims(token, settings.jwt_secret)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    expires = claims.get("exp")
    if expires and int(expires) < int(datetime.now(timezone.utc).timestamp()):
        raise HTTPException(status_code=401, detail="Token expired")
    return claims


def get_token_from_request(request: Request) -> Optional[str]:
    scheme, _, token = (request.headers.get("authorization") or "").partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    cached = getattr(request.state, "user", None)
    if cached:
        return cached

    token = get_token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = str(decode_token(token).get("sub") or "")
    profile = get_user_by_id(user_id) if user_id else None
    if not profile:
        raise HTTPException(status_code=401, detail="Unknown user")

    request.state.user = profile
    return profile


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user


def is_doctor(user: Dict[str, Any]) -> bool:
    return (user.get("user_type") or "patient") == "doctor"


def require_doctor(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if not is_doctor(user):
        raise HTTPException(status_code=403, detail="Only doctors can perform this action")
    return user
