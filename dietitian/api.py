# -*- coding: utf-8 -*-
"""
Digital dietitian API

Meal plans (AI-generated and doctor-authored), nutrition summaries, doctor/patient
chat, bookmarks, meal logs, glucose readings and food facts.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .app_db import init_app_db
from .assistant.api import router as assistant_router
from .auth.api import router as auth_router
from .auth.security import get_current_user_from_request
from .bookmarks.api import router as bookmarks_router
from .chat.api import router as chat_router
from .foodfacts.api import router as foodfacts_router
from .health.api import router as health_router
from .meal_logs.api import router as meal_logs_router
from .patients.api import router as patients_router
from .plans.api import router as plans_router
from .recipes.api import router as recipes_router

logger = logging.getLogger(__name__)

_logging_configured = False


def configure_logging() -> None:
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _logging_configured = True


configure_logging()

app = FastAPI(
    title="Digital Dietitian",
    description="Meal plans, nutrition summaries, chat and health data for patients and their doctors",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.app_db_path)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.app_db_path)


_AUTH_EXEMPT_PREFIXES = (
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    if path.startswith("/api") and path != "/api/health" and not any(path.startswith(p) for p in _AUTH_EXEMPT_PREFIXES):
        try:
            user = get_current_user_from_request(request)
            request.state.user = user
        except HTTPException as exc:
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    return await call_next(request)


app.include_router(auth_router)
app.include_router(patients_router)
app.include_router(plans_router)
app.include_router(chat_router)
app.include_router(recipes_router)
app.include_router(bookmarks_router)
app.include_router(meal_logs_router)
app.include_router(health_router)
app.include_router(foodfacts_router)
app.include_router(assistant_router)


@app.get("/api/health")
def service_health():
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    host = os.environ.get("DIETITIAN_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("DIETITIAN_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("dietitian.api:app", host=host, port=port, reload=False)
