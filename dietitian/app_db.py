# -*- coding: utf-8 -*-
"""App database (profiles/plans/chat/bookmarks/meal logs) — SQLite helpers.

Each table stores whole JSON documents where the upstream document store did,
so the normalizer sees the same shapes the mobile client used to read.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL DEFAULT '',
                first_name TEXT NOT NULL DEFAULT '',
                last_name TEXT NOT NULL DEFAULT '',
                user_type TEXT NOT NULL DEFAULT 'patient',
                photo_url TEXT,
                specialization TEXT,
                assigned_doctor_id TEXT,
                current_meal_plan_id TEXT,
                last_meal_plan_update TEXT,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_users_type ON users(user_type);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS meal_plans (
                id TEXT PRIMARY KEY,
                patient_id TEXT,
                doctor_id TEXT,
                plan_type TEXT NOT NULL,
                status TEXT NOT NULL,
                payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_meal_plans_patient_status_created ON meal_plans(patient_id, status, created_at DESC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS doctor_patient_assignments (
                id TEXT PRIMARY KEY,
                doctor_id TEXT NOT NULL,
                patient_id TEXT NOT NULL,
                assigned_at TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                UNIQUE (doctor_id, patient_id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                sender_id TEXT NOT NULL,
                recipient_id TEXT NOT NULL,
                text TEXT,
                file_url TEXT,
                file_name TEXT,
                file_type TEXT,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_messages_pair_created ON messages(sender_id, recipient_id, created_at ASC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS bookmarks (
                user_id TEXT NOT NULL,
                recipe_id TEXT NOT NULL,
                payload_json TEXT NOT NULL,
                date_bookmarked TEXT NOT NULL,
                PRIMARY KEY (user_id, recipe_id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS meal_logs (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                meal_type TEXT NOT NULL,
                meal_json TEXT NOT NULL,
                photo_uri TEXT,
                date TEXT NOT NULL,
                logged_at TEXT NOT NULL,
                device_timestamp TEXT,
                logged_from TEXT NOT NULL DEFAULT 'mobile_app',
                status TEXT NOT NULL DEFAULT 'logged'
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_meal_logs_user_logged ON meal_logs(user_id, logged_at DESC);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
