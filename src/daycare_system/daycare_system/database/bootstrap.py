from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Mapping

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

EXPECTED_TABLES = (
    "users",
    "classrooms",
    "children",
    "attendance_records",
    "invoice_sequence",
    "invoices",
    "invoice_line_items",
    "notifications",
    "medical_alerts",
    "activities",
    "activity_participants",
    "child_notes",
)

# role -> (full name, username, password, phone)
DEMO_ACCOUNTS: Mapping[str, tuple[str, str, str, str]] = {
    "admin": ("Admin Demo", "admin", "admin123", "+1 555 000 0001"),
    "employee": ("Teacher Demo", "teacher", "teacher123", "+1 555 000 0002"),
    "parent": ("Parent Demo", "parent", "parent123", "+1 555 000 0003"),
}


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes and '--' comments).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    lines = [ln for ln in sql.splitlines() if not ln.strip().startswith("--")]
    for ch in "\n".join(lines):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_sql_file(db_config: dict, *, path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    apply_sql_file(db_config, path=schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    apply_sql_file(db_config, path=seed_path)


def ensure_demo_users(db_config: dict) -> dict[str, int]:
    """Create (or reset) one account per role and give the teacher a classroom.

    Returns the user id of each demo account keyed by role.
    """

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(full_name: str, username: str, password: str, role: str, phone: str) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, password_hash=%s, role=%s, phone=%s, is_active=1
                    WHERE username=%s
                    """,
                    (full_name, password_hash, role, phone, username),
                )
                return int(existing["user_id"])
            cur.execute(
                """
                INSERT INTO users (full_name, username, password_hash, role, phone)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (full_name, username, password_hash, role, phone),
            )
            return int(cur.lastrowid)

        ids = {
            role: upsert_user(full_name, username, password, role, phone)
            for role, (full_name, username, password, phone) in DEMO_ACCOUNTS.items()
        }

        cur.execute(
            "UPDATE classrooms SET assigned_teacher_id=%s WHERE name=%s",
            (ids["employee"], "Sunflowers"),
        )

        conn.commit()
        return ids
    finally:
        conn.close()


def missing_tables(present: Iterable[str]) -> list[str]:
    names = {t.lower() for t in present}
    return [t for t in EXPECTED_TABLES if t not in names]


def describe_demo_accounts(ids: Mapping[str, int]) -> list[str]:
    """One line per seeded account, e.g. ``employee: teacher / teacher123 (id 2)``."""
    lines = []
    for role, (_, username, password, _) in DEMO_ACCOUNTS.items():
        if role in ids:
            lines.append(f"{role}: {username} / {password} (id {ids[role]})")
    return lines


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
