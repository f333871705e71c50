"""
Record Store queries — DB I/O only.

Rows are reshaped into the same dict layout as the JSON dataset export
(person → {person, private_data, roles}) so the pure layer never sees
storage details. Emission order is insertion order (rowid), which the
landscape layout relies on.
"""
from __future__ import annotations

import json
import sqlite3

from db import row_to_dict

_PRIVATE_FIELDS = (
    "legal_name", "email", "phone", "address",
    "emergency_contact", "time_zone", "location",
)


def _person_from_row(row: dict, roles: list[dict]) -> dict:
    return {
        "id":     row["id"],
        "person": {
            "name":       row["name"],
            "avatar_url": row["avatar_url"],
            "bio":        row["bio"],
        },
        "private_data": {f: row[f] for f in _PRIVATE_FIELDS},
        "roles": roles,
    }


def _fetch_roles(conn: sqlite3.Connection, person_ids: list[str] | None = None) -> dict[str, list[dict]]:
    sql = "SELECT person_id, role_name, description, assigned_at FROM person_roles"
    params: tuple = ()
    if person_ids is not None:
        if not person_ids:
            return {}
        sql += f" WHERE person_id IN ({','.join('?' * len(person_ids))})"
        params = tuple(person_ids)
    sql += " ORDER BY person_id, position"

    roles: dict[str, list[dict]] = {}
    for r in conn.execute(sql, params).fetchall():
        roles.setdefault(r["person_id"], []).append({
            "role_name":   r["role_name"],
            "description": r["description"],
            "assigned_at": r["assigned_at"],
        })
    return roles


def fetch_persons(conn: sqlite3.Connection) -> list[dict]:
    rows = [row_to_dict(r) for r in conn.execute("SELECT * FROM persons ORDER BY rowid").fetchall()]
    roles = _fetch_roles(conn)
    return [_person_from_row(r, roles.get(r["id"], [])) for r in rows]


def fetch_person(conn: sqlite3.Connection, person_id: str) -> dict | None:
    row = conn.execute("SELECT * FROM persons WHERE id = ?", (person_id,)).fetchone()
    if row is None:
        return None
    roles = _fetch_roles(conn, [person_id])
    return _person_from_row(row_to_dict(row), roles.get(person_id, []))


def fetch_resource_specifications(conn: sqlite3.Connection) -> list[dict]:
    specs = []
    for r in conn.execute("SELECT * FROM resource_specifications ORDER BY rowid").fetchall():
        s = row_to_dict(r)
        s["tags"]             = json.loads(s["tags"] or "[]")
        s["governance_rules"] = json.loads(s["governance_rules"] or "[]")
        s["is_active"]        = bool(s["is_active"])
        specs.append(s)
    return specs


def fetch_economic_resources(conn: sqlite3.Connection) -> list[dict]:
    return [
        row_to_dict(r)
        for r in conn.execute("SELECT * FROM economic_resources ORDER BY rowid").fetchall()
    ]


def fetch_resources_by_custodian(conn: sqlite3.Connection, person_id: str) -> list[dict]:
    return [
        row_to_dict(r)
        for r in conn.execute(
            "SELECT * FROM economic_resources WHERE custodian = ? ORDER BY rowid",
            (person_id,),
        ).fetchall()
    ]


def fetch_commitments(conn: sqlite3.Connection) -> list[dict]:
    return [
        row_to_dict(r)
        for r in conn.execute("SELECT * FROM commitments ORDER BY rowid").fetchall()
    ]


def fetch_commitments_by_person(conn: sqlite3.Connection, person_id: str) -> list[dict]:
    """Commitments where the person is either provider or receiver."""
    return [
        row_to_dict(r)
        for r in conn.execute(
            "SELECT * FROM commitments WHERE provider = ? OR receiver = ? ORDER BY rowid",
            (person_id, person_id),
        ).fetchall()
    ]


def fetch_snapshot(conn: sqlite3.Connection) -> dict:
    """
    Collect every collection needed for one landscape pass.

    Returns:
        persons                  — with roles + private_data nested
        resource_specifications  — tags / governance_rules decoded
        economic_resources
        commitments
    """
    return {
        "persons":                 fetch_persons(conn),
        "resource_specifications": fetch_resource_specifications(conn),
        "economic_resources":      fetch_economic_resources(conn),
        "commitments":             fetch_commitments(conn),
    }
