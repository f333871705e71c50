"""
Dataset list and overview queries — DB I/O only.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

from db import row_to_dict

_COUNTED_TABLES = (
    "persons",
    "resource_specifications",
    "economic_resources",
    "commitments",
)


def _counts(conn: sqlite3.Connection) -> dict[str, int]:
    return {
        t: conn.execute(f"SELECT COUNT(*) as n FROM {t}").fetchone()["n"]
        for t in _COUNTED_TABLES
    }


def fetch_dataset_list(data_dir: Path) -> list[dict]:
    """Scan data_dir for seeded .db files and return basic stats for each."""
    datasets = []
    for db_file in sorted(data_dir.glob("*.db")):
        conn = sqlite3.connect(db_file)
        conn.row_factory = sqlite3.Row
        try:
            counts = _counts(conn)
        except sqlite3.Error:
            # Not a seeded landscape DB
            continue
        finally:
            conn.close()
        datasets.append({
            "id":      db_file.stem,
            "name":    db_file.stem,
            **counts,
            "db_path": str(db_file),
        })
    return datasets


def fetch_dataset_overview(conn: sqlite3.Connection) -> dict:
    """Aggregate stats for a single dataset overview page."""
    cur = conn.cursor()

    resource_states = {
        r["state"]: r["cnt"]
        for r in cur.execute(
            "SELECT state, COUNT(*) as cnt FROM economic_resources GROUP BY state"
        ).fetchall()
    }
    top_roles = [
        row_to_dict(r) for r in cur.execute(
            """
            SELECT role_name, COUNT(DISTINCT person_id) as cnt FROM person_roles
            GROUP BY role_name ORDER BY cnt DESC, role_name LIMIT 10
            """
        ).fetchall()
    ]
    categories = {
        r["category"]: r["cnt"]
        for r in cur.execute(
            """
            SELECT s.category, COUNT(*) as cnt
            FROM economic_resources r
            JOIN resource_specifications s ON r.conforms_to = s.id
            GROUP BY s.category
            """
        ).fetchall()
    }
    locations = [
        row_to_dict(r) for r in cur.execute(
            """
            SELECT location, COUNT(*) as cnt FROM persons
            WHERE location IS NOT NULL
            GROUP BY location ORDER BY cnt DESC, location
            """
        ).fetchall()
    ]

    return {
        **_counts(conn),
        "resource_states":     resource_states,
        "resource_categories": categories,
        "top_roles":           top_roles,
        "person_locations":    locations,
    }
