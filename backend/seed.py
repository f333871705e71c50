"""
Commons Landscape seed pass.

Imports a JSON dataset export (persons, resource specifications, economic
resources, commitments) into a SQLite DB that the API serves from.
Re-running replaces the previous contents of the DB.

Usage:
    python3 seed.py data/commons.json
    python3 seed.py data/commons.json --out data/other.db
    python3 seed.py --all            # seed every *.json dataset in data/

JSON shape:
    {
      "persons": [{id, person: {name, avatar_url, bio},
                   private_data: {..., location}, roles: [{role_name, ...}]}],
      "resource_specifications": [{id, name, category, tags, ...}],
      "economic_resources": [{id, conforms_to, custodian, state, ...}],
      "commitments": [{id, action, provider, receiver, due_date, ...}]
    }
"""
from __future__ import annotations

import argparse
import json
import sqlite3
import time
from pathlib import Path

DATA_DIR = Path(__file__).parent.parent / "data"

COLLECTIONS = (
    "persons",
    "resource_specifications",
    "economic_resources",
    "commitments",
)

DDL = """
CREATE TABLE IF NOT EXISTS persons (
    id                TEXT PRIMARY KEY,
    name              TEXT,
    avatar_url        TEXT,
    bio               TEXT,
    legal_name        TEXT,
    email             TEXT,
    phone             TEXT,
    address           TEXT,
    emergency_contact TEXT,
    time_zone         TEXT,
    location          TEXT
);
CREATE TABLE IF NOT EXISTS person_roles (
    person_id   TEXT,
    position    INTEGER,   -- preserves assignment order
    role_name   TEXT,
    description TEXT,
    assigned_at TEXT
);
CREATE TABLE IF NOT EXISTS resource_specifications (
    id               TEXT PRIMARY KEY,
    name             TEXT,
    description      TEXT,
    category         TEXT,
    image_url        TEXT,
    tags             TEXT,      -- JSON list
    governance_rules TEXT,      -- JSON list
    created_by       TEXT,
    created_at       TEXT,
    is_active        INTEGER    -- bool
);
CREATE TABLE IF NOT EXISTS economic_resources (
    id               TEXT PRIMARY KEY,
    conforms_to      TEXT,
    quantity         REAL,
    unit             TEXT,
    custodian        TEXT,
    created_by       TEXT,
    created_at       TEXT,
    current_location TEXT,
    state            TEXT
);
CREATE TABLE IF NOT EXISTS commitments (
    id                      TEXT PRIMARY KEY,
    action                  TEXT,
    provider                TEXT,
    receiver                TEXT,
    resource_inventoried_as TEXT,
    due_date                TEXT,
    note                    TEXT,
    committed_at            TEXT
);
"""


def read_dataset(json_path: Path) -> dict:
    """Parse and shape-check a dataset export."""
    try:
        data = json.loads(Path(json_path).read_text())
    except json.JSONDecodeError as ex:
        raise ValueError(f"Failed to parse dataset {json_path}: {ex}") from ex
    if not isinstance(data, dict):
        raise ValueError(f"Dataset root must be an object: {json_path}")
    missing = [c for c in COLLECTIONS if not isinstance(data.get(c), list)]
    if missing:
        raise ValueError(f"Dataset {json_path} is missing collections: {', '.join(missing)}")
    return data


def load_dataset(conn: sqlite3.Connection, data: dict) -> dict[str, int]:
    """
    Write a parsed dataset into conn, replacing existing rows.

    Returns the row count written per collection.
    """
    conn.executescript(DDL)
    for table in ("persons", "person_roles", "resource_specifications",
                  "economic_resources", "commitments"):
        conn.execute(f"DELETE FROM {table}")

    person_rows, role_rows = [], []
    for p in data["persons"]:
        profile = p.get("person") or {}
        private = p.get("private_data") or {}
        person_rows.append((
            p["id"],
            profile.get("name"),
            profile.get("avatar_url"),
            profile.get("bio"),
            private.get("legal_name"),
            private.get("email"),
            private.get("phone"),
            private.get("address"),
            private.get("emergency_contact"),
            private.get("time_zone"),
            private.get("location"),
        ))
        for i, role in enumerate(p.get("roles") or []):
            role_rows.append((
                p["id"], i, role.get("role_name"),
                role.get("description"), role.get("assigned_at"),
            ))

    spec_rows = [
        (
            s["id"], s.get("name"), s.get("description"), s.get("category"),
            s.get("image_url"),
            json.dumps(s.get("tags") or []),
            json.dumps(s.get("governance_rules") or []),
            s.get("created_by"), s.get("created_at"),
            int(bool(s.get("is_active", True))),
        )
        for s in data["resource_specifications"]
    ]
    resource_rows = [
        (
            r["id"], r.get("conforms_to"), r.get("quantity"), r.get("unit"),
            r.get("custodian"), r.get("created_by"), r.get("created_at"),
            r.get("current_location"), r.get("state"),
        )
        for r in data["economic_resources"]
    ]
    commitment_rows = [
        (
            c["id"], c.get("action"), c.get("provider"), c.get("receiver"),
            c.get("resource_inventoried_as"), c.get("due_date"),
            c.get("note"), c.get("committed_at"),
        )
        for c in data["commitments"]
    ]

    conn.executemany("INSERT INTO persons VALUES (?,?,?,?,?,?,?,?,?,?,?)", person_rows)
    conn.executemany("INSERT INTO person_roles VALUES (?,?,?,?,?)", role_rows)
    conn.executemany("INSERT INTO resource_specifications VALUES (?,?,?,?,?,?,?,?,?,?)", spec_rows)
    conn.executemany("INSERT INTO economic_resources VALUES (?,?,?,?,?,?,?,?,?)", resource_rows)
    conn.executemany("INSERT INTO commitments VALUES (?,?,?,?,?,?,?,?)", commitment_rows)
    conn.commit()

    return {
        "persons":                 len(person_rows),
        "resource_specifications": len(spec_rows),
        "economic_resources":      len(resource_rows),
        "commitments":             len(commitment_rows),
    }


def seed(json_path: Path, db_path: Path | None = None, verbose: bool = True) -> Path:
    """Seed ``{stem}.db`` next to the JSON export (or db_path) and return its path."""
    t0 = time.time()
    json_path = Path(json_path)
    out_path = Path(db_path) if db_path else json_path.with_suffix(".db")

    if verbose:
        print(f"Seeding {json_path.name} → {out_path.name} ...", flush=True)

    data = read_dataset(json_path)
    conn = sqlite3.connect(out_path)
    try:
        counts = load_dataset(conn, data)
    finally:
        conn.close()

    if verbose:
        for name, n in counts.items():
            print(f"  {name}: {n}", flush=True)
        print(f"  Done in {round(time.time()-t0,2)}s\n")

    return out_path


# ── CLI ───────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a Commons Landscape dataset DB from JSON.")
    parser.add_argument("json", nargs="?", help="Path to dataset .json file")
    parser.add_argument("--out", help="Output .db path (default: alongside the JSON)")
    parser.add_argument("--all", action="store_true", help="Seed every *.json dataset in data/")
    args = parser.parse_args()

    if args.all:
        # Sidecar configs are not datasets
        exports = sorted(p for p in DATA_DIR.glob("*.json") if ".landscape" not in p.name)
        print(f"Seeding {len(exports)} datasets in {DATA_DIR}/\n")
        for export in exports:
            try:
                seed(export)
            except (OSError, ValueError, sqlite3.Error) as ex:
                print(f"  ERROR {export.name}: {ex}")
    elif args.json:
        seed(Path(args.json), Path(args.out) if args.out else None)
    else:
        parser.print_help()
