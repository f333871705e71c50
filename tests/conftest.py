"""
Shared fixtures and builders for the landscape tests.

Pure analytics tests use hand-built record dicts; query and API tests
seed a SQLite DB from data/commons.json using the same loader as the
seed CLI. No running server required.
"""
import json
import sqlite3
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Make backend importable
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from seed import load_dataset, read_dataset  # noqa: E402

DATA_DIR = Path(__file__).parent.parent / "data"
COMMONS_JSON = DATA_DIR / "commons.json"

# Reference "now" for commitment urgency in the sample dataset
FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


# --------------------------------------------------------------------------
# Record builders
# --------------------------------------------------------------------------

def make_person(pid, roles=(), location=""):
    return {
        "id":           pid,
        "person":       {"name": pid, "avatar_url": "", "bio": ""},
        "private_data": {"location": location},
        "roles":        [{"role_name": r, "description": "", "assigned_at": ""} for r in roles],
    }


def make_resource(rid, state="active", location="", conforms_to=None, custodian=None):
    return {
        "id":               rid,
        "conforms_to":      conforms_to,
        "custodian":        custodian,
        "current_location": location,
        "state":            state,
    }


def make_spec(sid, category):
    return {"id": sid, "name": sid, "category": category}


def make_commitment(cid, provider="p", receiver="r", due_date="2030-01-01T00:00:00Z"):
    return {
        "id":                      cid,
        "action":                  "Use",
        "provider":                provider,
        "receiver":                receiver,
        "resource_inventoried_as": None,
        "due_date":                due_date,
    }


def make_entity(entity_type, record):
    return {
        "id":       record["id"],
        "type":     entity_type,
        "data":     record,
        "position": {"x": 0, "y": 0, "z": 1, "proximity_score": 0},
        "state":    "available",
    }


def make_context(aid="agent_bob", role="Simple Member", location="Montreal",
                 perspective="role", capabilities=None):
    return {
        "id":           aid,
        "role":         role,
        "location":     location,
        "capabilities": capabilities or [],
        "perspective":  perspective,
    }


# --------------------------------------------------------------------------
# Fixtures
# --------------------------------------------------------------------------

@pytest.fixture
def commons_snapshot() -> dict:
    """The sample dataset as a snapshot dict (same shape the queries return)."""
    data = json.loads(COMMONS_JSON.read_text())
    return {
        "persons":                 data["persons"],
        "resource_specifications": data["resource_specifications"],
        "economic_resources":      data["economic_resources"],
        "commitments":             data["commitments"],
    }


@pytest.fixture
def seeded_conn():
    """In-memory DB seeded from data/commons.json."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    load_dataset(conn, read_dataset(COMMONS_JSON))
    yield conn
    conn.close()


@pytest.fixture
def seeded_data_dir(tmp_path, monkeypatch):
    """
    A throwaway data/ directory holding commons.db, wired into the backend.

    Patches every module-level DATA_DIR / CONFIG_DIR binding the routers read.
    """
    conn = sqlite3.connect(tmp_path / "commons.db")
    load_dataset(conn, read_dataset(COMMONS_JSON))
    conn.close()

    import db
    import routers.datasets
    monkeypatch.setattr(db, "DATA_DIR", tmp_path)
    monkeypatch.setattr(db, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(routers.datasets, "DATA_DIR", tmp_path)
    return tmp_path
