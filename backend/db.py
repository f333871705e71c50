"""
Database helpers shared across queries and routers.
No scoring or layout logic lives here — only I/O primitives.
"""
import json
import sqlite3
from pathlib import Path

from fastapi import HTTPException

DATA_DIR = Path(__file__).parent.parent / "data"
CONFIG_DIR = DATA_DIR

DEFAULT_LANDSCAPE_CONFIG = {
    "reference_city": "Montreal",
    "viewport_width": 1200,
    "entity_spacing": 80,
}


def row_to_dict(row) -> dict:
    return dict(row)


def get_db(dataset_id: str) -> sqlite3.Connection:
    db_path = DATA_DIR / f"{dataset_id}.db"
    if not db_path.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Dataset '{dataset_id}' not found. Run: python3 backend/seed.py data/{dataset_id}.json",
        )
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


# ── Landscape config ─────────────────────────────────────────────────────────

def landscape_config_path(dataset_id: str) -> Path:
    return CONFIG_DIR / f"{dataset_id}.landscape.json"


def read_landscape_config(dataset_id: str) -> dict:
    p = landscape_config_path(dataset_id)
    if p.exists():
        return {**DEFAULT_LANDSCAPE_CONFIG, **json.loads(p.read_text())}
    return dict(DEFAULT_LANDSCAPE_CONFIG)


def write_landscape_config(dataset_id: str, config: dict) -> None:
    landscape_config_path(dataset_id).write_text(json.dumps(config, indent=2))
