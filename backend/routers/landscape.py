import logging
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from db import get_db, read_landscape_config, write_landscape_config
from queries.records import (
    fetch_commitments_by_person,
    fetch_person,
    fetch_resources_by_custodian,
    fetch_snapshot,
)
from analytics.assembler import AgentNotFoundError, build_agent_context, create_landscape_entities
from analytics.layout import LAYER_LABELS, summarize_layers
from analytics.network import agent_network
from analytics.proximity import score_breakdown
from analytics.snapshot import person_by_id, resource_by_id

logger = logging.getLogger(__name__)

router = APIRouter()

Perspective = Literal["role", "resource", "agent", "geographic"]


class AgentContext(BaseModel):
    id: str
    role: str = "Simple Member"
    location: str = ""
    capabilities: list[str] = Field(default_factory=list)
    perspective: Perspective = "role"


def _load(dataset_id: str) -> tuple[dict, dict]:
    conn     = get_db(dataset_id)
    snapshot = fetch_snapshot(conn)
    conn.close()
    return snapshot, read_landscape_config(dataset_id)


def _context_or_404(snapshot: dict, agent_id: str, perspective: Optional[str]) -> dict:
    try:
        return build_agent_context(snapshot, agent_id, perspective)
    except AgentNotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))


def _landscape(snapshot: dict, context: dict, config: dict) -> dict:
    entities = create_landscape_entities(snapshot, context, config=config)
    logger.info("landscape for %s (%s): %d entities",
                context["id"], context["perspective"], len(entities))
    return {
        "agent_context": context,
        "perspective":   context["perspective"],
        "entities":      entities,
        "layers":        summarize_layers(entities),
        "layer_labels":  LAYER_LABELS,
    }


@router.get("/api/datasets/{dataset_id}/agents/{agent_id}")
def agent_panel(dataset_id: str, agent_id: str):
    conn        = get_db(dataset_id)
    person      = fetch_person(conn, agent_id)
    custodian   = fetch_resources_by_custodian(conn, agent_id)
    commitments = fetch_commitments_by_person(conn, agent_id)
    conn.close()
    if person is None:
        raise HTTPException(status_code=404, detail=f"Agent with id {agent_id} not found")
    return {"agent": person, "custodian_of": custodian, "commitments": commitments}


@router.get("/api/datasets/{dataset_id}/agents/{agent_id}/context")
def agent_context(dataset_id: str, agent_id: str, perspective: Optional[Perspective] = None):
    snapshot, _ = _load(dataset_id)
    return _context_or_404(snapshot, agent_id, perspective)


@router.post("/api/datasets/{dataset_id}/landscape")
def landscape(dataset_id: str, ctx: AgentContext):
    snapshot, config = _load(dataset_id)
    return _landscape(snapshot, ctx.model_dump(), config)


@router.get("/api/datasets/{dataset_id}/agents/{agent_id}/landscape")
def agent_landscape(dataset_id: str, agent_id: str, perspective: Perspective = "role"):
    snapshot, config = _load(dataset_id)
    context = _context_or_404(snapshot, agent_id, perspective)
    return _landscape(snapshot, context, config)


@router.get("/api/datasets/{dataset_id}/entities/{entity_id}/proximity")
def entity_proximity(
    dataset_id: str,
    entity_id: str,
    agent_id: str = Query(...),
    perspective: Perspective = "role",
):
    snapshot, config = _load(dataset_id)
    context = _context_or_404(snapshot, agent_id, perspective)

    commitment = next((c for c in snapshot["commitments"] if c["id"] == entity_id), None)
    candidates = [
        ("person",     person_by_id(snapshot, entity_id)),
        ("resource",   resource_by_id(snapshot, entity_id)),
        ("commitment", commitment),
    ]
    entity_type, record = next(((t, r) for t, r in candidates if r is not None), (None, None))
    if record is None:
        raise HTTPException(status_code=404, detail=f"Entity not found: {entity_id}")

    entity = {"id": entity_id, "type": entity_type, "data": record}
    return {
        "entity_id":     entity_id,
        "type":          entity_type,
        "agent_context": context,
        **score_breakdown(entity, context, snapshot=snapshot, config=config),
    }


@router.get("/api/datasets/{dataset_id}/agents/{agent_id}/network")
def network(dataset_id: str, agent_id: str, depth: int = Query(2, ge=1, le=4)):
    snapshot, _ = _load(dataset_id)
    result = agent_network(snapshot, agent_id, depth)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Agent with id {agent_id} not found")
    return result


# ── Per-dataset layout config ────────────────────────────────────────────────

class LandscapeConfigUpdate(BaseModel):
    reference_city: Optional[str]   = None
    viewport_width: Optional[float] = Field(None, gt=0)
    entity_spacing: Optional[float] = Field(None, gt=0)


@router.get("/api/datasets/{dataset_id}/landscape/config")
def get_landscape_config(dataset_id: str):
    get_db(dataset_id).close()
    return read_landscape_config(dataset_id)


@router.post("/api/datasets/{dataset_id}/landscape/config")
def update_landscape_config(dataset_id: str, req: LandscapeConfigUpdate):
    get_db(dataset_id).close()
    config = {**read_landscape_config(dataset_id), **req.model_dump(exclude_none=True)}
    write_landscape_config(dataset_id, config)
    logger.info("landscape config for %s updated: %s", dataset_id, config)
    return {"ok": True, "config": config}
