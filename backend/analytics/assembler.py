"""
Landscape entity assembly — pure functions, policy-table pattern.

Turns a record snapshot into landscape entities for one agent context:

  1. wrap every record with an initial visual state
     (perspective-independent)
  2. select + order entities by the perspective's SELECTION_POLICIES entry
  3. hand the result to layout.generate_entity_positions

To change what a perspective shows: edit its policy row. A row is an
ordered list of (entity_type, predicate-or-None); predicates receive
(record, snapshot, agent_context) and return bool.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, Optional

from .layout import generate_entity_positions
from .snapshot import person_by_id, person_location, role_names

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "Simple Member"
DEFAULT_PERSPECTIVE = "role"

_RESOURCE_STATES = {
    "active":      "available",
    "maintenance": "needs_attention",
    "inactive":    "dormant",
    "archived":    "available",
}

_COLLECTIONS = {
    "person":     "persons",
    "resource":   "economic_resources",
    "commitment": "commitments",
}


class AgentNotFoundError(LookupError):
    """No person record exists for the requested agent id."""

    def __init__(self, agent_id: str):
        super().__init__(f"Agent with id {agent_id} not found")
        self.agent_id = agent_id


# ── Initial states ────────────────────────────────────────────────────────────

def person_state(person: dict, agent_context: dict) -> str:
    if person["id"] == agent_context.get("id"):
        return "in_use"
    if any("Founder" in r or "Coordinator" in r for r in role_names(person)):
        return "available"
    return "dormant"


def resource_state(resource: dict) -> str:
    return _RESOURCE_STATES.get(resource.get("state"), "available")


def _as_utc(moment: datetime) -> datetime:
    """Naive datetimes are read as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat only learned the Z suffix in 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(value))


def days_until_due(due_date: str, now: datetime) -> int:
    """ceil((due - now) / 1 day); negative means overdue."""
    delta = _parse_timestamp(due_date) - _as_utc(now)
    return math.ceil(delta.total_seconds() / 86400)


def commitment_state(commitment: dict, now: datetime) -> str:
    due_date = commitment.get("due_date")
    try:
        if not isinstance(due_date, str):
            raise ValueError(due_date)
        days = days_until_due(due_date, now)
    except ValueError:
        logger.debug("commitment %s has unparseable due_date %r",
                     commitment.get("id"), due_date)
        return "available"
    if days < 0:  return "critical"          # overdue
    if days <= 2: return "needs_attention"   # due soon
    if days <= 7: return "pending"
    return "available"


def make_entity(entity_type: str, record: dict, state: str) -> dict:
    return {
        "id":       record["id"],
        "type":     entity_type,
        "data":     record,
        "position": {"x": 0, "y": 0, "z": 1, "proximity_score": 0},
        "state":    state,
    }


def build_entities(snapshot: dict, agent_context: dict, now: datetime) -> dict[str, list[dict]]:
    """Every record wrapped as an entity, keyed by entity type, in store order."""
    return {
        "person": [
            make_entity("person", p, person_state(p, agent_context))
            for p in snapshot.get("persons", [])
        ],
        "resource": [
            make_entity("resource", r, resource_state(r))
            for r in snapshot.get("economic_resources", [])
        ],
        "commitment": [
            make_entity("commitment", c, commitment_state(c, now))
            for c in snapshot.get("commitments", [])
        ],
    }


# ── Selection policies ────────────────────────────────────────────────────────

Predicate = Callable[[dict, dict, dict], bool]


def _is_steward_or_coordinator(person: dict, snapshot: dict, agent_context: dict) -> bool:
    names = [r.lower() for r in role_names(person)]
    return any("steward" in r or "coordinator" in r for r in names)


def _is_active_resource(resource: dict, snapshot: dict, agent_context: dict) -> bool:
    return resource.get("state") == "active"


def _provider_is_colocated(commitment: dict, snapshot: dict, agent_context: dict) -> bool:
    provider = person_by_id(snapshot, commitment.get("provider"))
    if provider is None:
        logger.debug("commitment %s dropped: provider %r not found",
                     commitment.get("id"), commitment.get("provider"))
        return False
    return person_location(provider) == agent_context.get("location")


SELECTION_POLICIES: dict[str, list[tuple[str, Optional[Predicate]]]] = {
    "role": [
        ("person",     None),
        ("resource",   None),
        ("commitment", None),
    ],
    "resource": [
        ("resource",   None),
        ("commitment", None),
        ("person",     _is_steward_or_coordinator),
    ],
    "agent": [
        ("person",     None),
        ("commitment", None),
        ("resource",   _is_active_resource),
    ],
    "geographic": [
        ("person",     None),
        ("resource",   None),
        ("commitment", _provider_is_colocated),
    ],
}


def select_entities(
    entities: dict[str, list[dict]],
    snapshot: dict,
    agent_context: dict,
) -> list[dict]:
    """Apply the perspective's policy row; unknown perspectives use the role row."""
    policy = SELECTION_POLICIES.get(
        agent_context.get("perspective"), SELECTION_POLICIES[DEFAULT_PERSPECTIVE]
    )
    selected = []
    for entity_type, predicate in policy:
        for entity in entities.get(entity_type, []):
            if predicate is None or predicate(entity["data"], snapshot, agent_context):
                selected.append(entity)
    return selected


# ── Entry points ──────────────────────────────────────────────────────────────

def create_landscape_entities(
    snapshot: dict,
    agent_context: dict,
    now: datetime | None = None,
    config: dict | None = None,
) -> list[dict]:
    """
    Build the positioned entity list for one landscape pass.

    snapshot      — {persons, resource_specifications, economic_resources, commitments}
    agent_context — {id, role, location, capabilities, perspective}
    now           — reference time for commitment urgency (default: current UTC)
    config        — layout/scoring overrides, see db.read_landscape_config
    """
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    entities = build_entities(snapshot, agent_context, now)
    selected = select_entities(entities, snapshot, agent_context)
    logger.debug(
        "assembled %d/%d entities for %s (%s perspective)",
        len(selected), sum(len(v) for v in entities.values()),
        agent_context.get("id"), agent_context.get("perspective"),
    )
    return generate_entity_positions(selected, agent_context, snapshot, config)


def build_agent_context(snapshot: dict, agent_id: str, perspective: str | None = None) -> dict:
    """
    Derive an agent context from the agent's person record.

    Raises AgentNotFoundError when no person has agent_id.
    """
    person = person_by_id(snapshot, agent_id)
    if person is None:
        raise AgentNotFoundError(agent_id)

    names = role_names(person)
    return {
        "id":           agent_id,
        "role":         names[0] if names and names[0] else DEFAULT_ROLE,
        "location":     person_location(person),
        "capabilities": names,
        "perspective":  perspective or DEFAULT_PERSPECTIVE,
    }
