"""
Proximity (relevance) scoring — pure functions only.

Scores one landscape entity against one agent context. Five sub-factors
are blended with a weight schedule chosen by the context's perspective:

    score = w.role_relevance        * role_match
          + w.geographic_distance   * (1 - geo_distance)
          + w.interaction_frequency * interaction
          + w.temporal_urgency      * urgency
          + w.governance_access     * access

and clamped to [0, 1]. Perspectives also boost individual sub-factors
(see _apply_perspective_boosts). Nothing here reads the clock or a random
source, so identical inputs always give identical scores.
"""
from __future__ import annotations

from typing import NamedTuple

from .snapshot import person_location, role_names, spec_for_resource


class ProximityWeights(NamedTuple):
    role_relevance:        float
    geographic_distance:   float
    interaction_frequency: float
    temporal_urgency:      float
    governance_access:     float


DEFAULT_WEIGHTS = ProximityWeights(
    role_relevance=0.4,
    geographic_distance=0.2,
    interaction_frequency=0.2,
    temporal_urgency=0.1,
    governance_access=0.1,
)

# Each perspective replaces the whole schedule; nothing is blended.
PERSPECTIVE_WEIGHTS: dict[str, ProximityWeights] = {
    "role":       ProximityWeights(0.6, 0.1, 0.1, 0.1, 0.1),
    "resource":   ProximityWeights(0.2, 0.2, 0.2, 0.3, 0.1),
    "agent":      ProximityWeights(0.3, 0.1, 0.4, 0.1, 0.1),
    "geographic": ProximityWeights(0.1, 0.6, 0.1, 0.1, 0.1),
}

PERSPECTIVES = tuple(PERSPECTIVE_WEIGHTS)

REFERENCE_CITY = "Montreal"

_RESOURCE_URGENCY = {
    "maintenance": 0.8,
    "active":      0.3,
    "inactive":    0.1,
}


def weights_for_perspective(
    perspective: str | None,
    weights: ProximityWeights | None = None,
) -> ProximityWeights:
    """Perspective schedule if known, else the caller's weights (or defaults)."""
    return PERSPECTIVE_WEIGHTS.get(perspective, weights or DEFAULT_WEIGHTS)


# ── Sub-factors ───────────────────────────────────────────────────────────────

def person_role_match(person: dict, agent_context: dict) -> float:
    person_roles = [r.lower() for r in role_names(person)]
    context_role = (agent_context.get("role") or "").lower()

    if context_role in person_roles:
        return 1.0
    if "resource steward" in person_roles and "maintenance" in context_role:
        return 0.8
    if "resource coordinator" in person_roles and "logistics" in context_role:
        return 0.8
    return 0.3


def resource_role_match(resource: dict, agent_context: dict, snapshot: dict | None = None) -> float:
    context_role = (agent_context.get("role") or "").lower()
    state = resource.get("state")

    if state == "maintenance" and "steward" in context_role:
        return 0.9
    if state == "active" and "coordinator" in context_role:
        return 0.7

    spec = spec_for_resource(snapshot, resource) if snapshot else None
    if spec:
        category = spec.get("category")
        if category == "workshop_tools" and "steward" in context_role:
            return 0.8
        if category == "transportation" and "coordinator" in context_role:
            return 0.8
    return 0.4


def role_match(entity: dict, agent_context: dict, snapshot: dict | None = None) -> float:
    if entity["type"] == "person":
        return person_role_match(entity["data"], agent_context)
    if entity["type"] == "resource":
        return resource_role_match(entity["data"], agent_context, snapshot)
    # Commitments carry no role signal
    return 0.0


def geographic_distance(entity: dict, agent_context: dict, reference_city: str = REFERENCE_CITY) -> float:
    """Coarse distance in [0, 1]; lower is closer. String equality, not coordinates."""
    if entity["type"] == "person":
        same_place = person_location(entity["data"]) == agent_context.get("location")
        return 0.1 if same_place else 0.6
    if entity["type"] == "resource":
        current = entity["data"].get("current_location") or ""
        return 0.2 if reference_city in current else 0.8
    return 0.5


def interaction_frequency(entity_id: str) -> float:
    """Stable stand-in for interaction history, in [0.25, 0.75)."""
    id_hash = sum(ord(ch) for ch in entity_id)
    return (id_hash % 50) / 100 + 0.25


def temporal_urgency(entity: dict) -> float:
    if entity["type"] == "resource":
        return _RESOURCE_URGENCY.get(entity["data"].get("state"), 0.2)
    return 0.2


def governance_access(agent_context: dict) -> float:
    role = agent_context.get("role") or ""
    if "Founder" in role or "Coordinator" in role:
        return 1.0
    if "Steward" in role:
        return 0.8
    return 0.6


# ── Composite ─────────────────────────────────────────────────────────────────

def _apply_perspective_boosts(factors: dict, entity_type: str, perspective: str | None) -> dict:
    """
    agent      — people and interaction history pull closer
    resource   — resources and urgency pull closer
    geographic — distance penalty softened before inversion
    """
    if perspective == "agent":
        if entity_type == "person":
            factors["role_match"] *= 1.5
        factors["interaction"] = min(1.0, factors["interaction"] * 1.3)
    elif perspective == "resource":
        if entity_type == "resource":
            factors["role_match"] *= 1.5
        factors["urgency"] = min(1.0, factors["urgency"] * 1.3)
    elif perspective == "geographic":
        factors["geo_distance"] *= 0.7
    return factors


def score_breakdown(
    entity: dict,
    agent_context: dict,
    weights: ProximityWeights | None = None,
    snapshot: dict | None = None,
    config: dict | None = None,
) -> dict:
    """
    Full scoring trace for one entity.

    entity        — landscape entity dict: {id, type, data, ...}
    agent_context — {id, role, location, capabilities, perspective}
    weights       — used only when the perspective has no schedule of its own
    snapshot      — resolves a resource's specification; optional
    config        — {reference_city}; optional
    Returns {score, factors, weights}.
    """
    perspective    = agent_context.get("perspective")
    reference_city = (config or {}).get("reference_city", REFERENCE_CITY)
    w = weights_for_perspective(perspective, weights)

    factors = {
        "role_match":   role_match(entity, agent_context, snapshot),
        "geo_distance": geographic_distance(entity, agent_context, reference_city),
        "interaction":  interaction_frequency(entity["id"]),
        "urgency":      temporal_urgency(entity),
        "access":       governance_access(agent_context),
    }
    factors = _apply_perspective_boosts(factors, entity["type"], perspective)

    raw = (
        w.role_relevance        * factors["role_match"]
        + w.geographic_distance   * (1 - factors["geo_distance"])
        + w.interaction_frequency * factors["interaction"]
        + w.temporal_urgency      * factors["urgency"]
        + w.governance_access     * factors["access"]
    )

    return {
        "score":   min(1.0, max(0.0, raw)),
        "factors": factors,
        "weights": w._asdict(),
    }


def calculate_proximity(
    entity: dict,
    agent_context: dict,
    weights: ProximityWeights | None = None,
    snapshot: dict | None = None,
    config: dict | None = None,
) -> float:
    """Relevance of entity to agent_context, in [0, 1]."""
    return score_breakdown(entity, agent_context, weights, snapshot, config)["score"]
