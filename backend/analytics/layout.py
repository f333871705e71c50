"""
Landscape layering and layout — pure functions only.

Buckets each entity into one of four depth layers by proximity score,
then lays every layer out as a single centred row inside that layer's
panel. Coordinates are relative to the layer container; y is always
the row centre (0).
"""
from __future__ import annotations

from .proximity import ProximityWeights, calculate_proximity

LAYER_LABELS = {
    1: "meso",       # candidates for the micro view
    2: "macro 1",
    3: "macro 2",
    4: "macro 3",    # background
}

# layer -> (panel width %, panel left margin %), matching the layer CSS
LAYER_GEOMETRY: dict[int, tuple[float, float]] = {
    1: (90, 5),
    2: (85, 7.5),
    3: (80, 10),
    4: (75, 12.5),
}

VIEWPORT_WIDTH = 1200
ENTITY_SPACING = 80


def assign_layer(proximity_score: float) -> int:
    """Map a score in [0, 1] to a depth layer, 1 nearest .. 4 farthest."""
    if proximity_score >= 0.8: return 1
    if proximity_score >= 0.6: return 2
    if proximity_score >= 0.4: return 3
    return 4


def layer_center(layer: int, viewport_width: float = VIEWPORT_WIDTH) -> float:
    """Horizontal centre of a layer's visible panel."""
    width_pct, margin_pct = LAYER_GEOMETRY[layer]
    panel_left  = viewport_width * margin_pct / 100
    panel_width = viewport_width * width_pct / 100
    return panel_left + panel_width / 2


def group_by_layer(entities: list[dict]) -> dict[int, list[dict]]:
    """Stable grouping on position.z; layers come back in ascending order."""
    groups: dict[int, list[dict]] = {}
    for entity in entities:
        groups.setdefault(entity["position"]["z"], []).append(entity)
    return dict(sorted(groups.items()))


def layout_row(
    layer_entities: list[dict],
    center: float,
    spacing: float = ENTITY_SPACING,
) -> None:
    """Place entities on one row centred on center. Mutates position.x / .y."""
    total_width = len(layer_entities) * spacing
    start_x = center - total_width / 2 + spacing / 2
    for index, entity in enumerate(layer_entities):
        entity["position"]["x"] = start_x + index * spacing
        entity["position"]["y"] = 0


def generate_entity_positions(
    entities: list[dict],
    agent_context: dict,
    snapshot: dict | None = None,
    config: dict | None = None,
    weights: ProximityWeights | None = None,
) -> list[dict]:
    """
    Score, layer and place every entity in one pass.

    entities      — landscape entity dicts in emission order
    agent_context — {id, role, location, capabilities, perspective}
    snapshot      — passed through to scoring for specification lookups
    config        — {reference_city, viewport_width, entity_spacing}
    Mutates each entity's position in place and returns the same list.
    """
    config = config or {}
    viewport_width = config.get("viewport_width", VIEWPORT_WIDTH)
    spacing        = config.get("entity_spacing", ENTITY_SPACING)

    for entity in entities:
        score = calculate_proximity(entity, agent_context, weights, snapshot, config)
        # z is only ever written together with the score that implies it
        entity["position"]["proximity_score"] = score
        entity["position"]["z"] = assign_layer(score)

    for layer, layer_entities in group_by_layer(entities).items():
        layout_row(layer_entities, layer_center(layer, viewport_width), spacing)

    return entities


def summarize_layers(entities: list[dict]) -> list[dict]:
    """Per-layer counts for the renderer's legend. Empty layers are omitted."""
    summary = []
    for layer, layer_entities in group_by_layer(entities).items():
        by_type: dict[str, int] = {}
        for e in layer_entities:
            by_type[e["type"]] = by_type.get(e["type"], 0) + 1
        summary.append({
            "layer":   layer,
            "label":   LAYER_LABELS[layer],
            "count":   len(layer_entities),
            "by_type": by_type,
        })
    return summary
