"""
Agent relation neighbourhood — pure functions only.

Builds an undirected graph over every record in a snapshot, with edges
following the referential fields, and extracts the ego network around
one agent for the landscape's side panel.

Each collection has its own id space, so graph nodes are keyed by
(kind, id); ids are unwrapped again in agent_network's output.
"""
from __future__ import annotations

import networkx as nx

from .snapshot import person_by_id

# field -> kind of the record it points at
_RESOURCE_LINKS = {
    "custodian":   "person",
    "conforms_to": "specification",
}
_COMMITMENT_LINKS = {
    "provider":                "person",
    "receiver":                "person",
    "resource_inventoried_as": "resource",
}


def person_label(person: dict) -> str:
    return (person.get("person") or {}).get("name") or person["id"]


def build_relation_graph(snapshot: dict) -> nx.Graph:
    """
    snapshot — {persons, resource_specifications, economic_resources, commitments}
    Nodes are (kind, id) and carry kind + label; edges carry relation.
    Dangling references are skipped.
    """
    G = nx.Graph()
    for p in snapshot.get("persons", []):
        G.add_node(("person", p["id"]), kind="person", label=person_label(p))
    for s in snapshot.get("resource_specifications", []):
        G.add_node(("specification", s["id"]), kind="specification", label=s.get("name") or s["id"])
    for r in snapshot.get("economic_resources", []):
        G.add_node(("resource", r["id"]), kind="resource", label=r["id"], state=r.get("state"))
    for c in snapshot.get("commitments", []):
        G.add_node(("commitment", c["id"]), kind="commitment", label=c.get("action") or c["id"])

    def link(kind: str, record: dict, fields: dict[str, str]) -> None:
        for field, target_kind in fields.items():
            target = (target_kind, record.get(field))
            if target[1] and G.has_node(target):
                G.add_edge((kind, record["id"]), target, relation=field)

    for r in snapshot.get("economic_resources", []):
        link("resource", r, _RESOURCE_LINKS)
    for c in snapshot.get("commitments", []):
        link("commitment", c, _COMMITMENT_LINKS)
    return G


def agent_network(snapshot: dict, agent_id: str, depth: int = 2) -> dict | None:
    """
    Everything within `depth` hops of an agent.

    Returns None when the agent has no person record, else
    {center, nodes: [{id, kind, label, distance}],
     edges: [{from, from_kind, to, to_kind, relation}]}.
    Nodes are ordered by distance, then id, then kind.
    """
    if person_by_id(snapshot, agent_id) is None:
        return None

    center = ("person", agent_id)
    G = build_relation_graph(snapshot)
    ego = nx.ego_graph(G, center, radius=depth)
    distances = nx.single_source_shortest_path_length(ego, center)

    nodes = [
        {"id": n[1], **ego.nodes[n], "distance": distances[n]}
        for n in sorted(ego.nodes, key=lambda n: (distances[n], n[1], n[0]))
    ]
    edges = [
        {"from": u[1], "from_kind": u[0], "to": v[1], "to_kind": v[0], "relation": d.get("relation")}
        for u, v, d in sorted(ego.edges(data=True), key=lambda e: (e[0], e[1]))
    ]
    return {"center": agent_id, "nodes": nodes, "edges": edges}
