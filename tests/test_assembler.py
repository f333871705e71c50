"""
Unit tests for analytics/assembler.py — pure functions only, no DB required.

Selection tests run against the sample dataset (data/commons.json):
  persons      alice (Founder, Resource Coordinator; Montreal)
               bob   (Simple Member; Montreal)
               carol (Resource Steward; Ottawa)
               dave  (no roles; Quebec City)
  resources    drill_1 maintenance, bike_1 active, projector_1 inactive, drill_2 archived
  commitments  1 alice→bob, 2 carol→alice, 3 dave→carol, 4 agent_ghost (unknown)→bob
"""
from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import FIXED_NOW, make_commitment, make_context, make_person, make_resource
from analytics.assembler import (
    DEFAULT_ROLE,
    SELECTION_POLICIES,
    AgentNotFoundError,
    build_agent_context,
    commitment_state,
    create_landscape_entities,
    days_until_due,
    person_state,
    resource_state,
)
from analytics.layout import assign_layer
from analytics.proximity import PERSPECTIVES
from analytics.snapshot import person_by_id, person_location


def _iso(dt):
    return dt.isoformat().replace("+00:00", "Z")


def _ids(entities):
    return [e["id"] for e in entities]


# ── Initial states ─────────────────────────────────────────────────────────────

class TestPersonState:
    def test_current_agent_is_in_use(self):
        p = make_person("agent_bob", roles=["Founder"])
        assert person_state(p, make_context(aid="agent_bob")) == "in_use"

    @pytest.mark.parametrize("role", ["Founder", "Resource Coordinator", "Co-Founder"])
    def test_important_roles_available(self, role):
        assert person_state(make_person("p", roles=[role]), make_context()) == "available"

    def test_match_is_case_sensitive(self):
        assert person_state(make_person("p", roles=["founder"]), make_context()) == "dormant"

    def test_no_roles_dormant(self):
        assert person_state(make_person("p"), make_context()) == "dormant"


class TestResourceState:
    @pytest.mark.parametrize("state, visual", [
        ("active",      "available"),
        ("maintenance", "needs_attention"),
        ("inactive",    "dormant"),
        ("archived",    "available"),
        ("lost",        "available"),
        (None,          "available"),
    ])
    def test_mapping(self, state, visual):
        assert resource_state(make_resource("r", state=state)) == visual


class TestCommitmentState:
    def _state(self, due):
        return commitment_state(make_commitment("c", due_date=due), FIXED_NOW)

    def test_due_exactly_now_needs_attention(self):
        assert days_until_due(_iso(FIXED_NOW), FIXED_NOW) == 0
        assert self._state(_iso(FIXED_NOW)) == "needs_attention"

    def test_overdue_is_critical(self):
        assert self._state(_iso(FIXED_NOW - timedelta(days=2))) == "critical"

    def test_less_than_a_day_late_rounds_up_to_zero(self):
        assert self._state(_iso(FIXED_NOW - timedelta(hours=3))) == "needs_attention"

    @pytest.mark.parametrize("delta, expected", [
        (timedelta(days=2),             "needs_attention"),
        (timedelta(days=2, seconds=1),  "pending"),
        (timedelta(days=7),             "pending"),
        (timedelta(days=7, seconds=1),  "available"),
        (timedelta(days=30),            "available"),
    ])
    def test_bands(self, delta, expected):
        assert self._state(_iso(FIXED_NOW + delta)) == expected

    def test_naive_and_date_only_timestamps_are_utc(self):
        assert self._state("2026-10-19T12:00:00") == "needs_attention"
        # midnight, half a day ago → ceil(-0.5) = 0
        assert self._state("2026-10-19") == "needs_attention"

    def test_unparseable_due_date_is_not_urgent(self):
        assert self._state("next tuesday") == "available"
        assert commitment_state({"id": "c"}, FIXED_NOW) == "available"

    def test_non_string_due_date_is_not_urgent(self):
        assert commitment_state({"id": "c", "due_date": 20260101}, FIXED_NOW) == "available"

    def test_naive_now_is_utc(self):
        naive_now = FIXED_NOW.replace(tzinfo=None)
        assert commitment_state(make_commitment("c", due_date=_iso(FIXED_NOW)), naive_now) == "needs_attention"
        assert commitment_state(make_commitment("c"), naive_now) == "available"

    def test_odd_inputs_still_produce_a_layout(self):
        snapshot = {"commitments": [
            {"id": "c1", "due_date": 20260101},
            make_commitment("c2", due_date=_iso(FIXED_NOW - timedelta(days=1))),
        ]}
        entities = create_landscape_entities(snapshot, make_context(),
                                             now=FIXED_NOW.replace(tzinfo=None))
        assert [(e["id"], e["state"]) for e in entities] == [("c1", "available"), ("c2", "critical")]


# ── Perspective selection ──────────────────────────────────────────────────────

class TestSelection:
    def _landscape(self, snapshot, perspective):
        ctx = make_context(aid="agent_bob", location="Montreal", perspective=perspective)
        return create_landscape_entities(snapshot, ctx, now=FIXED_NOW)

    def test_every_perspective_has_a_policy(self):
        assert set(SELECTION_POLICIES) == set(PERSPECTIVES)

    def test_role_emits_everything_in_type_order(self, commons_snapshot):
        entities = self._landscape(commons_snapshot, "role")
        assert [e["type"] for e in entities] == ["person"] * 4 + ["resource"] * 4 + ["commitment"] * 4
        assert _ids(entities)[:4] == ["agent_alice", "agent_bob", "agent_carol", "agent_dave"]

    def test_resource_keeps_only_stewards_and_coordinators(self, commons_snapshot):
        entities = self._landscape(commons_snapshot, "resource")
        assert [e["type"] for e in entities] == ["resource"] * 4 + ["commitment"] * 4 + ["person"] * 2
        assert _ids(entities)[-2:] == ["agent_alice", "agent_carol"]
        for e in entities:
            if e["type"] == "person":
                names = [r["role_name"].lower() for r in e["data"]["roles"]]
                assert any("steward" in n or "coordinator" in n for n in names)

    def test_agent_keeps_only_active_resources(self, commons_snapshot):
        entities = self._landscape(commons_snapshot, "agent")
        assert [e["type"] for e in entities] == ["person"] * 4 + ["commitment"] * 4 + ["resource"]
        assert all(e["data"]["state"] == "active" for e in entities if e["type"] == "resource")

    def test_geographic_keeps_colocated_commitments(self, commons_snapshot):
        entities = self._landscape(commons_snapshot, "geographic")
        commitments = [e for e in entities if e["type"] == "commitment"]
        assert _ids(commitments) == ["commitment_1"]
        for c in commitments:
            provider = person_by_id(commons_snapshot, c["data"]["provider"])
            assert person_location(provider) == "Montreal"

    def test_geographic_drops_unresolvable_provider(self, commons_snapshot):
        entities = self._landscape(commons_snapshot, "geographic")
        assert "commitment_4" not in _ids(entities)

    def test_unknown_perspective_falls_back_to_role(self, commons_snapshot):
        assert _ids(self._landscape(commons_snapshot, "sideways")) == \
            _ids(self._landscape(commons_snapshot, "role"))

    def test_states_assigned(self, commons_snapshot):
        states = {e["id"]: e["state"] for e in self._landscape(commons_snapshot, "role")}
        assert states["agent_bob"] == "in_use"
        assert states["agent_alice"] == "available"
        assert states["agent_carol"] == "dormant"
        assert states["resource_drill_1"] == "needs_attention"
        assert states["resource_projector_1"] == "dormant"
        assert states["commitment_1"] == "needs_attention"   # due in ~1 day
        assert states["commitment_2"] == "critical"          # overdue
        assert states["commitment_3"] == "available"
        assert states["commitment_4"] == "pending"           # due in ~6 days


# ── Full pass ──────────────────────────────────────────────────────────────────

class TestCreateLandscapeEntities:
    @pytest.mark.parametrize("perspective", PERSPECTIVES)
    def test_z_always_implied_by_score(self, commons_snapshot, perspective):
        ctx = make_context(perspective=perspective)
        for e in create_landscape_entities(commons_snapshot, ctx, now=FIXED_NOW):
            assert 0.0 <= e["position"]["proximity_score"] <= 1.0
            assert e["position"]["z"] == assign_layer(e["position"]["proximity_score"])

    def test_deterministic(self, commons_snapshot):
        ctx = make_context(perspective="geographic")
        first  = create_landscape_entities(commons_snapshot, ctx, now=FIXED_NOW)
        second = create_landscape_entities(commons_snapshot, ctx, now=FIXED_NOW)
        assert [(e["id"], e["state"], e["position"]) for e in first] == \
               [(e["id"], e["state"], e["position"]) for e in second]

    def test_entities_built_fresh_each_pass(self, commons_snapshot):
        ctx = make_context()
        first  = create_landscape_entities(commons_snapshot, ctx, now=FIXED_NOW)
        second = create_landscape_entities(commons_snapshot, ctx, now=FIXED_NOW)
        assert first[0] is not second[0]
        assert first[0]["position"] is not second[0]["position"]

    def test_empty_snapshot(self):
        assert create_landscape_entities({}, make_context(), now=FIXED_NOW) == []


# ── Agent context construction ─────────────────────────────────────────────────

class TestBuildAgentContext:
    def test_from_person(self, commons_snapshot):
        assert build_agent_context(commons_snapshot, "agent_bob") == {
            "id":           "agent_bob",
            "role":         "Simple Member",
            "location":     "Montreal",
            "capabilities": ["Simple Member"],
            "perspective":  "role",
        }

    def test_first_role_wins_and_perspective_kept(self, commons_snapshot):
        ctx = build_agent_context(commons_snapshot, "agent_alice", perspective="agent")
        assert ctx["role"] == "Founder"
        assert ctx["capabilities"] == ["Founder", "Resource Coordinator"]
        assert ctx["perspective"] == "agent"

    def test_no_roles_uses_default(self, commons_snapshot):
        ctx = build_agent_context(commons_snapshot, "agent_dave")
        assert ctx["role"] == DEFAULT_ROLE
        assert ctx["capabilities"] == []

    def test_unknown_agent_raises(self, commons_snapshot):
        with pytest.raises(AgentNotFoundError, match="agent_ghost"):
            build_agent_context(commons_snapshot, "agent_ghost")

    def test_not_found_is_a_lookup_error(self, commons_snapshot):
        with pytest.raises(LookupError):
            build_agent_context(commons_snapshot, "")
