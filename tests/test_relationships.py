"""Tests for cross-entity relationship queries.

Every per-kind query must follow the same contract: forward links before
reverse links within a kind, no duplicate (kind, id) pairs, and dangling
ids dropped without error.
"""

import pytest

from app.core.errors import InvalidArgument
from app.core.relationships import (
    RELATED_QUERIES,
    connection_counts,
    get_related_items,
    related_to_archetype,
    related_to_decision,
    related_to_focus_area,
    resolve_or_drop,
)
from app.core.schemas_metrics import EntityKind
from app.core.schemas_workspace import CustomerArchetype, FocusArea, WorkspaceSnapshot
from tests.fakes.workspace_data import sample_snapshot

GHOST = "ghost-id"

_COLLECTIONS = {
    EntityKind.FOCUS_AREA: "focus_areas",
    EntityKind.ARCHETYPE: "archetypes",
    EntityKind.HYPOTHESIS: "hypotheses",
    EntityKind.IDEA: "ideas",
    EntityKind.DECISION: "decisions",
    EntityKind.OBJECTIVE: "objectives",
    EntityKind.JOURNEY_MAP: "journey_maps",
    EntityKind.DOCUMENT: "documents",
    EntityKind.CHANGELOG: "changelog",
    EntityKind.BLOCKER: "blockers",
}

# Soft-link fields per collection: (list fields, single-id fields)
_LINK_FIELDS = {
    "focus_areas": (["target_archetype_ids"], []),
    "archetypes": (["related_focus_area_ids"], []),
    "hypotheses": ([], ["focus_area_id", "archetype_id"]),
    "ideas": ([], ["focus_area_id", "target_archetype_id"]),
    "decisions": (["related_hypothesis_ids"], ["focus_area_id"]),
    "objectives": (["focus_area_ids"], []),
    "journey_maps": ([], ["idea_id", "archetype_id"]),
    "documents": (["archetype_ids", "focus_area_ids"], []),
    "changelog": (["validated_hypothesis_ids"], ["focus_area_id"]),
    "blockers": ([], ["focus_area_id"]),
}


def _with_dangling_links(snapshot: WorkspaceSnapshot) -> WorkspaceSnapshot:
    """Add an unresolvable id to every empty or list-valued link field."""
    updates = {}
    for collection, (list_fields, single_fields) in _LINK_FIELDS.items():
        entities = []
        for entity in getattr(snapshot, collection):
            changes = {field: [*getattr(entity, field), GHOST] for field in list_fields}
            changes.update({field: GHOST for field in single_fields if getattr(entity, field) is None})
            entities.append(entity.model_copy(update=changes))
        updates[collection] = entities
    return snapshot.model_copy(update=updates)


def _all_ids(snapshot: WorkspaceSnapshot):
    for kind, collection in _COLLECTIONS.items():
        for entity in getattr(snapshot, collection):
            yield kind, entity.id


SNAPSHOT = sample_snapshot()
ALL_SOURCES = list(_all_ids(SNAPSHOT))


class TestUniformContract:
    def test_every_kind_has_a_query(self):
        assert set(RELATED_QUERIES) == set(EntityKind)

    @pytest.mark.parametrize("kind,entity_id", ALL_SOURCES)
    def test_no_duplicate_pairs(self, kind, entity_id):
        items = get_related_items(SNAPSHOT, kind, entity_id)
        pairs = [(item.kind, item.id) for item in items]
        assert len(pairs) == len(set(pairs))

    @pytest.mark.parametrize("kind,entity_id", ALL_SOURCES)
    def test_every_item_resolves(self, kind, entity_id):
        for item in get_related_items(SNAPSHOT, kind, entity_id):
            collection = getattr(SNAPSHOT, _COLLECTIONS[item.kind])
            assert item.id in {e.id for e in collection}

    @pytest.mark.parametrize("kind,entity_id", ALL_SOURCES)
    def test_dangling_ids_change_nothing(self, kind, entity_id):
        dangling = _with_dangling_links(SNAPSHOT)
        assert get_related_items(dangling, kind, entity_id) == get_related_items(SNAPSHOT, kind, entity_id)

    @pytest.mark.parametrize("kind", list(EntityKind))
    def test_unknown_source_id_does_not_raise(self, kind):
        assert get_related_items(SNAPSHOT, kind, "no-such-entity") == []


class TestFocusAreaQuery:
    def test_collects_every_linked_kind_in_order(self):
        items = related_to_focus_area(SNAPSHOT, "fa-onboarding")
        assert [(item.kind.value, item.id) for item in items] == [
            ("archetype", "arch-ops"),
            ("hypothesis", "hyp-1"),
            ("hypothesis", "hyp-2"),
            ("idea", "idea-1"),
            ("decision", "dec-1"),
            ("objective", "obj-1"),
            ("document", "doc-1"),
            ("changelog", "cl-1"),
            ("blocker", "blk-2"),
        ]

    def test_item_carries_title_status_and_path(self):
        item = related_to_focus_area(SNAPSHOT, "fa-onboarding")[0]
        assert item.title == "Operations Manager"
        assert item.status == "active"
        assert item.path == "/customer-archetypes"


class TestForwardBeforeReverse:
    def test_forward_focus_area_precedes_reverse_one(self):
        snapshot = WorkspaceSnapshot(
            focus_areas=[
                FocusArea(id="fa-a", title="Reverse only", target_archetype_ids=["arch-x"]),
                FocusArea(id="fa-b", title="Forward only"),
            ],
            archetypes=[CustomerArchetype(id="arch-x", name="X", related_focus_area_ids=["fa-b"])],
        )
        items = related_to_archetype(snapshot, "arch-x")
        assert [item.id for item in items] == ["fa-b", "fa-a"]

    def test_link_in_both_directions_appears_once(self):
        items = related_to_archetype(SNAPSHOT, "arch-ops")
        assert [item.id for item in items if item.kind == EntityKind.FOCUS_AREA] == ["fa-onboarding"]


def test_decision_drops_missing_hypothesis():
    items = related_to_decision(SNAPSHOT, "dec-1")
    assert [(item.kind.value, item.id) for item in items] == [
        ("focus-area", "fa-onboarding"),
        ("hypothesis", "hyp-1"),
    ]


def test_resolve_or_drop_keeps_order_and_skips_repeats():
    archetypes = SNAPSHOT.archetypes
    resolved = resolve_or_drop(["arch-finance", "", "ghost", "arch-ops", "arch-finance"], archetypes)
    assert [a.id for a in resolved] == ["arch-finance", "arch-ops"]


def test_unknown_kind_is_invalid_argument():
    with pytest.raises(InvalidArgument) as exc_info:
        get_related_items(SNAPSHOT, "widget", "x")
    assert exc_info.value.field == "kind"


def test_connection_counts():
    counts = connection_counts(SNAPSHOT)
    assert counts.archetypes_with_focus_areas == 2
    assert counts.focus_areas_with_archetypes == 1
    assert counts.hypotheses_with_archetypes == 3
    assert counts.ideas_with_archetypes == 1
    assert counts.objectives_with_focus_areas == 1
    assert counts.decisions_with_evidence == 1
    assert counts.journey_maps_with_archetypes == 1
