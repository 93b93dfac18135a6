"""Cross-entity relationship queries.

One query per entity kind. Each kind has its own fixed set of link fields,
but every query follows the same contract:

- forward links (ids stored on the entity itself) and reverse links (other
  entities whose link fields contain this id) are merged, grouped by target
  kind in a fixed order, forward before reverse within a kind;
- results are deduplicated by (kind, id);
- ids that do not resolve in the snapshot are dropped silently;
- an unknown source id yields only its reverse links.

All functions are pure: they read the snapshot and never do I/O.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from app.core.errors import InvalidArgument
from app.core.schemas_metrics import KIND_PATHS, ConnectionCounts, EntityKind, RelatedItem
from app.core.schemas_workspace import WorkspaceEntity, WorkspaceSnapshot

E = TypeVar("E", bound=WorkspaceEntity)

_TITLE_FIELDS: dict[EntityKind, str] = {
    EntityKind.FOCUS_AREA: "title",
    EntityKind.ARCHETYPE: "name",
    EntityKind.HYPOTHESIS: "belief",
    EntityKind.IDEA: "title",
    EntityKind.DECISION: "title",
    EntityKind.OBJECTIVE: "title",
    EntityKind.JOURNEY_MAP: "title",
    EntityKind.DOCUMENT: "name",
    EntityKind.CHANGELOG: "title",
    EntityKind.BLOCKER: "title",
}


def resolve_or_drop(ids: Iterable[str | None] | None, collection: Sequence[E]) -> list[E]:
    """Resolve soft-link ids against a collection.

    Returns the matching entities in the order of ``ids``. Unknown, empty and
    repeated ids are skipped.
    """
    if not ids:
        return []
    index = {entity.id: entity for entity in collection}
    resolved: list[E] = []
    seen: set[str] = set()
    for entity_id in ids:
        if not entity_id or entity_id in seen:
            continue
        entity = index.get(entity_id)
        if entity is None:
            continue
        seen.add(entity_id)
        resolved.append(entity)
    return resolved


def _find(collection: Sequence[E], entity_id: str) -> E | None:
    for entity in collection:
        if entity.id == entity_id:
            return entity
    return None


def to_related_item(kind: EntityKind, entity: WorkspaceEntity) -> RelatedItem:
    status = getattr(entity, "status", None)
    return RelatedItem(
        id=entity.id,
        kind=kind,
        title=getattr(entity, _TITLE_FIELDS[kind], "") or "",
        status=status.value if status is not None else None,
        path=KIND_PATHS[kind],
    )


class _RelatedCollector:
    """Accumulates related items, deduplicating by (kind, id)."""

    def __init__(self) -> None:
        self._items: list[RelatedItem] = []
        self._seen: set[tuple[EntityKind, str]] = set()

    def forward(
        self,
        kind: EntityKind,
        ids: Iterable[str | None] | None,
        collection: Sequence[WorkspaceEntity],
    ) -> None:
        for entity in resolve_or_drop(ids, collection):
            self._add(kind, entity)

    def reverse(self, kind: EntityKind, entities: Iterable[WorkspaceEntity]) -> None:
        for entity in entities:
            self._add(kind, entity)

    def _add(self, kind: EntityKind, entity: WorkspaceEntity) -> None:
        key = (kind, entity.id)
        if key in self._seen:
            return
        self._seen.add(key)
        self._items.append(to_related_item(kind, entity))

    def items(self) -> list[RelatedItem]:
        return list(self._items)


def _one(entity_id: str | None) -> list[str]:
    return [entity_id] if entity_id else []


# =============================================================================
# Per-kind queries
# =============================================================================


def related_to_focus_area(snapshot: WorkspaceSnapshot, focus_area_id: str) -> list[RelatedItem]:
    focus_area = _find(snapshot.focus_areas, focus_area_id)
    related = _RelatedCollector()

    related.forward(
        EntityKind.ARCHETYPE,
        focus_area.target_archetype_ids if focus_area else None,
        snapshot.archetypes,
    )
    related.reverse(
        EntityKind.ARCHETYPE,
        (a for a in snapshot.archetypes if focus_area_id in a.related_focus_area_ids),
    )
    related.reverse(
        EntityKind.HYPOTHESIS,
        (h for h in snapshot.hypotheses if h.focus_area_id == focus_area_id),
    )
    related.reverse(EntityKind.IDEA, (i for i in snapshot.ideas if i.focus_area_id == focus_area_id))
    related.reverse(
        EntityKind.DECISION,
        (d for d in snapshot.decisions if d.focus_area_id == focus_area_id),
    )
    related.reverse(
        EntityKind.OBJECTIVE,
        (o for o in snapshot.objectives if focus_area_id in o.focus_area_ids),
    )
    related.reverse(
        EntityKind.DOCUMENT,
        (d for d in snapshot.documents if focus_area_id in d.focus_area_ids),
    )
    related.reverse(
        EntityKind.CHANGELOG,
        (c for c in snapshot.changelog if c.focus_area_id == focus_area_id),
    )
    related.reverse(
        EntityKind.BLOCKER,
        (b for b in snapshot.blockers if b.focus_area_id == focus_area_id),
    )
    return related.items()


def related_to_archetype(snapshot: WorkspaceSnapshot, archetype_id: str) -> list[RelatedItem]:
    archetype = _find(snapshot.archetypes, archetype_id)
    related = _RelatedCollector()

    related.forward(
        EntityKind.FOCUS_AREA,
        archetype.related_focus_area_ids if archetype else None,
        snapshot.focus_areas,
    )
    related.reverse(
        EntityKind.FOCUS_AREA,
        (fa for fa in snapshot.focus_areas if archetype_id in fa.target_archetype_ids),
    )
    related.reverse(
        EntityKind.HYPOTHESIS,
        (h for h in snapshot.hypotheses if h.archetype_id == archetype_id),
    )
    related.reverse(
        EntityKind.IDEA,
        (i for i in snapshot.ideas if i.target_archetype_id == archetype_id),
    )
    related.reverse(
        EntityKind.JOURNEY_MAP,
        (j for j in snapshot.journey_maps if j.archetype_id == archetype_id),
    )
    related.reverse(
        EntityKind.DOCUMENT,
        (d for d in snapshot.documents if archetype_id in d.archetype_ids),
    )
    return related.items()


def related_to_hypothesis(snapshot: WorkspaceSnapshot, hypothesis_id: str) -> list[RelatedItem]:
    hypothesis = _find(snapshot.hypotheses, hypothesis_id)
    related = _RelatedCollector()

    if hypothesis:
        related.forward(EntityKind.FOCUS_AREA, _one(hypothesis.focus_area_id), snapshot.focus_areas)
        related.forward(EntityKind.ARCHETYPE, _one(hypothesis.archetype_id), snapshot.archetypes)
    related.reverse(
        EntityKind.DECISION,
        (d for d in snapshot.decisions if hypothesis_id in d.related_hypothesis_ids),
    )
    related.reverse(
        EntityKind.CHANGELOG,
        (c for c in snapshot.changelog if hypothesis_id in c.validated_hypothesis_ids),
    )
    return related.items()


def related_to_idea(snapshot: WorkspaceSnapshot, idea_id: str) -> list[RelatedItem]:
    idea = _find(snapshot.ideas, idea_id)
    related = _RelatedCollector()

    if idea:
        related.forward(EntityKind.FOCUS_AREA, _one(idea.focus_area_id), snapshot.focus_areas)
        related.forward(EntityKind.ARCHETYPE, _one(idea.target_archetype_id), snapshot.archetypes)
    related.reverse(
        EntityKind.JOURNEY_MAP,
        (j for j in snapshot.journey_maps if j.idea_id == idea_id),
    )
    return related.items()


def related_to_decision(snapshot: WorkspaceSnapshot, decision_id: str) -> list[RelatedItem]:
    decision = _find(snapshot.decisions, decision_id)
    related = _RelatedCollector()

    if decision:
        related.forward(EntityKind.FOCUS_AREA, _one(decision.focus_area_id), snapshot.focus_areas)
        related.forward(EntityKind.HYPOTHESIS, decision.related_hypothesis_ids, snapshot.hypotheses)
    return related.items()


def related_to_objective(snapshot: WorkspaceSnapshot, objective_id: str) -> list[RelatedItem]:
    objective = _find(snapshot.objectives, objective_id)
    related = _RelatedCollector()

    if objective:
        related.forward(EntityKind.FOCUS_AREA, objective.focus_area_ids, snapshot.focus_areas)
    return related.items()


def related_to_journey_map(snapshot: WorkspaceSnapshot, journey_map_id: str) -> list[RelatedItem]:
    journey_map = _find(snapshot.journey_maps, journey_map_id)
    related = _RelatedCollector()

    if journey_map:
        related.forward(EntityKind.IDEA, _one(journey_map.idea_id), snapshot.ideas)
        related.forward(EntityKind.ARCHETYPE, _one(journey_map.archetype_id), snapshot.archetypes)
    return related.items()


def related_to_document(snapshot: WorkspaceSnapshot, document_id: str) -> list[RelatedItem]:
    document = _find(snapshot.documents, document_id)
    related = _RelatedCollector()

    if document:
        related.forward(EntityKind.FOCUS_AREA, document.focus_area_ids, snapshot.focus_areas)
        related.forward(EntityKind.ARCHETYPE, document.archetype_ids, snapshot.archetypes)
    return related.items()


def related_to_changelog_entry(snapshot: WorkspaceSnapshot, entry_id: str) -> list[RelatedItem]:
    entry = _find(snapshot.changelog, entry_id)
    related = _RelatedCollector()

    if entry:
        related.forward(EntityKind.FOCUS_AREA, _one(entry.focus_area_id), snapshot.focus_areas)
        related.forward(EntityKind.HYPOTHESIS, entry.validated_hypothesis_ids, snapshot.hypotheses)
    return related.items()


def related_to_blocker(snapshot: WorkspaceSnapshot, blocker_id: str) -> list[RelatedItem]:
    blocker = _find(snapshot.blockers, blocker_id)
    related = _RelatedCollector()

    if blocker:
        related.forward(EntityKind.FOCUS_AREA, _one(blocker.focus_area_id), snapshot.focus_areas)
    return related.items()


RELATED_QUERIES: dict[EntityKind, Callable[[WorkspaceSnapshot, str], list[RelatedItem]]] = {
    EntityKind.FOCUS_AREA: related_to_focus_area,
    EntityKind.ARCHETYPE: related_to_archetype,
    EntityKind.HYPOTHESIS: related_to_hypothesis,
    EntityKind.IDEA: related_to_idea,
    EntityKind.DECISION: related_to_decision,
    EntityKind.OBJECTIVE: related_to_objective,
    EntityKind.JOURNEY_MAP: related_to_journey_map,
    EntityKind.DOCUMENT: related_to_document,
    EntityKind.CHANGELOG: related_to_changelog_entry,
    EntityKind.BLOCKER: related_to_blocker,
}


def get_related_items(
    snapshot: WorkspaceSnapshot,
    kind: EntityKind | str,
    entity_id: str,
) -> list[RelatedItem]:
    """Dispatch a relationship query by entity kind."""
    try:
        entity_kind = EntityKind(kind)
    except ValueError:
        raise InvalidArgument("kind", f"Unknown entity kind: {kind}") from None
    return RELATED_QUERIES[entity_kind](snapshot, entity_id)


def connection_counts(snapshot: WorkspaceSnapshot) -> ConnectionCounts:
    """Count entities carrying at least one cross-link of each dashboard-tracked type."""
    return ConnectionCounts(
        archetypes_with_focus_areas=sum(1 for a in snapshot.archetypes if a.related_focus_area_ids),
        focus_areas_with_archetypes=sum(1 for fa in snapshot.focus_areas if fa.target_archetype_ids),
        hypotheses_with_archetypes=sum(1 for h in snapshot.hypotheses if h.archetype_id),
        ideas_with_archetypes=sum(1 for i in snapshot.ideas if i.target_archetype_id),
        objectives_with_focus_areas=sum(1 for o in snapshot.objectives if o.focus_area_ids),
        decisions_with_evidence=sum(1 for d in snapshot.decisions if d.related_hypothesis_ids),
        journey_maps_with_archetypes=sum(1 for j in snapshot.journey_maps if j.archetype_id),
    )
