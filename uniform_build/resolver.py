"""Relationship resolution.

Turns the operator's pairwise relationship choices into typed, directed
edges attached to each entity.  Every edge has a mirror on its target:

* ``A`` belongs to ``B``: ``A`` gets a many-to-one edge named ``b`` whose
  inverse is ``as``; ``B`` gets a one-to-many edge named ``as`` whose
  inverse is ``b``.
* many-to-many: both sides get a collection edge named after the other's
  plural, with the field/inverse names swapped.

Inverse names are plain lowercasing plus ``s``, so entities that differ only
by case or plural suffix (``Tag`` and ``Tags``) collide.  That is a known
limitation and is not disambiguated here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from itertools import combinations

from .errors import ConfigurationError
from .models import EdgeKind, Relationship, RelationshipChoice, RelationshipEdge

Pair = tuple[str, str]


def resolve(
    entities: Sequence[str],
    choices: Mapping[Pair, RelationshipChoice | str],
) -> dict[str, list[RelationshipEdge]]:
    """Resolve pairwise choices into per-entity edge lists.

    Args:
        entities: Ordered, unique entity names.
        choices: Mapping from an entity pair to the decision for that pair.
            The decision is interpreted relative to the key's order, so
            ``{("Comment", "Post"): "entity1-to-entity2"}`` means a comment
            belongs to one post.  Pairs absent from the mapping have no
            relationship.

    Returns:
        A mapping with an entry for every entity (possibly empty).  Edges
        appear in the order pairs are enumerated from *entities*, which makes
        the result deterministic for identical input.

    Raises:
        ConfigurationError: On duplicate entities, pairs naming unknown or
            identical entities, a pair given twice, or choices supplied
            without any entity.
    """
    if choices and len(entities) < 1:
        raise ConfigurationError("Relationships were requested but no entities were given")

    seen: set[str] = set()
    for entity in entities:
        if entity in seen:
            raise ConfigurationError(f"Duplicate entity name: {entity}")
        seen.add(entity)

    normalized = _normalize_choices(entities, choices)

    edges: dict[str, list[RelationshipEdge]] = {entity: [] for entity in entities}
    for entity1, entity2 in combinations(entities, 2):
        choice = normalized.get((entity1, entity2), RelationshipChoice.NONE)
        if choice is RelationshipChoice.ENTITY1_TO_ENTITY2:
            _add_belongs_to(edges, owner=entity1, target=entity2)
        elif choice is RelationshipChoice.ENTITY2_TO_ENTITY1:
            _add_belongs_to(edges, owner=entity2, target=entity1)
        elif choice is RelationshipChoice.MANY_TO_MANY:
            _add_many_to_many(edges, entity1, entity2)
    return edges


def choices_from_relationships(
    relationships: Sequence[Relationship],
) -> dict[Pair, RelationshipChoice]:
    """Key collected ``Relationship`` records by their entity pair."""
    return {(r.entity1, r.entity2): r.type for r in relationships}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _normalize_choices(
    entities: Sequence[str],
    choices: Mapping[Pair, RelationshipChoice | str],
) -> dict[Pair, RelationshipChoice]:
    """Re-key *choices* so every pair follows the order of *entities*."""
    position = {entity: index for index, entity in enumerate(entities)}
    normalized: dict[Pair, RelationshipChoice] = {}

    for (first, second), raw in choices.items():
        for name in (first, second):
            if name not in position:
                raise ConfigurationError(f"Relationship refers to unknown entity: {name}")
        if first == second:
            raise ConfigurationError(f"An entity cannot be related to itself: {first}")
        try:
            choice = RelationshipChoice(raw)
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown relationship type for {first} and {second}: {raw!r}"
            ) from exc

        if position[first] > position[second]:
            first, second = second, first
            choice = choice.flipped()
        if (first, second) in normalized:
            raise ConfigurationError(f"Relationship between {first} and {second} given twice")
        normalized[(first, second)] = choice

    return normalized


def _add_belongs_to(
    edges: dict[str, list[RelationshipEdge]], *, owner: str, target: str
) -> None:
    owner_field = target.lower()
    target_field = owner.lower() + "s"
    edges[owner].append(
        RelationshipEdge(
            kind=EdgeKind.MANY_TO_ONE,
            target=target,
            field_name=owner_field,
            inverse_name=target_field,
        )
    )
    edges[target].append(
        RelationshipEdge(
            kind=EdgeKind.ONE_TO_MANY,
            target=owner,
            field_name=target_field,
            inverse_name=owner_field,
        )
    )


def _add_many_to_many(
    edges: dict[str, list[RelationshipEdge]], entity1: str, entity2: str
) -> None:
    field1 = entity2.lower() + "s"
    field2 = entity1.lower() + "s"
    edges[entity1].append(
        RelationshipEdge(
            kind=EdgeKind.MANY_TO_MANY, target=entity2, field_name=field1, inverse_name=field2
        )
    )
    edges[entity2].append(
        RelationshipEdge(
            kind=EdgeKind.MANY_TO_MANY, target=entity1, field_name=field2, inverse_name=field1
        )
    )
