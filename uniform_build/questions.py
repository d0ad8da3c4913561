"""Question decision table.

Input collection is expressed as a pure function from the partial answer
state to the next required question.  The interactive prompt and the
answer-file loader both drive the same table, so every branch can be
exercised without a terminal.

State is a plain dict keyed by question key.  Relationship answers are kept
as a list under ``"relationships"`` in the order the pairs are asked.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from itertools import combinations
from typing import Any

from .errors import ValidationError
from .models import (
    ApiConsumer,
    Answers,
    BackendNeed,
    Feature,
    ProjectType,
    Relationship,
    RelationshipChoice,
)

PROJECT_NAME_RE = re.compile(r"^[a-z0-9-]+$")
ENTITY_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Choice:
    """One selectable option of a ``select`` or ``checkbox`` question."""

    label: str
    value: str


@dataclass(frozen=True)
class Question:
    """A single input the engine still needs.

    ``kind`` is one of ``input``, ``select``, ``checkbox`` or ``confirm``.
    Relationship questions carry the entity ``pair`` they are about.
    """

    key: str
    kind: str
    message: str
    choices: tuple[Choice, ...] = field(default=())
    default: Any = None
    pair: tuple[str, str] | None = None


# ---------------------------------------------------------------------------
# Static questions
# ---------------------------------------------------------------------------

PROJECT_NAME = Question("project_name", "input", "Project name?", default="my-app")

PROJECT_TYPE = Question(
    "project_type",
    "select",
    "What are you building?",
    choices=(
        Choice("Full-stack (Flask + React)", ProjectType.FULLSTACK.value),
        Choice("Backend API only (Flask)", ProjectType.BACKEND_ONLY.value),
        Choice("Frontend only (React)", ProjectType.FRONTEND_ONLY.value),
    ),
    default=ProjectType.FULLSTACK.value,
)

API_CONSUMER = Question(
    "api_consumer",
    "select",
    "This API will be consumed by:",
    choices=(
        Choice("Mobile app (iOS/Android)", ApiConsumer.MOBILE.value),
        Choice("Third-party integrations", ApiConsumer.THIRD_PARTY.value),
        Choice("My own frontend (building later)", ApiConsumer.OWN_FRONTEND.value),
        Choice("Microservices/Internal use", ApiConsumer.INTERNAL.value),
    ),
    default=ApiConsumer.MOBILE.value,
)

BACKEND_NEEDED = Question(
    "backend_needed",
    "select",
    "Does this frontend need a backend?",
    choices=(
        Choice("No - Static site or uses existing API", BackendNeed.NONE.value),
        Choice("Yes - But building separately", BackendNeed.SEPARATE.value),
    ),
    default=BackendNeed.NONE.value,
)

ENTITIES = Question(
    "entities", "input", "Entities? (comma-separated, e.g., User,Recipe,Category)"
)

HAS_RELATIONSHIPS = Question(
    "has_relationships", "confirm", "Do your entities have relationships?", default=True
)

FEATURES = Question(
    "features",
    "checkbox",
    "Select features:",
    choices=(
        Choice("Authentication", Feature.AUTH.value),
        Choice("Admin Panel", Feature.ADMIN.value),
        Choice("File Uploads", Feature.UPLOADS.value),
    ),
    default=(),
)


def confirm_question(state: dict[str, Any]) -> Question:
    return Question(
        "confirm",
        "confirm",
        f"Create {state['project_name']} as a {state['project_type']} project?",
        default=True,
    )


def relationship_question(entity1: str, entity2: str) -> Question:
    return Question(
        "relationships",
        "select",
        f"{entity1} <-> {entity2}:",
        choices=(
            Choice("No relationship", RelationshipChoice.NONE.value),
            Choice(
                f"{entity1} belongs to ONE {entity2} (adds {entity2.lower()}_id to {entity1})",
                RelationshipChoice.ENTITY1_TO_ENTITY2.value,
            ),
            Choice(
                f"{entity2} belongs to ONE {entity1} (adds {entity1.lower()}_id to {entity2})",
                RelationshipChoice.ENTITY2_TO_ENTITY1.value,
            ),
            Choice("Many-to-Many (creates bridge table)", RelationshipChoice.MANY_TO_MANY.value),
        ),
        default=RelationshipChoice.NONE.value,
        pair=(entity1, entity2),
    )


# ---------------------------------------------------------------------------
# Decision table
# ---------------------------------------------------------------------------

def relationship_pairs(entities: list[str]) -> list[tuple[str, str]]:
    """Every unordered pair of distinct entities, in input order.

    Repeated names are paired once; the resolver rejects them later.
    """
    return list(combinations(dict.fromkeys(entities), 2))


def next_question(state: dict[str, Any]) -> Question | None:
    """Return the next question to ask, or ``None`` when *state* is complete."""
    if "project_name" not in state:
        return PROJECT_NAME
    if "project_type" not in state:
        return PROJECT_TYPE

    project_type = state["project_type"]
    if project_type == ProjectType.BACKEND_ONLY.value and "api_consumer" not in state:
        return API_CONSUMER
    if project_type == ProjectType.FRONTEND_ONLY.value and "backend_needed" not in state:
        return BACKEND_NEEDED

    if project_type != ProjectType.FRONTEND_ONLY.value:
        if "entities" not in state:
            return ENTITIES
        pairs = relationship_pairs(state["entities"])
        if pairs:
            if "has_relationships" not in state:
                return HAS_RELATIONSHIPS
            if state["has_relationships"]:
                answered = len(state.get("relationships", []))
                if answered < len(pairs):
                    return relationship_question(*pairs[answered])

    if "features" not in state:
        return FEATURES
    if "confirm" not in state:
        return confirm_question(state)
    return None


def apply_answer(state: dict[str, Any], question: Question, value: Any) -> dict[str, Any]:
    """Validate *value* for *question* and return the updated state.

    The input state is not modified.

    Raises:
        ValidationError: If the value is not acceptable for the question.
    """
    new_state = dict(state)

    if question.key == "project_name":
        new_state["project_name"] = validate_project_name(value)
    elif question.key == "entities":
        new_state["entities"] = parse_entities(value)
    elif question.pair is not None:
        entity1, entity2 = question.pair
        choice = _choice_value(question, value)
        new_state["relationships"] = [
            *state.get("relationships", []),
            {"entity1": entity1, "entity2": entity2, "type": choice},
        ]
    elif question.kind == "select":
        new_state[question.key] = _choice_value(question, value)
    elif question.kind == "checkbox":
        values = _as_list(value)
        allowed = {choice.value for choice in question.choices}
        for item in values:
            if item not in allowed:
                raise ValidationError(question.key, f"Unknown option: {item}")
        new_state[question.key] = values
    elif question.kind == "confirm":
        new_state[question.key] = _as_bool(question.key, value)
    else:
        new_state[question.key] = value

    return new_state


def answers_from_state(state: dict[str, Any]) -> Answers:
    """Freeze a complete answer state into an ``Answers`` record."""
    return Answers(
        project_name=state["project_name"],
        project_type=ProjectType(state["project_type"]),
        api_consumer=state.get("api_consumer"),
        backend_needed=state.get("backend_needed"),
        entities=list(state.get("entities", [])),
        has_relationships=bool(state.get("has_relationships", False)),
        relationships=[Relationship(**r) for r in state.get("relationships", [])],
        features=list(state.get("features", [])),
        confirm=bool(state.get("confirm", True)),
    )


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def validate_project_name(value: Any) -> str:
    name = str(value).strip()
    if not PROJECT_NAME_RE.match(name):
        raise ValidationError(
            "project_name", "Project name must be lowercase, alphanumeric, and hyphens only"
        )
    return name


def parse_entities(value: Any) -> list[str]:
    """Parse a comma-separated entity list (or a list) into entity names.

    Items are trimmed, empty items dropped and the first letter upper-cased.
    """
    raw = value.split(",") if isinstance(value, str) else list(value or [])
    entities: list[str] = []
    for item in raw:
        name = str(item).strip()
        if not name:
            continue
        if not ENTITY_NAME_RE.match(name):
            raise ValidationError("entities", f"Invalid entity name: {name!r}")
        entities.append(name[0].upper() + name[1:])
    if not entities:
        raise ValidationError("entities", "You need at least one entity")
    return entities


def _choice_value(question: Question, value: Any) -> str:
    raw = value.value if hasattr(value, "value") else str(value)
    for choice in question.choices:
        if raw == choice.value:
            return choice.value
    raise ValidationError(question.key, f"{raw!r} is not a valid choice for {question.message!r}")


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [v.value if hasattr(v, "value") else str(v) for v in value]


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("y", "yes", "true", "1"):
        return True
    if text in ("n", "no", "false", "0"):
        return False
    raise ValidationError(key, f"Expected yes or no, got {value!r}")
