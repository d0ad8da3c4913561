"""Pydantic v2 models for Uniform Build.

Defines the raw answer record, the resolved relationship graph and the
immutable ``ProjectConfig`` that every emitter reads.  ``ProjectMetadata``
is the durable ``.uniform-project.json`` record written at the project root.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from .config import PortConfig


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ProjectType(str, Enum):
    """Architecture shape of the generated project."""
    FULLSTACK = "fullstack"
    BACKEND_ONLY = "backend-only"
    FRONTEND_ONLY = "frontend-only"


class ApiConsumer(str, Enum):
    """Who consumes a backend-only API."""
    MOBILE = "mobile"
    THIRD_PARTY = "third-party"
    OWN_FRONTEND = "own-frontend"
    INTERNAL = "internal"


class BackendNeed(str, Enum):
    """Whether a frontend-only project talks to a backend."""
    NONE = "none"
    SEPARATE = "separate"


class Feature(str, Enum):
    """Optional features the operator can tick."""
    AUTH = "auth"
    ADMIN = "admin"
    UPLOADS = "uploads"


class RelationshipChoice(str, Enum):
    """Operator decision for one unordered entity pair.

    ``ENTITY1_TO_ENTITY2`` means the first entity of the pair belongs to one
    of the second (it holds the foreign key).
    """
    NONE = "none"
    ENTITY1_TO_ENTITY2 = "entity1-to-entity2"
    ENTITY2_TO_ENTITY1 = "entity2-to-entity1"
    MANY_TO_MANY = "many-to-many"

    def flipped(self) -> "RelationshipChoice":
        """The same decision expressed for the pair in reverse order."""
        if self is RelationshipChoice.ENTITY1_TO_ENTITY2:
            return RelationshipChoice.ENTITY2_TO_ENTITY1
        if self is RelationshipChoice.ENTITY2_TO_ENTITY1:
            return RelationshipChoice.ENTITY1_TO_ENTITY2
        return self


class EdgeKind(str, Enum):
    """Kind of a resolved, directed relationship edge."""
    MANY_TO_ONE = "many-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------

class Relationship(BaseModel):
    """A pairwise relationship decision as collected from the operator."""

    model_config = ConfigDict(frozen=True)

    entity1: str = Field(..., description="First entity of the pair, in input order")
    entity2: str = Field(..., description="Second entity of the pair")
    type: RelationshipChoice = Field(default=RelationshipChoice.NONE)


class RelationshipEdge(BaseModel):
    """A resolved edge attached to one entity.

    ``field_name`` is the attribute declared on the owning entity and
    ``inverse_name`` the attribute the target declares to point back.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    kind: EdgeKind
    target: str
    field_name: str
    inverse_name: str

    @property
    def foreign_key(self) -> Optional[str]:
        """Foreign-key column this edge adds to its entity, if any."""
        if self.kind is EdgeKind.MANY_TO_ONE:
            return f"{self.target.lower()}_id"
        return None


# ---------------------------------------------------------------------------
# Raw answers
# ---------------------------------------------------------------------------

class Answers(BaseModel):
    """The complete answer record produced by input collection."""

    project_name: str
    project_type: ProjectType
    api_consumer: Optional[ApiConsumer] = None
    backend_needed: Optional[BackendNeed] = None
    entities: list[str] = Field(default_factory=list)
    has_relationships: bool = False
    relationships: list[Relationship] = Field(default_factory=list)
    features: list[Feature] = Field(default_factory=list)
    confirm: bool = True


# ---------------------------------------------------------------------------
# Decision config
# ---------------------------------------------------------------------------

class KillSwitches(BaseModel):
    """Precomputed booleans gating whole categories of generation work."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    skip_frontend: bool
    skip_backend: bool
    skip_relationships: bool
    skip_providers: bool
    skip_api_service: bool


class BackendOptions(BaseModel):
    """Consumer-driven toggles for the generated backend."""

    model_config = ConfigDict(frozen=True)

    api_consumer: Optional[ApiConsumer] = None
    needs_cors: bool = True
    needs_api_docs: bool = False
    needs_versioning: bool = False
    api_prefix: str = "/api"


class FrontendOptions(BaseModel):
    """Toggles for the generated frontend."""

    model_config = ConfigDict(frozen=True)

    backend_needed: Optional[BackendNeed] = None
    is_static: bool = False


class ProjectConfig(BaseModel):
    """The single source of truth handed to every emitter.

    Built once by :func:`uniform_build.builder.build_config` and never
    mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    project_type: ProjectType
    entities: tuple[str, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    edges: Mapping[str, tuple[RelationshipEdge, ...]] = Field(
        default_factory=dict, validate_default=True
    )
    features: tuple[Feature, ...] = ()
    kill_switches: KillSwitches
    backend: BackendOptions = Field(default_factory=BackendOptions)
    frontend: FrontendOptions = Field(default_factory=FrontendOptions)
    ports: PortConfig = Field(default_factory=PortConfig)

    @field_validator("edges", mode="after")
    @classmethod
    def _freeze_edges(cls, value: Mapping[str, tuple[RelationshipEdge, ...]]):
        return MappingProxyType(dict(value))

    @field_serializer("edges")
    def _serialize_edges(self, value: Mapping[str, tuple[RelationshipEdge, ...]]):
        return dict(value)

    @property
    def needs_backend(self) -> bool:
        return not self.kill_switches.skip_backend

    @property
    def needs_frontend(self) -> bool:
        return not self.kill_switches.skip_frontend

    def edges_for(self, entity: str) -> tuple[RelationshipEdge, ...]:
        """Resolved edges of *entity* (empty when it has none)."""
        return self.edges.get(entity, ())


# ---------------------------------------------------------------------------
# Persisted metadata
# ---------------------------------------------------------------------------

class MetadataStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_files: int = 0


class ProjectMetadata(BaseModel):
    """Contents of ``.uniform-project.json``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    type: ProjectType
    generated: datetime
    generator: str
    entities: list[str] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    edges: dict[str, list[RelationshipEdge]] = Field(default_factory=dict)
    features: list[Feature] = Field(default_factory=list)
    kill_switches: KillSwitches
    stats: MetadataStats = Field(default_factory=MetadataStats)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True)

    @classmethod
    def load(cls, path: Path) -> "ProjectMetadata":
        """Read a metadata file written by a previous generation run."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)
