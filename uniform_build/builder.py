"""Configuration builder.

Combines the raw answer record with the resolved relationship graph into a
frozen ``ProjectConfig``.  All kill-switches and consumer toggles are
evaluated here exactly once; emitters read them and never re-derive the
underlying conditions.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .config import PortConfig
from .errors import ConfigurationError
from .models import (
    Answers,
    ApiConsumer,
    BackendNeed,
    BackendOptions,
    FrontendOptions,
    KillSwitches,
    ProjectConfig,
    ProjectType,
    RelationshipChoice,
    RelationshipEdge,
)


def build_config(
    answers: Answers,
    entities: Sequence[str],
    edges: Mapping[str, Sequence[RelationshipEdge]],
    *,
    ports: PortConfig | None = None,
) -> ProjectConfig:
    """Build the immutable decision config for one run.

    Args:
        answers: The collected answer record.
        entities: Entity names, already parsed and de-duplicated.
        edges: Output of :func:`uniform_build.resolver.resolve`.
        ports: Dev-server ports for the generated apps.

    Raises:
        ConfigurationError: When a field required by the project shape is
            missing, or *edges* does not cover exactly *entities*.
    """
    project_type = answers.project_type

    if project_type is not ProjectType.FRONTEND_ONLY and not entities:
        raise ConfigurationError(
            f"A {project_type.value} project needs at least one entity"
        )
    if project_type is ProjectType.BACKEND_ONLY and answers.api_consumer is None:
        raise ConfigurationError("A backend-only project needs an API consumer")
    if project_type is ProjectType.FRONTEND_ONLY and answers.backend_needed is None:
        raise ConfigurationError("A frontend-only project must say whether it needs a backend")

    unknown = set(edges) - set(entities)
    if unknown:
        raise ConfigurationError(f"Edges refer to unknown entities: {', '.join(sorted(unknown))}")

    relationships = tuple(
        r for r in answers.relationships if r.type is not RelationshipChoice.NONE
    ) if answers.has_relationships else ()

    return ProjectConfig(
        project_name=answers.project_name,
        project_type=project_type,
        entities=tuple(entities),
        relationships=relationships,
        edges={entity: tuple(edges.get(entity, ())) for entity in entities},
        features=tuple(answers.features),
        kill_switches=compute_kill_switches(
            project_type, len(entities), answers.backend_needed
        ),
        backend=compute_backend_options(answers.api_consumer),
        frontend=compute_frontend_options(project_type, answers.backend_needed),
        ports=ports or PortConfig(),
    )


def compute_kill_switches(
    project_type: ProjectType,
    entity_count: int,
    backend_needed: BackendNeed | None,
) -> KillSwitches:
    frontend_only = project_type is ProjectType.FRONTEND_ONLY
    return KillSwitches(
        skip_frontend=project_type is ProjectType.BACKEND_ONLY,
        skip_backend=frontend_only,
        skip_relationships=entity_count <= 1,
        skip_providers=frontend_only or entity_count == 0,
        skip_api_service=frontend_only and backend_needed is BackendNeed.NONE,
    )


def compute_backend_options(api_consumer: ApiConsumer | None) -> BackendOptions:
    """Toggles driven by who consumes the API.

    A full-stack project has no explicit consumer; it keeps CORS for its own
    frontend and skips docs and versioning.
    """
    return BackendOptions(
        api_consumer=api_consumer,
        needs_cors=api_consumer is not ApiConsumer.INTERNAL,
        needs_api_docs=api_consumer in (ApiConsumer.MOBILE, ApiConsumer.THIRD_PARTY),
        needs_versioning=api_consumer is ApiConsumer.MOBILE,
    )


def compute_frontend_options(
    project_type: ProjectType, backend_needed: BackendNeed | None
) -> FrontendOptions:
    return FrontendOptions(
        backend_needed=backend_needed,
        is_static=project_type is ProjectType.FRONTEND_ONLY
        and backend_needed is BackendNeed.NONE,
    )
