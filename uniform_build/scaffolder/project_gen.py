"""Project-level emitters: metadata, README, .gitignore and quick-start script."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .. import __version__
from ..models import (
    ProjectConfig,
    ProjectMetadata,
    MetadataStats,
    Relationship,
    RelationshipChoice,
)
from .backend_gen import BackendGenerator
from .frontend_gen import FrontendGenerator
from .plan import GenerationPlan
from .templates import TemplateRenderer

METADATA_FILE = ".uniform-project.json"

_ROUTE_LABELS: dict[str, str] = {
    "list": "List all",
    "get": "Get one",
    "create": "Create",
    "update": "Update",
    "delete": "Delete",
}


class ProjectFilesGenerator:
    """Emits the files at the project root."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def plan_metadata(self, config: ProjectConfig, plan: GenerationPlan, generated_at: datetime) -> None:
        # Total is read lazily so it includes files planned after this one.
        plan.add_file(
            METADATA_FILE,
            "project-metadata",
            lambda: self.render_metadata(config, generated_at, total_files=len(plan.files)),
        )

    def plan_root_files(self, config: ProjectConfig, plan: GenerationPlan, generated_at: datetime) -> None:
        plan.add_file("README.md", "project-readme", lambda: self.render_readme(config, generated_at))
        plan.add_file(".gitignore", "project-gitignore", lambda: self.render_gitignore(config))
        if config.needs_backend and config.needs_frontend:
            plan.add_file(
                "start-all.sh",
                "project-script",
                lambda: self.render_start_script(config),
                executable=True,
            )

    # -- Emitters ----------------------------------------------------------

    def build_metadata(
        self, config: ProjectConfig, generated_at: datetime, total_files: int = 0
    ) -> ProjectMetadata:
        return ProjectMetadata(
            name=config.project_name,
            type=config.project_type,
            generated=generated_at,
            generator=f"uniform-build v{__version__}",
            entities=list(config.entities),
            relationships=list(config.relationships),
            edges={entity: list(edges) for entity, edges in config.edges.items()},
            features=list(config.features),
            kill_switches=config.kill_switches,
            stats=MetadataStats(total_files=total_files),
        )

    def render_metadata(
        self, config: ProjectConfig, generated_at: datetime, total_files: int = 0
    ) -> str:
        return self.build_metadata(config, generated_at, total_files).to_json() + "\n"

    def render_readme(self, config: ProjectConfig, generated_at: datetime) -> str:
        route_sets = BackendGenerator.route_sets(config) if config.needs_backend else []
        context: dict[str, Any] = {
            "project_name": config.project_name,
            "generated_on": generated_at.date().isoformat(),
            "needs_backend": config.needs_backend,
            "needs_frontend": config.needs_frontend,
            "kill_switches": config.kill_switches,
            "backend": config.backend,
            "ports": config.ports,
            "entities": list(config.entities),
            "relationship_lines": [describe_relationship(r) for r in config.relationships],
            "route_sets": route_sets,
            "route_labels": _ROUTE_LABELS,
            "features": list(config.features),
            "generated_lines": _generated_lines(config),
        }
        return self.renderer.render("README.md.j2", context)

    def render_gitignore(self, config: ProjectConfig) -> str:
        return self.renderer.render("gitignore.j2", {"needs_frontend": config.needs_frontend})

    def render_start_script(self, config: ProjectConfig) -> str:
        return self.renderer.render(
            "start-all.sh.j2", {"project_name": config.project_name, "ports": config.ports}
        )


def describe_relationship(relationship: Relationship) -> str:
    """One README line for a collected relationship."""
    first, second = relationship.entity1, relationship.entity2
    if relationship.type is RelationshipChoice.ENTITY1_TO_ENTITY2:
        return f"{first} → {second} (many-to-one)"
    if relationship.type is RelationshipChoice.ENTITY2_TO_ENTITY1:
        return f"{second} → {first} (many-to-one)"
    if relationship.type is RelationshipChoice.MANY_TO_MANY:
        return f"{first} ↔ {second} (many-to-many)"
    return f"{first} / {second} (none)"


def _generated_lines(config: ProjectConfig) -> list[str]:
    switches = config.kill_switches
    lines = []
    if config.needs_backend:
        lines.append(f"Backend with {len(config.entities)} models and CRUD routes")
    else:
        lines.append("No backend")
    if config.needs_frontend:
        lines.append("Frontend with React + Vite")
        if not switches.skip_api_service:
            lines.append("API service layer")
        if FrontendGenerator.has_entity_bindings(config):
            lines.append(f"{len(config.entities)} context providers and entity pages")
        lines.append("Reusable components (Button, Card, Loading, Header)")
    else:
        lines.append("No frontend")
    lines.append(f"{len(config.relationships)} relationship(s)")
    return lines
