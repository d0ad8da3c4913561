"""Backend emitters: Flask application, models, schemas and routes.

Every ``render_*`` method is a pure function of the ``ProjectConfig``; the
entity-level structures come from :mod:`uniform_build.scaffolder.ir`.
"""

from __future__ import annotations

from typing import Any

from ..models import ProjectConfig
from .ir import (
    RouteSet,
    build_association_tables,
    build_model_spec,
    build_route_set,
    build_schema_spec,
)
from .plan import GenerationPlan
from .templates import TemplateRenderer

_ROUTE_SUMMARIES: dict[str, str] = {
    "list": "List all",
    "get": "Get one",
    "create": "Create",
    "update": "Update",
    "delete": "Delete",
}


class BackendGenerator:
    """Emits the ``backend/`` tree of a generated project."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    # -- Planning ----------------------------------------------------------

    def plan(self, config: ProjectConfig, plan: GenerationPlan) -> None:
        """Add the backend directories and files to *plan*."""
        plan.add_directories("backend", "backend/app", "backend/instance")

        plan.add_file("backend/app/__init__.py", "backend-app", lambda: self.render_app_init(config))
        plan.add_file("backend/app/extensions.py", "backend-app", lambda: self.render_extensions(config))
        plan.add_file("backend/run.py", "backend-app", lambda: self.render_run(config))
        plan.add_file("backend/config.py", "backend-app", lambda: self.render_settings(config))
        plan.add_file("backend/requirements.txt", "backend-app", lambda: self.render_requirements(config))
        plan.add_file("backend/.env.example", "backend-app", lambda: self.render_env_example(config))

        if config.entities:
            plan.add_file("backend/app/models.py", "backend-model", lambda: self.render_models(config))
            plan.add_file("backend/app/schemas.py", "backend-schema", lambda: self.render_schemas(config))
        else:
            plan.skipped.append("Backend models (no entities)")
        plan.add_file("backend/app/routes.py", "backend-routes", lambda: self.render_routes(config))

        if config.backend.needs_api_docs:
            plan.add_file("backend/app/docs.py", "backend-docs", lambda: self.render_docs(config))
        if config.backend.needs_versioning:
            plan.add_file(
                "backend/app/versioning.py", "backend-versioning", lambda: self.render_versioning(config)
            )

    # -- Context -----------------------------------------------------------

    def _context(self, config: ProjectConfig, **extra: Any) -> dict[str, Any]:
        return {
            "project_name": config.project_name,
            "backend": config.backend,
            "ports": config.ports,
            "entity_classes": list(config.entities),
            **extra,
        }

    # -- Emitters ----------------------------------------------------------

    def render_app_init(self, config: ProjectConfig) -> str:
        return self.renderer.render("backend/app/__init__.py.j2", self._context(config))

    def render_extensions(self, config: ProjectConfig) -> str:
        return self.renderer.render("backend/app/extensions.py.j2", self._context(config))

    def render_run(self, config: ProjectConfig) -> str:
        return self.renderer.render("backend/run.py.j2", self._context(config))

    def render_settings(self, config: ProjectConfig) -> str:
        return self.renderer.render("backend/config.py.j2", self._context(config))

    def render_requirements(self, config: ProjectConfig) -> str:
        return self.renderer.render("backend/requirements.txt.j2", self._context(config))

    def render_env_example(self, config: ProjectConfig) -> str:
        return self.renderer.render("backend/env.example.j2", self._context(config))

    def render_models(self, config: ProjectConfig) -> str:
        """``app/models.py``: one SQLAlchemy model per entity plus bridge tables."""
        return self.renderer.render(
            "backend/app/models.py.j2",
            self._context(
                config,
                association_tables=build_association_tables(config),
                models=[build_model_spec(e, config) for e in config.entities],
            ),
        )

    def render_schemas(self, config: ProjectConfig) -> str:
        """``app/schemas.py``: Marshmallow schemas with nested relationships."""
        return self.renderer.render(
            "backend/app/schemas.py.j2",
            self._context(config, schemas=[build_schema_spec(e, config) for e in config.entities]),
        )

    def render_routes(self, config: ProjectConfig) -> str:
        """``app/routes.py``: CRUD endpoints per entity and ``/health``."""
        return self.renderer.render(
            "backend/app/routes.py.j2",
            self._context(config, route_sets=self.route_sets(config)),
        )

    def render_docs(self, config: ProjectConfig) -> str:
        return self.renderer.render(
            "backend/app/docs.py.j2",
            self._context(config, openapi=build_openapi(config, self.route_sets(config))),
        )

    def render_versioning(self, config: ProjectConfig) -> str:
        return self.renderer.render("backend/app/versioning.py.j2", self._context(config))

    @staticmethod
    def route_sets(config: ProjectConfig) -> list[RouteSet]:
        return [build_route_set(e, config) for e in config.entities]


# ---------------------------------------------------------------------------
# OpenAPI document
# ---------------------------------------------------------------------------

def build_openapi(config: ProjectConfig, route_sets: list[RouteSet]) -> dict[str, Any]:
    """An OpenAPI 3 document describing exactly the generated routes."""
    prefix = config.backend.api_prefix
    paths: dict[str, dict[str, Any]] = {}

    for route_set in route_sets:
        for route in route_set.routes:
            operation: dict[str, Any] = {
                "operationId": route.function,
                "summary": f"{_ROUTE_SUMMARIES[route.action]} {route_set.names.plural}",
                "tags": [route_set.names.class_name],
                "responses": _responses_for(route.action),
            }
            if route.takes_id:
                operation["parameters"] = [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}}
                ]
            if route.action in ("create", "update"):
                schema: dict[str, Any] = {"type": "object"}
                if route.action == "create":
                    schema["required"] = list(route_set.required_fields)
                operation["requestBody"] = {
                    "required": True,
                    "content": {"application/json": {"schema": schema}},
                }
            paths.setdefault(prefix + route.path, {})[route.method.lower()] = operation

    paths[prefix + "/health"] = {
        "get": {"operationId": "health", "summary": "Health check",
                "responses": {"200": {"description": "OK"}}}
    }
    return {
        "openapi": "3.0.3",
        "info": {"title": config.project_name, "version": "1.0.0"},
        "paths": paths,
    }


def _responses_for(action: str) -> dict[str, Any]:
    if action == "create":
        return {"201": {"description": "Created"}, "400": {"description": "Missing field"}}
    if action == "delete":
        return {"204": {"description": "Deleted"}, "404": {"description": "Not found"}}
    if action == "list":
        return {"200": {"description": "OK"}}
    return {"200": {"description": "OK"}, "404": {"description": "Not found"}}
