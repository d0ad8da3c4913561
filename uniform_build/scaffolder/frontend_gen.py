"""Frontend emitters: React + Vite application, API client, providers, pages.

Three shapes of ``App.jsx`` exist:

* static: frontend-only project without any backend,
* basic: no entity bindings (providers are switched off),
* routed: one provider, hook and page per entity.
"""

from __future__ import annotations

from typing import Any

from ..models import ProjectConfig
from .ir import build_client_spec, build_page_spec, build_provider_spec
from .plan import GenerationPlan
from .templates import TemplateRenderer

_COMMON_COMPONENTS = ("Button", "Card", "Loading")


class FrontendGenerator:
    """Emits the ``frontend/`` tree of a generated project."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    # -- Planning ----------------------------------------------------------

    def plan(self, config: ProjectConfig, plan: GenerationPlan) -> None:
        """Add the frontend directories and files to *plan*."""
        switches = config.kill_switches
        entity_bindings = self.has_entity_bindings(config)

        plan.add_directories(
            "frontend",
            "frontend/src",
            "frontend/src/components/common",
            "frontend/src/components/layout",
            "frontend/src/pages",
            "frontend/public",
        )
        if not switches.skip_api_service:
            plan.add_directories("frontend/src/services")
        if not switches.skip_providers:
            plan.add_directories("frontend/src/providers", "frontend/src/hooks")

        plan.add_file("frontend/package.json", "frontend-app", lambda: self.render_package_json(config))
        plan.add_file("frontend/vite.config.js", "frontend-app", lambda: self.render_vite_config(config))
        plan.add_file("frontend/index.html", "frontend-app", lambda: self.render_index_html(config))
        plan.add_file("frontend/src/main.jsx", "frontend-app", lambda: self.render_main(config))
        plan.add_file("frontend/src/App.jsx", "frontend-app", lambda: self.render_app(config))

        if not switches.skip_api_service:
            plan.add_file(
                "frontend/src/services/api.js", "frontend-api-client", lambda: self.render_api_client(config)
            )
        else:
            plan.skipped.append("API service (static site)")

        for name in _COMMON_COMPONENTS:
            plan.add_file(
                f"frontend/src/components/common/{name}.jsx",
                "frontend-component",
                lambda name=name: self.render_common_component(name, config),
            )
        plan.add_file(
            "frontend/src/components/layout/Header.jsx", "frontend-component", lambda: self.render_header(config)
        )

        if not entity_bindings:
            plan.skipped.append("Entity components (no backend integration)")
            return

        plan.add_file("frontend/src/pages/HomePage.jsx", "frontend-page", lambda: self.render_home_page(config))
        for entity in config.entities:
            provider = build_provider_spec(entity, config)
            page = build_page_spec(entity, config)
            plan.add_file(
                f"frontend/src/providers/{provider.provider}.jsx",
                "frontend-state-provider",
                lambda entity=entity: self.render_provider(entity, config),
            )
            plan.add_file(
                f"frontend/src/hooks/{provider.hook}.js",
                "frontend-state-provider",
                lambda entity=entity: self.render_hook(entity, config),
            )
            plan.add_file(
                f"frontend/src/pages/{page.component}.jsx",
                "frontend-page",
                lambda entity=entity: self.render_page(entity, config),
            )

    @staticmethod
    def has_entity_bindings(config: ProjectConfig) -> bool:
        """Providers, hooks and entity pages are emitted only with a data source."""
        switches = config.kill_switches
        return (
            not config.frontend.is_static
            and not switches.skip_providers
            and not switches.skip_api_service
            and len(config.entities) > 0
        )

    # -- Context -----------------------------------------------------------

    def _context(self, config: ProjectConfig, **extra: Any) -> dict[str, Any]:
        return {
            "project_name": config.project_name,
            "ports": config.ports,
            **extra,
        }

    # -- Project files -----------------------------------------------------

    def render_package_json(self, config: ProjectConfig) -> str:
        dependencies = {
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
        }
        if self.has_entity_bindings(config):
            dependencies["react-router-dom"] = "^6.20.0"
        if not config.kill_switches.skip_api_service:
            dependencies["axios"] = "^1.6.2"
        package = {
            "name": config.project_name,
            "version": "1.0.0",
            "private": True,
            "type": "module",
            "scripts": {"dev": "vite", "build": "vite build", "preview": "vite preview"},
            "dependencies": dependencies,
            "devDependencies": {"@vitejs/plugin-react": "^4.2.1", "vite": "^5.0.8"},
        }
        return self.renderer.render("frontend/package.json.j2", self._context(config, package=package))

    def render_vite_config(self, config: ProjectConfig) -> str:
        return self.renderer.render("frontend/vite.config.js.j2", self._context(config))

    def render_index_html(self, config: ProjectConfig) -> str:
        return self.renderer.render("frontend/index.html.j2", self._context(config))

    def render_main(self, config: ProjectConfig) -> str:
        return self.renderer.render("frontend/src/main.jsx.j2", self._context(config))

    def render_app(self, config: ProjectConfig) -> str:
        """``src/App.jsx`` in its static, basic or routed shape."""
        if config.frontend.is_static:
            return self.renderer.render("frontend/src/App.static.jsx.j2", self._context(config))
        if not self.has_entity_bindings(config):
            return self.renderer.render("frontend/src/App.basic.jsx.j2", self._context(config))
        pages = [build_page_spec(e, config) for e in config.entities]
        return self.renderer.render("frontend/src/App.jsx.j2", self._context(config, pages=pages))

    def render_api_client(self, config: ProjectConfig) -> str:
        """``src/services/api.js``: one function per generated route."""
        clients = []
        if self.has_entity_bindings(config):
            clients = [build_client_spec(e, config) for e in config.entities]
        base_url = f"http://localhost:{config.ports.backend}{config.backend.api_prefix}"
        return self.renderer.render(
            "frontend/src/services/api.js.j2",
            self._context(config, clients=clients, api_base_url=base_url),
        )

    # -- Components --------------------------------------------------------

    def render_common_component(self, name: str, config: ProjectConfig) -> str:
        return self.renderer.render(f"frontend/src/components/common/{name}.jsx.j2", self._context(config))

    def render_header(self, config: ProjectConfig) -> str:
        return self.renderer.render("frontend/src/components/layout/Header.jsx.j2", self._context(config))

    def render_home_page(self, config: ProjectConfig) -> str:
        return self.renderer.render("frontend/src/pages/HomePage.jsx.j2", self._context(config))

    # -- Entity bindings ---------------------------------------------------

    def render_provider(self, entity: str, config: ProjectConfig) -> str:
        """``src/providers/<E>Provider.jsx``: context holding the entity list."""
        return self.renderer.render(
            "frontend/src/providers/Provider.jsx.j2",
            self._context(config, p=build_provider_spec(entity, config)),
        )

    def render_hook(self, entity: str, config: ProjectConfig) -> str:
        return self.renderer.render(
            "frontend/src/hooks/useEntities.js.j2",
            self._context(config, p=build_provider_spec(entity, config)),
        )

    def render_page(self, entity: str, config: ProjectConfig) -> str:
        return self.renderer.render(
            "frontend/src/pages/EntityPage.jsx.j2",
            self._context(config, page=build_page_spec(entity, config)),
        )
