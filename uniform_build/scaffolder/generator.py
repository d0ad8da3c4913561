"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and produces a ``GenerationPlan`` gated by the
kill-switches, then executes the plan: claim the project root, create the
directories, and write one file at a time.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from collections.abc import Callable
from pathlib import Path

from ..errors import GenerationError, PreconditionError
from ..models import ProjectConfig
from ..utils import write_file
from .backend_gen import BackendGenerator
from .frontend_gen import FrontendGenerator
from .plan import GenerationPlan, GenerationSummary, PlannedFile
from .project_gen import ProjectFilesGenerator
from .templates import TemplateRenderer


class ProjectGenerator:
    """Plans and writes a complete project tree.

    Given a ``ProjectConfig``, generates:
    - ``.uniform-project.json`` with the decisions that produced the tree
    - a Flask backend (unless ``skip_backend``)
    - a React frontend (unless ``skip_frontend``)
    - README, .gitignore and, for full-stack projects, ``start-all.sh``
    """

    def __init__(
        self,
        config: ProjectConfig,
        *,
        generated_at: datetime | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.generated_at = generated_at or datetime.now(timezone.utc)
        self.renderer = renderer or TemplateRenderer()
        self.backend_gen = BackendGenerator(self.renderer)
        self.frontend_gen = FrontendGenerator(self.renderer)
        self.project_gen = ProjectFilesGenerator(self.renderer)

    # -- Public API --------------------------------------------------------

    def plan(self) -> GenerationPlan:
        """Compute every directory and file this run will produce."""
        config = self.config
        switches = config.kill_switches
        plan = GenerationPlan(project_name=config.project_name)

        self.project_gen.plan_metadata(config, plan, self.generated_at)

        if not switches.skip_backend:
            self.backend_gen.plan(config, plan)
        else:
            plan.skipped.append("Backend (frontend-only)")

        if not switches.skip_frontend:
            self.frontend_gen.plan(config, plan)
        else:
            plan.skipped.append("Frontend (backend-only)")

        self.project_gen.plan_root_files(config, plan, self.generated_at)
        return plan

    async def generate(
        self,
        output_dir: str | Path,
        plan: GenerationPlan | None = None,
        on_file: Callable[[PlannedFile], None] | None = None,
    ) -> GenerationSummary:
        """Generate the project under *output_dir*.

        Args:
            output_dir: Parent directory; the project folder is created
                inside it and must not exist yet.
            plan: A plan previously returned by :meth:`plan`.  Computed
                fresh when omitted.
            on_file: Called after each file is written.

        Raises:
            PreconditionError: The project folder already exists.  Nothing
                is written.
            GenerationError: A write failed.  Files written so far remain.
        """
        started = time.monotonic()
        plan = plan or self.plan()
        project_root = Path(output_dir) / self.config.project_name

        if project_root.exists():
            raise PreconditionError(f"Folder {self.config.project_name} already exists!")
        try:
            await asyncio.to_thread(project_root.mkdir, parents=True, exist_ok=False)
        except FileExistsError as exc:
            raise PreconditionError(f"Folder {self.config.project_name} already exists!") from exc
        except OSError as exc:
            raise GenerationError(f"Could not create {project_root}: {exc}") from exc

        summary = GenerationSummary(
            project_root=project_root,
            entity_count=len(self.config.entities),
            relationship_count=len(self.config.relationships),
            skipped=list(plan.skipped),
        )

        try:
            for directory in plan.directories:
                await asyncio.to_thread(
                    (project_root / directory).mkdir, parents=True, exist_ok=True
                )
            for planned in plan.files:
                out = project_root / planned.path
                content = planned.render()
                await asyncio.to_thread(write_file, out, content, executable=planned.executable)
                summary.files_written.append(out)
                if on_file is not None:
                    on_file(planned)
        except OSError as exc:
            raise GenerationError(f"Failed while writing {self.config.project_name}: {exc}") from exc

        summary.duration_seconds = time.monotonic() - started
        return summary
