"""Generation session: one operator run from first question to summary.

Drives the run through its states::

    COLLECTING -> RESOLVING -> PLANNING -> AWAITING_CONFIRMATION
        -> GENERATING -> DONE
                      \\-> CANCELLED

Cancellation is only possible before anything touches the filesystem.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .builder import build_config
from .checker import UniformityChecker
from .config import Settings
from .errors import ValidationWarning
from .models import Answers, ProjectConfig
from .prompts import AnswerSource, collect_answers
from .resolver import choices_from_relationships, resolve
from .scaffolder import GenerationPlan, GenerationSummary, ProjectGenerator
from .utils import (
    console,
    create_progress,
    format_duration,
    print_error,
    print_skip,
    print_step,
    print_success,
    print_summary_table,
    print_warning,
)


class RunState(str, Enum):
    COLLECTING = "collecting"
    RESOLVING = "resolving"
    PLANNING = "planning"
    AWAITING_CONFIRMATION = "awaiting-confirmation"
    GENERATING = "generating"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass
class SessionResult:
    """Final state of a session and what it produced."""

    state: RunState
    config: Optional[ProjectConfig] = None
    plan: Optional[GenerationPlan] = None
    summary: Optional[GenerationSummary] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.state is RunState.CANCELLED


class GenerationSession:
    """Runs the full generation flow against an answer source.

    Args:
        settings: Tool settings (output directory, ports, checker).
        source: Where answers come from.
        proceed: Asked with the computed plan before anything is written.
            Returning ``False`` cancels the run.  ``None`` proceeds.
        checker: Overrides the checker built from *settings*.
    """

    def __init__(
        self,
        settings: Settings,
        source: AnswerSource,
        *,
        proceed: Callable[[GenerationPlan], bool] | None = None,
        checker: UniformityChecker | None = None,
    ) -> None:
        self.settings = settings
        self.source = source
        self.proceed = proceed
        self.checker = checker or UniformityChecker(
            settings.checker_path,
            runtime=settings.checker_runtime,
            timeout=settings.checker_timeout,
        )
        self.state = RunState.COLLECTING

    async def run(self) -> SessionResult:
        self.state = RunState.COLLECTING
        try:
            answers = collect_answers(self.source)
        except KeyboardInterrupt:
            return self._cancel()
        if not answers.confirm:
            return self._cancel()

        self.state = RunState.RESOLVING
        console.print("\n[green]Analyzing requirements...[/green]\n")
        config = self.resolve(answers)

        self.state = RunState.PLANNING
        generator = ProjectGenerator(config)
        plan = generator.plan()
        show_plan(config, plan)

        self.state = RunState.AWAITING_CONFIRMATION
        if self.proceed is not None and not self.proceed(plan):
            return self._cancel(config, plan)

        self.state = RunState.GENERATING
        with create_progress() as progress:
            task = progress.add_task(f"Generating {config.project_name}...", total=len(plan.files))
            summary = await generator.generate(
                self.settings.output_dir,
                plan,
                on_file=lambda _planned: progress.advance(task),
            )
        print_success("\nPROJECT GENERATED!\n")

        result = SessionResult(RunState.DONE, config=config, plan=plan, summary=summary)
        if self.settings.run_checker:
            await self._run_checker(summary, result)

        self.state = RunState.DONE
        show_summary(summary)
        show_next_steps(config)
        return result

    def resolve(self, answers: Answers) -> ProjectConfig:
        """Resolve relationships and build the frozen project config."""
        entities = list(answers.entities)
        choices = (
            choices_from_relationships(answers.relationships)
            if answers.has_relationships
            else {}
        )
        edges = resolve(entities, choices)
        return build_config(answers, entities, edges, ports=self.settings.ports)

    async def _run_checker(self, summary: GenerationSummary, result: SessionResult) -> None:
        console.print("\n[bold cyan]Running Uniformity Check...[/bold cyan]\n")
        try:
            check = await self.checker.check(summary.project_root)
        except ValidationWarning as warning:
            print_warning(str(warning))
            result.warnings.append(str(warning))
            return
        if check.output:
            console.print(check.output)
        print_success("Uniformity check passed!\n")

    def _cancel(
        self, config: ProjectConfig | None = None, plan: GenerationPlan | None = None
    ) -> SessionResult:
        self.state = RunState.CANCELLED
        print_error("\nCancelled\n")
        return SessionResult(RunState.CANCELLED, config=config, plan=plan)


# ---------------------------------------------------------------------------
# Operator output
# ---------------------------------------------------------------------------

def show_plan(config: ProjectConfig, plan: GenerationPlan) -> None:
    """Print what will (and will not) be generated."""
    switches = config.kill_switches
    rows = {
        "Project": config.project_name,
        "Type": config.project_type.value,
        "Entities": ", ".join(config.entities) or "(none)",
        "Relationships": str(len(config.relationships)),
        "Files": str(len(plan.files)),
    }
    if config.backend.api_consumer is not None:
        rows["API consumer"] = config.backend.api_consumer.value
    print_summary_table(rows, title="Generation Plan")

    if not switches.skip_backend:
        print_step("Backend (Flask + SQLAlchemy)")
    if not switches.skip_frontend:
        print_step("Frontend (React + Vite)")
    if config.backend.needs_api_docs and not switches.skip_backend:
        print_step("API documentation")
    if config.backend.needs_versioning and not switches.skip_backend:
        print_step("API versioning (/v1)")
    for skipped in plan.skipped:
        print_skip(skipped)
    console.print()


def show_summary(summary: GenerationSummary) -> None:
    print_summary_table(
        {
            "Location": str(summary.project_root),
            "Files written": str(summary.total_files),
            "Entities": str(summary.entity_count),
            "Relationships": str(summary.relationship_count),
            "Skipped": ", ".join(summary.skipped) or "-",
            "Duration": format_duration(summary.duration_seconds),
        },
        title="Generation Summary",
    )


def show_next_steps(config: ProjectConfig) -> None:
    console.print("[bold cyan]Next Steps:[/bold cyan]\n")
    step = 1
    console.print(f"{step}. Navigate to your project:")
    console.print(f"   [dim]cd {config.project_name}[/dim]\n")

    if config.needs_backend:
        step += 1
        console.print(f"{step}. Setup backend:")
        for line in (
            "cd backend",
            "python -m venv venv",
            "source venv/bin/activate",
            "pip install -r requirements.txt",
            "python run.py",
        ):
            console.print(f"   [dim]{line}[/dim]")
        console.print()

    if config.needs_frontend:
        step += 1
        console.print(f"{step}. Setup frontend:")
        for line in ("cd frontend", "npm install", "npm run dev"):
            console.print(f"   [dim]{line}[/dim]")
        console.print()

    if config.needs_backend and config.needs_frontend:
        step += 1
        ports = config.ports
        console.print(f"{step}. Access your app (or run ./start-all.sh):")
        console.print(f"   [dim]Frontend: http://localhost:{ports.frontend}[/dim]")
        console.print(f"   [dim]Backend:  http://localhost:{ports.backend}[/dim]")
        console.print(
            f"   [dim]Health:   http://localhost:{ports.backend}{config.backend.api_prefix}/health[/dim]\n"
        )
