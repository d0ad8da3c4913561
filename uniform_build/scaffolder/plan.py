"""Generation plan and summary records.

A ``GenerationPlan`` is computed from the kill-switches before anything is
written.  It is shown to the operator for confirmation and then executed
file by file, so the plan and the generated tree cannot disagree.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class PlannedFile:
    """One file the generator will write.

    ``render`` is a zero-argument callable returning the file content; it is
    only invoked during generation.
    """

    path: str
    emitter: str
    render: Callable[[], str]
    executable: bool = False


@dataclass
class GenerationPlan:
    """Ordered directories and files for one project."""

    project_name: str
    directories: list[str] = field(default_factory=list)
    files: list[PlannedFile] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def add_file(
        self, path: str, emitter: str, render: Callable[[], str], *, executable: bool = False
    ) -> None:
        self.files.append(PlannedFile(path, emitter, render, executable))

    def add_directories(self, *paths: str) -> None:
        for path in paths:
            if path not in self.directories:
                self.directories.append(path)

    @property
    def file_paths(self) -> list[str]:
        return [f.path for f in self.files]

    def files_by_emitter(self, emitter: str) -> list[PlannedFile]:
        return [f for f in self.files if f.emitter == emitter]


@dataclass
class GenerationSummary:
    """What a generation run produced."""

    project_root: Path
    files_written: list[Path] = field(default_factory=list)
    entity_count: int = 0
    relationship_count: int = 0
    skipped: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.files_written)
