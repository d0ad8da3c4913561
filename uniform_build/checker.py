"""Uniformity checker integration.

The checker is an external Node script that inspects a generated project
and exits non-zero when the layers disagree.  Its verdict never fails a
run: a missing checker and reported issues both surface as
``ValidationWarning``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import ValidationWarning
from .utils import run_command


@dataclass
class CheckResult:
    """Output of a successful checker run."""

    returncode: int
    output: str


class UniformityChecker:
    """Runs ``<runtime> <checker_path> <project_path>``."""

    def __init__(self, checker_path: Path, runtime: str = "node", timeout: int = 120) -> None:
        self.checker_path = Path(checker_path)
        self.runtime = runtime
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return self.checker_path.is_file()

    async def check(self, project_path: Path) -> CheckResult:
        """Check *project_path*.

        Raises:
            ValidationWarning: The checker is not installed, could not be
                started, or reported uniformity issues.
        """
        if not self.available:
            raise ValidationWarning(
                f"Uniformity checker not found - skipping validation "
                f"(install it at {self.checker_path.parent})"
            )

        cmd = [self.runtime, str(self.checker_path), str(Path(project_path).resolve())]
        try:
            rc, stdout, stderr = await run_command(
                cmd, cwd=self.checker_path.parent, timeout=self.timeout
            )
        except OSError as exc:
            raise ValidationWarning(f"Could not run uniformity checker: {exc}") from exc

        if rc != 0:
            details = stdout or stderr
            message = "Some uniformity issues detected"
            if details:
                message = f"{message}:\n{details}"
            raise ValidationWarning(message)
        return CheckResult(returncode=rc, output=stdout)
