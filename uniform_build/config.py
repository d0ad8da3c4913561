"""Uniform Build settings.

Tool-level settings (where to write, which ports the generated apps use,
how to reach the uniformity checker).  These are distinct from the
per-project ``ProjectConfig`` produced by the configuration builder: the
settings describe the generator, the project config describes one run.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_DEFAULT_CHECKER_PATH = (
    Path(__file__).resolve().parent.parent.parent / "uniformity-checker" / "checker.js"
)


class PortConfig(BaseModel):
    """Ports used by the generated backend and frontend dev servers."""

    backend: int = Field(default=5555, ge=1, le=65535)
    frontend: int = Field(default=3000, ge=1, le=65535)

    def as_dict(self) -> dict[str, int]:
        """Return a plain ``{service: port}`` mapping."""
        return {"backend": self.backend, "frontend": self.frontend}


class Settings(BaseModel):
    """Global Uniform Build settings.

    Created once by the CLI entry point and handed to the generation
    session.  Every field has a default so ``Settings()`` is always usable.
    """

    output_dir: Path = Field(default=Path("."))
    checker_path: Path = Field(default=_DEFAULT_CHECKER_PATH)
    checker_runtime: str = Field(default="node")
    checker_timeout: int = Field(default=120, ge=1, description="Checker timeout in seconds")
    run_checker: bool = Field(default=True)
    ports: PortConfig = Field(default_factory=PortConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            UNIFORM_OUTPUT_DIR, UNIFORM_CHECKER_PATH, UNIFORM_CHECKER_RUNTIME,
            UNIFORM_SKIP_CHECK, UNIFORM_BACKEND_PORT, UNIFORM_FRONTEND_PORT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("UNIFORM_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["UNIFORM_OUTPUT_DIR"])
        if os.environ.get("UNIFORM_CHECKER_PATH"):
            kwargs["checker_path"] = Path(os.environ["UNIFORM_CHECKER_PATH"])
        if os.environ.get("UNIFORM_CHECKER_RUNTIME"):
            kwargs["checker_runtime"] = os.environ["UNIFORM_CHECKER_RUNTIME"]
        if os.environ.get("UNIFORM_SKIP_CHECK", "").lower() in ("1", "true", "yes"):
            kwargs["run_checker"] = False

        port_kwargs: dict[str, Any] = {}
        if os.environ.get("UNIFORM_BACKEND_PORT"):
            port_kwargs["backend"] = int(os.environ["UNIFORM_BACKEND_PORT"])
        if os.environ.get("UNIFORM_FRONTEND_PORT"):
            port_kwargs["frontend"] = int(os.environ["UNIFORM_FRONTEND_PORT"])

        return cls(ports=PortConfig(**port_kwargs), **kwargs)
