"""Command-line entry point.

Usage::

    uniform-build
    uniform-build --answers blog.yaml -o ./projects --yes
    python -m uniform_build --no-check
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.prompt import Confirm

from . import __version__
from .config import Settings
from .errors import UniformBuildError
from .prompts import AnswerSource, InteractiveAnswerSource, PresetAnswerSource
from .scaffolder import GenerationPlan
from .session import GenerationSession
from .utils import console, print_banner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uniform-build",
        description="Uniform Build -- generate a consistent Flask + React project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  uniform-build\n"
            "  uniform-build --answers blog.yaml --yes\n"
            "  uniform-build -o ./projects --no-check\n"
        ),
    )
    parser.add_argument(
        "--answers", "-a",
        default=None,
        help="YAML or JSON answer file (skips the interactive questions)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory the project folder is created in (default: current directory)",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Do not ask for confirmation after showing the generation plan",
    )
    parser.add_argument(
        "--no-check",
        action="store_true",
        help="Skip the uniformity checker",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _confirm_plan(plan: GenerationPlan) -> bool:
    return Confirm.ask("Proceed with generation?", default=True, console=console)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``uniform-build``."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
        if args.output:
            settings.output_dir = Path(args.output)
        if args.no_check:
            settings.run_checker = False

        source: AnswerSource
        if args.answers:
            source = PresetAnswerSource.from_file(args.answers)
        else:
            print_banner("Uniform Build")
            source = InteractiveAnswerSource(console)

        session = GenerationSession(
            settings, source, proceed=None if args.yes else _confirm_plan
        )
        asyncio.run(session.run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Cancelled[/bold red]\n")
        sys.exit(0)
    except UniformBuildError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)
    except Exception as exc:
        console.print(f"[bold red]Error:[/bold red] {type(exc).__name__}: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
