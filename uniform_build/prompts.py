"""Answer sources that drive the question decision table.

``InteractiveAnswerSource`` asks the operator through Rich prompts and
re-asks on invalid input.  ``PresetAnswerSource`` answers from a YAML or
JSON answer file, which makes whole runs scriptable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import yaml
from rich.console import Console
from rich.prompt import Confirm, Prompt

from .errors import ValidationError
from .models import Answers, RelationshipChoice
from .questions import Question, answers_from_state, apply_answer, next_question
from .utils import console as default_console
from .utils import print_error


class AnswerSource(Protocol):
    """Something that can answer a ``Question``."""

    def ask(self, question: Question) -> Any: ...

    def on_invalid(self, question: Question, error: ValidationError) -> None:
        """Called when an answer is rejected; raise to abort collection."""


def collect_answers(source: AnswerSource) -> Answers:
    """Run the decision table to completion against *source*."""
    state: dict[str, Any] = {}
    question = next_question(state)
    while question is not None:
        value = source.ask(question)
        try:
            state = apply_answer(state, question, value)
        except ValidationError as exc:
            source.on_invalid(question, exc)
            continue
        question = next_question(state)
    return answers_from_state(state)


# ---------------------------------------------------------------------------
# Interactive
# ---------------------------------------------------------------------------


class InteractiveAnswerSource:
    """Ask questions on the terminal with Rich prompts."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console
        self._announced_relationships = False

    def ask(self, question: Question) -> Any:
        if question.pair is not None and not self._announced_relationships:
            self.console.print("\n[bold cyan]Define Relationships[/bold cyan]\n")
            self._announced_relationships = True

        if question.kind == "confirm":
            return Confirm.ask(
                question.message, default=bool(question.default), console=self.console
            )
        if question.kind == "select":
            return self._ask_select(question)
        if question.kind == "checkbox":
            return self._ask_checkbox(question)
        if question.default is None:
            return Prompt.ask(question.message, console=self.console)
        return Prompt.ask(question.message, default=question.default, console=self.console)

    def on_invalid(self, question: Question, error: ValidationError) -> None:
        print_error(str(error))

    def _ask_select(self, question: Question) -> str:
        self.console.print(f"[bold]{question.message}[/bold]")
        for index, choice in enumerate(question.choices, start=1):
            self.console.print(f"  {index}. {choice.label}")
        default_index = next(
            (str(i) for i, c in enumerate(question.choices, start=1) if c.value == question.default),
            "1",
        )
        picked = Prompt.ask(
            "Choose",
            choices=[str(i) for i in range(1, len(question.choices) + 1)],
            default=default_index,
            console=self.console,
        )
        return question.choices[int(picked) - 1].value

    def _ask_checkbox(self, question: Question) -> list[str]:
        self.console.print(f"[bold]{question.message}[/bold]")
        for index, choice in enumerate(question.choices, start=1):
            self.console.print(f"  {index}. {choice.label}")
        raw = Prompt.ask(
            "Numbers, comma-separated (blank for none)", default="", console=self.console
        )
        picked: list[str] = []
        for part in raw.split(","):
            part = part.strip()
            if not part:
                continue
            if part.isdigit() and 1 <= int(part) <= len(question.choices):
                picked.append(question.choices[int(part) - 1].value)
            else:
                # Let apply_answer reject it so the question is asked again.
                picked.append(part)
        return picked


# ---------------------------------------------------------------------------
# Preset (answer file)
# ---------------------------------------------------------------------------


class PresetAnswerSource:
    """Answer questions from a pre-built answer record.

    Keys mirror the question keys (``project_name``, ``project_type``,
    ``entities``, ...).  ``relationships`` is a list of
    ``{entity1, entity2, type}`` mappings; a pair may be listed in either
    order.  Missing keys fall back to the question default.
    """

    def __init__(self, data: dict[str, Any]) -> None:
        self.data = dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "PresetAnswerSource":
        """Load answers from a YAML (or JSON, which is valid YAML) file."""
        raw = Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(raw) or {}
        if not isinstance(data, dict):
            raise ValidationError("answers", f"Answer file {path} must contain a mapping")
        return cls(data)

    def ask(self, question: Question) -> Any:
        if question.pair is not None:
            return self._relationship_for(*question.pair)
        if question.key in self.data:
            return self.data[question.key]
        if question.default is None:
            raise ValidationError(question.key, f"Answer file is missing {question.key!r}")
        return question.default

    def on_invalid(self, question: Question, error: ValidationError) -> None:
        raise error

    def _relationship_for(self, entity1: str, entity2: str) -> str:
        for item in self.data.get("relationships") or []:
            first = str(item.get("entity1", ""))
            second = str(item.get("entity2", ""))
            kind = str(item.get("type", "none"))
            if _same(first, entity1) and _same(second, entity2):
                return kind
            if _same(first, entity2) and _same(second, entity1):
                return _flip(kind)
        return "none"


def _same(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def _flip(kind: str) -> str:
    try:
        return RelationshipChoice(kind).flipped().value
    except ValueError:
        # Unknown values pass through so apply_answer reports them.
        return kind
