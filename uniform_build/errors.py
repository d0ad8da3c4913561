"""Error taxonomy for Uniform Build.

Every fatal condition raised by the engine derives from
``UniformBuildError`` so the CLI can turn it into a readable message and a
non-zero exit status.  ``ValidationError`` is the one recoverable error: it
is raised while an answer is being collected and the interactive source
re-asks the question instead of aborting.
"""

from __future__ import annotations


class UniformBuildError(Exception):
    """Base class for all Uniform Build errors."""


class ValidationError(UniformBuildError):
    """An operator answer is malformed (bad project name, no entities, ...)."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(message)


class ConfigurationError(UniformBuildError):
    """The resolver or config builder found an inconsistent answer record."""


class PreconditionError(UniformBuildError):
    """The target project directory already exists."""


class GenerationError(UniformBuildError):
    """Writing the generated tree failed part-way through.

    Files written before the failure are left in place.
    """


class ValidationWarning(UserWarning):
    """The uniformity checker reported issues or could not be run."""
