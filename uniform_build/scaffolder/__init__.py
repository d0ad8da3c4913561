"""Uniform Build scaffolder -- renders a consistent Flask + React project.

This module takes a ``ProjectConfig`` and renders a project directory whose
backend models, schemas and routes agree with the frontend API client,
providers and pages.

Quick usage::

    from uniform_build.scaffolder import ProjectGenerator

    generator = ProjectGenerator(config)
    plan = generator.plan()
    summary = await generator.generate("/tmp/output", plan)
"""

from uniform_build.scaffolder.generator import ProjectGenerator
from uniform_build.scaffolder.plan import GenerationPlan, GenerationSummary, PlannedFile
from uniform_build.scaffolder.templates import TemplateRenderer

__all__ = [
    "GenerationPlan",
    "GenerationSummary",
    "PlannedFile",
    "ProjectGenerator",
    "TemplateRenderer",
]
