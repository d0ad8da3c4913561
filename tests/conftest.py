"""Shared pytest fixtures for the Uniform Build test suite.

Provides reusable fixtures for:
- Answer records for the common project shapes
- Resolved ``ProjectConfig`` objects built from those answers
- A template renderer and a fixed generation timestamp
- Mock subprocess helpers
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from uniform_build.builder import build_config
from uniform_build.models import (
    Answers,
    ApiConsumer,
    BackendNeed,
    ProjectConfig,
    ProjectType,
    Relationship,
    RelationshipChoice,
)
from uniform_build.resolver import choices_from_relationships, resolve
from uniform_build.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------

@pytest.fixture
def make_answers() -> Callable[..., Answers]:
    """Factory for ``Answers`` with full-stack defaults.

    Usage:
        answers = make_answers(entities=["User"], project_type="backend-only")
    """
    def factory(**overrides: Any) -> Answers:
        data: dict[str, Any] = {
            "project_name": "test-app",
            "project_type": ProjectType.FULLSTACK,
            "entities": ["Item"],
            "has_relationships": False,
            "relationships": [],
            "features": [],
            "confirm": True,
        }
        data.update(overrides)
        return Answers(**data)

    return factory


@pytest.fixture
def blog_answers(make_answers) -> Answers:
    """Full-stack blog where each Comment belongs to one Post."""
    return make_answers(
        project_name="blog-app",
        entities=["Post", "Comment"],
        has_relationships=True,
        relationships=[
            Relationship(
                entity1="Post",
                entity2="Comment",
                type=RelationshipChoice.ENTITY2_TO_ENTITY1,
            )
        ],
    )


# ---------------------------------------------------------------------------
# Configs
# ---------------------------------------------------------------------------

def config_from_answers(answers: Answers) -> ProjectConfig:
    choices = choices_from_relationships(answers.relationships) if answers.has_relationships else {}
    edges = resolve(answers.entities, choices)
    return build_config(answers, answers.entities, edges)


@pytest.fixture
def make_config(make_answers) -> Callable[..., ProjectConfig]:
    """Factory running answers through the resolver and config builder."""
    def factory(**overrides: Any) -> ProjectConfig:
        return config_from_answers(make_answers(**overrides))

    return factory


@pytest.fixture
def blog_config(blog_answers) -> ProjectConfig:
    return config_from_answers(blog_answers)


@pytest.fixture
def tagged_config(make_config) -> ProjectConfig:
    """User owns Posts, Posts and Tags are many-to-many."""
    return make_config(
        project_name="tag-app",
        entities=["User", "Post", "Tag"],
        has_relationships=True,
        relationships=[
            Relationship(entity1="User", entity2="Post", type=RelationshipChoice.ENTITY2_TO_ENTITY1),
            Relationship(entity1="Post", entity2="Tag", type=RelationshipChoice.MANY_TO_MANY),
        ],
    )


@pytest.fixture
def cyclic_config(make_config) -> ProjectConfig:
    """Posts and Comments belong to a User, Comments also belong to a Post."""
    return make_config(
        project_name="forum",
        project_type=ProjectType.BACKEND_ONLY,
        api_consumer=ApiConsumer.INTERNAL,
        entities=["User", "Post", "Comment"],
        has_relationships=True,
        relationships=[
            Relationship(entity1="User", entity2="Post", type=RelationshipChoice.ENTITY2_TO_ENTITY1),
            Relationship(entity1="User", entity2="Comment", type=RelationshipChoice.ENTITY2_TO_ENTITY1),
            Relationship(entity1="Post", entity2="Comment", type=RelationshipChoice.ENTITY2_TO_ENTITY1),
        ],
    )


@pytest.fixture
def mobile_api_config(make_config) -> ProjectConfig:
    return make_config(
        project_name="mobile-api",
        project_type=ProjectType.BACKEND_ONLY,
        api_consumer=ApiConsumer.MOBILE,
        entities=["User", "Recipe"],
    )


@pytest.fixture
def static_site_config(make_config) -> ProjectConfig:
    return make_config(
        project_name="landing-page",
        project_type=ProjectType.FRONTEND_ONLY,
        backend_needed=BackendNeed.NONE,
        entities=[],
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def generated_at() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
