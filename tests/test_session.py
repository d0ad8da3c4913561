"""Tests for the generation session state machine (uniform_build.session)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from uniform_build.checker import CheckResult, UniformityChecker
from uniform_build.config import PortConfig, Settings
from uniform_build.errors import ConfigurationError, PreconditionError, ValidationWarning
from uniform_build.prompts import PresetAnswerSource, collect_answers
from uniform_build.session import GenerationSession, RunState

pytestmark = pytest.mark.unit

BLOG = {
    "project_name": "blog-app",
    "project_type": "fullstack",
    "entities": "Post,Comment",
    "has_relationships": True,
    "relationships": [{"entity1": "Comment", "entity2": "Post", "type": "entity1-to-entity2"}],
}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(output_dir=tmp_path, run_checker=False)


def fake_checker(**kwargs) -> UniformityChecker:
    checker = MagicMock(spec=UniformityChecker)
    checker.check = AsyncMock(**kwargs)
    return checker


class TestStates:
    @pytest.mark.asyncio
    async def test_done(self, settings, tmp_path):
        session = GenerationSession(settings, PresetAnswerSource(BLOG))
        result = await session.run()

        assert result.state is RunState.DONE
        assert session.state is RunState.DONE
        assert result.summary.project_root == tmp_path / "blog-app"
        assert (tmp_path / "blog-app" / "backend" / "app" / "models.py").exists()
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_declined_confirm_answer_cancels_without_writes(self, settings, tmp_path):
        session = GenerationSession(settings, PresetAnswerSource(dict(BLOG, confirm=False)))
        result = await session.run()

        assert result.cancelled
        assert result.plan is None
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_declined_plan_cancels_without_writes(self, settings, tmp_path):
        seen = []

        def proceed(plan):
            seen.append(plan)
            return False

        session = GenerationSession(settings, PresetAnswerSource(BLOG), proceed=proceed)
        result = await session.run()

        assert result.cancelled
        assert result.plan is seen[0]
        assert result.summary is None
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_ctrl_c_during_collection_cancels(self, settings):
        source = MagicMock()
        source.ask.side_effect = KeyboardInterrupt
        result = await GenerationSession(settings, source).run()
        assert result.state is RunState.CANCELLED

    @pytest.mark.asyncio
    async def test_existing_target_is_fatal(self, settings, tmp_path):
        (tmp_path / "blog-app").mkdir()
        session = GenerationSession(settings, PresetAnswerSource(BLOG))
        with pytest.raises(PreconditionError):
            await session.run()
        assert session.state is RunState.GENERATING

    @pytest.mark.asyncio
    async def test_duplicate_entities_fail_before_writes(self, settings, tmp_path):
        session = GenerationSession(
            settings, PresetAnswerSource(dict(BLOG, entities="post,Post", has_relationships=False))
        )
        with pytest.raises(ConfigurationError, match="Duplicate"):
            await session.run()
        assert session.state is RunState.RESOLVING
        assert list(tmp_path.iterdir()) == []


class TestResolve:
    def test_ports_flow_into_config(self, tmp_path):
        settings = Settings(output_dir=tmp_path, ports=PortConfig(backend=8000, frontend=8080))
        session = GenerationSession(settings, PresetAnswerSource(BLOG))
        config = session.resolve(collect_answers(session.source))
        assert config.ports.backend == 8000
        assert [e.foreign_key for e in config.edges_for("Comment")] == ["post_id"]


class TestChecker:
    @pytest.mark.asyncio
    async def test_checker_warning_does_not_fail_run(self, tmp_path):
        settings = Settings(output_dir=tmp_path, run_checker=True)
        checker = fake_checker(side_effect=ValidationWarning("Some uniformity issues detected"))
        result = await GenerationSession(settings, PresetAnswerSource(BLOG), checker=checker).run()

        assert result.state is RunState.DONE
        assert result.warnings == ["Some uniformity issues detected"]
        checker.check.assert_awaited_once_with(tmp_path / "blog-app")

    @pytest.mark.asyncio
    async def test_passing_checker(self, tmp_path):
        settings = Settings(output_dir=tmp_path, run_checker=True)
        checker = fake_checker(return_value=CheckResult(returncode=0, output="100%"))
        result = await GenerationSession(settings, PresetAnswerSource(BLOG), checker=checker).run()
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_checker_skipped_when_disabled(self, settings):
        checker = fake_checker()
        await GenerationSession(settings, PresetAnswerSource(BLOG), checker=checker).run()
        checker.check.assert_not_awaited()
