"""Unit tests for the CLI helpers."""

import pytest
from rich.table import Table

from fluid_ai.analysis.pipeline import FluidityPipeline
from fluid_ai.api.client import FluidAPIClient
from fluid_ai.cli import build_analyzer, fluidity_bar, handle_command, render_history
from fluid_ai.core.models import LayerKey
from fluid_ai.sessions.orchestrator import SessionOrchestrator


class TestFluidityBar:
    """Tests for fluidity_bar()."""

    @pytest.mark.parametrize("fluidity, filled", [(0.0, 0), (0.5, 10), (1.0, 20)])
    def test_fill(self, fluidity, filled):
        bar = fluidity_bar(fluidity)

        assert len(bar) == 20
        assert bar.count("█") == filled


class TestRenderHistory:
    """Tests for render_history()."""

    def test_empty(self):
        assert "No history" in render_history(())

    @pytest.mark.asyncio
    async def test_newest_first(self, pipeline):
        first = await pipeline.analyze("first")
        second = await pipeline.analyze("second")

        table = render_history((first, second))

        assert isinstance(table, Table)
        assert list(table.columns[0].cells) == ["2", "1"]
        assert list(table.columns[1].cells) == ["second", "first"]


class TestHandleCommand:
    """Tests for chat slash commands."""

    @pytest.fixture
    def session(self, pipeline):
        return SessionOrchestrator(pipeline)

    def test_plain_text_is_not_a_command(self, session):
        assert handle_command(session, "hello") is True

    @pytest.mark.parametrize("line", ["/quit", "/exit", "  /QUIT "])
    def test_quit(self, session, line):
        assert handle_command(session, line) is False

    def test_set_moves_slider(self, session):
        assert handle_command(session, "/set emotion 0.2") is True
        assert session.settings.get(LayerKey.EMOTION) == pytest.approx(0.2)

    def test_set_clamps_to_limit(self, session):
        handle_command(session, "/set logic -5")

        assert session.settings.get(LayerKey.LOGIC) == pytest.approx(-0.3)

    @pytest.mark.parametrize("line", ["/set", "/set nope 0.1", "/set meaning abc"])
    def test_bad_set_leaves_sliders(self, session, line):
        assert handle_command(session, line) is True
        assert session.settings.as_adjustments() == {}

    def test_reset_sliders(self, session):
        handle_command(session, "/set context 0.1")
        handle_command(session, "/reset")

        assert session.settings.as_adjustments() == {}

    @pytest.mark.asyncio
    async def test_clear_keeps_history(self, session):
        await session.send("hello")

        handle_command(session, "/clear")

        assert session.conversation == ()
        assert len(session.history) == 1


class TestBuildAnalyzer:
    """Tests for build_analyzer()."""

    def test_local_pipeline(self, settings):
        assert isinstance(build_analyzer(settings, None), FluidityPipeline)

    @pytest.mark.asyncio
    async def test_remote_client(self, settings):
        analyzer = build_analyzer(settings, "http://fluid.example:9000")

        try:
            assert isinstance(analyzer, FluidAPIClient)
            assert str(analyzer._http_client.base_url).startswith("http://fluid.example:9000")
        finally:
            await analyzer.aclose()
