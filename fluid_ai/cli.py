"""Command-line interface for FluidAI."""

from __future__ import annotations

import asyncio
import json
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from fluid_ai.analysis.adjustments import FluiditySettings
from fluid_ai.analysis.pipeline import FluidityPipeline
from fluid_ai.api.client import FluidAPIClient
from fluid_ai.core.config import Settings, get_settings
from fluid_ai.core.exceptions import ConfigurationError
from fluid_ai.core.models import (
    LAYER_KEYS,
    AiResult,
    AnalysisOutcome,
    ConversationEntry,
    ErrorMessage,
    LoadingMarker,
    UserMessage,
)
from fluid_ai.sessions.orchestrator import Analyzer, SessionOrchestrator
from fluid_ai.utils.logging import setup_logging

app = typer.Typer(
    name="fluid-ai",
    help="FluidAI - four-layer fluidity analysis",
    add_completion=False,
)
console = Console()

BAR_WIDTH = 20

CHAT_HELP = """[cyan]/set LAYER VALUE[/cyan]  move a fluidity slider (-0.3 .. +0.3)
[cyan]/settings[/cyan]         show the sliders
[cyan]/reset[/cyan]            reset all sliders to 0
[cyan]/history[/cyan]          show past analyses
[cyan]/clear[/cyan]            clear the conversation
[cyan]/quit[/cyan]             leave"""


def fluidity_bar(fluidity: float, width: int = BAR_WIDTH) -> str:
    """Render ``fluidity`` as a fixed-width bar."""
    filled = int(round(fluidity * width))
    return "█" * filled + "░" * (width - filled)


def render_outcome(outcome: AnalysisOutcome) -> Table:
    table = Table(title=f"Analysis: {outcome.input}", show_lines=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Layer", style="cyan")
    table.add_column("Fluidity", style="green")
    table.add_column("", justify="right")
    table.add_column("Content")

    for position, (layer, result) in enumerate(outcome.ranked, start=1):
        table.add_row(
            str(position),
            layer.value,
            fluidity_bar(result.fluidity),
            f"{result.fluidity:.3f}",
            result.content,
        )
    return table


def render_history(history: tuple[AnalysisOutcome, ...]) -> Table | str:
    """Newest analysis first, as in the history panel."""
    if not history:
        return "[dim]No history yet[/dim]"

    table = Table(title="History")
    table.add_column("Input #", style="dim", justify="right")
    table.add_column("Input")
    for layer in LAYER_KEYS:
        table.add_column(layer.value, style="green")

    for number in range(len(history), 0, -1):
        outcome = history[number - 1]
        bars = [
            fluidity_bar(outcome.layer_maps[layer].fluidity, width=10)
            if layer in outcome.layer_maps
            else "-"
            for layer in LAYER_KEYS
        ]
        table.add_row(str(number), outcome.input, *bars)
    return table


def render_settings(settings: FluiditySettings) -> Table:
    table = Table(title="Fluidity adjustment")
    table.add_column("Layer", style="cyan")
    table.add_column("Delta", style="green", justify="right")
    for layer, label in settings.describe().items():
        table.add_row(layer, label)
    return table


def render_entry(entry: ConversationEntry) -> None:
    if isinstance(entry, UserMessage):
        console.print(f"[bold]> {entry.text}[/bold]")
    elif isinstance(entry, LoadingMarker):
        console.print("[dim]Processing...[/dim]")
    elif isinstance(entry, AiResult):
        console.print(render_outcome(entry.outcome))
    elif isinstance(entry, ErrorMessage):
        console.print(f"[red]{entry.text}[/red]")


def build_analyzer(settings: Settings, remote: Optional[str]) -> Analyzer:
    """Local pipeline, or a client for a remote endpoint when ``remote`` is set."""
    if remote:
        return FluidAPIClient.from_settings(settings, base_url=remote)
    return FluidityPipeline.from_settings(settings)


def _adjustments_from_options(
    settings: Settings,
    meaning: float,
    emotion: float,
    logic: float,
    context: float,
) -> FluiditySettings:
    sliders = FluiditySettings(
        limit=settings.analysis.adjustment_limit,
        step=settings.analysis.adjustment_step,
    )
    for layer, value in zip(LAYER_KEYS, (meaning, emotion, logic, context)):
        sliders.set(layer, value)
    return sliders


@app.command()
def analyze(
    text: str = typer.Argument(..., help="Text to analyze"),
    meaning: float = typer.Option(0.0, "--meaning", help="Meaning adjustment"),
    emotion: float = typer.Option(0.0, "--emotion", help="Emotion adjustment"),
    logic: float = typer.Option(0.0, "--logic", help="Logic adjustment"),
    context: float = typer.Option(0.0, "--context", help="Context adjustment"),
    remote: Optional[str] = typer.Option(
        None, "--remote", help="Base URL of a FluidAI server"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON result"),
) -> None:
    """Analyze a single input."""
    settings = get_settings()
    setup_logging(settings)

    sliders = _adjustments_from_options(settings, meaning, emotion, logic, context)

    try:
        analyzer = build_analyzer(settings, remote)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(code=1)

    session = SessionOrchestrator(analyzer, settings=sliders)
    asyncio.run(_run_once(session, analyzer, text))

    last = session.conversation[-1] if session.conversation else None
    if isinstance(last, AiResult):
        if as_json:
            console.print_json(
                json.dumps(last.outcome.model_dump(mode="json", by_alias=True))
            )
        else:
            console.print(render_outcome(last.outcome))
    elif isinstance(last, ErrorMessage):
        console.print(f"[red]{last.text}[/red]")
        raise typer.Exit(code=1)
    else:
        console.print("[yellow]Nothing to analyze[/yellow]")
        raise typer.Exit(code=2)


async def _run_once(session: SessionOrchestrator, analyzer: Analyzer, text: str) -> None:
    try:
        await session.send(text)
    finally:
        if isinstance(analyzer, FluidAPIClient):
            await analyzer.aclose()


@app.command()
def chat(
    remote: Optional[str] = typer.Option(
        None, "--remote", help="Base URL of a FluidAI server"
    ),
) -> None:
    """Interactive analysis session."""
    settings = get_settings()
    setup_logging(settings)

    try:
        analyzer = build_analyzer(settings, remote)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(code=1)

    sliders = FluiditySettings(
        limit=settings.analysis.adjustment_limit,
        step=settings.analysis.adjustment_step,
    )
    session = SessionOrchestrator(analyzer, settings=sliders)
    session.on_entry(render_entry)

    console.print(
        Panel.fit(
            "[bold blue]FluidAI[/bold blue]\n"
            "Enter a message to start. Type /help for commands.",
            title="Chat",
        )
    )

    asyncio.run(_chat_loop(session, analyzer))


async def _chat_loop(session: SessionOrchestrator, analyzer: Analyzer) -> None:
    try:
        while True:
            line = await asyncio.to_thread(Prompt.ask, "[bold cyan]you[/bold cyan]")
            if not handle_command(session, line):
                break
            if line.strip().startswith("/"):
                continue
            await session.send(line)
    except (KeyboardInterrupt, EOFError):
        console.print()
    finally:
        if isinstance(analyzer, FluidAPIClient):
            await analyzer.aclose()


def handle_command(session: SessionOrchestrator, line: str) -> bool:
    """Apply a slash command. Returns False when the session should end."""
    parts = line.strip().split()
    if not parts or not parts[0].startswith("/"):
        return True

    command, args = parts[0].lower(), parts[1:]
    if command in ("/quit", "/exit"):
        return False
    if command == "/help":
        console.print(CHAT_HELP)
    elif command == "/settings":
        console.print(render_settings(session.settings))
    elif command == "/reset":
        session.settings.reset()
        console.print(render_settings(session.settings))
    elif command == "/history":
        console.print(render_history(session.history))
    elif command == "/clear":
        session.reset()
        console.clear()
    elif command == "/set":
        if len(args) != 2:
            console.print("[yellow]Usage: /set LAYER VALUE[/yellow]")
            return True
        try:
            value = session.settings.set(args[0].lower(), float(args[1]))
        except (KeyError, ValueError):
            console.print(f"[yellow]Invalid slider: {' '.join(args)}[/yellow]")
            return True
        console.print(f"{args[0].lower()} = {value:+.2f}")
    else:
        console.print(f"[yellow]Unknown command: {command}[/yellow]")
    return True


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Server host"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Server port"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    settings = get_settings()
    host = host or settings.api.host
    port = port or settings.api.port

    console.print(
        Panel.fit(
            f"[bold blue]FluidAI API Server[/bold blue]\n"
            f"Starting at http://{host}:{port}",
            title="Server",
        )
    )

    if reload:
        import uvicorn
        uvicorn.run(
            "fluid_ai.api.server:create_app",
            host=host,
            port=port,
            reload=True,
            factory=True,
        )
    else:
        from fluid_ai.api.server import run_server
        asyncio.run(run_server(settings, host=host, port=port))


@app.command()
def status() -> None:
    """Show configuration."""
    settings = get_settings()

    config_table = Table(title="Configuration")
    config_table.add_column("Setting", style="cyan")
    config_table.add_column("Value", style="green")

    config_table.add_row("Environment", settings.environment)
    config_table.add_row("AI Provider", settings.ai.primary_provider)
    config_table.add_row("AI Model", settings.ai.anthropic_model)
    config_table.add_row(
        "API Key",
        "[green]configured[/green]" if settings.anthropic_api_key else "[red]missing[/red]",
    )
    config_table.add_row("Adjustment Range", f"±{settings.analysis.adjustment_limit:.2f}")
    config_table.add_row("Server", f"{settings.api.host}:{settings.api.port}")

    console.print(config_table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
