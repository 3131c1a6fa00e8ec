"""
Command-line interface for memtrace.

Commands:
    serve     - Start the FastAPI server
    chat      - Chat with the memory-augmented assistant
    remember  - Store a memory for a user
    search    - Search a user's memories
    memories  - List all memories of a user
    trace-url - Show where the traces can be viewed
    version   - Show version information
"""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="memtrace",
    help="Memory-augmented chat traced with Arize Phoenix",
    add_completion=False,
)
console = Console()


@app.callback()
def main() -> None:
    """Configure logging for every command."""
    from memtrace.config import settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _memory_table(title: str, records: list[dict]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Memory", style="green")
    table.add_column("Score", style="cyan", justify="right")

    for record in records:
        score = record.get("score")
        table.add_row(
            str(record.get("id", "")),
            record.get("memory", ""),
            f"{score:.2f}" if isinstance(score, (int, float)) else "",
        )
    return table


def _traced_memory():
    from memtrace.memory import TracedMemory, create_memory
    from memtrace.tracing import setup_tracing, shutdown_tracing

    setup_tracing()
    try:
        return TracedMemory(create_memory())
    except Exception as e:
        shutdown_tracing()
        console.print(f"[red]Failed to create memory client: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port to bind (default: API_PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Start the FastAPI server."""
    import uvicorn

    from memtrace.config import settings

    host = host or settings.api_host
    port = port or settings.api_port
    console.print(f"[green]Starting memtrace server on {host}:{port}[/green]")

    uvicorn.run(
        "memtrace.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def chat(
    user_id: str = typer.Option(..., "--user", "-u", help="User whose memories are used"),
    message: Optional[str] = typer.Argument(None, help="Message (omit for an interactive session)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show recalled memories and trace id"),
) -> None:
    """Chat with the memory-augmented assistant."""
    from memtrace.chat import MemoryAssistant
    from memtrace.llm import create_llm
    from memtrace.tracing import shutdown_tracing

    def turn(text: str) -> None:
        with console.status("[bold green]Thinking..."):
            result = assistant.chat(text, user_id=user_id)

        console.print(f"[green]Assistant:[/green] {result.response}")
        if verbose:
            for memory in result.memories:
                console.print(f"[dim]  • {memory}[/dim]")
            if result.trace_id:
                console.print(f"[dim]Trace: {result.trace_id}[/dim]")

    try:
        assistant = MemoryAssistant(memory=_traced_memory(), llm=create_llm())

        if message is not None:
            turn(message)
            return

        console.print("[blue]Type 'exit' to quit.[/blue]")
        while True:
            text = console.input("[blue]You:[/blue] ").strip()
            if text.lower() in ("exit", "quit"):
                break
            if text:
                turn(text)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]Chat failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        shutdown_tracing()


@app.command()
def remember(
    text: str = typer.Argument(..., help="Text to remember"),
    user_id: str = typer.Option(..., "--user", "-u", help="Owner of the memory"),
) -> None:
    """Store a memory for a user."""
    from memtrace.tracing import shutdown_tracing

    memory = _traced_memory()
    try:
        results = memory.add(text, user_id=user_id)
    except Exception as e:
        console.print(f"[red]Failed to store memory: {e}[/red]")
        raise typer.Exit(1)
    finally:
        shutdown_tracing()

    if not results:
        console.print("[yellow]Nothing new to remember.[/yellow]")
        return
    for record in results:
        event = record.get("event", "ADD")
        console.print(f"[green]{event}[/green] {record.get('memory', '')}")


@app.command()
def search(
    query: str = typer.Argument(..., help="What to look for"),
    user_id: str = typer.Option(..., "--user", "-u", help="Owner of the memories"),
    limit: int = typer.Option(3, "--limit", "-n", min=1, max=50, help="Maximum results"),
) -> None:
    """Search a user's memories."""
    from memtrace.tracing import shutdown_tracing

    memory = _traced_memory()
    try:
        results = memory.search(query, user_id=user_id, limit=limit)
    except Exception as e:
        console.print(f"[red]Search failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        shutdown_tracing()

    if not results:
        console.print("[yellow]No matching memories.[/yellow]")
        return
    console.print(_memory_table(f"Memories matching '{query}'", results))


@app.command()
def memories(
    user_id: str = typer.Option(..., "--user", "-u", help="Owner of the memories"),
) -> None:
    """List all memories of a user."""
    from memtrace.tracing import shutdown_tracing

    memory = _traced_memory()
    try:
        results = memory.get_all(user_id=user_id)
    except Exception as e:
        console.print(f"[red]Failed to list memories: {e}[/red]")
        raise typer.Exit(1)
    finally:
        shutdown_tracing()

    if not results:
        console.print(f"[yellow]No memories stored for {user_id}.[/yellow]")
        return
    console.print(_memory_table(f"Memories of {user_id}", results))


@app.command("trace-url")
def trace_url() -> None:
    """Show where the traces can be viewed."""
    from memtrace.config import settings
    from memtrace.tracing import project_url

    if not settings.enable_tracing:
        console.print("[yellow]Tracing is disabled (ENABLE_TRACING=false).[/yellow]")
    console.print(f"Project: [cyan]{settings.phoenix_project_name}[/cyan]")
    console.print(f"Open {project_url()} and select the project to inspect its traces.")


@app.command()
def version() -> None:
    """Show version information."""
    from memtrace import __version__

    console.print(f"memtrace v{__version__}")


if __name__ == "__main__":
    app()
