import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from postman_graph.config import ENV_FILE, get_settings
from postman_graph.core.client import PostmanClient
from postman_graph.core.errors import PostmanAPIError, describe_error
from postman_graph.core.pipeline import (
    KnowledgeGraphResult,
    dataset_stats,
    has_entities,
    run_pipeline,
    write_export,
)

logger = logging.getLogger(__name__)

APP_HELP = """
pmgraph: Visualize your Postman workspace as a knowledge graph.

Fetches workspaces, collections, environments and your user profile from the
Postman API, then produces:

- a node/edge graph (user -> workspaces, collections -> requests,
  user -> environments) for force-directed rendering
- a JSON-LD document describing the same entities

GETTING STARTED:
1. Run `pmgraph config set-key <api-key>` once.
2. Run `pmgraph load` to check the connection and see a summary.
3. Run `pmgraph graph` or `pmgraph jsonld` to print either view,
   or `pmgraph export` to save the JSON-LD to a dated file.
"""

app = typer.Typer(name="pmgraph", help=APP_HELP, no_args_is_help=True)
config_app = typer.Typer(name="config", help="Manage configuration and keys.")
app.add_typer(config_app, name="config")

state = {"api_key": None}


@app.callback()
def main(
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="Postman API key (overrides configured key)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """
    Postman Knowledge Graph CLI.
    """
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    state["api_key"] = api_key


def _build_client() -> PostmanClient:
    return PostmanClient.from_settings(get_settings(), api_key=state["api_key"])


def _load(console: Console) -> KnowledgeGraphResult:
    """Run the pipeline, exiting with a friendly message on API errors."""
    client = _build_client()
    try:
        with console.status("[bold blue]Fetching Postman workspace data...[/bold blue]"):
            return asyncio.run(run_pipeline(client))
    except PostmanAPIError as e:
        logger.debug(f"Load failed: {e!r}")
        console.print(f"[red]{describe_error(e)}[/red]")
        raise typer.Exit(code=1)


def _emit(payload: dict, output: Optional[Path]) -> None:
    text = json.dumps(payload, indent=2)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"[green]Wrote {output}[/green]")
    else:
        typer.echo(text)


@config_app.command("set-key")
def set_key(
    api_key: str = typer.Argument(..., help="Postman API key"),
    base_url: str = typer.Option(None, "--base-url", "-u", help="Postman API base URL"),
):
    """
    Save the Postman API key to ~/.postman-graph/.env.

    Examples:
        pmgraph config set-key PMAK-abc123
        pmgraph config set-key PMAK-abc123 --base-url https://api.getpostman.com
    """
    env_path = ENV_FILE
    env_path.parent.mkdir(parents=True, exist_ok=True)

    lines = []
    if env_path.exists():
        lines = env_path.read_text(encoding="utf-8").splitlines(keepends=True)

    lines = [l for l in lines if not l.startswith("POSTMAN_GRAPH_API_KEY=")]
    lines.append(f"POSTMAN_GRAPH_API_KEY={api_key.strip()}\n")

    if base_url:
        lines = [l for l in lines if not l.startswith("POSTMAN_GRAPH_BASE_URL=")]
        lines.append(f"POSTMAN_GRAPH_BASE_URL={base_url}\n")

    env_path.write_text("".join(lines), encoding="utf-8")
    print(f"[green]API key saved to {env_path}[/green]")


@app.command("load")
def load():
    """
    Fetch all data and print a summary.
    """
    console = Console()
    result = _load(console)

    if not has_entities(result.dataset):
        console.print("[yellow]No workspaces, collections, or environments found[/yellow]")
        return

    stats = dataset_stats(result.dataset)
    table = Table(title=f"Postman data for {stats.user}")
    table.add_column("Entity", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Workspaces", str(stats.workspaces))
    table.add_row("Collections", str(stats.collections))
    table.add_row("Collections (detailed)", str(stats.detailed_collections))
    table.add_row("Environments", str(stats.environments))
    table.add_row("Requests", str(stats.total_requests))
    for method, count in sorted(stats.request_methods.items()):
        table.add_row(f"  {method}", str(count))
    table.add_row("Graph nodes", str(len(result.graph.nodes)))
    table.add_row("Graph edges", str(len(result.graph.edges)))
    console.print(table)


@app.command("graph")
def graph(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
):
    """
    Print the node/edge graph as JSON.
    """
    result = _load(Console(stderr=True))
    _emit(result.graph.to_payload(), output)


@app.command("jsonld")
def jsonld(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
):
    """
    Print the JSON-LD linked-data document.
    """
    result = _load(Console(stderr=True))
    _emit(result.document, output)


@app.command("export")
def export(
    directory: Path = typer.Option(Path("."), "--dir", "-d", help="Directory for the export file"),
):
    """
    Save the JSON-LD document as postman-knowledge-graph-YYYY-MM-DD.json.
    """
    result = _load(Console())
    path = write_export(result.document, directory)
    print(f"[green]Exported linked data to {path}[/green]")


if __name__ == "__main__":
    app()
