"""
Command-line interface for the SEO Indexing Pipeline.

Runs indexing decisions, the full pipeline, health audits and sitemap
generation over a JSON export of entities.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import PipelineConfig
from .entity_store import EntityLoadError, InMemoryEntityStore, load_entities_json
from .health import SEOHealthAuditor, summarize_health
from .models import EntityType, OverallHealth, SEOHealthFlags, SEOResult
from .orchestrator import SEOOrchestrator

console = Console()

ENTITY_TYPES = [t.value for t in EntityType]

HEALTH_STYLES = {
    OverallHealth.HEALTHY: "green",
    OverallHealth.WARNING: "yellow",
    OverallHealth.CRITICAL: "red",
}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )
    else:
        logging.basicConfig(level=logging.WARNING)


def _load_store(entities_file: Path) -> InMemoryEntityStore:
    try:
        return load_entities_json(entities_file)
    except EntityLoadError as e:
        console.print(f"[red]Entity loading error:[/red] {e}")
        sys.exit(1)


@click.group()
@click.option(
    "--base-url",
    type=str,
    default=None,
    help="Site origin for canonical URLs (default: SEO_BASE_URL or https://zeva360.com).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.pass_context
def main(ctx: click.Context, base_url: Optional[str], verbose: bool) -> None:
    """
    SEO Indexing Pipeline - index/noindex decisions, metadata and sitemaps.

    Examples:

        seo-pipeline decide entities.json clinic 64f1c2

        seo-pipeline audit entities.json doctor --json

        seo-pipeline sitemap entities.json --sitemap-dir public
    """
    _configure_logging(verbose)
    overrides = {"base_url": base_url} if base_url else {}
    try:
        ctx.obj = PipelineConfig.from_env(**overrides)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


@main.command()
@click.argument("entities_file", type=click.Path(exists=True, path_type=Path))
@click.argument("entity_type", type=click.Choice(ENTITY_TYPES))
@click.argument("entity_id")
@click.pass_obj
def decide(config: PipelineConfig, entities_file: Path, entity_type: str, entity_id: str) -> None:
    """Show the indexing decision and robots directive of one entity."""
    store = _load_store(entities_file)
    result = SEOOrchestrator(store, config).quick_check(EntityType(entity_type), entity_id)

    table = Table(title=f"{entity_type} {entity_id}", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Index", "Yes" if result.indexing.should_index else "No")
    table.add_row("Reason", result.indexing.reason)
    table.add_row("Priority", result.indexing.priority.value)
    table.add_row("Robots", result.robots.content)
    for warning in result.indexing.warnings:
        table.add_row("Warning", f"[yellow]{warning}[/yellow]")
    console.print(table)


@main.command()
@click.argument("entities_file", type=click.Path(exists=True, path_type=Path))
@click.argument("entity_type", type=click.Choice(ENTITY_TYPES))
@click.argument("entity_id")
@click.option(
    "--sitemap-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for sitemap files (default: SEO_SITEMAP_DIR or ./public).",
)
@click.option(
    "--ping/--no-ping",
    default=False,
    help="Notify search engines after the sitemap update (default: off).",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.pass_obj
def run(
    config: PipelineConfig,
    entities_file: Path,
    entity_type: str,
    entity_id: str,
    sitemap_dir: Optional[Path],
    ping: bool,
    as_json: bool,
) -> None:
    """Run the full SEO pipeline for one entity."""
    store = _load_store(entities_file)
    config.enable_ping = ping
    if sitemap_dir:
        config.sitemap_dir = sitemap_dir

    orchestrator = SEOOrchestrator(store, config)
    result = orchestrator.run(EntityType(entity_type), entity_id)

    ping_results = None
    if result.ping_task is not None:
        with console.status("[bold green]Pinging search engines..."):
            ping_results = result.ping_task.result()
        orchestrator.pinger.shutdown()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _display_result(result)
        if ping_results:
            for ping_result in ping_results:
                status = "[green]ok[/green]" if ping_result.success else f"[red]{ping_result.error}[/red]"
                console.print(f"  Ping {ping_result.engine}: {status}")

    if not result.success:
        sys.exit(1)


@main.command()
@click.argument("entities_file", type=click.Path(exists=True, path_type=Path))
@click.argument("entity_type", type=click.Choice(ENTITY_TYPES))
@click.option(
    "--id",
    "entity_ids",
    multiple=True,
    help="Entity id to audit (repeatable). Default: every entity of the type.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the results as JSON.")
@click.pass_obj
def audit(
    config: PipelineConfig,
    entities_file: Path,
    entity_type: str,
    entity_ids: tuple[str, ...],
    as_json: bool,
) -> None:
    """Audit the SEO health of entities."""
    store = _load_store(entities_file)
    kind = EntityType(entity_type)
    ids = list(entity_ids) or store.ids(kind)
    auditor = SEOHealthAuditor(store, config=config)

    if as_json:
        results = auditor.batch_check(kind, ids)
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    with console.status(f"[bold green]Auditing {len(ids)} {entity_type}(s)..."):
        results = auditor.batch_check(kind, ids)
    _display_audit(results)


@main.command()
@click.argument("entities_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--sitemap-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for sitemap files (default: SEO_SITEMAP_DIR or ./public).",
)
@click.pass_obj
def sitemap(config: PipelineConfig, entities_file: Path, sitemap_dir: Optional[Path]) -> None:
    """Regenerate every sitemap file."""
    store = _load_store(entities_file)
    if sitemap_dir:
        config.sitemap_dir = sitemap_dir

    result = SEOOrchestrator(store, config).sitemap_builder.update_sitemaps()
    if not result.success:
        console.print(f"[red]Sitemap error:[/red] {result.error}")
        sys.exit(1)

    console.print(Panel.fit(
        "\n".join(str(config.sitemap_dir / name) for name in result.files),
        title="[bold blue]Sitemaps written[/bold blue]",
        border_style="blue",
    ))


def _display_result(result: SEOResult) -> None:
    """Display a pipeline result."""
    table = Table(title=f"SEO pipeline: {result.entity_type.value} {result.entity_id}", show_header=True)
    table.add_column("Stage", style="cyan")
    table.add_column("Result", style="green")

    table.add_row("Index", f"{result.indexing.should_index} ({result.indexing.reason})")
    table.add_row("Robots", result.robots.content)
    if result.meta:
        table.add_row("Title", result.meta.title)
        table.add_row("Description", result.meta.description)
        table.add_row("Keywords", ", ".join(result.meta.keywords))
    if result.canonical is not None:
        table.add_row("Canonical", result.canonical or "-")
    if result.duplicate_check:
        table.add_row("Duplicates", result.duplicate_check.reason)
    if result.headings:
        table.add_row("H1", result.headings.h1)
        table.add_row("H2", " | ".join(result.headings.h2))
    table.add_row("Sitemap updated", "Yes" if result.sitemap_updated else "No")
    console.print(table)

    for error in result.errors:
        console.print(f"[red]Error:[/red] {error}")


def _display_audit(results: list[SEOHealthFlags]) -> None:
    """Display batch audit results."""
    table = Table(title="SEO Health", show_header=True)
    table.add_column("Entity", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Health")
    table.add_column("Issues", justify="right")
    table.add_column("Top issue", style="dim")

    for flags in results:
        style = HEALTH_STYLES[flags.overall_health]
        top = flags.issues[0].message if flags.issues else "-"
        table.add_row(
            flags.entity_id,
            str(flags.score),
            f"[{style}]{flags.overall_health.value}[/{style}]",
            str(len(flags.issues)),
            top,
        )
    console.print(table)

    summary = summarize_health(results)
    console.print(
        f"\n[green]Healthy:[/green] {summary.healthy}  "
        f"[yellow]Warning:[/yellow] {summary.warning}  "
        f"[red]Critical:[/red] {summary.critical}  "
        f"[cyan]Average score:[/cyan] {summary.average_score}/100"
    )


def run_cli() -> None:
    """Entry point for the CLI."""
    main()


if __name__ == "__main__":
    run_cli()
