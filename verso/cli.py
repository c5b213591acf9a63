"""CLI entry point for Verso."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from verso.config import DEFAULT_CONFIG_TEMPLATE, load_config
from verso.render import HtmlIndexBuilder, MarkdownRenderer
from verso_core.config import SyncConfig, VersoConfig
from verso_core.errors import SyncError
from verso_core.sync import GlobIgnoreMatcher, SyncReport, Synchronizer
from verso_core.sync.watcher import SyncWatcher

app = typer.Typer(
    name="verso",
    help="Mirror a notes directory into rendered HTML, rebuilding only what changed.",
)

config_app = typer.Typer(help="Manage Verso configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: VersoConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _get_config() -> VersoConfig:
    if _config is None:
        return load_config()
    return _config


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _configure_logging(cfg: VersoConfig) -> None:
    handler = logging.StreamHandler()
    if cfg.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler])


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to verso.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _configure_logging(_config)


def _sync_config(source: str | None, output: str | None, full: bool) -> SyncConfig:
    """Apply command-line overrides on top of the loaded sync settings."""
    updates: dict = {}
    if source is not None:
        updates["source_dir"] = source
    if output is not None:
        updates["output_dir"] = output
    if full:
        updates["incremental"] = False
    return _get_config().sync.model_copy(update=updates)


def _make_synchronizer(sync_cfg: SyncConfig) -> Synchronizer:
    cfg = _get_config()
    source_root = Path(sync_cfg.source_dir).expanduser().resolve()
    output_root = Path(sync_cfg.output_dir).expanduser().resolve()
    matcher = GlobIgnoreMatcher(sync_cfg.ignore, root=source_root, excluded=[output_root])
    return Synchronizer(
        sync_cfg,
        renderer=MarkdownRenderer(cfg.render),
        index_builder=HtmlIndexBuilder(),
        matcher=matcher,
    )


def _display_report(report: SyncReport) -> None:
    if report.up_to_date:
        rprint("[green]Everything up to date.[/green]")
        return
    verb = "Would render" if report.dry_run else "Rendered"
    table = Table(title=f"{verb} ({len(report.rendered)} documents, {len(report.indexed)} indexes)")
    table.add_column("Path", style="cyan")
    table.add_column("Action", justify="center")
    for path in report.rendered:
        table.add_row(path, "[green]render[/green]")
    for path in report.indexed:
        table.add_row(path, "[yellow]index[/yellow]")
    rprint(table)
    rprint(f"[dim]Visited {len(report.visited)} director(ies) in {report.duration:.2f}s[/dim]")


@app.command()
def sync(
    source: Annotated[str | None, typer.Option("--source", "-s", help="Notes directory")] = None,
    output: Annotated[str | None, typer.Option("--output", "-o", help="Render directory")] = None,
    full: Annotated[bool, typer.Option("--full", help="Ignore saved state, rebuild everything")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Preview without writing")] = False,
) -> None:
    """Render changed notes and rebuild affected indexes."""
    synchronizer = _make_synchronizer(_sync_config(source, output, full))
    try:
        report = synchronizer.run(dry_run=dry_run)
    except SyncError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _display_report(report)


@app.command()
def status(
    source: Annotated[str | None, typer.Option("--source", "-s", help="Notes directory")] = None,
    output: Annotated[str | None, typer.Option("--output", "-o", help="Render directory")] = None,
) -> None:
    """Show what the next sync would do."""
    synchronizer = _make_synchronizer(_sync_config(source, output, full=False))
    try:
        items = synchronizer.plan()
    except SyncError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not any(item.has_work for item in items):
        rprint("[green]Everything up to date.[/green]")
        return

    table = Table(title="Pending work")
    table.add_column("Directory", style="cyan")
    table.add_column("Stale documents")
    table.add_column("Index", justify="center")
    for item in items:
        table.add_row(
            item.directory.rel_path or ".",
            ", ".join(doc.name for doc in item.stale_documents) or "-",
            "[yellow]rebuild[/yellow]" if item.rebuild_index else "ok",
        )
    rprint(table)


@app.command()
def watch(
    source: Annotated[str | None, typer.Option("--source", "-s", help="Notes directory")] = None,
    output: Annotated[str | None, typer.Option("--output", "-o", help="Render directory")] = None,
    debounce: Annotated[float | None, typer.Option("--debounce", help="Quiet period in seconds")] = None,
) -> None:
    """Sync once, then resync whenever the notes directory changes."""
    cfg = _get_config()
    synchronizer = _make_synchronizer(_sync_config(source, output, full=False))

    def _resync() -> None:
        try:
            _display_report(synchronizer.run())
        except SyncError as e:
            rprint(f"[red]Error:[/red] {escape(str(e))}")

    _resync()
    watcher = SyncWatcher(
        synchronizer.source_root,
        on_change=_resync,
        debounce_seconds=debounce or cfg.watch.debounce_seconds,
        matcher=synchronizer.matcher,
    )
    rprint(f"Watching {synchronizer.source_root}... (Ctrl+C to stop)")
    watcher.run_forever()


@app.command()
def render(
    path: Annotated[Path, typer.Argument(help="Markdown file to render")],
) -> None:
    """Render a single Markdown file to stdout."""
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        rprint(f"[red]Error:[/red] cannot read {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(1)
    typer.echo(MarkdownRenderer(_get_config().render).render(source), nl=False)


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create a verso.yaml in the current directory."""
    path = Path("verso.yaml")
    if path.exists() and not force:
        rprint("[yellow]verso.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    path.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {path}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    cfg = _get_config()
    text = yaml.safe_dump(cfg.model_dump(), default_flow_style=False, sort_keys=False)
    rprint(Syntax(text, "yaml"))


if __name__ == "__main__":
    app()
