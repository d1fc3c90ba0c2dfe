import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console

from theme_assets.config import ProjectConfig, load_project_config
from theme_assets.errors import AssetsAppError
from theme_assets.models import CopyStatus, EventKind
from theme_assets.plugins import BuildPlugin, ServePlugin, shopify_assets
from theme_assets.runner import CycleOutcome, run_build, run_serve, run_watch
from theme_assets.session import SyncSession


def _load_project(obj: Dict[str, Any]) -> ProjectConfig:
    try:
        return load_project_config(obj.get("config_path"))
    except AssetsAppError as exc:
        raise click.ClickException(str(exc))


def _plugins(project: ProjectConfig, console: Console) -> tuple[BuildPlugin, ServePlugin]:
    try:
        return shopify_assets(project.options, console=console, cwd=str(project.root))
    except AssetsAppError as exc:
        raise click.ClickException(f"Fatal: {exc}")


def _manifest_option(func):
    return click.option(
        "--manifest",
        "manifest_path",
        type=click.Path(path_type=Path, dir_okay=False),
        default=None,
        help="Build manifest used to decide which output files to keep.",
    )(func)


def _finish(session: SyncSession, outcome: CycleOutcome) -> None:
    session.logger.ui.render_cycle_result(outcome.copies, outcome.cleanup)
    failed = any(result.status == CopyStatus.ERROR for result in outcome.copies)
    if failed or (outcome.cleanup is not None and outcome.cleanup.failed):
        raise click.exceptions.Exit(1)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Project config file (default: ./theme-assets.yaml).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """Mirror static assets into a Shopify theme."""
    ctx.obj = {"config_path": config_path}


@cli.command(help="Build the asset map and print it without copying.")
@click.pass_obj
def plan(obj: Dict[str, Any]) -> None:
    console = Console()
    project = _load_project(obj)
    build_plugin, _ = _plugins(project, console)
    session = build_plugin.session

    asyncio.run(session.rebuild())

    warnings = [
        event
        for event in session.logger.events
        if event.kind in (EventKind.WARNING, EventKind.DUPLICATE_IGNORED)
    ]
    session.logger.ui.render_plan(session.state.assets, mode="plan", warnings=warnings)


@cli.command(help="Copy all assets once and clean stale files.")
@_manifest_option
@click.pass_obj
def build(obj: Dict[str, Any], manifest_path: Optional[Path]) -> None:
    console = Console()
    project = _load_project(obj)
    plugin, _ = _plugins(project, console)

    outcome = asyncio.run(
        run_build(plugin, project.host, manifest_path or project.manifest)
    )
    _finish(plugin.session, outcome)


@cli.command(help="Build once, then keep the theme in sync until interrupted.")
@_manifest_option
@click.pass_obj
def watch(obj: Dict[str, Any], manifest_path: Optional[Path]) -> None:
    console = Console()
    project = _load_project(obj)
    plugin, _ = _plugins(project, console)

    try:
        outcome = asyncio.run(
            run_watch(plugin, project.host, manifest_path or project.manifest)
        )
    except KeyboardInterrupt:
        return
    _finish(plugin.session, outcome)


@cli.command(help="Dev mode: sync all assets, then mirror every change.")
@click.pass_obj
def serve(obj: Dict[str, Any]) -> None:
    console = Console()
    project = _load_project(obj)
    _, plugin = _plugins(project, console)

    try:
        outcome = asyncio.run(run_serve(plugin))
    except KeyboardInterrupt:
        return
    _finish(plugin.session, outcome)


def main() -> int:
    try:
        # Without standalone mode click returns the code of a raised Exit.
        code = cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return 2
    return code if isinstance(code, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
