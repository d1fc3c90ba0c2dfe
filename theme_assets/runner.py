import asyncio
import signal
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from theme_assets.cleanup import load_manifest
from theme_assets.constants import MANIFEST_RELATIVE_PATH
from theme_assets.errors import ManifestError
from theme_assets.models import CleanupResult, CopyResult, HostConfig
from theme_assets.plugins import BuildPlugin, ServePlugin
from theme_assets.watcher import SourceWatcher


@dataclass
class CycleOutcome:
    copies: list[CopyResult] = field(default_factory=list)
    cleanup: Optional[CleanupResult] = None


def _install_stop_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop_event.set)


async def run_build(
    plugin: BuildPlugin,
    host: HostConfig,
    manifest_path: Optional[Path] = None,
    watch_mode: bool = False,
) -> CycleOutcome:
    session = plugin.session
    plugin.config(host)
    plugin.config_resolved()
    await plugin.build_start(watch_mode=watch_mode)

    manifest = None
    if session.clean:
        path = manifest_path or Path(session.options.theme_assets_dir) / MANIFEST_RELATIVE_PATH
        try:
            manifest = load_manifest(path)
        except ManifestError as exc:
            session.logger.warn(str(exc))

    cleanup = await plugin.write_bundle(manifest=manifest)
    copies = await plugin.close_bundle()
    return CycleOutcome(copies=copies, cleanup=cleanup)


async def run_watch(
    plugin: BuildPlugin,
    host: HostConfig,
    manifest_path: Optional[Path] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> CycleOutcome:
    stop_event = stop_event or asyncio.Event()
    _install_stop_handlers(stop_event)

    outcome = await run_build(plugin, host, manifest_path, watch_mode=True)
    watcher = SourceWatcher(plugin.session.options, plugin.watch_change, stop_event)
    try:
        await watcher.run()
    finally:
        outcome.copies = await plugin.close_watcher()
    return outcome


async def run_serve(
    plugin: ServePlugin, stop_event: Optional[asyncio.Event] = None
) -> CycleOutcome:
    stop_event = stop_event or asyncio.Event()
    _install_stop_handlers(stop_event)

    plugin.config()
    plugin.config_resolved()
    copies = await plugin.build_start()
    if not plugin.session.options.on_serve:
        return CycleOutcome(copies=copies)

    watcher = SourceWatcher(plugin.session.options, plugin.watch_change, stop_event)
    try:
        await watcher.run()
    finally:
        copies = await plugin.close_watcher()
    return CycleOutcome(copies=copies)
