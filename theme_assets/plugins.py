from typing import Any, Mapping, Optional

from rich.console import Console

from theme_assets.logger import EventSink
from theme_assets.models import (
    AssetsOptions,
    Bundle,
    ChangeEvent,
    CleanupResult,
    CopyResult,
    HostConfig,
    TrackState,
)
from theme_assets.session import SyncSession
from theme_assets.utils import is_child_dir, relative_to_cwd, resolve_path


class BuildPlugin:
    """Build-mode lifecycle: one-shot build and build-watch."""

    name = "theme-assets:build"
    apply = "build"

    def __init__(self, session: SyncSession) -> None:
        self.session = session
        self.watch_mode = False

    @property
    def collects_watch_dirs(self) -> bool:
        return self.session.options.on_watch and self.watch_mode

    def config(self, host_config: HostConfig) -> dict[str, Any]:
        options = self.session.options
        logger = self.session.logger

        if host_config.copy_public_dir is True:
            logger.warn("Host copy_public_dir is enabled, but it will be ignored.")

        if host_config.public_dir is not None and host_config.public_dir is not False:
            logger.warn(
                f'Your host public_dir option is set to "{host_config.public_dir}", '
                f"but it will be ignored - Please set this in the plugin options "
                f"instead. Using: {relative_to_cwd(options.public_dir)}."
            )

        out_dir = (
            resolve_path(options.theme_root, host_config.out_dir)
            if host_config.out_dir
            else options.theme_assets_dir
        )
        nested = is_child_dir(options.theme_root, out_dir)
        if host_config.empty_out_dir is not False and not nested:
            logger.warn(
                "Your theme assets directory is not located inside themeRoot. "
                "Clean will be disabled."
            )
        self.session.clean = host_config.empty_out_dir is not False and nested

        # The engine copies and cleans itself: the host must do neither.
        return {
            "public_dir": options.public_dir,
            "build": {"copy_public_dir": False, "empty_out_dir": False},
        }

    def config_resolved(self, console: Optional[Console] = None) -> None:
        if console is not None:
            self.session.use_console(console)
        self.session.bootstrap_dirs()

    async def build_start(self, watch_mode: bool = False) -> None:
        self.watch_mode = watch_mode
        await self.session.rebuild(collect_watch_dirs=self.collects_watch_dirs)

    async def write_bundle(
        self,
        bundle: Optional[Bundle] = None,
        manifest: Optional[Mapping[str, Any]] = None,
    ) -> Optional[CleanupResult]:
        if not self.session.clean:
            return None
        return await self.session.clean_destination(bundle=bundle, manifest=manifest)

    async def close_bundle(self) -> list[CopyResult]:
        options = self.session.options
        if options.on_build or self.collects_watch_dirs:
            return await self.session.sync_all()
        return []

    async def watch_change(self, path: str, event: ChangeEvent) -> Optional[TrackState]:
        if not self.collects_watch_dirs:
            return None
        return await self.session.handle_change(path, event)

    async def close_watcher(self) -> list[CopyResult]:
        return await self.session.sync_all()


class ServePlugin:
    """Dev-server lifecycle."""

    name = "theme-assets:serve"
    apply = "serve"

    def __init__(self, session: SyncSession) -> None:
        self.session = session

    def config(self) -> dict[str, Any]:
        return {"public_dir": self.session.options.public_dir}

    def config_resolved(self, console: Optional[Console] = None) -> None:
        if console is not None:
            self.session.use_console(console)
        self.session.bootstrap_dirs()

    async def build_start(self) -> list[CopyResult]:
        if not self.session.options.on_serve:
            self.session.logger.advise("Skipping serve")
            return []

        await self.session.reconcile_clean_match()
        await self.session.rebuild(collect_watch_dirs=True)
        return await self.session.sync_all(timestamp=True)

    async def watch_change(self, path: str, event: ChangeEvent) -> Optional[TrackState]:
        if not self.session.options.on_serve:
            return None
        return await self.session.handle_change(path, event)

    async def close_watcher(self) -> list[CopyResult]:
        if not self.session.options.on_serve:
            return []
        return await self.session.sync_all()


def shopify_assets(
    options: AssetsOptions,
    console: Optional[Console] = None,
    sink: Optional[EventSink] = None,
    cwd: Optional[str] = None,
) -> tuple[BuildPlugin, ServePlugin]:
    session = SyncSession.from_options(options, console=console, sink=sink, cwd=cwd)
    return BuildPlugin(session), ServePlugin(session)
