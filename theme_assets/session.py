from pathlib import Path
from typing import Any, Mapping, Optional

from rich.console import Console

from theme_assets.asset_map import AssetMapBuilder, AssetMapState
from theme_assets.cleanup import CleanupReconciler
from theme_assets.copier import CopyEngine
from theme_assets.logger import AssetLogger, EventSink
from theme_assets.models import (
    AssetsOptions,
    Bundle,
    ChangeEvent,
    CleanupResult,
    CopyResult,
    ResolvedOptions,
    TrackState,
)
from theme_assets.options import resolve_options
from theme_assets.tui.renderers import AssetConsoleUI
from theme_assets.utils import relative_to_cwd
from theme_assets.watcher import WatchEventHandler


class SyncSession:
    """State and collaborators for one loaded configuration.

    Created once per configuration load; `rebuild` resets the asset map at
    the start of every build cycle.
    """

    def __init__(self, options: ResolvedOptions, logger: Optional[AssetLogger] = None) -> None:
        self.options = options
        self.logger = logger or AssetLogger(silent=options.silent)
        self.state = AssetMapState()
        self.clean = False

        self.builder = AssetMapBuilder(options, self.logger)
        self.copier = CopyEngine(self.logger)
        self.reconciler = CleanupReconciler(options, self.logger)
        self.handler = WatchEventHandler(
            options, self.state, self.copier, self.reconciler, self.logger
        )

    @classmethod
    def from_options(
        cls,
        options: AssetsOptions,
        console: Optional[Console] = None,
        sink: Optional[EventSink] = None,
        cwd: Optional[str] = None,
    ) -> "SyncSession":
        logger = AssetLogger(console=console, silent=options.silent, sink=sink)
        return cls(resolve_options(options, logger=logger, cwd=cwd), logger=logger)

    def use_console(self, console: Console) -> None:
        self.logger.ui = AssetConsoleUI(console)

    def bootstrap_dirs(self) -> None:
        """Create missing source and destination roots, warning instead of failing."""
        public_dir = Path(self.options.public_dir)
        if self.options.targets and not public_dir.exists():
            self.logger.warn(
                f"Your publicDir does not exist, creating it at "
                f"{relative_to_cwd(public_dir)}/ - Use this folder to store the "
                f"source static assets for your Shopify theme"
            )
            public_dir.mkdir(parents=True, exist_ok=True)

        assets_dir = Path(self.options.theme_assets_dir)
        if not assets_dir.exists():
            self.logger.warn(
                f"Your Shopify theme assets folder does not exist - creating it at "
                f"{relative_to_cwd(assets_dir)}/ - Your static assets will be copied "
                f"to this folder"
            )
            assets_dir.mkdir(parents=True, exist_ok=True)

    async def rebuild(self, collect_watch_dirs: bool = False) -> AssetMapState:
        return await self.builder.build(self.state, collect_watch_dirs=collect_watch_dirs)

    async def sync_all(self, timestamp: bool = False) -> list[CopyResult]:
        return await self.copier.copy_all(self.state.assets, timestamp=timestamp)

    async def clean_destination(
        self,
        bundle: Optional[Bundle] = None,
        manifest: Optional[Mapping[str, Any]] = None,
    ) -> CleanupResult:
        return await self.reconciler.reconcile(self.state, bundle=bundle, manifest=manifest)

    async def reconcile_clean_match(self) -> CleanupResult:
        return await self.reconciler.reconcile_clean_match(self.builder)

    async def handle_change(self, path: str, event: ChangeEvent) -> TrackState:
        return await self.handler.handle(path, event)
