import asyncio
import os
import posixpath
from typing import Awaitable, Callable, Optional

from watchfiles import Change, awatch

from theme_assets.asset_map import AssetMapState, resolve_destination
from theme_assets.cleanup import CleanupReconciler
from theme_assets.copier import CopyEngine
from theme_assets.logger import AssetLogger
from theme_assets.models import (
    AssetEntry,
    ChangeEvent,
    CopyStatus,
    ResolvedOptions,
    ResolvedTarget,
    TrackState,
)
from theme_assets.utils import glob_base_dir, is_child_dir, match_glob, normalize_path


CHANGE_EVENTS = {
    Change.added: ChangeEvent.CREATE,
    Change.modified: ChangeEvent.UPDATE,
    Change.deleted: ChangeEvent.DELETE,
}

ChangeCallback = Callable[[str, ChangeEvent], Awaitable[object]]


class WatchEventHandler:
    """Per-file UNTRACKED/TRACKED state machine driven by change notifications."""

    def __init__(
        self,
        options: ResolvedOptions,
        state: AssetMapState,
        copier: CopyEngine,
        reconciler: CleanupReconciler,
        logger: AssetLogger,
    ) -> None:
        self.options = options
        self.state = state
        self.copier = copier
        self.reconciler = reconciler
        self.logger = logger
        self.base_dirs = [glob_base_dir(target.src) for target in options.targets]

    def in_scope(self, path: str) -> bool:
        if self.state.is_watched_dir(posixpath.dirname(path)):
            return True
        return any(is_child_dir(base, path) for base in self.base_dirs)

    def match_target(self, path: str) -> Optional[ResolvedTarget]:
        for target in self.options.targets:
            if match_glob(path, target.src):
                return target
        return None

    async def handle(self, path: str, event: ChangeEvent) -> TrackState:
        path = normalize_path(path)
        event = self._settle(path, event)
        if not self.in_scope(path):
            return self.state.state_of(path)

        target = self.match_target(path)
        if target is None:
            return self.state.state_of(path)

        if match_glob(path, target.ignore):
            self.logger.ignored(event, path, timestamp=True)
            return self.state.state_of(path)

        if event == ChangeEvent.DELETE:
            return await self._untrack(path)
        return await self._track(path, target)

    @staticmethod
    def _settle(path: str, event: ChangeEvent) -> ChangeEvent:
        """The state of `path` on disk decides the event kind."""
        exists = os.path.lexists(path)
        if event == ChangeEvent.DELETE and exists:
            return ChangeEvent.UPDATE
        if event != ChangeEvent.DELETE and not exists:
            return ChangeEvent.DELETE
        return event

    async def _track(self, path: str, target: ResolvedTarget) -> TrackState:
        if os.path.isdir(path):
            return self.state.state_of(path)

        entry = self.state.get(path)
        added = entry is None
        if entry is None:
            dest = await resolve_destination(target, path)
            if self.state.claims(dest):
                self.logger.duplicate(path, dest, timestamp=True)
                return TrackState.UNTRACKED
            entry = AssetEntry(target=target, dest=dest)
            self.state.add(path, entry, watch=True)

        result = await self.copier.copy_entry(path, entry, timestamp=True)
        if added and result.status == CopyStatus.ERROR:
            self.state.remove(path)
            return TrackState.UNTRACKED
        return TrackState.TRACKED

    async def _untrack(self, path: str) -> TrackState:
        entry = self.state.remove(path)
        if entry is not None:
            await self.reconciler.delete_one(entry.dest, timestamp=True)
        return TrackState.UNTRACKED


class SourceWatcher:
    def __init__(
        self,
        options: ResolvedOptions,
        on_change: ChangeCallback,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.options = options
        self.on_change = on_change
        self.stop_event = stop_event or asyncio.Event()

    def watch_roots(self) -> list[str]:
        candidates = [self.options.public_dir]
        candidates.extend(glob_base_dir(target.src) for target in self.options.targets)

        roots: list[str] = []
        for candidate in sorted({normalize_path(item) for item in candidates}):
            if not os.path.isdir(candidate):
                continue
            if any(is_child_dir(root, candidate) for root in roots):
                continue
            roots.append(candidate)
        return roots

    async def run(self) -> None:
        roots = self.watch_roots()
        if not roots:
            return
        async for changes in awatch(*roots, stop_event=self.stop_event):
            # One notification per path and batch.
            latest: dict[str, ChangeEvent] = {}
            for change, path in changes:
                event = CHANGE_EVENTS.get(change)
                if event is not None:
                    latest[normalize_path(path)] = event
            for path in sorted(latest):
                await self.on_change(path, latest[path])

    def stop(self) -> None:
        self.stop_event.set()
