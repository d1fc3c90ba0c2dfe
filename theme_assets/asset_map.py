import asyncio
import posixpath
from dataclasses import dataclass, field
from typing import Optional

from theme_assets.logger import AssetLogger
from theme_assets.models import AssetEntry, ResolvedOptions, ResolvedTarget, TrackState
from theme_assets.utils import glob_files, join_path, normalize_path, rename_file


@dataclass
class AssetMapState:
    """Asset map plus the sets derived from it for one build cycle.

    Only the map builder (full rebuild) and the watch handler (incremental
    updates) write to it.
    """

    assets: dict[str, AssetEntry] = field(default_factory=dict)
    dest_set: set[str] = field(default_factory=set)
    protected_basenames: set[str] = field(default_factory=set)
    watched_dirs: set[str] = field(default_factory=set)

    def clear(self) -> None:
        self.assets.clear()
        self.dest_set.clear()
        self.protected_basenames.clear()
        self.watched_dirs.clear()

    def claims(self, dest: str) -> bool:
        return normalize_path(dest) in self.dest_set

    def state_of(self, src: str) -> TrackState:
        if normalize_path(src) in self.assets:
            return TrackState.TRACKED
        return TrackState.UNTRACKED

    def get(self, src: str) -> Optional[AssetEntry]:
        return self.assets.get(normalize_path(src))

    def add(self, src: str, entry: AssetEntry, watch: bool = False) -> None:
        src = normalize_path(src)
        dest = normalize_path(entry.dest)
        self.assets[src] = entry
        self.dest_set.add(dest)
        self.protected_basenames.add(posixpath.basename(dest))
        if watch:
            self.watched_dirs.add(posixpath.dirname(src))

    def remove(self, src: str) -> Optional[AssetEntry]:
        entry = self.assets.pop(normalize_path(src), None)
        if entry is None:
            return None
        dest = normalize_path(entry.dest)
        self.dest_set.discard(dest)
        basename = posixpath.basename(dest)
        if not any(
            posixpath.basename(other.dest) == basename for other in self.assets.values()
        ):
            self.protected_basenames.discard(basename)
        return entry

    def is_watched_dir(self, directory: str) -> bool:
        return normalize_path(directory) in self.watched_dirs

    def snapshot(self) -> dict[str, str]:
        return {src: entry.dest for src, entry in self.assets.items()}

    def __len__(self) -> int:
        return len(self.assets)

    def __contains__(self, src: object) -> bool:
        return isinstance(src, str) and normalize_path(src) in self.assets


async def resolve_destination(target: ResolvedTarget, src: str) -> str:
    file_name = posixpath.basename(normalize_path(src))
    if target.rename is not None:
        file_name = await rename_file(file_name, src, target.rename)
    return join_path(target.dest, file_name)


class AssetMapBuilder:
    def __init__(self, options: ResolvedOptions, logger: AssetLogger) -> None:
        self.options = options
        self.logger = logger

    async def expand(self, target: ResolvedTarget) -> list[str]:
        return await asyncio.to_thread(glob_files, target.src, target.ignore)

    async def build(
        self, state: AssetMapState, collect_watch_dirs: bool = False
    ) -> AssetMapState:
        """Clear `state` and rebuild it from every target, in declaration order.

        A file whose destination is already claimed is dropped and reported
        as a duplicate; the earlier claim always wins.
        """
        state.clear()
        for target in self.options.targets:
            for src in await self.expand(target):
                dest = await resolve_destination(target, src)
                if state.claims(dest):
                    self.logger.duplicate(src, dest, timestamp=True)
                    continue
                state.add(src, AssetEntry(target=target, dest=dest), watch=collect_watch_dirs)
        return state

    async def expected_destinations(self, target: ResolvedTarget) -> list[str]:
        return [
            await resolve_destination(target, src) for src in await self.expand(target)
        ]
