import asyncio
import errno
import posixpath
import shutil
from pathlib import Path
from typing import Mapping

from theme_assets.logger import AssetLogger
from theme_assets.models import (
    AssetEntry,
    CopyResult,
    CopyStatus,
    EventKind,
    ForcePolicy,
    ResolvedTarget,
)
from theme_assets.utils import relative_to_cwd


def copy_file(src: str, dest: str, target: ResolvedTarget) -> CopyStatus:
    """Copy one file honoring the target's overwrite, symlink and timestamp flags."""
    src_path = Path(src)
    dest_path = Path(dest)

    exists = dest_path.exists() or dest_path.is_symlink()
    if exists:
        if target.force == ForcePolicy.SKIP:
            return CopyStatus.SKIP
        if target.force == ForcePolicy.ERROR:
            raise FileExistsError(errno.EEXIST, "Destination already exists", dest)

    dest_path.parent.mkdir(parents=True, exist_ok=True)

    # Never write through a symlink sitting at the destination.
    if dest_path.is_symlink():
        dest_path.unlink()

    if target.preserve_timestamps:
        shutil.copy2(src_path, dest_path, follow_symlinks=target.dereference)
    else:
        shutil.copy(src_path, dest_path, follow_symlinks=target.dereference)

    return CopyStatus.UPDATE if exists else CopyStatus.CREATE


class CopyEngine:
    def __init__(self, logger: AssetLogger) -> None:
        self.logger = logger

    async def copy_entry(
        self, src: str, entry: AssetEntry, timestamp: bool = False
    ) -> CopyResult:
        # Log output is keyed off the captured paths, so completions from a
        # superseded cycle stay harmless.
        dest = entry.dest
        try:
            status = await asyncio.to_thread(copy_file, src, dest, entry.target)
        except OSError as exc:
            self.logger.error(
                f"could not copy {relative_to_cwd(dest)} "
                f"from {relative_to_cwd(posixpath.dirname(src))}",
                path=relative_to_cwd(dest),
                timestamp=timestamp,
            )
            self.logger.exception(exc, timestamp=timestamp)
            return CopyResult(src=src, dest=dest, status=CopyStatus.ERROR, error=exc)

        if status == CopyStatus.CREATE:
            self.logger.file_event(EventKind.CREATE, dest, related_path=src, timestamp=timestamp)
        elif status == CopyStatus.UPDATE:
            self.logger.file_event(EventKind.UPDATE, dest, related_path=src, timestamp=timestamp)
        return CopyResult(src=src, dest=dest, status=status)

    async def copy_all(
        self, assets: Mapping[str, AssetEntry], timestamp: bool = False
    ) -> list[CopyResult]:
        """Copy every entry concurrently; one failure never stops its siblings."""
        entries = list(assets.items())
        if not entries:
            return []
        return list(
            await asyncio.gather(
                *(self.copy_entry(src, entry, timestamp=timestamp) for src, entry in entries)
            )
        )
