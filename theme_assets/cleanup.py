import asyncio
import json
import os
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from theme_assets.asset_map import AssetMapBuilder, AssetMapState
from theme_assets.constants import HOST_INTERNAL_DIRNAME
from theme_assets.errors import ManifestError
from theme_assets.logger import AssetLogger
from theme_assets.models import (
    Bundle,
    CleanupResult,
    DeleteResult,
    EventKind,
    OutputChunk,
    ResolvedOptions,
)
from theme_assets.utils import (
    glob_files,
    join_path,
    normalize_path,
    read_json,
    relative_to_cwd,
)


def _top_level(file_name: str) -> str:
    return normalize_path(file_name).lstrip("/").split("/", 1)[0]


def _is_internal(file_name: str) -> bool:
    return _top_level(file_name) == HOST_INTERNAL_DIRNAME


def bundle_output_files(bundle: Bundle) -> set[str]:
    """Top-level names in the output dir produced by an in-memory bundle."""
    files: set[str] = set()
    for file_name, output in bundle.items():
        if _is_internal(file_name):
            files.add(HOST_INTERNAL_DIRNAME)
            continue
        files.add(_top_level(file_name))
        if isinstance(output, OutputChunk):
            files.update(_top_level(item) for item in output.imported_css)
            files.update(_top_level(item) for item in output.imported_assets)
    return files


def manifest_output_files(manifest: Mapping[str, Any]) -> set[str]:
    """Top-level names in the output dir declared by a build manifest.

    Entries only referenced from another entry's `imports` are followed, and
    their stylesheets and assets are included as well.
    """
    files: set[str] = {HOST_INTERNAL_DIRNAME}

    def collect(entry: Mapping[str, Any]) -> None:
        file_name = entry.get("file")
        if isinstance(file_name, str) and file_name:
            files.add(_top_level(file_name))
        for key in ("css", "assets"):
            items = entry.get(key)
            if isinstance(items, list):
                files.update(_top_level(item) for item in items if isinstance(item, str))

    for entry in manifest.values():
        if not isinstance(entry, dict):
            continue
        collect(entry)
        for key in ("imports", "dynamicImports"):
            imported = entry.get(key)
            if not isinstance(imported, list):
                continue
            for import_key in imported:
                if not isinstance(import_key, str):
                    continue
                dependency = manifest.get(import_key)
                if isinstance(dependency, dict):
                    collect(dependency)
                else:
                    files.add(os.path.basename(normalize_path(import_key)))
    return files


def load_manifest(path: Path) -> Optional[dict[str, Any]]:
    if not path.exists():
        return None
    try:
        payload = read_json(path)
    except (OSError, json.JSONDecodeError) as exc:
        raise ManifestError(path, str(exc)) from exc
    if not isinstance(payload, dict):
        raise ManifestError(path, "expected a JSON object")
    return payload


def remove_file(path: str) -> bool:
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    return True


class CleanupReconciler:
    def __init__(self, options: ResolvedOptions, logger: AssetLogger) -> None:
        self.options = options
        self.logger = logger

    def list_destination(self) -> list[str]:
        root = Path(self.options.theme_assets_dir)
        if not root.is_dir():
            return []
        return sorted(
            child.name
            for child in root.iterdir()
            if child.is_file() or child.is_symlink()
        )

    def stale_files(self, output_files: set[str], state: AssetMapState) -> list[str]:
        return [
            join_path(self.options.theme_assets_dir, name)
            for name in self.list_destination()
            if name not in output_files
            and name not in state.protected_basenames
            and name != HOST_INTERNAL_DIRNAME
        ]

    async def clean_match_files(self, state: AssetMapState) -> set[str]:
        matched: set[str] = set()
        for target in self.options.targets:
            if not target.clean_match:
                continue
            files = await asyncio.to_thread(glob_files, target.clean_match)
            matched.update(item for item in files if not state.claims(item))
        return matched

    async def reconcile(
        self,
        state: AssetMapState,
        bundle: Optional[Bundle] = None,
        manifest: Optional[Mapping[str, Any]] = None,
    ) -> CleanupResult:
        """Delete destination files no longer justified by the map or the build output.

        Skips entirely when neither a bundle nor a manifest is available.
        """
        if bundle:
            output_files = bundle_output_files(bundle)
        elif manifest:
            output_files = manifest_output_files(manifest)
        else:
            reason = "build output unknown (no bundle or manifest)"
            self.logger.warn(f"Could not determine the build output, skipping clean: {reason}")
            return CleanupResult(skipped_reason=reason)

        candidates = set(await asyncio.to_thread(self.stale_files, output_files, state))
        candidates |= await self.clean_match_files(state)

        protected = set(state.dest_set)
        protected.update(
            join_path(self.options.theme_assets_dir, name) for name in output_files
        )
        return await self.delete_files(sorted(candidates - protected))

    async def reconcile_clean_match(self, builder: AssetMapBuilder) -> CleanupResult:
        """Delete `clean_match` files that the current sources would not produce."""
        candidates: set[str] = set()
        for target in self.options.targets:
            if not target.clean_match:
                continue
            keep = set(await builder.expected_destinations(target))
            files = await asyncio.to_thread(glob_files, target.clean_match)
            candidates.update(item for item in files if item not in keep)
        return await self.delete_files(sorted(candidates))

    async def delete_one(self, path: str, timestamp: bool = False) -> DeleteResult:
        try:
            deleted = await asyncio.to_thread(remove_file, path)
        except OSError as exc:
            self.logger.error(
                f"Could not delete {relative_to_cwd(path)}",
                path=relative_to_cwd(path),
                timestamp=timestamp,
            )
            self.logger.exception(exc, timestamp=timestamp)
            return DeleteResult(path=path, deleted=False, error=exc)
        if deleted:
            self.logger.file_event(EventKind.DELETE, path, timestamp=timestamp)
        return DeleteResult(path=path, deleted=deleted)

    async def delete_files(
        self, paths: Iterable[str], timestamp: bool = False
    ) -> CleanupResult:
        paths = list(paths)
        results = await asyncio.gather(
            *(self.delete_one(path, timestamp=timestamp) for path in paths)
        )
        return CleanupResult(
            deleted=[result.path for result in results if result.deleted],
            failed=[result.path for result in results if result.error is not None],
        )
