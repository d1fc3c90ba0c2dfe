import os
from typing import Optional, Union

from theme_assets.constants import (
    GENERIC_CLEAN_PATTERNS,
    PUBLIC_DIRNAME,
    THEME_ASSETS_DIRNAME,
)
from theme_assets.errors import AssetsConfigError, DynamicDestinationError
from theme_assets.logger import AssetLogger
from theme_assets.models import (
    AssetsOptions,
    ComputedName,
    FixedName,
    ForcePolicy,
    Rename,
    ResolvedOptions,
    ResolvedTarget,
    Target,
)
from theme_assets.utils import (
    glob_base_dir,
    is_child_dir,
    is_dynamic_pattern,
    join_path,
    resolve_path,
)


def resolve_options(
    options: AssetsOptions,
    logger: Optional[AssetLogger] = None,
    cwd: Optional[str] = None,
) -> ResolvedOptions:
    """Normalize user targets into absolute, fully-defaulted targets.

    Raises `DynamicDestinationError` when a destination is a glob. Never
    touches the file system.
    """
    cwd = cwd or os.getcwd()
    logger = logger or AssetLogger(silent=options.silent)

    public_dir = (
        resolve_path(cwd, options.public_dir)
        if options.public_dir
        else resolve_path(cwd, PUBLIC_DIRNAME)
    )
    theme_root = (
        resolve_path(cwd, options.theme_root) if options.theme_root else resolve_path(cwd)
    )
    theme_assets_dir = join_path(theme_root, THEME_ASSETS_DIRNAME)

    targets = tuple(
        resolve_target(target, public_dir, theme_root, theme_assets_dir, logger)
        for target in options.targets or ()
    )

    return ResolvedOptions(
        public_dir=public_dir,
        theme_root=theme_root,
        theme_assets_dir=theme_assets_dir,
        targets=targets,
        on_serve=options.on_serve,
        on_build=options.on_build,
        on_watch=options.on_watch,
        silent=options.silent,
    )


def resolve_target(
    target: Union[str, Target],
    public_dir: str,
    theme_root: str,
    theme_assets_dir: str,
    logger: AssetLogger,
) -> ResolvedTarget:
    if isinstance(target, str):
        return ResolvedTarget(src=join_path(public_dir, target), dest=theme_assets_dir)
    if not isinstance(target, Target):
        raise AssetsConfigError(f"Unsupported target: {target!r}")
    if not target.src:
        raise AssetsConfigError("target.src is required")

    if target.dest and is_dynamic_pattern(target.dest):
        raise DynamicDestinationError(target.dest)

    dest = join_path(theme_root, target.dest) if target.dest else theme_assets_dir
    ignore = [target.ignore] if isinstance(target.ignore, str) else list(target.ignore)

    return ResolvedTarget(
        src=join_path(public_dir, target.src),
        dest=dest,
        ignore=tuple(join_path(public_dir, item) for item in ignore),
        clean_match=resolve_clean_match(
            target.clean_match, dest, theme_assets_dir, logger
        ),
        rename=_coerce_rename(target.rename),
        dereference=target.dereference,
        force=ForcePolicy.from_force(target.force),
        preserve_timestamps=target.preserve_timestamps,
    )


def resolve_clean_match(
    clean_match: Optional[str],
    dest: str,
    theme_assets_dir: str,
    logger: AssetLogger,
) -> Optional[str]:
    """Anchor `clean_match` under `dest`, or disable it.

    Disabled (with an advisory warning) when the destination is the theme
    assets directory or when the pattern would match virtually anything.
    """
    if not clean_match:
        return None

    if dest == theme_assets_dir:
        logger.advise(
            "WARNING: target.clean_match will have no effect when target.dest "
            "is not set or is equal to the default value."
        )
        return None

    pattern = clean_match.strip()
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if pattern in GENERIC_CLEAN_PATTERNS:
        logger.advise(
            "WARNING: target.clean_match pattern is too generic and will be "
            "disabled to prevent accidentally deleting files."
        )
        return None

    resolved = join_path(dest, pattern)
    base = glob_base_dir(resolved)
    if base != dest and not is_child_dir(dest, base):
        logger.advise(
            "WARNING: target.clean_match must stay inside target.dest and "
            "will be disabled to prevent deleting files outside of it."
        )
        return None

    return resolved


def _coerce_rename(rename) -> Optional[Rename]:
    if rename is None or isinstance(rename, (FixedName, ComputedName)):
        return rename
    if isinstance(rename, str):
        return FixedName(rename)
    if callable(rename):
        return ComputedName(rename)
    raise AssetsConfigError(f"Unsupported target.rename: {rename!r}")
