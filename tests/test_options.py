from pathlib import Path

import pytest

from theme_assets.errors import DynamicDestinationError
from theme_assets.logger import AssetLogger
from theme_assets.models import (
    AssetsOptions,
    ComputedName,
    EventKind,
    FixedName,
    ForcePolicy,
    Target,
)
from theme_assets.options import resolve_clean_match, resolve_options
from theme_assets.utils import normalize_path


def _resolve(project: Path, targets, logger: AssetLogger | None = None, **kwargs):
    options = AssetsOptions(targets=targets, theme_root="theme", public_dir="src", **kwargs)
    return resolve_options(options, logger=logger, cwd=str(project))


def test_bare_string_target_uses_defaults(project: Path) -> None:
    resolved = _resolve(project, ["images/*.png"])

    target = resolved.targets[0]
    assert target.src == normalize_path(project / "src" / "images" / "*.png")
    assert target.dest == resolved.theme_assets_dir
    assert target.dest == normalize_path(project / "theme" / "assets")
    assert target.ignore == ()
    assert target.clean_match is None
    assert target.rename is None
    assert target.dereference is True
    assert target.force == ForcePolicy.OVERWRITE
    assert target.preserve_timestamps is True


def test_roots_default_to_working_directory(project: Path) -> None:
    resolved = resolve_options(AssetsOptions(targets=[]), cwd=str(project))

    assert resolved.theme_root == normalize_path(project)
    assert resolved.public_dir == normalize_path(project / "public")
    assert resolved.theme_assets_dir == normalize_path(project / "assets")
    assert resolved.targets == ()
    assert resolved.silent is True


def test_full_target_resolves_paths(project: Path) -> None:
    resolved = _resolve(
        project,
        [
            Target(
                src="../icons/icon-*.svg",
                dest="snippets",
                ignore="icons/skip-*.svg",
                force="error",
                dereference=False,
                preserve_timestamps=False,
            )
        ],
    )

    target = resolved.targets[0]
    assert target.src == normalize_path(project / "icons" / "icon-*.svg")
    assert target.dest == normalize_path(project / "theme" / "snippets")
    assert target.ignore == (normalize_path(project / "src" / "icons" / "skip-*.svg"),)
    assert target.force == ForcePolicy.ERROR
    assert target.dereference is False
    assert target.preserve_timestamps is False


@pytest.mark.parametrize(
    ("force", "expected"),
    [(True, ForcePolicy.OVERWRITE), (False, ForcePolicy.SKIP), ("error", ForcePolicy.ERROR)],
)
def test_force_maps_to_policy(project: Path, force, expected: ForcePolicy) -> None:
    resolved = _resolve(project, [Target(src="*.png", force=force)])
    assert resolved.targets[0].force == expected


def test_ignore_list_is_anchored_under_public_dir(project: Path) -> None:
    resolved = _resolve(project, [Target(src="**/*.js", ignore=["vendor/**", "*.min.js"])])

    assert resolved.targets[0].ignore == (
        normalize_path(project / "src" / "vendor" / "**"),
        normalize_path(project / "src" / "*.min.js"),
    )


@pytest.mark.parametrize("dest", ["snippets/*", "icons/{a,b}", "**/out"])
def test_dynamic_destination_is_fatal(project: Path, dest: str) -> None:
    with pytest.raises(DynamicDestinationError):
        _resolve(project, [Target(src="*.svg", dest=dest)])


def test_rename_variants_are_coerced(project: Path) -> None:
    def suffix(name: str, ext: str, src: str) -> str:
        return f"{name}.liquid"

    resolved = _resolve(
        project,
        [
            Target(src="a.svg", rename="fixed.svg"),
            Target(src="b.svg", rename=suffix),
            Target(src="c.svg", rename=FixedName("kept.svg")),
        ],
    )

    assert resolved.targets[0].rename == FixedName("fixed.svg")
    assert resolved.targets[1].rename == ComputedName(suffix)
    assert resolved.targets[2].rename == FixedName("kept.svg")


def test_clean_match_is_anchored_under_destination(project: Path) -> None:
    resolved = _resolve(
        project, [Target(src="icons/*.svg", dest="snippets", clean_match="icon-*.liquid")]
    )

    assert resolved.targets[0].clean_match == normalize_path(
        project / "theme" / "snippets" / "icon-*.liquid"
    )


@pytest.mark.parametrize("dest", [None, "assets"])
def test_clean_match_disabled_for_default_destination(
    project: Path, logger: AssetLogger, dest
) -> None:
    resolved = _resolve(
        project,
        [Target(src="*.svg", dest=dest, clean_match="icon-*.svg")],
        logger=logger,
        silent=False,
    )

    assert resolved.targets[0].clean_match is None
    warnings = logger.events_of(EventKind.WARNING)
    assert len(warnings) == 1
    assert "no effect" in warnings[0].message


@pytest.mark.parametrize("pattern", ["*", "**", "**/*", "*.*", "**/*.*", "./*"])
def test_generic_clean_match_is_always_disabled(
    project: Path, logger: AssetLogger, pattern: str
) -> None:
    resolved = _resolve(
        project,
        [Target(src="*.svg", dest="snippets", clean_match=pattern)],
        logger=logger,
    )

    assert resolved.targets[0].clean_match is None
    assert "too generic" in logger.events_of(EventKind.WARNING)[0].message


def test_ignored_clean_match_is_quiet_when_silent(console) -> None:
    logger = AssetLogger(console=console, silent=True)

    assert resolve_clean_match("*", "/theme/snippets", "/theme/assets", logger) is None
    assert logger.events == []


@pytest.mark.parametrize(
    "pattern", ["../layout/*.liquid", "../../*.liquid", "sub/../../layout/*", "/tmp/*.liquid"]
)
def test_clean_match_escaping_destination_is_disabled(
    project: Path, logger: AssetLogger, pattern: str
) -> None:
    resolved = _resolve(
        project,
        [Target(src="icons/*.svg", dest="snippets", clean_match=pattern)],
        logger=logger,
    )

    assert resolved.targets[0].clean_match is None
    assert "inside target.dest" in logger.events_of(EventKind.WARNING)[0].message


def test_clean_match_may_point_into_a_subdirectory(project: Path) -> None:
    resolved = _resolve(
        project,
        [Target(src="icons/*.svg", dest="snippets", clean_match="icons/../generated/*.liquid")],
    )

    assert resolved.targets[0].clean_match == normalize_path(
        project / "theme" / "snippets" / "generated" / "*.liquid"
    )
