import os
from pathlib import Path

import pytest

from theme_assets.copier import CopyEngine, copy_file
from theme_assets.models import (
    AssetEntry,
    CopyStatus,
    EventKind,
    ForcePolicy,
    ResolvedTarget,
)


def _target(dest: Path, **kwargs) -> ResolvedTarget:
    return ResolvedTarget(src="unused/*", dest=str(dest), **kwargs)


def test_copy_creates_parent_dirs_and_bytes_match(tmp_path: Path, write_file) -> None:
    src = write_file(tmp_path / "src" / "logo.svg", "<svg/>")
    dest = tmp_path / "theme" / "assets" / "nested" / "logo.svg"

    status = copy_file(str(src), str(dest), _target(dest.parent))

    assert status == CopyStatus.CREATE
    assert dest.read_bytes() == src.read_bytes()


def test_copy_over_existing_file_reports_update(tmp_path: Path, write_file) -> None:
    src = write_file(tmp_path / "a.css", "new")
    dest = write_file(tmp_path / "out" / "a.css", "old")

    status = copy_file(str(src), str(dest), _target(dest.parent))

    assert status == CopyStatus.UPDATE
    assert dest.read_text(encoding="utf-8") == "new"


def test_copy_skip_policy_leaves_existing_file(tmp_path: Path, write_file) -> None:
    src = write_file(tmp_path / "a.css", "new")
    dest = write_file(tmp_path / "out" / "a.css", "old")

    status = copy_file(str(src), str(dest), _target(dest.parent, force=ForcePolicy.SKIP))

    assert status == CopyStatus.SKIP
    assert dest.read_text(encoding="utf-8") == "old"


def test_copy_error_policy_raises(tmp_path: Path, write_file) -> None:
    src = write_file(tmp_path / "a.css", "new")
    dest = write_file(tmp_path / "out" / "a.css", "old")

    with pytest.raises(FileExistsError):
        copy_file(str(src), str(dest), _target(dest.parent, force=ForcePolicy.ERROR))


def test_copy_preserves_timestamps_when_asked(tmp_path: Path, write_file) -> None:
    src = write_file(tmp_path / "a.js")
    os.utime(src, (1_000_000, 1_000_000))

    kept = tmp_path / "kept" / "a.js"
    fresh = tmp_path / "fresh" / "a.js"
    copy_file(str(src), str(kept), _target(kept.parent, preserve_timestamps=True))
    copy_file(str(src), str(fresh), _target(fresh.parent, preserve_timestamps=False))

    assert int(kept.stat().st_mtime) == 1_000_000
    assert int(fresh.stat().st_mtime) != 1_000_000


def test_copy_without_dereference_keeps_symlink(tmp_path: Path, write_file) -> None:
    real = write_file(tmp_path / "real.txt", "payload")
    link = tmp_path / "link.txt"
    link.symlink_to(real)

    followed = tmp_path / "out" / "followed.txt"
    kept = tmp_path / "out" / "kept.txt"
    copy_file(str(link), str(followed), _target(followed.parent, dereference=True))
    copy_file(str(link), str(kept), _target(kept.parent, dereference=False))

    assert not followed.is_symlink()
    assert followed.read_text(encoding="utf-8") == "payload"
    assert kept.is_symlink()


def test_copy_replaces_symlink_at_destination(tmp_path: Path, write_file) -> None:
    src = write_file(tmp_path / "a.txt", "fresh")
    elsewhere = write_file(tmp_path / "elsewhere.txt", "untouched")
    dest = tmp_path / "out" / "a.txt"
    dest.parent.mkdir()
    dest.symlink_to(elsewhere)

    copy_file(str(src), str(dest), _target(dest.parent))

    assert not dest.is_symlink()
    assert dest.read_text(encoding="utf-8") == "fresh"
    assert elsewhere.read_text(encoding="utf-8") == "untouched"


@pytest.mark.asyncio(loop_scope="function")
async def test_copy_all_isolates_failures(tmp_path: Path, write_file, logger) -> None:
    good = write_file(tmp_path / "src" / "good.png")
    missing = tmp_path / "src" / "missing.png"
    out = tmp_path / "out"
    target = _target(out)
    assets = {
        str(missing): AssetEntry(target=target, dest=str(out / "missing.png")),
        str(good): AssetEntry(target=target, dest=str(out / "good.png")),
    }

    results = await CopyEngine(logger).copy_all(assets)

    statuses = {Path(result.dest).name: result.status for result in results}
    assert statuses == {"missing.png": CopyStatus.ERROR, "good.png": CopyStatus.CREATE}
    assert (out / "good.png").exists()
    errors = logger.events_of(EventKind.ERROR)
    assert any("could not copy" in event.message for event in errors)
    assert len(logger.events_of(EventKind.CREATE)) == 1


@pytest.mark.asyncio(loop_scope="function")
async def test_copy_entry_error_policy_is_logged_not_raised(
    tmp_path: Path, write_file, logger
) -> None:
    src = write_file(tmp_path / "a.css", "new")
    dest = write_file(tmp_path / "out" / "a.css", "old")
    entry = AssetEntry(target=_target(dest.parent, force=ForcePolicy.ERROR), dest=str(dest))

    result = await CopyEngine(logger).copy_entry(str(src), entry)

    assert result.status == CopyStatus.ERROR
    assert isinstance(result.error, FileExistsError)
    assert dest.read_text(encoding="utf-8") == "old"


@pytest.mark.asyncio(loop_scope="function")
async def test_recopy_reports_update(make_session, public_dir: Path, write_file) -> None:
    write_file(public_dir / "app.js")
    session = make_session(["*.js"])
    await session.rebuild()

    first = await session.sync_all()
    second = await session.sync_all()

    assert [result.status for result in first] == [CopyStatus.CREATE]
    assert [result.status for result in second] == [CopyStatus.UPDATE]
    kinds = [event.kind for event in session.logger.events]
    assert kinds.count(EventKind.CREATE) == 1
    assert kinds.count(EventKind.UPDATE) == 1
