import sys
from io import StringIO
from pathlib import Path
from typing import Callable

import pytest
from click.testing import CliRunner
from rich.console import Console


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from theme_assets.logger import AssetLogger  # noqa: E402
from theme_assets.models import AssetsOptions  # noqa: E402
from theme_assets.session import SyncSession  # noqa: E402


@pytest.fixture
def project(tmp_path: Path, monkeypatch) -> Path:
    """Theme project with `theme/` as theme root and `src/` as public dir."""
    (tmp_path / "theme" / "assets").mkdir(parents=True)
    (tmp_path / "src").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def theme_root(project: Path) -> Path:
    return project / "theme"


@pytest.fixture
def assets_dir(theme_root: Path) -> Path:
    return theme_root / "assets"


@pytest.fixture
def public_dir(project: Path) -> Path:
    return project / "src"


@pytest.fixture
def write_file() -> Callable[..., Path]:
    def _write(path: Path, content: str = "content") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def console() -> Console:
    return Console(file=StringIO(), width=200, color_system=None)


@pytest.fixture
def logger(console: Console) -> AssetLogger:
    return AssetLogger(console=console, silent=False)


@pytest.fixture
def make_session(project: Path, console: Console) -> Callable[..., SyncSession]:
    def _make(targets, silent: bool = False, **kwargs) -> SyncSession:
        options = AssetsOptions(
            targets=targets,
            theme_root="theme",
            public_dir="src",
            silent=silent,
            **kwargs,
        )
        return SyncSession.from_options(options, console=console, cwd=str(project))

    return _make


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def write_config(project: Path) -> Callable[..., Path]:
    def _write(content: str, name: str = "theme-assets.yaml") -> Path:
        path = project / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
