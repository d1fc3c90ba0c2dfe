import inspect
import json
import os
import posixpath
from pathlib import Path
from typing import Any, Iterable, Sequence, Union

from wcmatch import glob as wglob

from theme_assets.models import ComputedName, FixedName, Rename


GLOB_FLAGS = wglob.GLOBSTAR | wglob.BRACE | wglob.NODIR | wglob.FOLLOW
MATCH_FLAGS = wglob.GLOBSTAR | wglob.BRACE


def normalize_path(path: Union[str, Path]) -> str:
    """Forward slashes, no `.`/`..` segments, no trailing separator."""
    text = str(path).replace("\\", "/")
    if not text:
        return "."
    return posixpath.normpath(text)


def resolve_path(*parts: Union[str, Path]) -> str:
    return normalize_path(os.path.abspath(os.path.join(*[str(p) for p in parts])))


def join_path(*parts: Union[str, Path]) -> str:
    return normalize_path(posixpath.join(*[normalize_path(p) for p in parts]))


def is_child_dir(base: Union[str, Path], target: Union[str, Path]) -> bool:
    try:
        relation = os.path.relpath(str(target), str(base))
    except ValueError:
        return False
    relation = normalize_path(relation)
    return (
        relation != "."
        and relation != ".."
        and not relation.startswith("../")
        and not os.path.isabs(relation)
    )


def relative_to_cwd(path: Union[str, Path]) -> str:
    try:
        return normalize_path(os.path.relpath(str(path)))
    except ValueError:
        return normalize_path(path)


def is_dynamic_pattern(pattern: str) -> bool:
    return wglob.is_magic(pattern, flags=MATCH_FLAGS)


def glob_base_dir(pattern: str) -> str:
    parts = normalize_path(pattern).split("/")
    static: list[str] = []
    for part in parts:
        if is_dynamic_pattern(part):
            break
        static.append(part)
    if len(static) == len(parts):
        static = static[:-1]
    base = "/".join(static)
    if not base:
        return "/" if pattern.startswith("/") else "."
    return base


def glob_files(pattern: str, ignore: Sequence[str] = ()) -> list[str]:
    matches = wglob.glob(pattern, flags=GLOB_FLAGS)
    files = [normalize_path(item) for item in matches]
    if ignore:
        files = [item for item in files if not match_glob(item, ignore)]
    return sorted(set(files))


def match_glob(path: str, patterns: Union[str, Iterable[str]]) -> bool:
    if isinstance(patterns, str):
        patterns = [patterns]
    patterns = list(patterns)
    if not patterns:
        return False
    return wglob.globmatch(normalize_path(path), patterns, flags=MATCH_FLAGS)


async def rename_file(file_name: str, src: str, rename: Rename) -> str:
    if isinstance(rename, FixedName):
        return rename.name
    if not isinstance(rename, ComputedName):
        raise TypeError(f"Unsupported rename: {rename!r}")

    name, ext = os.path.splitext(file_name)
    result = rename.func(name, ext.replace(".", "", 1), src)
    if inspect.isawaitable(result):
        result = await result
    return str(result)


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
