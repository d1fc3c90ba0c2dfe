"""Project config file loading for the command line host."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from jsonschema import Draft202012Validator

from theme_assets.constants import CONFIG_FILENAMES, RENAME_PLACEHOLDERS
from theme_assets.errors import (
    InvalidConfigSchemaError,
    InvalidYamlFormatError,
    MissingConfigFileError,
)
from theme_assets.models import AssetsOptions, ComputedName, HostConfig, Target

_SCHEMA_CACHE: dict[str, tuple[float, dict[str, Any]]] = {}


class ConfigSchemaRepository:
    def __init__(
        self, local_schema_path: Optional[Path] = None, ttl_seconds: int = 3600
    ) -> None:
        self.local_schema_path = local_schema_path or (
            Path(__file__).resolve().parent / "schema.json"
        )
        self.ttl_seconds = ttl_seconds

    def load_schema(self) -> dict[str, Any]:
        key = str(self.local_schema_path.resolve())
        cached = _SCHEMA_CACHE.get(key)
        now = time.time()
        if cached and now - cached[0] < self.ttl_seconds:
            return cached[1]
        schema = json.loads(self.local_schema_path.read_text(encoding="utf-8"))
        _SCHEMA_CACHE[key] = (now, schema)
        return schema


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


@dataclass(frozen=True)
class ProjectConfig:
    path: Path
    options: AssetsOptions
    host: HostConfig
    manifest: Optional[Path] = None

    @property
    def root(self) -> Path:
        return self.path.parent


def find_config_file(start: Path) -> Optional[Path]:
    for candidate in CONFIG_FILENAMES:
        path = start / candidate
        if path.is_file():
            return path
    return None


def template_rename(template: str) -> ComputedName:
    def _rename(name: str, ext: str, src: str) -> str:
        return (
            template.replace("{name}", name)
            .replace("{ext}", ext)
            .replace("{src}", src)
        )

    return ComputedName(_rename)


def _target_from_payload(item: Any) -> str | Target:
    if isinstance(item, str):
        return item
    rename = item.get("rename")
    if isinstance(rename, str) and any(p in rename for p in RENAME_PLACEHOLDERS):
        rename = template_rename(rename)
    return Target(
        src=item["src"],
        dest=item.get("dest"),
        rename=rename,
        ignore=item.get("ignore", ()),
        clean_match=item.get("clean_match"),
        dereference=item.get("dereference", True),
        force=item.get("force", True),
        preserve_timestamps=item.get("preserve_timestamps", True),
    )


def parse_project_config(
    path: Path, payload: Any, validator: Optional[Draft202012Validator] = None
) -> ProjectConfig:
    validator = validator or Draft202012Validator(ConfigSchemaRepository().load_schema())
    error = next(iter(validator.iter_errors(payload)), None)
    if error is not None:
        raise InvalidConfigSchemaError(path, format_schema_error(error))

    options = AssetsOptions(
        targets=[_target_from_payload(item) for item in payload["targets"]],
        theme_root=payload.get("theme_root"),
        public_dir=payload.get("public_dir"),
        on_serve=payload.get("on_serve", True),
        on_build=payload.get("on_build", True),
        on_watch=payload.get("on_watch", True),
        silent=payload.get("silent", True),
    )
    manifest = payload.get("manifest")
    return ProjectConfig(
        path=path,
        options=options,
        host=HostConfig.from_dict(payload.get("host") or {}),
        manifest=(path.parent / manifest).resolve() if manifest else None,
    )


def load_project_config(
    path: Optional[Path] = None, cwd: Optional[Path] = None
) -> ProjectConfig:
    if path is None:
        start = cwd or Path.cwd()
        path = find_config_file(start)
        if path is None:
            raise MissingConfigFileError(start / CONFIG_FILENAMES[0])
    path = path.expanduser().resolve()
    if not path.is_file():
        raise MissingConfigFileError(path)

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidYamlFormatError(path, str(exc)) from exc

    return parse_project_config(path, payload if payload is not None else {})
