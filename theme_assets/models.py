from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence, Union


RenameFunc = Callable[[str, str, str], Union[str, Awaitable[str]]]


class ForcePolicy(str, Enum):
    OVERWRITE = "overwrite"
    SKIP = "skip"
    ERROR = "error"

    @classmethod
    def from_force(cls, force: Union[bool, str]) -> "ForcePolicy":
        if force == "error":
            return cls.ERROR
        return cls.OVERWRITE if force else cls.SKIP


class ChangeEvent(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class EventKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DUPLICATE_IGNORED = "duplicate-ignored"
    IGNORED = "ignored"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


class CopyStatus(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    ERROR = "error"


class TrackState(str, Enum):
    UNTRACKED = "untracked"
    TRACKED = "tracked"


@dataclass(frozen=True)
class FixedName:
    name: str


@dataclass(frozen=True)
class ComputedName:
    func: RenameFunc


Rename = Union[FixedName, ComputedName]


@dataclass(frozen=True)
class Target:
    src: str
    dest: Optional[str] = None
    rename: Union[str, RenameFunc, FixedName, ComputedName, None] = None
    ignore: Union[str, Sequence[str]] = ()
    clean_match: Optional[str] = None
    dereference: bool = True
    force: Union[bool, str] = True
    preserve_timestamps: bool = True


@dataclass(frozen=True)
class ResolvedTarget:
    src: str
    dest: str
    ignore: tuple[str, ...] = ()
    clean_match: Optional[str] = None
    rename: Optional[Rename] = None
    dereference: bool = True
    force: ForcePolicy = ForcePolicy.OVERWRITE
    preserve_timestamps: bool = True


@dataclass(frozen=True)
class ResolvedOptions:
    public_dir: str
    theme_root: str
    theme_assets_dir: str
    targets: tuple[ResolvedTarget, ...]
    on_serve: bool = True
    on_build: bool = True
    on_watch: bool = True
    silent: bool = True


@dataclass(frozen=True)
class AssetEntry:
    target: ResolvedTarget
    dest: str


@dataclass(frozen=True)
class LogEvent:
    kind: EventKind
    message: str
    path: Optional[str] = None
    related_path: Optional[str] = None

    def as_dict(self) -> dict[str, Optional[str]]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "path": self.path,
            "related_path": self.related_path,
        }


@dataclass(frozen=True)
class CopyResult:
    src: str
    dest: str
    status: CopyStatus
    error: Optional[Exception] = None


@dataclass(frozen=True)
class DeleteResult:
    path: str
    deleted: bool
    error: Optional[Exception] = None


@dataclass
class CleanupResult:
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


@dataclass(frozen=True)
class OutputAsset:
    file_name: str


@dataclass(frozen=True)
class OutputChunk:
    file_name: str
    imported_css: tuple[str, ...] = ()
    imported_assets: tuple[str, ...] = ()


Bundle = dict[str, Union[OutputAsset, OutputChunk]]


@dataclass(frozen=True)
class HostConfig:
    public_dir: Union[str, bool, None] = None
    copy_public_dir: Optional[bool] = None
    empty_out_dir: Optional[bool] = None
    out_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "HostConfig":
        return cls(
            public_dir=payload.get("public_dir"),
            copy_public_dir=payload.get("copy_public_dir"),
            empty_out_dir=payload.get("empty_out_dir"),
            out_dir=payload.get("out_dir"),
        )


@dataclass(frozen=True)
class AssetsOptions:
    targets: Sequence[Union[str, Target]] = ()
    theme_root: Optional[str] = None
    public_dir: Optional[str] = None
    on_serve: bool = True
    on_build: bool = True
    on_watch: bool = True
    silent: bool = True
