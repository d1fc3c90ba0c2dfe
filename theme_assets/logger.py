from typing import Callable, Optional

from rich.console import Console

from theme_assets.models import ChangeEvent, EventKind, LogEvent
from theme_assets.tui.renderers import AssetConsoleUI
from theme_assets.utils import relative_to_cwd


EventSink = Callable[[LogEvent], None]

_PAST_TENSE = {
    EventKind.CREATE: "created",
    EventKind.UPDATE: "updated",
    EventKind.DELETE: "deleted",
}


class AssetLogger:
    """Console output plus the structured event stream handed to the host.

    Every emitted message is kept in `events` and forwarded to `sink`.
    When `silent` is set, advisory warnings and raw exception details are
    dropped; file events and error summaries are always emitted.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        silent: bool = True,
        sink: Optional[EventSink] = None,
    ) -> None:
        self.ui = AssetConsoleUI(console)
        self.silent = silent
        self.sink = sink
        self.events: list[LogEvent] = []

    @property
    def console(self) -> Console:
        return self.ui.console

    def emit(
        self,
        kind: EventKind,
        message: str,
        path: Optional[str] = None,
        related_path: Optional[str] = None,
        timestamp: bool = False,
    ) -> LogEvent:
        event = LogEvent(kind=kind, message=message, path=path, related_path=related_path)
        self.events.append(event)
        if self.sink is not None:
            self.sink(event)
        self.ui.render_event(event, timestamp=timestamp)
        return event

    def info(self, message: str, timestamp: bool = False) -> LogEvent:
        return self.emit(EventKind.INFO, message, timestamp=timestamp)

    def warn(self, message: str, timestamp: bool = False) -> LogEvent:
        return self.emit(EventKind.WARNING, message, timestamp=timestamp)

    def advise(self, message: str, timestamp: bool = False) -> Optional[LogEvent]:
        if self.silent:
            return None
        return self.warn(message, timestamp=timestamp)

    def error(
        self, message: str, path: Optional[str] = None, timestamp: bool = False
    ) -> LogEvent:
        return self.emit(EventKind.ERROR, message, path=path, timestamp=timestamp)

    def exception(self, error: BaseException, timestamp: bool = False) -> Optional[LogEvent]:
        if self.silent:
            return None
        return self.emit(EventKind.ERROR, str(error), timestamp=timestamp)

    def file_event(
        self,
        kind: EventKind,
        path: str,
        related_path: Optional[str] = None,
        timestamp: bool = False,
    ) -> LogEvent:
        return self.emit(
            kind,
            _PAST_TENSE.get(kind, kind.value),
            path=relative_to_cwd(path),
            related_path=relative_to_cwd(related_path) if related_path else None,
            timestamp=timestamp,
        )

    def ignored(self, change: ChangeEvent, path: str, timestamp: bool = False) -> LogEvent:
        return self.emit(
            EventKind.IGNORED,
            f"{change.value} ignored",
            path=relative_to_cwd(path),
            timestamp=timestamp,
        )

    def duplicate(self, src: str, dest: str, timestamp: bool = False) -> LogEvent:
        # Always recorded; only printed when not silent.
        event = LogEvent(
            kind=EventKind.DUPLICATE_IGNORED,
            message=f"Duplicate asset found. Ignoring {relative_to_cwd(src)}",
            path=relative_to_cwd(src),
            related_path=relative_to_cwd(dest),
        )
        self.events.append(event)
        if self.sink is not None:
            self.sink(event)
        if not self.silent:
            self.ui.render_event(event, timestamp=timestamp)
        return event

    def events_of(self, kind: EventKind) -> list[LogEvent]:
        return [event for event in self.events if event.kind == kind]
