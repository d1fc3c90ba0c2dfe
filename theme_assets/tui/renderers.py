import posixpath
from datetime import datetime
from typing import Iterable, Mapping, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from theme_assets.constants import LOG_PREFIX
from theme_assets.models import (
    AssetEntry,
    CleanupResult,
    CopyResult,
    EventKind,
    LogEvent,
)
from theme_assets.tui.enums import EVENT_KIND_STYLE, UIStyle
from theme_assets.tui.tables import AssetMapTable, CycleTable


PATH_EVENT_KINDS = (
    EventKind.CREATE,
    EventKind.UPDATE,
    EventKind.DELETE,
    EventKind.IGNORED,
)


class AssetConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    @staticmethod
    def format_event(event: LogEvent, timestamp: bool = False) -> str:
        style = EVENT_KIND_STYLE.get(event.kind, UIStyle.WHITE.value)
        stamp = f"[dim]{datetime.now():%H:%M:%S}[/dim] " if timestamp else ""

        if event.kind in PATH_EVENT_KINDS and event.path:
            head, base = posixpath.split(event.path)
            head = f"{head}/" if head else ""
            return (
                f"{stamp}[dim]{escape(LOG_PREFIX)} {escape(head)}[/dim]"
                f"[{style}]{escape(base)}[/{style}]"
                f"[dim] {escape(event.message)}[/dim]"
            )
        return (
            f"{stamp}[dim]{escape(LOG_PREFIX)}[/dim] "
            f"[{style}]{escape(event.message)}[/{style}]"
        )

    def render_event(self, event: LogEvent, timestamp: bool = False) -> None:
        self.console.print(self.format_event(event, timestamp=timestamp))

    def render_plan(
        self,
        assets: Mapping[str, AssetEntry],
        mode: str,
        warnings: Iterable[LogEvent] = (),
    ) -> None:
        warnings = list(warnings)
        duplicates = [
            event for event in warnings if event.kind == EventKind.DUPLICATE_IGNORED
        ]
        self.console.print(
            Panel(
                AssetMapTable.summary_block(assets, mode=mode, duplicates=len(duplicates)),
                title="asset map",
                border_style=UIStyle.BLUE.value,
                padding=(0, 1),
            )
        )
        if assets:
            self.console.print(
                Panel(
                    AssetMapTable.entries_table(assets),
                    title="assets",
                    border_style=UIStyle.CYAN.value,
                    padding=(0, 1),
                )
            )
        else:
            self.console.print(
                Panel("No source files matched.", title="assets", border_style=UIStyle.DIM.value)
            )
        if warnings:
            self.console.print(
                Panel(
                    escape(CycleTable.warnings_text(warnings)),
                    title="warnings",
                    border_style=UIStyle.YELLOW.value,
                    padding=(0, 1),
                )
            )

    def render_cycle_result(
        self,
        copies: Iterable[CopyResult],
        cleanup: Optional[CleanupResult] = None,
    ) -> None:
        self.console.print(CycleTable.stats_panel(copies, cleanup))
