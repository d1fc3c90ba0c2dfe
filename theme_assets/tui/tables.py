from collections import Counter
from typing import Iterable, Mapping, Optional

from rich.panel import Panel
from rich.table import Column, Table

from theme_assets.models import (
    AssetEntry,
    CleanupResult,
    CopyResult,
    CopyStatus,
    LogEvent,
)
from theme_assets.tui.enums import COPY_STATUS_STYLE, UIStyle
from theme_assets.utils import relative_to_cwd


class AssetMapTable:
    @staticmethod
    def summary_block(
        assets: Mapping[str, AssetEntry], mode: str, duplicates: int = 0
    ) -> Table:
        per_dest = Counter(
            relative_to_cwd(entry.target.dest) for entry in assets.values()
        )
        chips = [f"{key}={value}" for key, value in sorted(per_dest.items())]

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Mode", mode)
        table.add_row("Assets", str(len(assets)))
        table.add_row("Destinations", "  ".join(chips) or "none")
        table.add_row("Duplicates", str(duplicates))
        return table

    @staticmethod
    def entries_table(assets: Mapping[str, AssetEntry]) -> Table:
        table = Table(
            Column(header="Source", overflow="ellipsis", max_width=58),
            Column(header="Destination", overflow="ellipsis", max_width=58),
            Column(header="Clean", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for src, entry in assets.items():
            clean = relative_to_cwd(entry.target.clean_match) if entry.target.clean_match else ""
            table.add_row(relative_to_cwd(src), relative_to_cwd(entry.dest), clean)
        return table


class CycleTable:
    @staticmethod
    def stats_panel(
        copies: Iterable[CopyResult], cleanup: Optional[CleanupResult] = None
    ) -> Panel:
        counts = Counter(result.status for result in copies)
        table = Table(show_header=False, box=None)
        for status, style in COPY_STATUS_STYLE.items():
            table.add_row(
                f"[bold]{status.value}[/bold]",
                f"[{style}]{counts.get(status, 0)}[/{style}]",
            )
        if cleanup is not None:
            if cleanup.skipped:
                table.add_row("[bold]clean[/bold]", f"skipped ({cleanup.skipped_reason})")
            else:
                table.add_row("[bold]deleted[/bold]", str(len(cleanup.deleted)))
                table.add_row("[bold]delete failed[/bold]", str(len(cleanup.failed)))

        border = UIStyle.GREEN.value
        if counts.get(CopyStatus.ERROR) or (cleanup is not None and cleanup.failed):
            border = UIStyle.RED.value
        return Panel(table, title="sync", border_style=border)

    @staticmethod
    def warnings_text(events: Iterable[LogEvent]) -> str:
        return "\n".join(f"- {event.message}" for event in events)
