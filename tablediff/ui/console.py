"""
Terminal rendering of sources and diff results.
Single responsibility: present comparison output with Rich.
"""

from typing import Any, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from ..core.models import DiffEntry, DiffResult, DiffStatus, ParsedTable


STATUS_STYLES = {
    DiffStatus.ADDED: "green",
    DiffStatus.DELETED: "red",
    DiffStatus.CHANGED: "yellow",
    DiffStatus.SAME: "dim",
}

MAX_PREVIEW_COLUMNS = 20


def human_size(size: int) -> str:
    """
    Format a byte count for display.

    Examples:
        >>> human_size(512)
        '512 B'
        >>> human_size(1536)
        '1.5 KB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 ** 2:
        return f"{size / 1024:.1f} KB"
    if size < 1024 ** 3:
        return f"{size / 1024 ** 2:.1f} MB"
    return f"{size / 1024 ** 3:.1f} GB"


def display_value(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def cell_text(value: Any) -> Text:
    """Literal text for user data; brackets are never read as markup."""
    return Text(display_value(value))


class ResultPrinter:
    """
    Prints sources, previews, summaries and entry tables.

    Anything that comes from the compared files (values, field names,
    file names, error messages) is printed as ``Text``, never as markup.
    """

    def __init__(self, console: Optional[Console] = None, use_rich: bool = True):
        """
        Initialize printer.

        Args:
            console: Console to print to
            use_rich: Plain, uncoloured output when False
        """
        if console is None:
            console = Console() if use_rich else Console(no_color=True, highlight=False)
        self.console = console

    def print_source(self, side: str, label: str, size: int, table: ParsedTable):
        meta = table.format_meta
        details = [f"{len(table.records):,} records", f"{len(table.field_names)} fields",
                   human_size(size)]
        if meta.get("delimiter"):
            details.append(f"delimiter {meta['delimiter']!r}")
        if meta.get("encoding"):
            details.append(meta["encoding"])
        line = Text(side, style="bold")
        line.append(f" {label}: " + " · ".join(details))
        self.console.print(line)

    def print_error(self, message: str):
        self.console.print(Text(f"Error: {message}", style="bold red"))

    def print_preview(self, table: ParsedTable, limit: int = 30):
        """Show the first rows of a table, at most 20 columns wide."""
        columns = table.field_names[:MAX_PREVIEW_COLUMNS]
        grid = Table(title=Text(f"Preview: {table.source_label}"), box=box.SIMPLE)
        for name in columns:
            grid.add_column(cell_text(name), overflow="fold")
        for record in table.preview(limit):
            grid.add_row(*(cell_text(record.get(name)) for name in columns))
        self.console.print(grid)

    def print_key_candidates(self, candidates: List[str]):
        if not candidates:
            self.print_error("The two tables share no field that could serve as a key.")
            return
        self.console.print(Text("Choose a key with --key. Candidates: " + ", ".join(candidates)))

    def print_summary(self, result: DiffResult, left_label: str, right_label: str):
        """Counts panel, plus skipped and duplicate keys when there are any."""
        counts = result.counts
        text = Text()
        text.append(f"{left_label} → {right_label}  (key: {result.key_field})\n\n", style="bold")
        text.append(f"total {counts.total:,}   ")
        for status in DiffStatus:
            text.append(f"{status.value} {getattr(counts, status.value):,}   ",
                        style=STATUS_STYLES[status])

        skipped = result.skipped["left"] + result.skipped["right"]
        if skipped:
            text.append(f"\nskipped without key: left {result.skipped['left']:,}, "
                        f"right {result.skipped['right']:,}", style="magenta")
        duplicates = result.duplicates["left"] + result.duplicates["right"]
        if duplicates:
            text.append(f"\nduplicate keys: left {result.duplicates['left']:,}, "
                        f"right {result.duplicates['right']:,}", style="magenta")

        self.console.print(Panel(text, title="Comparison", box=box.ROUNDED))

    def print_entries(self, result: DiffResult, show_same: bool = False,
                      limit: Optional[int] = 200):
        """
        Table of entries; mismatches only unless show_same is set.
        """
        entries: List[DiffEntry] = result.entries if show_same else result.mismatches()
        if not entries:
            self.console.print("[green]No differences.[/green]")
            return

        grid = Table(box=box.SIMPLE_HEAD)
        grid.add_column("status")
        grid.add_column(cell_text(result.key_field))
        grid.add_column("field")
        grid.add_column("left", overflow="fold")
        grid.add_column("right", overflow="fold")

        shown = entries if limit is None else entries[:limit]
        for entry in shown:
            style = STATUS_STYLES[entry.status]
            if entry.status is DiffStatus.CHANGED:
                for name in entry.changed_fields:
                    grid.add_row(entry.status.value, cell_text(entry.key), cell_text(name),
                                 cell_text(entry.left.get(name)),
                                 cell_text(entry.right.get(name)), style=style)
            else:
                grid.add_row(entry.status.value, cell_text(entry.key), "", "", "",
                             style=style)

        self.console.print(grid)
        if len(shown) < len(entries):
            self.console.print(f"… {len(entries) - len(shown):,} more entries in the export")

    def print_export(self, path: str, artifact_format: str,
                     fallback_reason: Optional[str] = None):
        if fallback_reason:
            notice = Text("Workbook export unavailable, wrote text report", style="yellow")
            notice.append(f" ({fallback_reason})")
            self.console.print(notice)
        self.console.print(Text(f"Report ({artifact_format}): {path}"))
