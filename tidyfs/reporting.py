import csv
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import config
from .models import DuplicateGroup, FileRecord
from .scanning.duplicates import group_duplicates, sort_by_wasted_space
from .settings import Settings

KB = 1024
MB = KB * 1024
GB = MB * 1024


def format_size(size: int) -> str:
    if size >= GB:
        return f"{size / GB:.2f} GB"
    if size >= MB:
        return f"{size / MB:.2f} MB"
    if size >= KB:
        return f"{size / KB:.2f} KB"
    return f"{size} bytes"


def format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class CategoryStats:
    name: str
    size: int
    count: int
    percentage: float


@dataclass
class StorageReport:
    total_size: int = 0
    total_files: int = 0
    categories: List[CategoryStats] = field(default_factory=list)
    largest: List[FileRecord] = field(default_factory=list)


@dataclass
class DuplicateReport:
    groups: List[DuplicateGroup] = field(default_factory=list)
    total_groups: int = 0
    total_duplicates: int = 0
    wasted_bytes: int = 0

    @property
    def hidden_groups(self) -> int:
        return self.total_groups - len(self.groups)


class ReportGenerator:
    def storage_report(self, records: Iterable[FileRecord], top_n: int = config.TOP_FILES) -> StorageReport:
        """Size and count per category plus the `top_n` largest files."""
        records = list(records)
        total_size = sum(r.size for r in records)

        sizes: Dict[str, int] = defaultdict(int)
        counts: Dict[str, int] = defaultdict(int)
        for r in records:
            name = r.category.display_name
            sizes[name] += r.size
            counts[name] += 1

        categories = [
            CategoryStats(
                name=name,
                size=size,
                count=counts[name],
                percentage=(size / total_size * 100.0) if total_size else 0.0,
            )
            for name, size in sizes.items()
        ]
        categories.sort(key=lambda c: (-c.size, c.name))

        largest = sorted(records, key=lambda r: (-r.size, str(r.path)))[:top_n]

        return StorageReport(
            total_size=total_size,
            total_files=len(records),
            categories=categories,
            largest=largest,
        )

    def duplicate_report(self, records: Iterable[FileRecord], limit: int = config.TOP_DUPLICATE_GROUPS) -> DuplicateReport:
        ordered = sort_by_wasted_space(group_duplicates(records))
        return DuplicateReport(
            groups=ordered[:limit],
            total_groups=len(ordered),
            total_duplicates=sum(len(g.records) - 1 for g in ordered),
            wasted_bytes=sum(g.wasted_bytes for g in ordered),
        )

    def export_csv(self, records: Iterable[FileRecord], output_csv: Path):
        """Writes one row per scanned file."""
        headers = ["Path", "Category", "Size (bytes)", "Last Modified", "Content Hash"]
        count = 0
        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            for r in records:
                writer.writerow([
                    str(r.path),
                    r.category.display_name,
                    r.size,
                    format_timestamp(r.last_modified),
                    r.content_hash or "",
                ])
                count += 1
        logging.info(f"Wrote {count} rows to {output_csv}")


# --- Console rendering ---

def render_storage_report(report: StorageReport, console: Optional[Console] = None):
    console = console or Console()

    console.print()
    console.print("[bold underline]Storage Usage Report[/]")
    console.print(f"Total: {report.total_files} files, [bold]{format_size(report.total_size)}[/]")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("% of Total", justify="right")
    for row in report.categories:
        table.add_row(escape(row.name), format_size(row.size), str(row.count), f"{row.percentage:.1f}%")
    console.print(table)

    console.print("[bold underline]Largest Files:[/]")
    for r in report.largest:
        console.print(
            f"[cyan]{escape(str(r.path))}[/] ([yellow]{format_size(r.size)}[/], modified {format_timestamp(r.last_modified)})",
            highlight=False,
        )


def render_duplicate_report(report: DuplicateReport, console: Optional[Console] = None):
    console = console or Console()

    if not report.total_groups:
        console.print()
        console.print("[bold]No duplicate files found.[/]")
        return

    console.print()
    console.print(
        f"[bold yellow]Duplicate Files Found[/] ({report.total_duplicates} duplicate files "
        f"in {report.total_groups} groups, wasting [bold]{format_size(report.wasted_bytes)}[/])"
    )
    for i, group in enumerate(report.groups, start=1):
        console.print()
        console.print(
            f"Group {i} - {len(group.records) - 1} duplicates, wasting "
            f"[yellow]{format_size(group.wasted_bytes)}[/]:"
        )
        for r in group.records:
            console.print(f"  {escape(str(r.path))}", highlight=False)

    if report.hidden_groups > 0:
        console.print()
        console.print(f"... and {report.hidden_groups} more duplicate groups")


def render_settings(settings: Settings, console: Optional[Console] = None):
    console = console or Console()

    console.print("[bold underline]Current Configuration:[/]")
    console.print("Ignored patterns:")
    for pattern in settings.ignore_patterns:
        console.print(f"  - {escape(pattern)}", highlight=False)

    console.print()
    console.print("Custom categories:")
    for name, exts in settings.custom_categories.items():
        console.print(f"  - {escape(name)}: {escape(', '.join(exts))}", highlight=False)

    console.print()
    console.print(f"Default organization method: {settings.default_organization}")

    console.print()
    console.print("Recent directories:")
    for d in settings.recent_directories:
        console.print(f"  - {escape(d)}", highlight=False)
