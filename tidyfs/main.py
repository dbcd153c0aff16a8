import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from . import __version__, config
from .core import TidyFSApp
from .exceptions import ArgumentError, ConfigError, FileAccessError
from .reporting import (
    ReportGenerator,
    render_duplicate_report,
    render_settings,
    render_storage_report,
)
from .settings import SettingsStore

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to stderr and, if requested, to a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def create_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tidyfs", description="Smart file system organizer and analyzer")

    p.add_argument("--config", type=Path, default=None,
                   help=f"Settings file (default: per-user config dir, or ${config.CONFIG_ENV_VAR})")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = p.add_subparsers(dest="command")

    scan = sub.add_parser("scan", help="Scan directory and show statistics")
    scan.add_argument("dir", nargs="?", type=Path, default=Path("."), help="Directory to scan")
    scan.add_argument("-r", "--recursive", action="store_true", help="Scan subdirectories recursively")
    scan.add_argument("-d", "--duplicates", action="store_true", help="Find duplicate files")
    scan.add_argument("--top", type=int, default=config.TOP_FILES, help="Number of largest files to list")
    scan.add_argument("--report-csv", type=Path, default=None, help="Also export every scanned file to this CSV")
    scan.add_argument("--workers", type=int, default=None, help="Number of parallel scan workers")

    org = sub.add_parser("organize", help="Organize files into folders")
    org.add_argument("dir", nargs="?", type=Path, default=Path("."), help="Directory to organize")
    org.add_argument("-t", "--target", type=Path, default=None,
                     help="Target directory for organized files (default: the scanned directory)")
    org.add_argument("-b", "--by", choices=config.SCHEMES, default=None,
                     help="Organization method (default: the configured default)")
    org.add_argument("-n", "--dry-run", action="store_true", help="Show what would be done without making changes")
    org.add_argument("-r", "--recursive", action="store_true", help="Process subdirectories recursively")
    org.add_argument("--workers", type=int, default=None, help="Number of parallel scan workers")

    cfg = sub.add_parser("config", help="Configure tidyfs settings")
    cfg.add_argument("--list", action="store_true", help="List current configuration")
    cfg.add_argument("--add-ignore", metavar="PATTERN", help="Add pattern to ignore list")
    cfg.add_argument("--remove-ignore", metavar="PATTERN", help="Remove pattern from ignore list")
    cfg.add_argument("--add-category", metavar="NAME:EXT1,EXT2",
                     help="Add custom category (format: 'category:ext1,ext2')")
    cfg.add_argument("--set-default-org", choices=config.SCHEMES,
                     help="Set default organization method")

    return p


def cmd_scan(args: argparse.Namespace, app: TidyFSApp, console: Console) -> int:
    console.print(f"[bold green]Scanning directory: {escape(str(args.dir))}[/]")
    result = app.scan(args.dir, recursive=args.recursive, duplicates=args.duplicates)

    if not result.records:
        console.print("No files found in the specified directory.")
    else:
        reporter = ReportGenerator()
        render_storage_report(reporter.storage_report(result.records, top_n=args.top), console)
        if args.duplicates:
            render_duplicate_report(reporter.duplicate_report(result.records), console)
        if args.report_csv:
            reporter.export_csv(result.records, args.report_csv)

    console.print()
    console.print(f"Scan complete. Processed {len(result.records)} files with {result.errors} errors")
    return EXIT_OK


def cmd_organize(args: argparse.Namespace, app: TidyFSApp, console: Console) -> int:
    scheme = args.by or app.settings.default_organization
    console.print(
        f"[bold green]Organizing files in {escape(str(args.dir))} by {scheme}"
        f"{' (DRY RUN)' if args.dry_run else ''}[/]"
    )
    result = app.organize(
        args.dir,
        target=args.target,
        scheme=scheme,
        dry_run=args.dry_run,
        recursive=args.recursive,
    )

    if args.dry_run:
        for move in result.planned:
            console.print(f"  {escape(str(move.source))} -> {escape(str(move.destination))}", highlight=False)
        console.print(
            f"Dry run complete. {len(result.planned)} files would be moved, "
            f"{result.errors} errors. No files were moved."
        )
    else:
        console.print(
            f"Organization complete. Moved {result.moved} files, "
            f"skipped {result.skipped}, with {result.errors} errors"
        )
    return EXIT_OK


def cmd_config(args: argparse.Namespace, app: TidyFSApp, console: Console) -> int:
    settings = app.settings
    changed = False

    # Apply every change in memory first; nothing is saved if one is rejected
    messages = []
    if args.add_ignore is not None:
        if settings.add_ignore_pattern(args.add_ignore):
            messages.append(f"Added '{args.add_ignore}' to ignore patterns")
            changed = True
        else:
            messages.append(f"Pattern '{args.add_ignore}' is already ignored")

    if args.remove_ignore is not None:
        if settings.remove_ignore_pattern(args.remove_ignore):
            messages.append(f"Removed '{args.remove_ignore}' from ignore patterns")
            changed = True
        else:
            messages.append(f"Pattern '{args.remove_ignore}' not found in ignore list")

    if args.add_category is not None:
        name, extensions = settings.add_category(args.add_category)
        messages.append(f"Added custom category '{name}' with extensions: {', '.join(extensions)}")
        changed = True

    if args.set_default_org is not None:
        settings.set_default_organization(args.set_default_org)
        messages.append(f"Default organization method set to '{args.set_default_org}'")
        changed = True

    if changed and app.store is not None:
        app.store.save(settings)

    for message in messages:
        console.print(escape(message), highlight=False)

    if args.list or not messages:
        render_settings(settings, console)
    return EXIT_OK


COMMANDS = {
    "scan": cmd_scan,
    "organize": cmd_organize,
    "config": cmd_config,
}


def run(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    setup_logging(args.verbose, args.log_file)
    console = Console(soft_wrap=True)

    try:
        store = SettingsStore(args.config)
        settings = store.load()
        app = TidyFSApp(
            settings,
            store=store,
            max_workers=getattr(args, "workers", None),
            show_progress=sys.stderr.isatty(),
        )
        return COMMANDS[args.command](args, app, console)
    except ArgumentError as e:
        logging.error(str(e))
        return EXIT_USAGE
    except ConfigError as e:
        logging.error(f"Configuration error: {e}")
        return EXIT_FAILURE
    except FileAccessError as e:
        logging.error(str(e))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user. Files already moved stay moved.")
        return EXIT_INTERRUPTED


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
