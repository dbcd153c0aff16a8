import logging
from pathlib import Path
from typing import Optional

from . import config
from .exceptions import ArgumentError, FileAccessError
from .models import OrganizeResult, ScanResult
from .organization.mover import organize
from .scanning.filesystem import DiskScanner
from .settings import Settings, SettingsStore


class TidyFSApp:
    def __init__(self,
                 settings: Settings,
                 store: Optional[SettingsStore] = None,
                 max_workers: Optional[int] = None,
                 show_progress: bool = False):
        self.settings = settings
        self.store = store
        self.max_workers = max_workers
        self.show_progress = show_progress

    def scan(self, root: Path, recursive: bool = False, duplicates: bool = False) -> ScanResult:
        """Scans root, hashing every file when duplicate detection is requested."""
        root = self._require_dir(root)
        self.remember_directory(root)

        logging.info(f"Scanning {root} (recursive={recursive}, duplicates={duplicates})...")
        scanner = self._scanner()
        return scanner.scan(root, compute_hashes=duplicates, recursive=recursive)

    def organize(self,
                 root: Path,
                 target: Optional[Path] = None,
                 scheme: Optional[str] = None,
                 dry_run: bool = False,
                 recursive: bool = False) -> OrganizeResult:
        """
        Executes the organize pipeline.
        1. Validate the scheme (before anything is touched)
        2. Scan (no hashing)
        3. Plan & Move
        """
        scheme = scheme or self.settings.default_organization
        if scheme not in config.SCHEMES:
            raise ArgumentError(
                f"Invalid organization method '{scheme}'. Use one of: {', '.join(config.SCHEMES)}"
            )

        root = self._require_dir(root)
        target = Path(target) if target else root
        self.remember_directory(root)

        logging.info(
            f"Organizing files in {root} by {scheme} into {target}"
            f"{' (DRY RUN)' if dry_run else ''}"
        )
        scan = self._scanner().scan(root, compute_hashes=False, recursive=recursive)
        if not scan.records:
            logging.info("No files found in the specified directory.")
            return OrganizeResult(errors=scan.errors)

        result = organize(scan.records, target, scheme, dry_run=dry_run, show_progress=self.show_progress)
        # Files that could not even be scanned count as failures of this run
        result.errors += scan.errors
        return result

    def remember_directory(self, directory: Path):
        """Records directory at the front of the recent list and persists settings."""
        self.settings.add_recent_directory(Path(directory).resolve())
        if self.store is not None:
            self.store.save(self.settings)

    @staticmethod
    def _require_dir(root: Path) -> Path:
        root = Path(root)
        if not root.is_dir():
            raise FileAccessError(f"'{root}' is not a valid directory")
        return root

    def _scanner(self) -> DiskScanner:
        return DiskScanner(self.settings, max_workers=self.max_workers, show_progress=self.show_progress)
