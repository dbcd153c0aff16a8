import os
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from tqdm import tqdm

from .. import config
from ..exceptions import FileAccessError
from ..models import FileRecord, ScanResult
from ..settings import Settings
from .classifier import classify
from .hasher import FileHasher

# Files handed to a worker at once. Batches never span directories.
BATCH_SIZE = 64


class DirectoryWalker:
    """
    Lists regular files under a root, honouring ignore patterns.

    Unreadable directories and entries are skipped and counted in `errors`
    instead of aborting the walk.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings(ignore_patterns=[])
        self.errors = 0

    def is_ignored(self, path: Path) -> bool:
        return self.settings.is_ignored(path)

    def walk(self, root: Path, recursive: bool = False) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        if self.is_ignored(root):
            logging.debug(f"Root {root} matches an ignore pattern, nothing to walk")
            return

        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                logging.warning(f"Cannot read directory {current}: {e}")
                self.errors += 1
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            for e in entries:
                path = Path(e.path)
                if self.is_ignored(path):
                    continue
                try:
                    # Directory symlinks are never followed, which rules out cycles
                    if e.is_dir(follow_symlinks=False):
                        dirs.append(path)
                    elif e.is_file():
                        yield path
                except OSError as err:
                    logging.warning(f"Cannot inspect {path}: {err}")
                    self.errors += 1

            if recursive:
                # Push dirs to stack (reversed so we process A before Z)
                for d in reversed(dirs):
                    stack.append(d)


class DiskScanner:
    def __init__(self,
                 settings: Settings,
                 max_workers: Optional[int] = None,
                 show_progress: bool = False,
                 hasher: Optional[FileHasher] = None):
        self.settings = settings
        self.hasher = hasher or FileHasher()
        if max_workers is None:
            max_workers = min(config.MAX_SCAN_WORKERS, os.cpu_count() or 1)
        self.max_workers = max_workers
        self.show_progress = show_progress

    def scan(self, root: Path, compute_hashes: bool = False, recursive: bool = False) -> ScanResult:
        """
        Lists every file under root, then stats, classifies and (optionally)
        hashes them on a thread pool.

        A file that fails is logged, counted in `errors` and left out; it never
        stops the rest of the scan. Records come back sorted by path.
        """
        root = Path(root)
        if not root.is_dir():
            raise FileAccessError(f"'{root}' is not a valid directory")

        walker = DirectoryWalker(self.settings)
        files = list(walker.walk(root, recursive=recursive))
        logging.info(f"Found {len(files)} files under {root} (recursive={recursive}, hashes={compute_hashes})")

        with tqdm(total=len(files), desc="Scanning", unit="file", disable=not self.show_progress) as bar:
            if self.max_workers <= 1:
                records, errors = self._process_batch(files, compute_hashes, bar)
            else:
                records, errors = self._scan_parallel(files, compute_hashes, bar)

        errors += walker.errors
        records.sort(key=lambda r: str(r.path))
        logging.info(f"Scan complete. Processed {len(records)} files with {errors} errors")
        return ScanResult(records=records, errors=errors)

    def _scan_parallel(self,
                       files: List[Path],
                       compute_hashes: bool,
                       bar: tqdm) -> Tuple[List[FileRecord], int]:
        """
        Each worker accumulates its own records and error count; results are
        merged here as batches complete, so workers share no mutable state.
        """
        batches = self._make_batches(files)
        logging.debug(f"Parallel scan: {len(batches)} batches, {self.max_workers} workers")

        records: List[FileRecord] = []
        errors = 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_batch = {
                executor.submit(self._process_batch, batch, compute_hashes): batch
                for batch in batches
            }

            for future in as_completed(future_to_batch):
                batch = future_to_batch[future]
                try:
                    batch_records, batch_errors = future.result()
                except Exception as e:
                    logging.error(f"Failed to process batch in {batch[0].parent}: {e}")
                    batch_records, batch_errors = [], len(batch)
                records.extend(batch_records)
                errors += batch_errors
                bar.update(len(batch))

        return records, errors

    def _make_batches(self, files: List[Path]) -> List[List[Path]]:
        """Groups files by parent directory, then splits large directories."""
        by_dir: dict[Path, List[Path]] = {}
        for path in files:
            by_dir.setdefault(path.parent, []).append(path)

        batches = []
        for dir_files in by_dir.values():
            for start in range(0, len(dir_files), BATCH_SIZE):
                batches.append(dir_files[start:start + BATCH_SIZE])
        return batches

    def _process_batch(self,
                       files: List[Path],
                       compute_hashes: bool,
                       bar: Optional[tqdm] = None) -> Tuple[List[FileRecord], int]:
        records = []
        errors = 0
        for path in files:
            try:
                records.append(self.process_file(path, compute_hashes))
            except FileAccessError as e:
                logging.error(f"Failed to scan {path}: {e}")
                errors += 1
            if bar is not None:
                bar.update(1)
        return records, errors

    def process_file(self, path: Path, compute_hashes: bool = False) -> FileRecord:
        """Builds the FileRecord for one file. Raises FileAccessError on I/O failure."""
        try:
            stat_result = path.stat()
        except OSError as e:
            raise FileAccessError(f"Cannot read metadata of {path}: {e}") from e

        category = classify(path, self.settings)
        content_hash = self.hasher.compute_hash(path) if compute_hashes else None

        return FileRecord(
            path=path,
            size=stat_result.st_size,
            last_modified=int(stat_result.st_mtime),
            category=category,
            content_hash=content_hash,
        )
