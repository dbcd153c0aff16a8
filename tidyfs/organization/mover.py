import shutil
import logging
import time
from pathlib import Path
from typing import AbstractSet, Callable, Iterable, List, Optional, Set

from tqdm import tqdm

from .. import config
from ..exceptions import FileOperationError
from ..models import FileRecord, OrganizeResult, PlannedMove
from .rules import DestinationPlanner


class FileMover:
    def __init__(self, show_progress: bool = False, clock: Callable[[], float] = time.time):
        self.show_progress = show_progress
        self.clock = clock

    def execute(self, moves: List[PlannedMove], dry_run: bool = False) -> OrganizeResult:
        """
        Applies planned moves one at a time.

        In dry-run mode nothing on disk changes; each move is logged and
        returned with the name it would really get after collision renaming.
        A failed move is counted and the loop carries on. Moves that already
        happened stay in place if the run is interrupted.
        """
        result = OrganizeResult(planned=[] if dry_run else list(moves))

        if not moves:
            logging.info("No files need moving.")
            return result

        logging.info(f"Processing {len(moves)} files (DryRun={dry_run})...")

        claimed: Set[Path] = set()
        for move in tqdm(moves, desc="Organizing", unit="file", disable=not self.show_progress):
            src, dest = move.source, move.destination

            if self._same_location(src, dest):
                logging.debug(f"Already in place: {src}")
                result.skipped += 1
                continue

            if dry_run:
                final = self.resolve_collision(dest, taken=claimed)
                claimed.add(final)
                result.planned.append(PlannedMove(src, final))
                logging.info(f"[DRY RUN] Move {src} -> {final}")
                continue

            try:
                final = self.move(src, dest)
                logging.debug(f"Moved {src} -> {final}")
                result.moved += 1
            except FileOperationError as e:
                logging.error(str(e))
                result.errors += 1

        if dry_run:
            logging.info("Dry run complete. No files were moved.")
        else:
            logging.info(
                f"Organization complete. Moved {result.moved} files, "
                f"skipped {result.skipped}, {result.errors} errors"
            )
        return result

    def move(self, src: Path, dest: Path) -> Path:
        """Moves src to dest without overwriting anything. Returns the final path."""
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            final = self.resolve_collision(dest)
            if final != dest:
                logging.info(f"{dest} exists, renaming incoming file to {final.name}")
            shutil.move(str(src), str(final))
        except OSError as e:
            raise FileOperationError(f"Failed to move {src} -> {dest}: {e}") from e
        return final

    def resolve_collision(self, dest: Path, taken: AbstractSet[Path] = frozenset()) -> Path:
        """
        Returns dest if it is free, otherwise `stem_<epoch>.ext`. Should that
        name be taken too (two collisions within one second), a counter is
        appended until a free name turns up.

        `taken` holds names already promised to earlier moves of a dry run,
        which never reach the disk. Only existence checks are made here.
        """
        def in_use(path: Path) -> bool:
            return path in taken or path.exists()

        if not in_use(dest):
            return dest

        stamp = int(self.clock())
        candidate = dest.with_name(f"{dest.stem}_{stamp}{dest.suffix}")
        counter = 1
        while in_use(candidate):
            candidate = dest.with_name(f"{dest.stem}_{stamp}_{counter}{dest.suffix}")
            counter += 1
        return candidate

    @staticmethod
    def _same_location(src: Path, dest: Path) -> bool:
        return src.resolve() == dest.resolve()


def organize(records: Iterable[FileRecord],
             target_root: Path,
             scheme: str = config.DEFAULT_SCHEME,
             dry_run: bool = False,
             show_progress: bool = False,
             mover: Optional[FileMover] = None) -> OrganizeResult:
    """Plans destinations for `records` under target_root and moves them."""
    planner = DestinationPlanner(target_root, scheme)
    moves = planner.plan_all(records)
    mover = mover or FileMover(show_progress=show_progress)
    return mover.execute(moves, dry_run=dry_run)
