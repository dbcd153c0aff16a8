from datetime import datetime
from pathlib import Path
from typing import Iterable, List

from .. import config
from ..models import FileRecord, PlannedMove


class DestinationPlanner:
    """
    Works out where each record should go under `target_root` for a scheme.
    Planning never touches the filesystem.
    """

    def __init__(self, target_root: Path, scheme: str = config.DEFAULT_SCHEME):
        self.target_root = Path(target_root)
        self.scheme = scheme

    def plan_all(self, records: Iterable[FileRecord]) -> List[PlannedMove]:
        return [PlannedMove(r.path, self.destination_for(r)) for r in records]

    def destination_for(self, record: FileRecord) -> Path:
        return self.target_root / self.subfolder_for(record) / record.name

    def subfolder_for(self, record: FileRecord) -> str:
        if self.scheme == "type":
            return record.category.folder_name
        if self.scheme == "date":
            # Local time, like a file manager would show it
            return datetime.fromtimestamp(record.last_modified).strftime(config.DATE_FOLDER_FORMAT)
        if self.scheme == "ext":
            return record.extension or config.NO_EXTENSION_FOLDER
        return config.UNSORTED_FOLDER
