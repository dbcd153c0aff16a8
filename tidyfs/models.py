from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from . import config


class CategoryKind(Enum):
    DOCUMENT = "Documents"
    IMAGE = "Images"
    VIDEO = "Videos"
    AUDIO = "Audio"
    ARCHIVE = "Archives"
    CODE = "Code"
    EXECUTABLE = "Executables"
    OTHER = "Other"


@dataclass(frozen=True)
class Category:
    """
    Classification of a file. Built-in kinds carry no label; OTHER carries
    either a lowercase extension, "unknown", or a custom category name.
    """
    kind: CategoryKind
    label: Optional[str] = None
    custom: bool = False

    @classmethod
    def other(cls, label: str, custom: bool = False) -> "Category":
        return cls(CategoryKind.OTHER, label, custom)

    @property
    def is_unknown(self) -> bool:
        return self.kind is CategoryKind.OTHER and not self.custom and self.label == config.UNKNOWN_LABEL

    @property
    def folder_name(self) -> str:
        """Destination folder when organizing by type."""
        if self.kind is not CategoryKind.OTHER:
            return self.kind.value
        if self.custom:
            return self.label
        return config.UNKNOWN_FOLDER if self.is_unknown else config.MISC_FOLDER

    @property
    def display_name(self) -> str:
        """Row label in the storage report."""
        if self.kind is not CategoryKind.OTHER:
            return self.kind.value
        if self.custom:
            return self.label
        if self.is_unknown:
            return "Unknown"
        return f"Other (.{self.label})"


@dataclass(frozen=True)
class FileRecord:
    """
    Represents a regular file found during a scan.
    """
    path: Path
    size: int
    last_modified: int      # seconds since epoch
    category: Category
    content_hash: Optional[str] = None

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        """Case-preserved extension without the dot, or '' if there is none."""
        suffix = self.path.suffix
        return suffix[1:] if suffix else ""


@dataclass
class DuplicateGroup:
    content_hash: str
    records: List[FileRecord] = field(default_factory=list)

    @property
    def size(self) -> int:
        return self.records[0].size if self.records else 0

    @property
    def wasted_bytes(self) -> int:
        # Same hash implies same size, so every copy past the first is waste
        return max(len(self.records) - 1, 0) * self.size


@dataclass
class ScanResult:
    records: List[FileRecord] = field(default_factory=list)
    errors: int = 0


@dataclass(frozen=True)
class PlannedMove:
    source: Path
    destination: Path


@dataclass
class OrganizeResult:
    moved: int = 0
    errors: int = 0
    skipped: int = 0
    planned: List[PlannedMove] = field(default_factory=list)
