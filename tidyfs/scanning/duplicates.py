from collections import defaultdict
from typing import Dict, Iterable, List

from ..models import DuplicateGroup, FileRecord


def group_duplicates(records: Iterable[FileRecord]) -> Dict[str, DuplicateGroup]:
    """
    Groups hashed records by content hash, keeping only groups of two or more.
    Records without a hash are ignored.
    """
    by_hash: Dict[str, List[FileRecord]] = defaultdict(list)
    for record in records:
        if record.content_hash:
            by_hash[record.content_hash].append(record)

    return {
        h: DuplicateGroup(content_hash=h, records=members)
        for h, members in by_hash.items()
        if len(members) > 1
    }


def sort_by_wasted_space(groups: Dict[str, DuplicateGroup]) -> List[DuplicateGroup]:
    """Largest waste first; ties broken by hash so output is stable."""
    return sorted(groups.values(), key=lambda g: (-g.wasted_bytes, g.content_hash))
