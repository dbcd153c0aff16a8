import hashlib
from pathlib import Path

from .. import config
from ..exceptions import FileHashError


class FileHasher:
    def __init__(self, chunk_size: int = config.HASH_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def compute_hash(self, path: Path) -> str:
        """
        Streams the file through SHA-256 and returns the hex digest.

        Memory use is bounded by the chunk size; the digest does not depend on it.
        Raises FileHashError if the file cannot be opened or read.
        """
        h = hashlib.sha256()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(self.chunk_size):
                    h.update(chunk)
        except OSError as e:
            raise FileHashError(f"Cannot hash {path}: {e}") from e
        return h.hexdigest()
