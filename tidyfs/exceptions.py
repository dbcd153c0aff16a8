"""
Custom exception hierarchy for tidyfs.

Per-file problems (FileAccessError and its subclasses) are counted and
skipped by the batch operations. ConfigError and ArgumentError abort the
command before anything on disk is touched.
"""


class TidyFSError(Exception):
    """Base exception for all tidyfs errors."""
    pass


class FileAccessError(TidyFSError):
    """Raised when a single file cannot be read, inspected or moved."""
    pass


class FileHashError(FileAccessError):
    """Raised when file hashing fails."""
    pass


class FileOperationError(FileAccessError):
    """Raised when a file move fails."""
    pass


class ConfigError(TidyFSError):
    """Raised when the settings file cannot be located, read or parsed."""
    pass


class ArgumentError(TidyFSError):
    """Raised for invalid user input such as an unknown scheme or category spec."""
    pass
