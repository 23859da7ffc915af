"""Filesystem browsing: visibility filters and bounded directory listings."""

from .filters import DEFAULT_FILE_FILTER, FileFilter
from .listing import DirectoryLister, FileSystemEntry, flatten_entries

__all__ = [
    "DEFAULT_FILE_FILTER",
    "DirectoryLister",
    "FileFilter",
    "FileSystemEntry",
    "flatten_entries",
]
