"""Visibility rules for directory listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from mediavault.config_manager import DEFAULT_LISTED_EXTENSIONS

HIDDEN_EXTENSIONS = frozenset({"exe", "dll", "sys", "tmp", "temp", "log", "cache"})

HIDDEN_FILES = frozenset(
    {
        ".DS_Store",
        "Thumbs.db",
        "desktop.ini",
        ".git",
        ".svn",
        ".hg",
        "node_modules",
        ".next",
        ".nuxt",
        ".vscode",
        ".idea",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
    }
)

HIDDEN_FOLDERS = frozenset(
    {
        ".git",
        ".svn",
        ".hg",
        "node_modules",
        ".next",
        ".nuxt",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".vscode",
        ".idea",
        "dist",
        "build",
        "out",
        ".cache",
        "temp",
        "tmp",
    }
)


@dataclass(frozen=True)
class FileFilter:
    """Decide which directory entries a listing exposes."""

    allowed_extensions: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_LISTED_EXTENSIONS)
    )
    hidden_extensions: frozenset[str] = HIDDEN_EXTENSIONS
    hidden_files: frozenset[str] = HIDDEN_FILES
    hidden_folders: frozenset[str] = HIDDEN_FOLDERS

    @classmethod
    def with_extensions(cls, extensions: Iterable[str]) -> "FileFilter":
        """Build a filter whose allow-list is ``extensions`` (empty shows all)."""

        normalized = frozenset(ext.strip().lower().lstrip(".") for ext in extensions if ext.strip())
        return cls(allowed_extensions=normalized)

    def should_show_file(self, name: str, extension: str) -> bool:
        if name.startswith("."):
            return False
        if name in self.hidden_files:
            return False
        if extension in self.hidden_extensions:
            return False
        if not self.allowed_extensions:
            return True
        return extension in self.allowed_extensions

    def should_show_folder(self, name: str) -> bool:
        if name.startswith("."):
            return False
        return name not in self.hidden_folders


DEFAULT_FILE_FILTER = FileFilter()

__all__ = [
    "DEFAULT_FILE_FILTER",
    "FileFilter",
    "HIDDEN_EXTENSIONS",
    "HIDDEN_FILES",
    "HIDDEN_FOLDERS",
]
