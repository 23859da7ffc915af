"""Bounded-depth directory listings for the filesystem browser."""

from __future__ import annotations

import dataclasses
import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Literal, Optional, Sequence

from mediavault import logging_manager as log_mgr
from mediavault.errors import MediaIOError, MediaVaultError, NotFound
from mediavault.sandbox import PathSandbox

from .filters import DEFAULT_FILE_FILTER, FileFilter

logger = log_mgr.get_logger().getChild("browser.listing")

EntryKind = Literal["file", "folder"]


@dataclass(frozen=True)
class FileSystemEntry:
    """Metadata for a single file or folder in a listing."""

    identity: str
    name: str
    kind: EntryKind
    path: str
    size_bytes: Optional[int] = None
    modified_at: Optional[datetime] = None
    extension: Optional[str] = None
    children: Optional[List["FileSystemEntry"]] = None


def _extension_of(name: str) -> str:
    return os.path.splitext(name)[1].lower().lstrip(".")


def _sort_key(entry: FileSystemEntry) -> tuple[int, str]:
    return (0 if entry.kind == "folder" else 1, entry.name)


class DirectoryLister:
    """Walk permitted directories to a bounded depth."""

    def __init__(self, sandbox: PathSandbox, file_filter: FileFilter = DEFAULT_FILE_FILTER) -> None:
        self._sandbox = sandbox
        self._filter = file_filter

    def list(self, directory: Path, depth: int = 0, max_depth: int = 1) -> List[FileSystemEntry]:
        """Return the visible children of ``directory``, folders first.

        Subfolders are expanded while ``depth < max_depth`` and the subfolder
        passes the sandbox depth check. Entries that cannot be stat'ed are
        skipped and unreadable subfolders are returned without children.
        """

        try:
            names = os.listdir(directory)
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise NotFound("Path does not exist or is not a directory") from exc
        except OSError as exc:
            raise MediaIOError(f"Unable to read directory: {exc.strerror or exc}") from exc

        entries: List[FileSystemEntry] = []
        for name in names:
            child = directory / name
            try:
                child_stat = child.stat()
            except OSError:
                logger.debug(
                    "Skipping entry that could not be stat'ed",
                    extra={"event": "listing.stat_failed", "path": str(child)},
                )
                continue

            is_folder = stat.S_ISDIR(child_stat.st_mode)
            extension = None
            if is_folder:
                if not self._filter.should_show_folder(name):
                    continue
            else:
                extension = _extension_of(name)
                if not self._filter.should_show_file(name, extension):
                    continue

            normalized = child.as_posix()
            children: Optional[List[FileSystemEntry]] = None
            if is_folder and depth < max_depth and self._sandbox.is_within_depth(child):
                children = self._list_children(child, depth + 1, max_depth)

            entries.append(
                FileSystemEntry(
                    identity=normalized,
                    name=name,
                    kind="folder" if is_folder else "file",
                    path=normalized,
                    size_bytes=child_stat.st_size,
                    modified_at=datetime.fromtimestamp(child_stat.st_mtime, tz=timezone.utc),
                    extension=extension,
                    children=children,
                )
            )

        entries.sort(key=_sort_key)
        return entries

    def _list_children(
        self, folder: Path, depth: int, max_depth: int
    ) -> Optional[List[FileSystemEntry]]:
        try:
            return self.list(folder, depth, max_depth)
        except MediaVaultError:
            logger.warning(
                "Could not read subdirectory; listing it without children",
                exc_info=True,
                extra={"event": "listing.subdirectory_failed", "path": str(folder)},
            )
            return None


def flatten_entries(entries: Sequence[FileSystemEntry]) -> List[FileSystemEntry]:
    """Return a pre-order, parent-first list of ``entries`` with children stripped."""

    flattened: List[FileSystemEntry] = []
    for entry in entries:
        flattened.append(dataclasses.replace(entry, children=None))
        if entry.children:
            flattened.extend(flatten_entries(entry.children))
    return flattened


__all__ = ["DirectoryLister", "EntryKind", "FileSystemEntry", "flatten_entries"]
