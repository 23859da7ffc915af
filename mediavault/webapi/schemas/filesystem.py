"""Schemas for the filesystem browsing endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from mediavault.browser import FileSystemEntry
from mediavault.sandbox import AllowedBase

from .base import CamelModel


class FileSystemItem(CamelModel):
    """One file or folder in a directory listing."""

    identity: str
    name: str
    kind: Literal["file", "folder"]
    path: str
    size_bytes: Optional[int] = None
    modified_at: Optional[datetime] = None
    extension: Optional[str] = None
    children: Optional[List["FileSystemItem"]] = None

    @classmethod
    def from_entry(cls, entry: FileSystemEntry) -> "FileSystemItem":
        return cls(
            identity=entry.identity,
            name=entry.name,
            kind=entry.kind,
            path=entry.path,
            size_bytes=entry.size_bytes,
            modified_at=entry.modified_at,
            extension=entry.extension,
            children=(
                [cls.from_entry(child) for child in entry.children]
                if entry.children is not None
                else None
            ),
        )


class AllowedPathPayload(CamelModel):
    path: str
    display_name: str

    @classmethod
    def from_base(cls, base: AllowedBase) -> "AllowedPathPayload":
        return cls(path=base.path.as_posix(), display_name=base.display_name)


class FileSystemResponse(CamelModel):
    """Directory listing, or the landing view when no path was selected."""

    items: List[FileSystemItem] = Field(default_factory=list)
    error: Optional[str] = None
    is_home_page: Optional[bool] = None
    allowed_paths: Optional[List[AllowedPathPayload]] = None


class AllowedRootsResponse(CamelModel):
    enforced: bool
    max_depth: int
    roots: List[AllowedPathPayload] = Field(default_factory=list)


FileSystemItem.model_rebuild()


__all__ = [
    "AllowedPathPayload",
    "AllowedRootsResponse",
    "FileSystemItem",
    "FileSystemResponse",
]
