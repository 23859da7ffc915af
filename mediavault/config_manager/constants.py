"""Shared constants for the configuration manager package."""
from __future__ import annotations

import os
import shutil
from pathlib import Path

MODULE_DIR = Path(__file__).resolve().parent
SCRIPT_DIR = MODULE_DIR.parent.resolve()

DEFAULT_ALLOWED_BASE_PATHS = (
    str(Path.home() / "documents"),
    str(Path.home() / "downloads"),
)
DEFAULT_MAX_DEPTH = 3
DEFAULT_DEFAULT_PATH = str(Path.home())
DEFAULT_SUBTITLE_CACHE_RELATIVE = Path("cache") / "subtitles"
DEFAULT_FFMPEG_PATH = os.environ.get("FFMPEG_PATH") or shutil.which("ffmpeg") or "ffmpeg"
DEFAULT_TOOL_TIMEOUT_SECONDS = 300.0
DEFAULT_CONTAINER_EXTENSIONS = ("mkv",)

# Extensions shown by the directory lister; an empty allow-list shows everything
# that is not explicitly hidden.
DEFAULT_LISTED_EXTENSIONS = (
    # Documents
    "txt", "pdf", "doc", "docx", "odt",
    # Images
    "jpg", "jpeg", "png", "gif", "bmp", "svg", "webp",
    # Videos
    "mp4", "avi", "mkv", "mov", "wmv", "flv", "webm",
    # Subtitles
    "vtt",
    # Audio
    "mp3", "wav", "ogg", "flac", "m4a",
    # Code
    "js", "ts", "jsx", "tsx", "html", "css", "scss", "json", "yaml", "yml",
    "py", "java", "cpp", "c", "cs", "php", "rb", "go", "rs",
    # Archives
    "zip", "rar", "7z", "tar", "gz",
)

__all__ = [
    "DEFAULT_ALLOWED_BASE_PATHS",
    "DEFAULT_CONTAINER_EXTENSIONS",
    "DEFAULT_DEFAULT_PATH",
    "DEFAULT_FFMPEG_PATH",
    "DEFAULT_LISTED_EXTENSIONS",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_SUBTITLE_CACHE_RELATIVE",
    "DEFAULT_TOOL_TIMEOUT_SECONDS",
    "MODULE_DIR",
    "SCRIPT_DIR",
]
