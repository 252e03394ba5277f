"""File type categorisation by extension, with per-category totals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from disksleuth.tree import FileTree


class FileCategory(Enum):
    """Broad file type categories for visual grouping."""

    DOCUMENTS = "Documents"
    IMAGES = "Images"
    VIDEO = "Video"
    AUDIO = "Audio"
    ARCHIVES = "Archives"
    CODE = "Code"
    EXECUTABLES = "Executables"
    SYSTEM = "System"
    OTHER = "Other"

    def label(self) -> str:
        """Human-readable label for display."""
        return self.value


_EXTENSIONS_BY_CATEGORY = {
    FileCategory.DOCUMENTS: (
        "doc", "docx", "pdf", "txt", "rtf", "odt", "xls", "xlsx", "ppt", "pptx",
        "csv", "md", "epub",
    ),
    FileCategory.IMAGES: (
        "jpg", "jpeg", "png", "gif", "bmp", "svg", "webp", "ico", "tiff", "tif",
        "psd", "raw", "cr2", "nef", "heic", "heif",
    ),
    FileCategory.VIDEO: (
        "mp4", "mkv", "avi", "mov", "wmv", "flv", "webm", "m4v", "mpg", "mpeg", "3gp",
    ),
    FileCategory.AUDIO: ("mp3", "wav", "flac", "aac", "ogg", "wma", "m4a", "opus"),
    FileCategory.ARCHIVES: (
        "zip", "rar", "7z", "tar", "gz", "bz2", "xz", "zst", "cab", "iso", "dmg",
    ),
    FileCategory.CODE: (
        "rs", "py", "js", "ts", "jsx", "tsx", "c", "cpp", "h", "hpp", "cs", "java",
        "go", "rb", "php", "swift", "kt", "scala", "html", "css", "scss", "json",
        "xml", "yaml", "yml", "toml", "sql", "sh", "bat", "ps1",
    ),
    FileCategory.EXECUTABLES: ("exe", "msi", "dll", "so", "dylib", "app", "com", "scr"),
    FileCategory.SYSTEM: (
        "sys", "drv", "inf", "cat", "log", "etl", "dat", "reg", "tmp", "bak",
    ),
}

_CATEGORY_BY_EXTENSION: Dict[str, FileCategory] = {
    ext: category
    for category, extensions in _EXTENSIONS_BY_CATEGORY.items()
    for ext in extensions
}


@dataclass
class CategoryStats:
    """Size and count totals for a single file category."""

    category: Optional[FileCategory] = None
    total_size: int = 0
    file_count: int = 0


def categorise_extension(ext: str) -> FileCategory:
    """Map a file extension (without the dot, any case) to a category."""
    return _CATEGORY_BY_EXTENSION.get(ext.lower(), FileCategory.OTHER)


def analyse_file_types(tree: FileTree) -> List[CategoryStats]:
    """Per-category size and count totals over all files, largest first."""
    stats: Dict[FileCategory, CategoryStats] = {}
    for node in tree.nodes:
        if node.is_dir:
            continue
        ext = node.name.rsplit(".", 1)[-1]
        category = categorise_extension(ext)
        entry = stats.setdefault(category, CategoryStats(category=category))
        entry.total_size += node.size
        entry.file_count += 1
    return sorted(stats.values(), key=lambda s: s.total_size, reverse=True)