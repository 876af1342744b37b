"""Extension-based file categories and temporary download detection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType


class Category(Enum):
    """Category a downloaded file is sorted into.

    The value doubles as the folder name created under the downloads root.
    """

    DOCUMENTS = "Documents"
    IMAGES = "Images"
    VIDEOS = "Videos"
    AUDIO = "Audio"
    ARCHIVES = "Archives"
    INSTALLERS = "Installers"
    CODE = "Code"
    OTHERS = "Others"


# Partially downloaded or scratch files left behind by browsers
TEMP_EXTENSIONS: frozenset[str] = frozenset({
    ".tmp",
    ".part",
    ".crdownload",
    ".download",
})


@dataclass(frozen=True)
class CategoryTable:
    """Immutable lookup from lowercase extension to category."""

    mapping: Mapping[str, Category] = field(default_factory=lambda: MappingProxyType({}))
    conflicts: tuple[tuple[str, Category, Category], ...] = ()

    @classmethod
    def from_lists(cls, lists: Iterable[tuple[Category, Iterable[str]]]) -> CategoryTable:
        """Build a table from per-category extension lists.

        When an extension appears under two categories, the first one wins and
        the clash is kept in ``conflicts`` so callers can reject the table.

        Args:
            lists: (category, extensions) pairs in priority order.

        Returns:
            The frozen table.

        """
        mapping: dict[str, Category] = {}
        conflicts: list[tuple[str, Category, Category]] = []

        for category, extensions in lists:
            for ext in extensions:
                key = ext.lower()
                if key in mapping:
                    if mapping[key] is not category:
                        conflicts.append((key, mapping[key], category))
                    continue
                mapping[key] = category

        return cls(mapping=MappingProxyType(mapping), conflicts=tuple(conflicts))

    def lookup(self, extension: str) -> Category:
        """Return the category for an exact extension, ``OTHERS`` if unknown."""
        return self.mapping.get(extension, Category.OTHERS)

    def extensions(self) -> frozenset[str]:
        """All extensions the table knows about."""
        return frozenset(self.mapping)

    def duplicates(self) -> list[str]:
        """Extensions listed under more than one category."""
        return sorted({ext for ext, _first, _second in self.conflicts})

    @property
    def is_injective(self) -> bool:
        return not self.conflicts


DEFAULT_CATEGORY_TABLE: CategoryTable = CategoryTable.from_lists([
    (Category.DOCUMENTS, [".pdf", ".txt", ".docx", ".doc", ".rtf", ".odt", ".pages"]),
    (Category.IMAGES, [".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".webp", ".tiff"]),
    (Category.VIDEOS, [".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm", ".m4v"]),
    (Category.AUDIO, [".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a"]),
    (Category.ARCHIVES, [".zip", ".tar", ".gz", ".rar", ".7z", ".bz2", ".xz", ".tar.gz"]),
    (Category.INSTALLERS, [".deb", ".rpm", ".dmg", ".exe", ".msi", ".appimage", ".sh", ".pkg"]),
    (Category.CODE, [".py", ".js", ".go", ".java", ".cpp", ".c", ".html", ".css", ".json"]),
])


class ExtensionClassifier:
    """Assigns categories to extensions using an injected table."""

    def __init__(self, table: CategoryTable = DEFAULT_CATEGORY_TABLE) -> None:
        self.table = table

    def classify(self, extension: str) -> Category:
        """Classify a lowercase extension (leading dot included).

        Args:
            extension: Extension such as ``".pdf"``. Multi-part extensions are
                only matched when listed verbatim.

        Returns:
            The matching category, or ``Category.OTHERS``.

        """
        return self.table.lookup(extension)

    def classify_path(self, path: Path) -> Category:
        """Classify a file by the lowercase form of its last suffix."""
        return self.classify(file_extension(path))


def file_extension(path: Path) -> str:
    """Return the lowercase last suffix of ``path`` (``""`` if none)."""
    return path.suffix.lower()


def is_temporary(extension: str) -> bool:
    """Check if a lowercase extension marks an ephemeral download."""
    return extension in TEMP_EXTENSIONS
