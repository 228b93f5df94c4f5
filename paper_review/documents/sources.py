"""Source stores and root-document detection.

A source store hands the pipeline every text file of a project
(``path -> content``), the paths of binary assets, and optionally the
path of the root document. Paths are normalized project-relative POSIX
paths without a leading slash.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from paper_review.errors import FatalInputError

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({
    ".tex", ".bib", ".sty", ".cls", ".bst", ".def", ".cfg", ".clo", ".fd",
    ".txt", ".md", ".bbl",
})

DOCUMENTCLASS_PATTERN = re.compile(r"^[ \t]*\\documentclass\b", re.MULTILINE)


def normalize_path(path: str) -> str:
    """Strip a leading slash so paths are project-relative."""
    return path[1:] if path.startswith("/") else path


def resolve_doc_path(path: str, docs: Mapping[str, str]) -> str | None:
    """Resolve a path to a known document, trying a ``.tex`` suffix."""
    if path in docs:
        return path
    if path + ".tex" in docs:
        return path + ".tex"
    return None


def has_documentclass(content: str) -> bool:
    """Check whether a document declares ``\\documentclass`` on its own line."""
    return DOCUMENTCLASS_PATTERN.search(content) is not None


def find_root_document(
    docs: Mapping[str, str],
    preferred: str | None = None,
) -> str:
    """
    Determine the root document of a project.

    Args:
        docs: Normalized ``path -> content`` mapping.
        preferred: Root path declared by the caller or the store.

    Returns:
        Normalized path of the root document.

    Raises:
        FatalInputError: If neither the preferred path nor any ``.tex``
            document declaring ``\\documentclass`` is available.
    """
    if preferred:
        resolved = resolve_doc_path(normalize_path(preferred), docs)
        if resolved is not None:
            return resolved
        logger.warning(f"Declared root document {preferred!r} not found, scanning for \\documentclass")

    for path in sorted(docs):
        if path.endswith(".tex") and has_documentclass(docs[path]):
            return path

    raise FatalInputError(
        "Could not find root .tex file with \\documentclass",
        root_path=preferred,
    )


# =============================================================================
# Source Stores
# =============================================================================


class SourceStore(ABC):
    """Read access to a project's files."""

    @abstractmethod
    def get_docs(self) -> dict[str, str]:
        """Return every text document as normalized ``path -> content``."""

    def get_file_paths(self) -> list[str]:
        """Return normalized paths of binary files (figures etc.)."""
        return []

    def root_doc_path(self) -> str | None:
        """Return the declared root document, if the store knows it."""
        return None


class InMemorySourceStore(SourceStore):
    """Source store over in-memory mappings."""

    def __init__(
        self,
        docs: Mapping[str, str],
        file_paths: list[str] | None = None,
        root_path: str | None = None,
    ):
        self._docs = {normalize_path(path): content for path, content in docs.items()}
        self._file_paths = [normalize_path(path) for path in file_paths or []]
        self._root_path = normalize_path(root_path) if root_path else None

    def get_docs(self) -> dict[str, str]:
        return dict(self._docs)

    def get_file_paths(self) -> list[str]:
        return list(self._file_paths)

    def root_doc_path(self) -> str | None:
        return self._root_path


class DirectorySourceStore(SourceStore):
    """Source store over a project directory on disk.

    Files with a known text extension are read as documents; everything
    else is listed as a binary file. Hidden files and directories are
    ignored.
    """

    def __init__(self, directory: str | Path, root_path: str | None = None):
        self.directory = Path(directory)
        self._root_path = normalize_path(root_path) if root_path else None
        self._docs: dict[str, str] | None = None
        self._file_paths: list[str] | None = None

    def _scan(self) -> None:
        if not self.directory.is_dir():
            raise FatalInputError(
                f"Project directory not found: {self.directory}",
                root_path=str(self.directory),
            )
        docs: dict[str, str] = {}
        file_paths: list[str] = []
        for path in sorted(self.directory.rglob("*")):
            relative = path.relative_to(self.directory)
            if not path.is_file() or any(part.startswith(".") for part in relative.parts):
                continue
            key = relative.as_posix()
            if path.suffix.lower() in TEXT_EXTENSIONS:
                docs[key] = path.read_text(encoding="utf-8", errors="replace")
            else:
                file_paths.append(key)
        logger.info(f"Scanned {self.directory}: {len(docs)} docs, {len(file_paths)} files")
        self._docs = docs
        self._file_paths = file_paths

    def get_docs(self) -> dict[str, str]:
        if self._docs is None:
            self._scan()
        return dict(self._docs)

    def get_file_paths(self) -> list[str]:
        if self._file_paths is None:
            self._scan()
        return list(self._file_paths)

    def root_doc_path(self) -> str | None:
        return self._root_path
