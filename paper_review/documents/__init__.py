"""Source access, merging, section parsing and file categorization."""

from paper_review.documents.sources import (
    SourceStore,
    InMemorySourceStore,
    DirectorySourceStore,
    find_root_document,
    has_documentclass,
    normalize_path,
    resolve_doc_path,
)
from paper_review.documents.merger import (
    INLINE_BEGIN_MARKER,
    INLINE_END_MARKER,
    SKIPPED_INCLUDE_MARKER,
    merge_documents,
    provenance_from_markers,
)
from paper_review.documents.sections import (
    ABSTRACT_TITLE,
    parse_sections,
)
from paper_review.documents.assets import (
    build_project_metadata,
    categorize_project_files,
)

__all__ = [
    "SourceStore",
    "InMemorySourceStore",
    "DirectorySourceStore",
    "find_root_document",
    "has_documentclass",
    "normalize_path",
    "resolve_doc_path",
    "INLINE_BEGIN_MARKER",
    "INLINE_END_MARKER",
    "SKIPPED_INCLUDE_MARKER",
    "merge_documents",
    "provenance_from_markers",
    "ABSTRACT_TITLE",
    "parse_sections",
    "build_project_metadata",
    "categorize_project_files",
]
