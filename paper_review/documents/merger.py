"""Recursive inlining of a multi-file LaTeX project into one document.

Starting from the root document, every ``\\input{...}`` and
``\\include{...}`` is replaced by the expanded content of the target file,
wrapped in begin/end marker comments. Missing targets and files that were
already inlined (cycles, repeated includes) are replaced by a one-line
marker instead, so the merge always completes and a reader can see what
was skipped.

While expanding, the merger records provenance regions: the runs of
merged text copied verbatim from each included file. Nested includes
split their parent's runs, so regions never overlap. Text outside every
region belongs to the root document.
"""

import logging
import posixpath
import re
from collections.abc import Mapping

from paper_review.documents.sources import normalize_path, resolve_doc_path
from paper_review.errors import FatalInputError
from paper_review.state.models import MergeResult, ProvenanceRegion

logger = logging.getLogger(__name__)


# =============================================================================
# Patterns and Markers
# =============================================================================

INCLUDE_PATTERN = re.compile(r"\\(?:input|include)\{([^}]+)\}")
GRAPHICS_PATTERN = re.compile(r"\\includegraphics(?:\[[^\]]*\])?\{([^}]+)\}")
BIBLIOGRAPHY_PATTERN = re.compile(r"\\(?:bibliography|addbibresource)\{([^}]+)\}")
PACKAGE_PATTERN = re.compile(r"\\(?:usepackage|RequirePackage)(?:\[[^\]]*\])?\{([^}]+)\}")
DOCUMENTCLASS_NAME_PATTERN = re.compile(r"\\documentclass(?:\[[^\]]*\])?\{([^}]+)\}")

INLINE_BEGIN_MARKER = "% ========== INLINED FROM: {target} =========="
INLINE_END_MARKER = "% ========== END OF: {target} =========="
SKIPPED_INCLUDE_MARKER = "% [Paper Review] Could not inline: {target} ({reason})"

REASON_NOT_FOUND = "not found"
REASON_ALREADY_INCLUDED = "already included"

INLINE_MARKER_PATTERN = re.compile(
    r"^% ========== (INLINED FROM|END OF): (.+?) ==========$",
    re.MULTILINE,
)


class _MergeRun:
    """Mutable bookkeeping for a single merge."""

    def __init__(self, sources: Mapping[str, str]):
        self.sources = sources
        self.parts: list[str] = []
        self.length = 0
        self.visited: set[str] = set()
        self.ordered: list[str] = []
        self.regions: list[ProvenanceRegion] = []
        # dicts keep first-seen order
        self.figures: dict[str, None] = {}
        self.bib_files: dict[str, None] = {}
        self.packages: dict[str, None] = {}

    def emit(self, text: str, owner: str | None) -> None:
        if not text:
            return
        start = self.length
        self.parts.append(text)
        self.length += len(text)
        if owner is not None:
            self.regions.append(
                ProvenanceRegion(file=owner, start_offset=start, end_offset=self.length)
            )

    def resolve(self, target: str, including_path: str) -> str | None:
        """Resolve an include target relative to the including file.

        Falls back to a project-relative lookup, which is how LaTeX itself
        resolves paths during compilation.
        """
        if target.startswith("/"):
            return resolve_doc_path(normalize_path(target), self.sources)
        base_dir = posixpath.dirname(including_path)
        candidates = []
        if base_dir:
            candidates.append(posixpath.normpath(posixpath.join(base_dir, target)))
        candidates.append(posixpath.normpath(target))
        for candidate in candidates:
            resolved = resolve_doc_path(candidate, self.sources)
            if resolved is not None:
                return resolved
        return None

    def scan_references(self, content: str) -> None:
        for match in GRAPHICS_PATTERN.finditer(content):
            self.figures[match.group(1).strip()] = None
        for match in BIBLIOGRAPHY_PATTERN.finditer(content):
            for name in match.group(1).split(","):
                if name.strip():
                    self.bib_files[name.strip()] = None
        for match in PACKAGE_PATTERN.finditer(content):
            for name in match.group(1).split(","):
                if name.strip():
                    self.packages[name.strip()] = None
        for match in DOCUMENTCLASS_NAME_PATTERN.finditer(content):
            self.packages[match.group(1).strip()] = None

    def expand(self, path: str, is_root: bool = False) -> None:
        self.visited.add(path)
        self.ordered.append(path)
        content = self.sources.get(path) or ""
        if not content:
            return
        self.scan_references(content)

        owner = None if is_root else path
        cursor = 0
        for match in INCLUDE_PATTERN.finditer(content):
            self.emit(content[cursor:match.start()], owner)
            self.inline(match.group(1).strip(), path)
            cursor = match.end()
        self.emit(content[cursor:], owner)

    def inline(self, target: str, including_path: str) -> None:
        resolved = self.resolve(target, including_path)
        if resolved is None or resolved in self.visited:
            reason = REASON_NOT_FOUND if resolved is None else REASON_ALREADY_INCLUDED
            logger.warning(f"Could not inline {target!r} from {including_path}: {reason}")
            self.emit(SKIPPED_INCLUDE_MARKER.format(target=target, reason=reason), None)
            return

        self.emit(INLINE_BEGIN_MARKER.format(target=target) + "\n", None)
        self.expand(resolved)
        self.emit("\n" + INLINE_END_MARKER.format(target=target), None)


def merge_documents(root_path: str, sources: Mapping[str, str]) -> MergeResult:
    """
    Inline every include reachable from the root document.

    Args:
        root_path: Path of the root document (leading slash allowed).
        sources: Normalized ``path -> content`` mapping of text files.

    Returns:
        MergeResult with the merged text, provenance regions, the files in
        the order they were inlined, and the asset references found.

    Raises:
        FatalInputError: If the root document is not in ``sources``.
    """
    root = resolve_doc_path(normalize_path(root_path), sources)
    if root is None:
        raise FatalInputError(f"Root document not found: {root_path}", root_path=root_path)

    run = _MergeRun(sources)
    run.expand(root, is_root=True)
    merged_text = "".join(run.parts)

    logger.info(
        f"Merged {len(run.ordered)} file(s) from {root} into {len(merged_text)} chars "
        f"({len(run.regions)} provenance regions)"
    )

    return MergeResult(
        root_path=root,
        merged_text=merged_text,
        regions=run.regions,
        ordered_files=run.ordered,
        referenced_figures=list(run.figures),
        referenced_bib_files=list(run.bib_files),
        referenced_packages=list(run.packages),
    )


def provenance_from_markers(merged_text: str) -> list[ProvenanceRegion]:
    """
    Rebuild provenance regions from the inline markers of a merged text.

    Used when only a cached merged document is available. Each region spans
    from the line after a begin marker to the matching end marker, so
    nested includes produce nested regions; lookups should prefer the
    innermost one. Region files are the include targets as written, which
    may lack the ``.tex`` suffix.
    """
    regions = []
    open_markers: list[tuple[str, int]] = []

    for match in INLINE_MARKER_PATTERN.finditer(merged_text):
        kind, target = match.group(1), match.group(2).strip()
        if kind == "INLINED FROM":
            open_markers.append((target, min(match.end() + 1, len(merged_text))))
            continue
        for index in range(len(open_markers) - 1, -1, -1):
            if open_markers[index][0] == target:
                _, start = open_markers.pop(index)
                regions.append(
                    ProvenanceRegion(
                        file=target,
                        start_offset=start,
                        end_offset=max(start, match.start()),
                    )
                )
                break

    regions.sort(key=lambda region: region.start_offset)
    return regions
