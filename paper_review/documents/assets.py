"""Project file categorization.

After a merge, every path in the project is sorted into one of five
buckets using the asset references collected while inlining: the merged
TeX files, referenced figures, bibliography files, support files
(styles, classes and the like) and everything else.
"""

import logging
import posixpath

from paper_review.state.models import FileCategory, MergeResult, ProjectMetadata

logger = logging.getLogger(__name__)

SUPPORT_EXTENSIONS = (".sty", ".cls", ".bst", ".def", ".cfg", ".clo", ".fd")


def _strip_extension(path: str) -> str:
    return posixpath.splitext(path)[0]


def _matches_reference(path: str, reference: str) -> bool:
    """A path matches a reference exactly, by suffix, or ignoring extensions."""
    path_stem = _strip_extension(path)
    reference_stem = _strip_extension(reference)
    return (
        path == reference
        or path.endswith("/" + reference)
        or path_stem == reference_stem
        or path_stem.endswith("/" + reference_stem)
    )


def _matches_bib_reference(path: str, reference: str) -> bool:
    path_stem = path[: -len(".bib")]
    reference_stem = reference[: -len(".bib")] if reference.endswith(".bib") else reference
    return (
        path == reference
        or path == reference + ".bib"
        or path_stem == reference_stem
        or path_stem.endswith("/" + reference_stem)
    )


def categorize_project_files(
    merge: MergeResult,
    doc_paths: list[str],
    file_paths: list[str],
) -> dict[str, FileCategory]:
    """
    Sort every project path into a category.

    Args:
        merge: Result of merging the project.
        doc_paths: Normalized paths of text documents.
        file_paths: Normalized paths of binary files.

    Returns:
        Mapping of category key to FileCategory, in a fixed key order:
        ``texFiles``, ``figures``, ``bibFiles``, ``usefulFiles``,
        ``irrelevantFiles``.
    """
    tex_files = list(merge.ordered_files)

    figures = [
        path for path in file_paths
        if any(_matches_reference(path, ref) for ref in merge.referenced_figures)
    ]

    bib_files = [
        path for path in doc_paths
        if path.endswith(".bib")
        and any(_matches_bib_reference(path, ref) for ref in merge.referenced_bib_files)
    ]
    bib_files.extend(
        path for path in file_paths
        if path.endswith(".bib") and path not in bib_files
    )

    taken = set(tex_files) | set(figures) | set(bib_files)
    useful = [
        path for path in [*doc_paths, *file_paths]
        if path.endswith(SUPPORT_EXTENSIONS) and path not in taken
    ]

    taken.update(useful)
    irrelevant = [path for path in [*doc_paths, *file_paths] if path not in taken]

    return {
        "texFiles": FileCategory(
            description="TeX files merged in reading order",
            files=tex_files,
        ),
        "figures": FileCategory(
            description="Referenced figure files",
            files=figures,
            references=list(merge.referenced_figures),
        ),
        "bibFiles": FileCategory(
            description="Referenced bibliography files",
            files=bib_files,
            references=list(merge.referenced_bib_files),
        ),
        "usefulFiles": FileCategory(
            description="Other useful files (style, class, etc.)",
            files=useful,
        ),
        "irrelevantFiles": FileCategory(
            description="Irrelevant or unused files",
            files=irrelevant,
        ),
    }


def build_project_metadata(
    project_id: str,
    merge: MergeResult,
    doc_paths: list[str],
    file_paths: list[str],
) -> ProjectMetadata:
    """Describe a merged project for the metadata cache artifact."""
    categories = categorize_project_files(merge, doc_paths, file_paths)
    logger.info(
        "Categorized project files: "
        + ", ".join(f"{key}={category.count}" for key, category in categories.items())
    )
    return ProjectMetadata(
        project_id=project_id,
        root_doc_path=merge.root_path,
        categories=categories,
        merged_text_length=len(merge.merged_text),
        total_docs=len(doc_paths),
        total_files=len(file_paths),
    )
