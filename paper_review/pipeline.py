"""Entry points for reviewing and analyzing a paper project.

``run_full_review`` is the single call a host application makes: it
resolves the root document, runs the review workflow and writes the cache
artifacts. Everything it needs is passed explicitly; nothing is read from
the environment here.
"""

import asyncio
import dataclasses
import logging
import time

from paper_review.cache import ArtifactCache, append_review_log
from paper_review.config import ReviewConfig
from paper_review.documents import (
    SourceStore,
    build_project_metadata,
    find_root_document,
    merge_documents,
)
from paper_review.graphs import create_review_workflow
from paper_review.llm import AnthropicCompletionService, CompletionService
from paper_review.runtime import ReviewRuntime
from paper_review.state.enums import ReviewStatus
from paper_review.state.models import ProjectAnalysis, ReviewResult
from paper_review.state.schema import WorkflowState
from paper_review.telemetry import LoggingObserver, ReviewObserver

logger = logging.getLogger(__name__)


def _resolve_cache(cache: ArtifactCache | None, config: ReviewConfig) -> ArtifactCache | None:
    if cache is not None:
        return cache
    if config.cache_dir is not None:
        return ArtifactCache(config.cache_dir)
    return None


async def run_full_review(
    project_id: str,
    model: str,
    source_store: SourceStore,
    root_path: str | None = None,
    *,
    config: ReviewConfig | None = None,
    completion: CompletionService | None = None,
    observer: ReviewObserver | None = None,
    cache: ArtifactCache | None = None,
    reuse_cached_merge: bool = False,
) -> ReviewResult:
    """
    Run the full multi-agent review of a project.

    Args:
        project_id: Project identifier (names the cache directory).
        model: Model name for the completion service.
        source_store: Access to the project's files.
        root_path: Root document path (default: the store's declared root,
            else the first document declaring ``\\documentclass``).
        config: Run configuration (default: ``ReviewConfig()``).
        completion: Completion service (default: Anthropic via LangChain).
        observer: Progress observer (default: LoggingObserver).
        cache: Artifact cache (default: one at ``config.cache_dir`` if set).
        reuse_cached_merge: Review the cached merged text instead of merging
            again, when the cache holds one.

    Returns:
        The ReviewResult, also written to the cache when one is available.

    Raises:
        FatalInputError: If no root document can be resolved.
    """
    config = dataclasses.replace(config or ReviewConfig(), model_name=model)
    completion = completion or AnthropicCompletionService(model_name=model)
    observer = observer or LoggingObserver()
    cache = _resolve_cache(cache, config)

    docs = source_store.get_docs()
    root = find_root_document(docs, root_path or source_store.root_doc_path())

    logger.info("=" * 80)
    logger.info(f"STARTING FULL REVIEW: project={project_id}, model={model}")
    logger.info(f"  Root document: {root}, {len(docs)} documents")
    logger.info("=" * 80)
    start = time.monotonic()

    state: WorkflowState = {
        "project_id": project_id,
        "model": model,
        "sources": docs,
        "root_path": root,
        "status": ReviewStatus.INITIALIZED,
        "stage_seconds": {},
    }
    if reuse_cached_merge and cache is not None:
        cached = cache.read_merged_text(project_id)
        if cached:
            state["cached_merged_text"] = cached
        else:
            logger.info(f"No cached merged text for {project_id}, merging sources")

    runtime = ReviewRuntime(completion=completion, config=config, observer=observer)
    workflow = create_review_workflow()
    final_state = await workflow.ainvoke(state, runtime.as_config())
    result: ReviewResult = final_state["result"]

    if cache is not None:
        cache.write_merged_text(project_id, final_state["merge"].merged_text)
        cache.write_result(result)
    if config.review_log_dir is not None:
        append_review_log(config.review_log_dir, result)

    logger.info("=" * 80)
    logger.info(f"REVIEW COMPLETE in {time.monotonic() - start:.1f}s")
    logger.info(f"  Paper type: {result.classification.paper_type.value}")
    logger.info(f"  Total comments: {result.summary.total}")
    logger.info(f"  By category: {result.summary.by_category}")
    logger.info(f"  By severity: {result.summary.by_severity}")
    failed = "; ".join(f"{a.name}: {a.reason}" for a in result.failed_agents) or "none"
    logger.info(f"  Failed/skipped agents: {failed}")
    logger.info("=" * 80)
    return result


def review_project(
    project_id: str,
    model: str,
    source_store: SourceStore,
    root_path: str | None = None,
    **kwargs,
) -> ReviewResult:
    """Synchronous wrapper around ``run_full_review``."""
    return asyncio.run(run_full_review(project_id, model, source_store, root_path, **kwargs))


def analyze_project(
    project_id: str,
    source_store: SourceStore,
    root_path: str | None = None,
    *,
    cache: ArtifactCache | None = None,
) -> ProjectAnalysis:
    """
    Merge a project and categorize its files, without calling any model.

    Args:
        project_id: Project identifier.
        source_store: Access to the project's files.
        root_path: Root document path (detected when omitted).
        cache: When given, ``merged.tex`` and ``metadata.json`` are written.

    Returns:
        ProjectAnalysis with the merge result and project metadata.

    Raises:
        FatalInputError: If no root document can be resolved.
    """
    docs = source_store.get_docs()
    file_paths = source_store.get_file_paths()
    root = find_root_document(docs, root_path or source_store.root_doc_path())

    merge = merge_documents(root, docs)
    metadata = build_project_metadata(project_id, merge, list(docs), file_paths)

    if cache is not None:
        cache.write_merged_text(project_id, merge.merged_text)
        cache.write_metadata(metadata)

    return ProjectAnalysis(merge=merge, metadata=metadata)
