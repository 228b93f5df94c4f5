"""Command-line entry point: review a LaTeX project directory."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from paper_review.cache import ArtifactCache
from paper_review.config import ReviewConfig, settings
from paper_review.documents import DirectorySourceStore
from paper_review.errors import FatalInputError, create_error_response
from paper_review.pipeline import analyze_project, run_full_review
from paper_review.state.models import ReviewResult


def print_summary(result: ReviewResult) -> None:
    """Print a short report of a review."""
    print(f"\n{'=' * 60}")
    print(f"Review of {result.project_id} ({result.model})")
    print(f"{'=' * 60}")
    print(f"Paper type: {result.classification.paper_type.value}")
    print(f"  {result.classification.paper_type_summary}")
    print(f"Total comments: {result.summary.total}")
    for category, count in result.summary.by_category.items():
        print(f"  {category}: {count}")
    print("By severity:")
    for severity, count in result.summary.by_severity.items():
        print(f"  {severity}: {count}")
    print("By document:")
    for doc_path, comments in result.comments_by_doc.items():
        print(f"  {doc_path}: {len(comments)}")
    if result.failed_agents:
        print("Failed/skipped agents:")
        for agent in result.failed_agents:
            print(f"  - {agent.name}: {agent.reason}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="paper-review",
        description="Multi-agent review of a multi-file LaTeX paper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "project_dir",
        help="Directory holding the LaTeX project",
    )
    parser.add_argument(
        "--project-id",
        help="Project identifier (default: directory name)",
    )
    parser.add_argument(
        "--root",
        help="Root document path relative to the project directory",
    )
    parser.add_argument(
        "--model",
        default=settings.default_model,
        help="Model name for the completion service",
    )
    parser.add_argument(
        "--cache-dir",
        default=settings.cache_dir,
        help="Directory for cache artifacts",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=120.0,
        help="Per-agent timeout in seconds",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        help="Maximum number of agents running at once",
    )
    parser.add_argument(
        "--analyze-only",
        action="store_true",
        help="Merge and categorize files without calling the model",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    project_dir = Path(args.project_dir)
    project_id = args.project_id or project_dir.resolve().name
    store = DirectorySourceStore(project_dir, root_path=args.root)
    cache = ArtifactCache(args.cache_dir) if args.cache_dir else None

    try:
        if args.analyze_only:
            analysis = analyze_project(project_id, store, cache=cache)
            print(f"Root document: {analysis.metadata.root_doc_path}")
            print(f"Merged length: {analysis.metadata.merged_text_length} chars")
            for key, category in analysis.metadata.categories.items():
                print(f"  {key}: {category.count}")
            return 0

        errors = settings.validate()
        if errors:
            print("Configuration errors:\n" + "\n".join(f"- {e}" for e in errors))
            return 1

        config = ReviewConfig.from_settings(
            settings,
            model_name=args.model,
            agent_timeout_seconds=args.timeout,
            max_concurrency=args.max_concurrency,
            cache_dir=Path(args.cache_dir) if args.cache_dir else None,
        )
        result = asyncio.run(
            run_full_review(project_id, args.model, store, config=config, cache=cache)
        )
    except FatalInputError as e:
        response = create_error_response(e, stage="input")
        print(f"Error [{response['category']}]: {response['message']}", file=sys.stderr)
        return 2

    print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
