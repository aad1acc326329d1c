from __future__ import annotations

import sys
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from .aggregate import aggregate
from .blame import attribute_from_blame, attribute_from_log, has_attributable_lines
from .config import ConfigError, FameOptions
from .git import blame_porcelain, last_commit_log, list_files
from .languages import load_language_registry
from .models import AuthorStat, FileAttribution
from .ranking import rank_stats, sort_key_for
from .render import FORMATS, render_stats
from .selection import select_files


def validate_options(options: FameOptions) -> None:
    sort_key_for(options.order_by)
    if options.format not in FORMATS:
        raise ConfigError(f"unknown format {options.format!r} (expected one of: {', '.join(FORMATS)})")


def attribute_file(repo: Path, revision: str, path: str, *, use_committer: bool) -> FileAttribution:
    blame_text = blame_porcelain(repo, revision, path)
    if has_attributable_lines(blame_text):
        return attribute_from_blame(path, blame_text, use_committer=use_committer)
    return attribute_from_log(path, last_commit_log(repo, revision, path))


def attribute_files(
    repo: Path,
    revision: str,
    paths: list[str],
    *,
    use_committer: bool,
    jobs: int,
    progress: bool = False,
) -> list[FileAttribution]:
    """
    Attribute every path in a worker pool and return results in `paths` order.
    The first failure cancels the pending work and is re-raised.
    """
    results: list[FileAttribution | None] = [None] * len(paths)
    if not paths:
        return []

    with ThreadPoolExecutor(max_workers=jobs) as ex:
        futs: dict[Future[FileAttribution], int] = {
            ex.submit(attribute_file, repo, revision, p, use_committer=use_committer): i for i, p in enumerate(paths)
        }
        try:
            for done, fut in enumerate(as_completed(futs), start=1):
                results[futs[fut]] = fut.result()
                if progress and (done % 50 == 0 or done == len(futs)):
                    print(f"Attributed {done}/{len(futs)} files...", file=sys.stderr)
        except BaseException:
            for f in futs:
                f.cancel()
            raise

    return [r for r in results if r is not None]


def compute_stats(options: FameOptions) -> list[AuthorStat]:
    repo = options.repository
    registry = load_language_registry(options.language_table)

    all_files = list_files(repo, options.revision)
    candidates = select_files(all_files, options.filters, registry)
    if options.progress:
        print(f"Selected {len(candidates)} of {len(all_files)} files at {options.revision}.", file=sys.stderr)

    attributions = attribute_files(
        repo,
        options.revision,
        candidates,
        use_committer=options.use_committer,
        jobs=options.jobs,
        progress=options.progress,
    )

    return rank_stats(aggregate(attributions), options.order_by)


def run_fame(options: FameOptions) -> str:
    validate_options(options)
    stats = compute_stats(options)
    return render_stats(stats, options.format)
