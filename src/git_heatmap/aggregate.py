from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from .branches import BranchResolutionStrategy, OrderedFallback, resolve_head
from .errors import RepositoryError
from .git import GitRepository, Repository
from .identity import AuthorFilter
from .models import StatsGrid
from .window import TimeWindow, from_timestamp


def new_grid(window: TimeWindow) -> StatsGrid:
    return StatsGrid(window.anchor_year, window.years_spanned)


def aggregate(
    repo: Repository,
    window: TimeWindow,
    author_filter: AuthorFilter,
    grid: StatsGrid,
    *,
    strategy: BranchResolutionStrategy | None = None,
    reference: str = "local",
) -> int:
    """
    Count every matching commit reachable from the repository's default head
    into `grid`. Returns the number of commits counted.
    """
    head = resolve_head(repo, strategy or OrderedFallback())
    counted = 0
    for commit in repo.iter_commits(head):
        when = from_timestamp(commit.author_timestamp, reference)
        if not window.contains(when):
            continue
        if not author_filter.matches(commit.author_email):
            continue
        grid.increment(when.date())
        counted += 1
    return counted


def _aggregate_path(
    path: Path,
    window: TimeWindow,
    author_filter: AuthorFilter,
    strategy: BranchResolutionStrategy,
    reference: str,
    open_repo: Callable[[Path], Repository],
) -> StatsGrid:
    shard = new_grid(window)
    repo = open_repo(path)
    aggregate(repo, window, author_filter, shard, strategy=strategy, reference=reference)
    return shard


def aggregate_paths(
    paths: list[Path],
    *,
    window: TimeWindow,
    author_filter: AuthorFilter,
    strategy: BranchResolutionStrategy | None = None,
    reference: str = "local",
    force: bool = False,
    jobs: int = 1,
    verbose: bool = False,
    open_repo: Callable[[Path], Repository] = GitRepository.open,
) -> StatsGrid:
    """
    Aggregate many repositories into one grid.

    Each repository is counted into its own shard, merged only once the whole
    history was walked, so a repository skipped in force mode contributes
    nothing. Without force the first failing repository (in input order)
    aborts the run by raising its RepositoryError.
    """
    strategy = strategy or OrderedFallback()
    grid = new_grid(window)

    def absorb(path: Path, get_shard: Callable[[], StatsGrid]) -> None:
        try:
            shard = get_shard()
        except RepositoryError as e:
            if not force:
                raise
            if verbose:
                print(f"Skipping {path}: {e}", file=sys.stderr)
            return
        grid.merge(shard)

    if jobs <= 1 or len(paths) <= 1:
        for path in paths:
            absorb(path, lambda p=path: _aggregate_path(p, window, author_filter, strategy, reference, open_repo))
        return grid

    with ThreadPoolExecutor(max_workers=jobs) as ex:
        futs = [
            ex.submit(_aggregate_path, path, window, author_filter, strategy, reference, open_repo)
            for path in paths
        ]
        try:
            for path, fut in zip(paths, futs):
                absorb(path, fut.result)
        except RepositoryError:
            for fut in futs:
                fut.cancel()
            raise
    return grid
