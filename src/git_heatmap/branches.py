from __future__ import annotations

from typing import Optional, Protocol

from .errors import NoDefaultBranchError
from .git import Repository

DEFAULT_CANDIDATES = (
    "refs/remotes/origin/HEAD",
    "refs/remotes/origin/master",
    "refs/heads/master",
    "HEAD",
)


class BranchResolutionStrategy(Protocol):
    name: str

    def select(self, repo: Repository) -> Optional[str]:
        ...


class OrderedFallback:
    """First candidate ref that resolves to a commit wins."""

    name = "ordered"

    def __init__(self, candidates: tuple[str, ...] = DEFAULT_CANDIDATES) -> None:
        self.candidates = candidates

    def select(self, repo: Repository) -> Optional[str]:
        for ref in self.candidates:
            sha = repo.resolve(ref)
            if sha:
                return sha
        return None


class RemoteHeadScan:
    """
    Use the remote-tracking branch some remote's HEAD points at (the remote's
    default branch), falling back to the local `master`.
    """

    name = "remote-head"

    def __init__(self, fallback: str = "refs/heads/master") -> None:
        self.fallback = fallback

    def select(self, repo: Repository) -> Optional[str]:
        for _symref, target in repo.remote_heads():
            sha = repo.resolve(target)
            if sha:
                return sha
        return repo.resolve(self.fallback)


STRATEGIES: dict[str, type] = {
    OrderedFallback.name: OrderedFallback,
    RemoteHeadScan.name: RemoteHeadScan,
}


def strategy_for(name: str) -> BranchResolutionStrategy:
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"unknown branch strategy {name!r} (expected one of: {', '.join(STRATEGIES)})") from None


def resolve_head(repo: Repository, strategy: BranchResolutionStrategy) -> str:
    sha = strategy.select(repo)
    if not sha:
        raise NoDefaultBranchError(repo.path, "can't select branch for stats")
    return sha
