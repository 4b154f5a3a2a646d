from __future__ import annotations


class HeatmapError(Exception):
    """Base class for every error git-heatmap reports to the user."""


class UsageError(HeatmapError, ValueError):
    pass


class PatternCompileError(HeatmapError, ValueError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"bad regular expression {pattern!r}: {reason}")
        self.pattern = pattern


class RepositoryError(HeatmapError, RuntimeError):
    """A per-repository failure; skipped instead of fatal in force mode."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class RepositoryOpenError(RepositoryError):
    pass


class NoDefaultBranchError(RepositoryError):
    pass


class TraversalError(RepositoryError):
    pass
