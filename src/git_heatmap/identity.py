from __future__ import annotations

import dataclasses
import re
from typing import Iterable, Union

from .errors import PatternCompileError


@dataclasses.dataclass(frozen=True)
class ExactEmail:
    email: str

    def matches(self, author_email: str) -> bool:
        return author_email == self.email


@dataclasses.dataclass(frozen=True)
class RegexEmail:
    regex: re.Pattern[str]

    @property
    def source(self) -> str:
        return self.regex.pattern

    def matches(self, author_email: str) -> bool:
        return self.regex.search(author_email) is not None


FilterPattern = Union[ExactEmail, RegexEmail]


def compile_regex(source: str) -> RegexEmail:
    try:
        return RegexEmail(re.compile(source))
    except re.error as e:
        raise PatternCompileError(source, str(e)) from e


@dataclasses.dataclass(frozen=True)
class AuthorFilter:
    """
    Decides whether a commit author is of interest.

    With no patterns every author matches (the empty email included). Otherwise
    an email matches when any exact pattern equals it byte for byte or any
    regex finds a match anywhere in it.
    """

    patterns: tuple[FilterPattern, ...] = ()

    @classmethod
    def build(cls, *, emails: Iterable[str] = (), regexes: Iterable[str] = ()) -> AuthorFilter:
        patterns: list[FilterPattern] = [ExactEmail(e) for e in emails]
        patterns.extend(compile_regex(r) for r in regexes)
        return cls(tuple(patterns))

    def extended(self, patterns: Iterable[FilterPattern]) -> AuthorFilter:
        return AuthorFilter(self.patterns + tuple(patterns))

    def matches(self, author_email: str) -> bool:
        if not self.patterns:
            return True
        return any(p.matches(author_email) for p in self.patterns)
