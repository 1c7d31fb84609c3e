"""Selector expressions that pick one user or repository from a ranked list.

Supported forms (case-sensitive):

- ``TOP(n)`` / ``RANK(n)``: nth entry by weighted score (commits for repos)
- ``NEW(n)``: nth user by window start date, most recent first
- ``ACTIVE(n)``: nth user by last activity date, most recent first
- ``USERNAME(x)``: user whose login is exactly ``x``
- ``NAME(x)``: repository whose name is exactly ``x``

Positions are 1-indexed. A position outside the list, an unknown form, or a
name with no match yields ``None``; selection never raises.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Union

from impactboard.stats_data import AggregatedStats, RepoAggregatedStats

POSITIONAL_KINDS = ("TOP", "RANK", "NEW", "ACTIVE")
NAMED_KINDS = ("USERNAME", "NAME")

_POSITIONAL_RE = re.compile(rf"^({'|'.join(POSITIONAL_KINDS)})\((\d+)\)$")
_NAMED_RE = re.compile(rf"^({'|'.join(NAMED_KINDS)})\(([^()]+)\)$")


@dataclass(frozen=True)
class Selector:
    """A parsed selector expression."""
    kind: str
    argument: Union[int, str]

    @property
    def is_positional(self) -> bool:
        return self.kind in POSITIONAL_KINDS


def parse_selector(text: str) -> Optional[Selector]:
    """Parse selector text such as ``TOP(3)`` or ``USERNAME(alice)``.

    Returns:
        A Selector, or None if the text is not a recognized form.
    """
    match = _POSITIONAL_RE.match(text)
    if match:
        return Selector(kind=match.group(1), argument=int(match.group(2)))
    match = _NAMED_RE.match(text)
    if match:
        return Selector(kind=match.group(1), argument=match.group(2))
    return None


def _nth(items: Sequence, n: int):
    if 1 <= n <= len(items):
        return items[n - 1]
    return None


def rank_users(stats: Sequence[AggregatedStats], kind: str = "TOP") -> list[AggregatedStats]:
    """Order users for a positional selector kind.

    Sorting is stable, so ties keep their input order.
    """
    if kind == "NEW":
        return sorted(stats, key=lambda s: s.start_date, reverse=True)
    if kind == "ACTIVE":
        return sorted(stats, key=lambda s: s.end_date, reverse=True)
    return sorted(stats, key=lambda s: s.weighted_score, reverse=True)


def rank_repos(repos: Sequence[RepoAggregatedStats]) -> list[RepoAggregatedStats]:
    """Order repositories by total commits, descending and stable."""
    return sorted(repos, key=lambda r: r.total_commits, reverse=True)


def select_user(
    stats: Sequence[AggregatedStats],
    selector: Union[str, Selector],
) -> Optional[AggregatedStats]:
    """Pick a user from an already privacy-filtered list.

    Args:
        stats: Public users for one window, in provider order.
        selector: Selector text or a parsed Selector.

    Returns:
        The matching AggregatedStats, or None when nothing matches.
    """
    if isinstance(selector, str):
        selector = parse_selector(selector)
    if selector is None:
        return None

    if selector.kind in POSITIONAL_KINDS:
        return _nth(rank_users(stats, selector.kind), selector.argument)
    if selector.kind == "USERNAME":
        for s in stats:
            if s.user_login == selector.argument:
                return s
    return None


def select_repo(
    repos: Sequence[RepoAggregatedStats],
    selector: Union[str, Selector],
) -> Optional[RepoAggregatedStats]:
    """Pick a repository by ``TOP(n)``, ``RANK(n)`` or ``NAME(x)``."""
    if isinstance(selector, str):
        selector = parse_selector(selector)
    if selector is None:
        return None

    if selector.kind in ("TOP", "RANK"):
        return _nth(rank_repos(repos), selector.argument)
    if selector.kind == "NAME":
        for r in repos:
            if r.name == selector.argument:
                return r
    return None
