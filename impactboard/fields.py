"""Field lookup for resolved entities, and display formatting of field values.

Field resolvers return raw strings; ``format_value`` is applied afterwards by
the resolver so raw and display values stay separate. Unknown fields resolve
to an empty string.
"""

from __future__ import annotations

import math
import re
from typing import Callable, Dict

from impactboard.ranks import RANK_EMOJI, fire_marks, rank_emoji
from impactboard.stats_data import AggregatedStats, OrgStatsSummary, RepoAggregatedStats

FORMATS = ("number", "compact", "badge", "fire")

_INT_RE = re.compile(r"^-?\d+$")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


_USER_FIELDS: Dict[str, Callable[[AggregatedStats], object]] = {
    "username": lambda s: f"@{s.user_login}",
    "commits": lambda s: s.total_commits,
    "prs": lambda s: s.total_pull_requests_merged,
    "issues_closed": lambda s: s.total_issues_closed,
    "issues_open": lambda s: s.total_issues_opened,
    "loc_added": lambda s: s.total_lines_added,
    "loc_removed": lambda s: s.total_lines_removed,
    "streak": lambda s: s.current_streak,
    "longest_streak": lambda s: s.longest_streak,
    "active_days": lambda s: s.active_days,
    "rank": lambda s: s.rank,
    "impact": lambda s: round_half_up(s.weighted_score),
    "repos": lambda s: s.unique_repositories,
    "last_active": lambda s: s.end_date,
}

_REPO_FIELDS: Dict[str, Callable[[RepoAggregatedStats], object]] = {
    "name": lambda r: r.name,
    "commits": lambda r: r.total_commits,
    "prs": lambda r: r.total_pull_requests,
    "issues": lambda r: r.total_issues,
    "loc_added": lambda r: r.total_lines_added,
    "contributors": lambda r: r.contributor_count,
    "status": lambda r: r.status,
}

_ORG_FIELDS: Dict[str, Callable[[OrgStatsSummary], object]] = {
    "active_users": lambda o: o.active_users,
    "total_commits": lambda o: o.total_commits,
    "total_prs": lambda o: o.total_prs,
    "total_loc_added": lambda o: o.total_loc_added,
    "total_repos": lambda o: o.total_repos,
    "health_score": lambda o: o.health_score,
}

USER_FIELDS = frozenset(_USER_FIELDS)
REPO_FIELDS = frozenset(_REPO_FIELDS)
ORG_FIELDS = frozenset(_ORG_FIELDS)


def _lookup(table: Dict[str, Callable], field: str, entity) -> str:
    getter = table.get(field)
    if getter is None:
        return ""
    value = getter(entity)
    return "" if value is None else str(value)


def resolve_user_field(stat: AggregatedStats, field: str) -> str:
    """Resolve a USER field (``username``, ``commits``, ``rank``, ...)."""
    return _lookup(_USER_FIELDS, field, stat)


def resolve_repo_field(repo: RepoAggregatedStats, field: str) -> str:
    """Resolve a REPO field (``name``, ``commits``, ``contributors``, ...)."""
    return _lookup(_REPO_FIELDS, field, repo)


def resolve_org_field(summary: OrgStatsSummary, field: str) -> str:
    """Resolve an ORG field read directly from the summary record."""
    return _lookup(_ORG_FIELDS, field, summary)


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------

_COMPACT_UNITS = [(1_000_000_000, "B"), (1_000_000, "M"), (1_000, "k")]


def _format_compact(n: int) -> str:
    sign = "-" if n < 0 else ""
    n = abs(n)
    if n < 1000:
        return f"{sign}{n}"
    for i, (size, suffix) in enumerate(_COMPACT_UNITS):
        if n >= size:
            scaled = f"{n / size:.1f}"
            # 999,950 rounds to "1000.0k"; promote it to the next unit
            if float(scaled) >= 1000 and i > 0:
                size, suffix = _COMPACT_UNITS[i - 1]
                scaled = f"{n / size:.1f}"
            if scaled.endswith(".0"):
                scaled = scaled[:-2]
            return f"{sign}{scaled}{suffix}"
    return f"{sign}{n}"


def format_value(value: str, fmt: str) -> str:
    """Apply a ``format=`` option to a resolved field value.

    Args:
        value: Raw field value as returned by a field resolver.
        fmt: One of ``number``, ``compact``, ``badge``, ``fire``; anything
            else leaves the value unchanged.

    Returns:
        The display string. Non-numeric values pass through unchanged except
        for ``badge``, which prefixes rank tiers with their emoji.
    """
    if not value or fmt not in FORMATS:
        return value

    if fmt == "badge" and value in RANK_EMOJI:
        return f"{rank_emoji(value)} {value}"

    if not _INT_RE.match(value):
        return value
    n = int(value)

    if fmt in ("number", "badge"):
        return f"{n:,}"
    if fmt == "compact":
        return _format_compact(n)
    return f"{value}{fire_marks(n)}"
