"""Statistics snapshot data model, consumed by the placeholder engine.

Records are produced by the external aggregator and are read-only for the
duration of a resolution pass, so every class here is frozen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

WINDOWS = ("7d", "30d", "90d", "all-time")
DEFAULT_WINDOW = "30d"


@dataclass(frozen=True)
class AggregatedStats:
    """Per-user contribution totals for one org and one time window."""
    user_id: int
    user_login: str
    start_date: str          # YYYY-MM-DD, first activity inside the window
    end_date: str            # YYYY-MM-DD, last activity inside the window
    weighted_score: float
    user_avatar_url: str = ""
    org_id: int = 0
    window: str = DEFAULT_WINDOW
    total_commits: int = 0
    total_lines_added: int = 0
    total_lines_removed: int = 0
    total_pull_requests_merged: int = 0
    total_issues_opened: int = 0
    total_issues_closed: int = 0
    active_days: int = 0
    raw_score: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    rank: str = "Bronze"     # tier name: Bronze, Silver, Gold, Diamond
    unique_repositories: int = 0


@dataclass(frozen=True)
class RepoAggregatedStats:
    """Per-repository totals for one org and one time window."""
    repo_id: int
    name: str
    org_id: int = 0
    window: str = DEFAULT_WINDOW
    total_commits: int = 0
    total_pull_requests: int = 0
    total_issues: int = 0
    total_lines_added: int = 0
    contributor_count: int = 0
    status: str = "active"


@dataclass(frozen=True)
class OrgStatsSummary:
    """Organization-wide totals for one time window."""
    org_id: int
    window: str = DEFAULT_WINDOW
    active_users: int = 0
    total_commits: int = 0
    total_prs: int = 0
    total_loc_added: int = 0
    total_repos: int = 0
    health_score: int = 0    # 0-100


@dataclass(frozen=True)
class AssetContext:
    """Already-written SVG assets, keyed by asset name.

    Keys are lower-case asset names (``leaderboard``, ``heatmap``) with
    optional ``_dark`` variants; values are repository paths or absolute URLs.
    """
    org_login: str
    paths: Dict[str, str] = field(default_factory=dict)
    branch: str = "HEAD"

    def get(self, key: str) -> Optional[str]:
        return self.paths.get(key) or None


def stats_from_dict(raw: dict) -> AggregatedStats:
    """Build an AggregatedStats from a snapshot dict, ignoring unknown keys."""
    return AggregatedStats(**_known_fields(AggregatedStats, raw))


def repo_stats_from_dict(raw: dict) -> RepoAggregatedStats:
    """Build a RepoAggregatedStats from a snapshot dict, ignoring unknown keys."""
    return RepoAggregatedStats(**_known_fields(RepoAggregatedStats, raw))


def summary_from_dict(raw: dict) -> OrgStatsSummary:
    """Build an OrgStatsSummary from a snapshot dict, ignoring unknown keys."""
    return OrgStatsSummary(**_known_fields(OrgStatsSummary, raw))


def _known_fields(cls, raw: dict) -> dict:
    names = cls.__dataclass_fields__.keys()
    return {k: v for k, v in raw.items() if k in names}
