"""Read-only data sources consumed by the placeholder engine.

``StatsProvider`` and ``PrivacyProvider`` describe the storage collaborators.
``SnapshotProvider`` serves both from a JSON snapshot (used by the CLI and
tests); ``CachingStatsProvider`` puts a caller-owned TTLCache in front of any
StatsProvider.

Snapshot format::

    {
      "users":   {"30d": [{"user_id": 1, "user_login": "alice", ...}]},
      "repos":   {"30d": [{"repo_id": 7, "name": "api", ...}]},
      "summary": {"30d": {"active_users": 12, ...}},
      "opted_out": [3, 4]
    }
"""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Protocol, Set

from impactboard.cache import TTLCache
from impactboard.ranks import calculate_rank
from impactboard.stats_data import (
    WINDOWS,
    AggregatedStats,
    OrgStatsSummary,
    RepoAggregatedStats,
    repo_stats_from_dict,
    stats_from_dict,
    summary_from_dict,
)

logger = logging.getLogger("impactboard.providers")


class StatsProvider(Protocol):
    async def get_org_stats(self, org_id: int, window: str) -> List[AggregatedStats]: ...

    async def get_repo_stats(self, org_id: int, window: str) -> List[RepoAggregatedStats]: ...

    async def get_org_summary(self, org_id: int, window: str) -> Optional[OrgStatsSummary]: ...


class PrivacyProvider(Protocol):
    async def get_opted_out_user_ids(self, org_id: int) -> Set[int]: ...


class SnapshotProvider:
    """Statistics and privacy data for a single org, held in memory."""

    def __init__(
        self,
        users: Dict[str, List[AggregatedStats]] | None = None,
        repos: Dict[str, List[RepoAggregatedStats]] | None = None,
        summaries: Dict[str, OrgStatsSummary] | None = None,
        opted_out: Set[int] | None = None,
    ):
        self.users = users or {}
        self.repos = repos or {}
        self.summaries = summaries or {}
        self.opted_out = frozenset(opted_out or ())

    @classmethod
    def from_dict(cls, data: dict) -> "SnapshotProvider":
        """Build a provider from a decoded snapshot document.

        Raises:
            ValueError: If the document is not a JSON object of the
                expected shape.
        """
        if not isinstance(data, dict):
            raise ValueError("stats snapshot must be a JSON object")

        users: Dict[str, List[AggregatedStats]] = {}
        repos: Dict[str, List[RepoAggregatedStats]] = {}
        summaries: Dict[str, OrgStatsSummary] = {}
        try:
            for window, rows in (data.get("users") or {}).items():
                users[window] = [_user_from_dict(row, window) for row in rows]
            for window, rows in (data.get("repos") or {}).items():
                repos[window] = [repo_stats_from_dict({"window": window, **row}) for row in rows]
            for window, row in (data.get("summary") or {}).items():
                summaries[window] = summary_from_dict({"org_id": 0, "window": window, **row})
            opted_out = {int(uid) for uid in data.get("opted_out") or []}
        except (TypeError, AttributeError) as e:
            # missing required keys or rows that are not objects
            raise ValueError(f"malformed stats snapshot: {e}") from e

        logger.debug(
            "Loaded snapshot: %d user windows, %d repo windows, %d summaries, %d opted out",
            len(users), len(repos), len(summaries), len(opted_out),
        )
        return cls(users=users, repos=repos, summaries=summaries, opted_out=opted_out)

    @classmethod
    def from_file(cls, path: str) -> "SnapshotProvider":
        """Load a provider from a JSON snapshot file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    async def get_org_stats(self, org_id: int, window: str) -> List[AggregatedStats]:
        return list(self.users.get(window, []))

    async def get_repo_stats(self, org_id: int, window: str) -> List[RepoAggregatedStats]:
        return list(self.repos.get(window, []))

    async def get_org_summary(self, org_id: int, window: str) -> Optional[OrgStatsSummary]:
        return self.summaries.get(window)

    async def get_opted_out_user_ids(self, org_id: int) -> Set[int]:
        return set(self.opted_out)


def _user_from_dict(row: dict, window: str) -> AggregatedStats:
    """Decode one snapshot user row, deriving the tier when it is absent."""
    row = {"window": window, **row}
    if "rank" not in row:
        row["rank"] = calculate_rank(float(row.get("weighted_score", 0)))
    return stats_from_dict(row)


class CachingStatsProvider:
    """StatsProvider decorator that reuses results across resolution passes.

    Args:
        provider: The underlying StatsProvider.
        cache: A TTLCache owned by the caller; entries are keyed by
            ``(kind, org_id, window)``.
    """

    def __init__(self, provider: StatsProvider, cache: TTLCache):
        self.provider = provider
        self.cache = cache

    async def get_org_stats(self, org_id: int, window: str) -> List[AggregatedStats]:
        key = ("users", org_id, window)
        cached = self.cache.get(key)
        if cached is None:
            cached = tuple(await self.provider.get_org_stats(org_id, window))
            self.cache.set(key, cached)
        return list(cached)

    async def get_repo_stats(self, org_id: int, window: str) -> List[RepoAggregatedStats]:
        key = ("repos", org_id, window)
        cached = self.cache.get(key)
        if cached is None:
            cached = tuple(await self.provider.get_repo_stats(org_id, window))
            self.cache.set(key, cached)
        return list(cached)

    async def get_org_summary(self, org_id: int, window: str) -> Optional[OrgStatsSummary]:
        key = ("summary", org_id, window)
        cached = self.cache.get(key)
        if cached is None:
            cached = await self.provider.get_org_summary(org_id, window)
            if cached is not None:
                self.cache.set(key, cached)
        return cached

    def invalidate(self, org_id: int) -> int:
        """Evict every cached entry for an org; return how many were removed."""
        removed = 0
        for kind in ("users", "repos", "summary"):
            for window in WINDOWS:
                if self.cache.evict((kind, org_id, window)):
                    removed += 1
        return removed
