"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from impactboard.config import Policy
from impactboard.stats_data import (
    AggregatedStats,
    OrgStatsSummary,
    RepoAggregatedStats,
)


def make_user(user_id, login, score, **kwargs) -> AggregatedStats:
    """Create an AggregatedStats with sensible defaults, overridden by kwargs."""
    defaults = dict(
        user_id=user_id,
        user_login=login,
        start_date="2026-09-01",
        end_date="2026-09-30",
        weighted_score=score,
        total_commits=10,
    )
    defaults.update(kwargs)
    return AggregatedStats(**defaults)


def make_repo(repo_id, name, commits, **kwargs) -> RepoAggregatedStats:
    """Create a RepoAggregatedStats with sensible defaults."""
    defaults = dict(repo_id=repo_id, name=name, total_commits=commits)
    defaults.update(kwargs)
    return RepoAggregatedStats(**defaults)


@pytest.fixture
def users():
    """Four users in provider order; carol (id 3) is the top scorer."""
    return [
        make_user(1, "alice", 900.0, total_commits=120, current_streak=5, rank="Gold"),
        make_user(2, "bob", 450.4, total_commits=80, current_streak=20, rank="Silver"),
        make_user(3, "carol", 2400.0, total_commits=300, current_streak=31, rank="Diamond"),
        make_user(4, "dave", 50.0, total_commits=3),
    ]


@pytest.fixture
def repos():
    return [
        make_repo(10, "api", 500, contributor_count=6),
        make_repo(11, "web", 1200, contributor_count=9),
        make_repo(12, "docs", 40, contributor_count=2),
    ]


@pytest.fixture
def summary():
    return OrgStatsSummary(
        org_id=1,
        active_users=4,
        total_commits=1540,
        total_prs=88,
        total_loc_added=1234567,
        total_repos=3,
        health_score=87,
    )


@pytest.fixture
def policy():
    return Policy()


@pytest.fixture
def stats_provider(users, repos, summary):
    """A StatsProvider mock serving the same data for every window."""
    provider = AsyncMock()
    provider.get_org_stats.return_value = users
    provider.get_repo_stats.return_value = repos
    provider.get_org_summary.return_value = summary
    return provider


@pytest.fixture
def privacy_provider():
    """A PrivacyProvider mock with nobody opted out."""
    provider = AsyncMock()
    provider.get_opted_out_user_ids.return_value = set()
    return provider
