"""Placeholder resolution and mode dispatch for organization READMEs.

One call to :func:`resolve_placeholders` is one resolution pass: it parses the
text, applies the policy, reads a single consistent snapshot of statistics
(each org/window read happens at most once per pass), privacy-filters it
before any ranking, and splices the resolved values back into the text.

A placeholder that cannot be resolved safely gets its ``fallback`` option, or
an empty string. Errors raised by providers are not caught here; they mean the
upstream store is broken and the caller must not write a partial README.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional

from impactboard.assets import resolve_svg
from impactboard.config import Policy
from impactboard.fields import (
    format_value,
    resolve_org_field,
    resolve_repo_field,
    resolve_user_field,
)
from impactboard.format_markdown import render_template_readme
from impactboard.placeholders import Placeholder, parse_placeholders
from impactboard.policy import (
    effective_field,
    in_scope,
    is_allowed,
    is_field_hidden,
    resolution_enabled,
)
from impactboard.privacy import filter_opted_out
from impactboard.providers import PrivacyProvider, StatsProvider
from impactboard.selection import parse_selector, select_repo, select_user
from impactboard.stats_data import (
    AggregatedStats,
    AssetContext,
    OrgStatsSummary,
    RepoAggregatedStats,
)

logger = logging.getLogger("impactboard.resolver")


class PassSnapshot:
    """Statistics read during one resolution pass.

    Every read is memoized, so all placeholders in a document see the same
    data and each provider call happens at most once per (kind, window).
    """

    def __init__(
        self,
        org_id: int,
        stats_provider: StatsProvider,
        privacy_provider: PrivacyProvider,
    ):
        self.org_id = org_id
        self._stats_provider = stats_provider
        self._privacy_provider = privacy_provider
        self._opted_out: Optional[FrozenSet[int]] = None
        self._users: Dict[str, List[AggregatedStats]] = {}
        self._repos: Dict[str, List[RepoAggregatedStats]] = {}
        self._summaries: Dict[str, Optional[OrgStatsSummary]] = {}

    async def opted_out(self) -> FrozenSet[int]:
        if self._opted_out is None:
            ids = await self._privacy_provider.get_opted_out_user_ids(self.org_id)
            self._opted_out = frozenset(ids)
        return self._opted_out

    async def public_users(self, window: str) -> List[AggregatedStats]:
        """Users for ``window`` with every opted-out user removed."""
        if window not in self._users:
            opted_out = await self.opted_out()
            stats = await self._stats_provider.get_org_stats(self.org_id, window)
            self._users[window] = filter_opted_out(stats, opted_out)
            logger.debug(
                "Loaded %d users for window %s (%d after privacy filter)",
                len(stats), window, len(self._users[window]),
            )
        return self._users[window]

    async def repos(self, window: str) -> List[RepoAggregatedStats]:
        if window not in self._repos:
            repos = await self._stats_provider.get_repo_stats(self.org_id, window)
            self._repos[window] = list(repos)
        return self._repos[window]

    async def summary(self, window: str) -> Optional[OrgStatsSummary]:
        if window not in self._summaries:
            self._summaries[window] = await self._stats_provider.get_org_summary(
                self.org_id, window,
            )
        return self._summaries[window]


def select_window(placeholder: Placeholder, policy: Policy) -> str:
    """The ``window=`` option if the policy allows it, else the default."""
    if placeholder.window in policy.allowed_windows:
        return placeholder.window
    return policy.default_window


async def _resolve_user(
    p: Placeholder, policy: Policy, snapshot: PassSnapshot,
) -> Optional[str]:
    users = await snapshot.public_users(select_window(p, policy))
    selected = select_user(users, parse_selector(p.selector))
    if selected is None:
        logger.debug("USER placeholder at %d: no match", p.start)
        return None
    if is_field_hidden(selected.user_login, p.field, policy):
        logger.debug("USER placeholder at %d: field hidden by user rule", p.start)
        return None
    return resolve_user_field(selected, p.field)


async def _resolve_repo(
    p: Placeholder, policy: Policy, snapshot: PassSnapshot,
) -> Optional[str]:
    repos = await snapshot.repos(select_window(p, policy))
    selected = select_repo(repos, p.selector)
    if selected is None:
        logger.debug("REPO placeholder at %d: no match", p.start)
        return None
    return resolve_repo_field(selected, p.field)


async def _resolve_org(
    p: Placeholder, policy: Policy, snapshot: PassSnapshot,
) -> Optional[str]:
    summary = await snapshot.summary(select_window(p, policy))
    if summary is None:
        logger.debug("ORG placeholder at %d: no summary", p.start)
        return None
    return resolve_org_field(summary, effective_field(p))


_RESOLVERS = {
    "USER": _resolve_user,
    "REPO": _resolve_repo,
    "ORG": _resolve_org,
}


async def resolve_one(
    p: Placeholder,
    policy: Policy,
    snapshot: PassSnapshot,
    asset_context: Optional[AssetContext] = None,
) -> str:
    """Resolve a single in-scope placeholder to its substitution text."""
    if not is_allowed(p, policy):
        logger.debug("%s placeholder at %d: not allowed by policy", p.entity, p.start)
        return p.fallback

    if p.entity == "SVG":
        reference = resolve_svg(p.selector, asset_context)
        return reference if reference else p.fallback

    value = await _RESOLVERS[p.entity](p, policy, snapshot)
    if not value:
        return p.fallback
    return format_value(value, p.format)


def _splice(text: str, placeholders: List[Placeholder], values: List[str]) -> str:
    parts: List[str] = []
    pos = 0
    for p, value in zip(placeholders, values):
        parts.append(text[pos:p.start])
        parts.append(value)
        pos = p.end
    parts.append(text[pos:])
    return "".join(parts)


async def resolve_placeholders(
    org_id: int,
    installation_id: int,
    org_login: str,
    text: str,
    policy: Policy,
    stats_provider: StatsProvider,
    privacy_provider: PrivacyProvider,
    asset_context: Optional[AssetContext] = None,
) -> str:
    """Replace every in-scope placeholder in ``text``.

    Args:
        org_id: Organization whose statistics are read.
        installation_id: App installation, used for log context only.
        org_login: Organization login, used for log context only.
        text: README or template content.
        policy: Validated organization policy.
        stats_provider: Source of user, repo and org statistics.
        privacy_provider: Source of the opted-out user set.
        asset_context: Already-written SVG assets, if any.

    Returns:
        The text with placeholders substituted. Outside ``full`` mode, or when
        there are no placeholders, the text is returned unchanged. Occurrences
        past ``policy.max_placeholders`` are left as literal text.
    """
    if not resolution_enabled(policy):
        return text

    placeholders = parse_placeholders(text)
    if not placeholders:
        return text

    scoped = in_scope(placeholders, policy)
    logger.debug(
        "Resolving %d of %d placeholders for %s (installation %d)",
        len(scoped), len(placeholders), org_login, installation_id,
    )

    snapshot = PassSnapshot(org_id, stats_provider, privacy_provider)
    values = [await resolve_one(p, policy, snapshot, asset_context) for p in scoped]
    return _splice(text, scoped, values)


async def render_readme(
    org_id: int,
    installation_id: int,
    org_login: str,
    text: str,
    policy: Policy,
    stats_provider: StatsProvider,
    privacy_provider: PrivacyProvider,
    asset_context: Optional[AssetContext] = None,
) -> str:
    """Produce README content according to ``policy.mode``.

    ``full`` resolves placeholders in ``text``, ``template`` renders a
    generated README (``text`` is ignored), and ``assets-only`` returns
    ``text`` unchanged.
    """
    if policy.mode == "full":
        return await resolve_placeholders(
            org_id, installation_id, org_login, text, policy,
            stats_provider, privacy_provider, asset_context,
        )
    if policy.mode == "template":
        return await render_template_readme(
            org_id, org_login, policy, stats_provider, privacy_provider, asset_context,
        )
    return text
