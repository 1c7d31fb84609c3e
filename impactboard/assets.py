"""References to already-written SVG assets.

SVGs are written to the organization's ``.github`` repository by an external
writer; the README only links to them. ``SVG.<KEY>`` placeholders become a
URL, ``SVG.<KEY>_THEMED`` placeholders become a ``<picture>`` element with
dark and light sources.
"""

from __future__ import annotations

import html
from typing import Optional
from urllib.parse import quote

from impactboard.stats_data import AssetContext

PROFILE_REPO_NAME = ".github"
RAW_CONTENT_BASE_URL = "https://raw.githubusercontent.com"

_THEMED_SUFFIX = "_THEMED"


def svg_reference(context: AssetContext, path: str) -> str:
    """Build the URL for an asset path in the org's profile repository.

    Absolute URLs are returned unchanged.
    """
    if path.startswith(("https://", "http://")):
        return path
    return (
        f"{RAW_CONTENT_BASE_URL}/{quote(context.org_login)}/{PROFILE_REPO_NAME}/"
        f"{context.branch}/{quote(path.lstrip('/'))}"
    )


def themed_picture(alt: str, light_url: str, dark_url: str) -> str:
    """Render a ``<picture>`` that follows the reader's color scheme."""
    light = html.escape(light_url, quote=True)
    dark = html.escape(dark_url, quote=True)
    return (
        "<picture>\n"
        f'  <source media="(prefers-color-scheme: dark)" srcset="{dark}">\n'
        f'  <source media="(prefers-color-scheme: light)" srcset="{light}">\n'
        f'  <img alt="{html.escape(alt, quote=True)}" src="{light}">\n'
        "</picture>"
    )


def resolve_svg(selector: str, context: Optional[AssetContext]) -> Optional[str]:
    """Resolve an SVG selector such as ``LEADERBOARD`` or ``HEATMAP_THEMED``.

    Returns:
        The URL or markup, or None when there is no context or no asset for
        the key.
    """
    if context is None:
        return None

    themed = selector.endswith(_THEMED_SUFFIX)
    key = (selector[:-len(_THEMED_SUFFIX)] if themed else selector).lower()
    if not key:
        return None

    light_path = context.get(key)
    if light_path is None:
        return None
    light_url = svg_reference(context, light_path)
    if not themed:
        return light_url

    dark_path = context.get(f"{key}_dark")
    dark_url = svg_reference(context, dark_path) if dark_path else light_url
    return themed_picture(key.replace("_", " ").title(), light_url, dark_url)
