"""Parser for ``{{IMPACTBOARD:...}}`` placeholders.

Grammar::

    {{IMPACTBOARD:<ENTITY>.<SELECTOR>[.<field>][ | key=value, key=value]}}

ENTITY is one of USER, REPO, ORG, SVG. SELECTOR is an upper-case token with an
optional parenthesized argument. Anything that does not match the grammar is
not a placeholder and is left in the text as-is.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

ENTITIES = ("USER", "REPO", "ORG", "SVG")

PLACEHOLDER_RE = re.compile(
    r"\{\{IMPACTBOARD:"
    rf"(?P<entity>{'|'.join(ENTITIES)})\."
    r"(?P<selector>[A-Z_]+(?:\([^(){}\n]*\))?)"
    r"(?:\.(?P<field>[a-z_]+))?"
    r"(?:\s*\|\s*(?P<options>[^{}\n]*))?"
    r"\}\}"
)


@dataclass(frozen=True)
class Placeholder:
    """One placeholder occurrence, with its exact source text and offsets."""
    entity: str
    selector: str
    field: str
    raw: str
    start: int
    end: int
    options: Dict[str, str] = field(default_factory=dict)

    @property
    def fallback(self) -> str:
        return self.options.get("fallback", "")

    @property
    def window(self) -> str:
        return self.options.get("window", "")

    @property
    def format(self) -> str:
        return self.options.get("format", "")


def parse_options(raw: str) -> Dict[str, str]:
    """Parse a ``key=value, key=value`` option list.

    Keys and values are whitespace-trimmed; a bare key maps to an empty
    string; empty keys are dropped.
    """
    result: Dict[str, str] = {}
    if not raw:
        return result
    for part in raw.split(","):
        key, _, value = part.partition("=")
        key = key.strip()
        if key:
            result[key] = value.strip()
    return result


def parse_placeholders(text: str) -> List[Placeholder]:
    """Return every placeholder in ``text``, in document order.

    Pure function: each call scans the text once and returns a fresh list.
    """
    return [
        Placeholder(
            entity=m.group("entity"),
            selector=m.group("selector"),
            field=m.group("field") or "",
            raw=m.group(0),
            start=m.start(),
            end=m.end(),
            options=parse_options(m.group("options") or ""),
        )
        for m in PLACEHOLDER_RE.finditer(text)
    ]
