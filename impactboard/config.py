"""Policy loader for impactboard.

Reads an organization's ``impactboard.yml``, validates it against the JSON
schema in ``schemas/policy.json`` and resolves every default once, so the
placeholder engine receives a complete, frozen Policy.

Requires PyYAML and jsonschema.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

import jsonschema
import yaml

from impactboard.fields import ORG_FIELDS, REPO_FIELDS, USER_FIELDS
from impactboard.stats_data import DEFAULT_WINDOW, WINDOWS

POLICY_FILE_NAME = "impactboard.yml"
DEFAULT_ASSETS_BASE_PATH = "assets/impactboard"

MODES = ("full", "assets-only", "template")

DEFAULT_ENTITIES: FrozenSet[str] = frozenset({"USER", "REPO", "ORG"})
DEFAULT_USER_SELECTORS: FrozenSet[str] = frozenset(
    {"TOP", "RANK", "USERNAME", "NEW", "ACTIVE"}
)
DEFAULT_FIELDS: FrozenSet[str] = USER_FIELDS | REPO_FIELDS | ORG_FIELDS
DEFAULT_TOP_MAX = 10
DEFAULT_MAX_PLACEHOLDERS = 50
DEFAULT_LEADERBOARD_LIMIT = 10


class PolicyError(ValueError):
    """Raised when an impactboard.yml is unreadable or violates the schema."""


@dataclass(frozen=True)
class Policy:
    """Validated organization policy with all defaults resolved."""

    mode: str = "full"
    entities: FrozenSet[str] = DEFAULT_ENTITIES
    top_max: int = DEFAULT_TOP_MAX
    user_selectors: FrozenSet[str] = DEFAULT_USER_SELECTORS
    fields: FrozenSet[str] = DEFAULT_FIELDS
    max_placeholders: int = DEFAULT_MAX_PLACEHOLDERS
    default_window: str = DEFAULT_WINDOW
    allowed_windows: Tuple[str, ...] = WINDOWS
    # login -> fields hidden for that public user
    public_users: Mapping[str, FrozenSet[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    fail_on_invalid_config: bool = False
    assets_base_path: str = DEFAULT_ASSETS_BASE_PATH
    show_leaderboard: bool = True
    leaderboard_limit: int = DEFAULT_LEADERBOARD_LIMIT
    template_window: str = DEFAULT_WINDOW

    def hidden_fields(self, login: str) -> FrozenSet[str]:
        """Fields a public user has asked to hide (empty if no rule)."""
        return self.public_users.get(login, frozenset())


_schema_cache: dict | None = None


def _load_schema() -> dict:
    """Load and cache the policy JSON schema."""
    global _schema_cache
    if _schema_cache is None:
        schema_path = Path(__file__).parent / "schemas" / "policy.json"
        with open(schema_path, encoding="utf-8") as f:
            _schema_cache = json.load(f)
    return _schema_cache


def _expand_path(path: str) -> str:
    """Expand ~ and environment variables in a path."""
    return os.path.expanduser(os.path.expandvars(path))


def parse_policy(data: object) -> Policy:
    """Validate a parsed YAML document and build a Policy.

    Args:
        data: The object returned by ``yaml.safe_load``.

    Returns:
        A Policy with every default filled in.

    Raises:
        PolicyError: If the document violates the schema or is internally
            inconsistent (a default or template window not among the allowed
            windows, or a public user login that is not a string).
    """
    if not isinstance(data, dict):
        raise PolicyError("impactboard.yml must be a mapping at the top level")

    try:
        jsonschema.validate(instance=data, schema=_load_schema())
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise PolicyError(f"invalid impactboard.yml at {location}: {e.message}") from e

    allow = (data.get("readme") or {}).get("allow") or {}
    user_selectors = allow.get("user_selectors") or {}
    windows = (data.get("data") or {}).get("windows") or {}
    public_users = (data.get("privacy") or {}).get("public_users") or {}
    template = data.get("template") or {}
    template_options = template.get("options") or {}
    template_overrides = template.get("overrides") or {}

    allowed_windows = tuple(windows.get("allowed", WINDOWS))
    default_window = windows.get("default", DEFAULT_WINDOW)
    if default_window not in allowed_windows:
        raise PolicyError(
            f"default window '{default_window}' is not in the allowed windows "
            f"({', '.join(allowed_windows)})"
        )

    template_window = template_overrides.get("window", default_window)
    if template_window not in allowed_windows:
        raise PolicyError(
            f"template window '{template_window}' is not in the allowed windows "
            f"({', '.join(allowed_windows)})"
        )

    # YAML reads unquoted logins such as 1234, on or null as non-strings
    for login in public_users:
        if not isinstance(login, str):
            raise PolicyError(
                f"privacy.public_users key {login!r} is not a string; "
                f"quote the login in impactboard.yml"
            )

    entities = frozenset(allow.get("entities", DEFAULT_ENTITIES))

    return Policy(
        mode=data["mode"],
        entities=entities,
        top_max=user_selectors.get("top_max", DEFAULT_TOP_MAX),
        user_selectors=frozenset(user_selectors.get("allowed", DEFAULT_USER_SELECTORS)),
        fields=frozenset(allow.get("fields", DEFAULT_FIELDS)),
        max_placeholders=allow.get("max_placeholders", DEFAULT_MAX_PLACEHOLDERS),
        default_window=default_window,
        allowed_windows=allowed_windows,
        public_users=MappingProxyType({
            login: frozenset((rules or {}).get("hide", []))
            for login, rules in public_users.items()
        }),
        fail_on_invalid_config=data.get("fail_on_invalid_config", False),
        assets_base_path=(data.get("assets") or {}).get(
            "base_path", DEFAULT_ASSETS_BASE_PATH
        ),
        show_leaderboard=template_options.get("show_leaderboard", True),
        leaderboard_limit=template_overrides.get(
            "leaderboard_limit", DEFAULT_LEADERBOARD_LIMIT
        ),
        template_window=template_window,
    )


def load_policy_text(text: str) -> Policy:
    """Parse and validate impactboard.yml content."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PolicyError(f"impactboard.yml is not valid YAML: {e}") from e
    return parse_policy(data)


def load_policy(config_path: str) -> Optional[Policy]:
    """Load a policy from a YAML file.

    Args:
        config_path: Path to impactboard.yml.

    Returns:
        A Policy, or None if the file does not exist (the caller decides
        whether a missing policy is an error).

    Raises:
        PolicyError: If the file exists but is invalid.
    """
    path = _expand_path(config_path)

    if not os.path.isfile(path):
        return None

    with open(path, "r", encoding="utf-8") as f:
        return load_policy_text(f.read())
