"""Policy checks applied to each placeholder before and after selection.

Rules, in order; a failed check means the placeholder gets its fallback:

1. Only ``full`` mode resolves placeholders at all.
2. The entity must be allowed by the policy (SVG always is).
3. USER selectors must be an allowed kind, and positional ones may not reach
   past ``top_max``.
4. Only the first ``max_placeholders`` occurrences are in scope; the rest are
   left as literal text.
5. The field must be allowed, and must not be hidden by the selected public
   user's ``hide`` list.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from impactboard.config import Policy
from impactboard.placeholders import Placeholder
from impactboard.selection import Selector, parse_selector


def resolution_enabled(policy: Policy) -> bool:
    return policy.mode == "full"


def effective_field(placeholder: Placeholder) -> str:
    """Field name a placeholder asks for.

    ORG placeholders carry the field in the selector slot
    (``ORG.TOTAL_COMMITS``), so the selector is lower-cased into a field
    name unless an explicit field follows it.
    """
    if placeholder.entity == "ORG" and not placeholder.field:
        return placeholder.selector.lower()
    return placeholder.field


def in_scope(placeholders: Sequence[Placeholder], policy: Policy) -> list[Placeholder]:
    """The first ``max_placeholders`` occurrences, in document order."""
    return list(placeholders[:policy.max_placeholders])


def is_entity_allowed(entity: str, policy: Policy) -> bool:
    if entity == "SVG":
        return True
    return entity in policy.entities


def is_user_selector_allowed(selector: Optional[Selector], policy: Policy) -> bool:
    """Check a USER selector's kind and, for positional kinds, its bound."""
    if selector is None:
        return False
    if selector.kind not in policy.user_selectors:
        return False
    if selector.is_positional and selector.argument > policy.top_max:
        return False
    return True


def is_field_allowed(field: str, policy: Policy) -> bool:
    return bool(field) and field in policy.fields


def is_field_hidden(login: str, field: str, policy: Policy) -> bool:
    """True when public user ``login`` hides ``field`` in the policy."""
    return field in policy.hidden_fields(login)


def is_allowed(placeholder: Placeholder, policy: Policy) -> bool:
    """Run every check that does not depend on the selected entity.

    The per-user ``hide`` rule is checked separately with
    :func:`is_field_hidden` once the user is known.
    """
    if not resolution_enabled(policy):
        return False
    if not is_entity_allowed(placeholder.entity, policy):
        return False
    if placeholder.entity == "SVG":
        return True
    if placeholder.entity == "USER":
        if not is_user_selector_allowed(parse_selector(placeholder.selector), policy):
            return False
    return is_field_allowed(effective_field(placeholder), policy)
