"""Scope token validation (RFC 6749 Section 3.3).

    scope-token = 1*( %x21 / %x23-5B / %x5D-7E )

Any visible ASCII character except space, double quote and backslash.
"""

from __future__ import annotations

from collections.abc import Iterable

from authflow.models.errors import ScopeValidationError

_FORBIDDEN = frozenset('"\\')


def is_valid_scope(scope: str) -> bool:
    """Check a single scope token against the RFC grammar."""
    if not scope:
        return False
    return all(0x21 <= ord(ch) <= 0x7E and ch not in _FORBIDDEN for ch in scope)


def validate_scope(scope: str) -> str:
    """Validate a scope token.

    Returns:
        The token, unchanged

    Raises:
        ScopeValidationError: If the token is empty or contains a character
            outside the grammar
    """
    if not is_valid_scope(scope):
        raise ScopeValidationError(scope)
    return scope


def validate_scopes(scopes: Iterable[str | None]) -> list[str]:
    """Validate scope tokens, skipping ``None`` and empty entries.

    The whole batch fails on the first bad token, so callers never end up
    with a partially applied set.
    """
    return [validate_scope(scope) for scope in scopes if scope]
