"""Parsing of form-urlencoded redirect components.

The authorization server returns its response either in the query (code
flow) or in the fragment (implicit flow) of the redirect URI. Both use the
``application/x-www-form-urlencoded`` format.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from urllib.parse import parse_qsl

# Plain ASCII decimal in the signed 32-bit range
_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class ParameterMap:
    """Ordered multimap of decoded parameter names to their values.

    Keys keep first-seen order and repeated keys keep every value.
    """

    def __init__(self, pairs: list[tuple[str, str]] | None = None):
        self._values: dict[str, list[str]] = {}
        for key, value in pairs or []:
            self._values.setdefault(key, []).append(value)

    def get_first(self, key: str) -> str | None:
        """Return the first value for ``key``, or ``None`` if absent."""
        values = self._values.get(key)
        return values[0] if values else None

    def get_all(self, key: str) -> list[str]:
        return list(self._values.get(key, []))

    def get_int(self, key: str, default: int = 0) -> int:
        """Return the first value for ``key`` as an integer.

        Absent or malformed values yield ``default`` instead of raising.
        """
        value = self.get_first(key)
        if value is None or not _INTEGER.fullmatch(value):
            return default
        number = int(value)
        if not _INT32_MIN <= number <= _INT32_MAX:
            return default
        return number

    def to_dict(self) -> dict[str, list[str]]:
        return {key: list(values) for key, values in self._values.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterMap):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"ParameterMap({self._values!r})"


def parse_parameters(component: str | None) -> ParameterMap:
    """Parse a query or fragment string into a ParameterMap.

    Empty segments and pairs with an empty name are skipped. A bare name
    without ``=`` gets an empty string value. Both ``+`` and ``%20`` decode
    to a space.

    Args:
        component: Query or fragment, without the leading ``?`` or ``#``

    Returns:
        ParameterMap of decoded names to decoded values
    """
    if not component:
        return ParameterMap()

    pairs = parse_qsl(component, keep_blank_values=True, errors="replace")
    return ParameterMap([(key, value) for key, value in pairs if key])
