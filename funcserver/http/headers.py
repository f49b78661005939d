"""HTTP header multi-map.

Headers maps a header name to an ordered list of values. The helper
methods (get, set, add, values, delete) canonicalize the name they are
given, so "content-type" and "Content-Type" address the same entry. Plain
item access stores and returns keys exactly as written.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def canonical_header_key(key: str) -> str:
    """Return the canonical form of a header name.

    The first letter and any letter following a hyphen are upper-cased,
    the rest lower-cased: "accept-encoding" -> "Accept-Encoding".
    Names containing a space or other non-token character are returned
    unchanged.
    """
    if not key or any(c not in _TOKEN_CHARS for c in key):
        return key
    out = []
    upper = True
    for c in key:
        out.append(c.upper() if upper else c.lower())
        upper = c == "-"
    return "".join(out)


class Headers(dict[str, list[str]]):
    """Header multi-map keyed by header name."""

    @classmethod
    def from_single(cls, single: Mapping[str, str]) -> Headers:
        """Lift a one-value-per-name mapping into a multi-map."""
        out = cls()
        for key, value in single.items():
            out.set(key, value)
        return out

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> Headers:
        out = cls()
        for key, value in pairs:
            out.add(key, value)
        return out

    def get(self, key: str, default: str = "") -> str:  # type: ignore[override]
        """First value for key, or default when absent.

        key is canonicalized before the lookup, so entries stored under a
        non-canonical name are not seen. Inbound multi-value headers keep
        the lower case names the load balancer sends: read those with
        find(), which ignores case.
        """
        values = super().get(canonical_header_key(key))
        if not values:
            return default
        return values[0]

    def values_for(self, key: str) -> list[str]:
        return list(super().get(canonical_header_key(key), []))

    def set(self, key: str, value: str) -> None:
        """Replace all values for key with value."""
        self[canonical_header_key(key)] = [value]

    def add(self, key: str, value: str) -> None:
        """Append value to the values for key."""
        self.setdefault(canonical_header_key(key), []).append(value)

    def delete(self, key: str) -> None:
        self.pop(canonical_header_key(key), None)

    def has(self, key: str) -> bool:
        return canonical_header_key(key) in self

    def find(self, key: str) -> str:
        """First value for key, ignoring case even for non-canonical keys."""
        wanted = key.lower()
        for name, values in self.items():
            if name.lower() == wanted and values:
                return values[0]
        return ""

    def clone(self) -> Headers:
        """Deep copy; the value lists are not shared with the original."""
        return Headers({key: list(values) for key, values in self.items()})

    def items_flat(self) -> list[tuple[str, str]]:
        return [(key, value) for key, values in self.items() for value in values]
