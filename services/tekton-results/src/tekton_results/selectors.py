"""Parse and match comma-separated key=value label selectors."""

from __future__ import annotations

from collections.abc import Mapping

from tekton_results.exceptions import MalformedSelectorError


def parse_label_selector(selector: str | None) -> dict[str, str]:
    """Parse ``"app=web, tier = backend"`` into ``{"app": "web", "tier": "backend"}``.

    Blank input yields an empty mapping. Later duplicates overwrite earlier ones.

    Raises:
        MalformedSelectorError: If a pair has no ``=`` or an empty key or value.
    """
    result: dict[str, str] = {}
    if not selector or not selector.strip():
        return result

    for raw_pair in selector.split(","):
        pair = raw_pair.strip()
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        if not sep:
            raise MalformedSelectorError(
                f"invalid label selector {pair!r}: expected key=value pairs"
            )
        key = key.strip()
        value = value.strip()
        if not key or not value:
            raise MalformedSelectorError(
                f"invalid label selector {pair!r}: empty key or value"
            )
        result[key] = value
    return result


def matches_labels(
    actual: Mapping[str, str] | None, expected: Mapping[str, str]
) -> bool:
    """Return True when every expected label is present with the same value."""
    if not expected:
        return True
    if not actual:
        return False
    return all(actual.get(key) == want for key, want in expected.items())
