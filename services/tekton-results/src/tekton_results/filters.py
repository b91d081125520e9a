"""Build server-side filter expressions and list scopes for the Results API."""

from __future__ import annotations

from collections.abc import Mapping

from tekton_results.kinds import ResourceKind

ALL_NAMESPACES = "-"
_ALL_NAMESPACE_ALIASES = {"", "-", "all", "*"}


def escape_cel_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_filter_expression(
    kind: ResourceKind,
    labels: Mapping[str, str],
    exact_name: str = "",
) -> str:
    """Combine the data-type clause, label equalities and an optional name match.

    The record UID is not part of the expression: the Results query language
    cannot filter on it, so UID matching happens in memory after retrieval.
    """
    parts: list[str] = []
    if kind.data_types:
        clauses = [f'data_type=="{escape_cel_string(t)}"' for t in kind.data_types]
        parts.append(f"({' || '.join(clauses)})")
    for key, value in labels.items():
        parts.append(
            f'data.metadata.labels["{escape_cel_string(key)}"]=="{escape_cel_string(value)}"'
        )
    if exact_name:
        parts.append(f'data.metadata.name=="{escape_cel_string(exact_name)}"')
    return " && ".join(parts)


def parent_for_namespace(namespace: str | None) -> str:
    """Return the list scope for a namespace; blank or wildcard spans all namespaces."""
    ns = (namespace or "").strip()
    if ns.lower() in _ALL_NAMESPACE_ALIASES:
        return f"{ALL_NAMESPACES}/results/-"
    return f"{ns}/results/-"


def normalize_namespace(value: str | None, default: str) -> str:
    """Apply the default to a blank namespace and collapse wildcard aliases to ``-``."""
    ns = (value or "").strip()
    if not ns:
        return default
    if ns.lower() in _ALL_NAMESPACE_ALIASES:
        return ALL_NAMESPACES
    return ns
