"""Helpers for reading field structure definitions from JSON payloads."""

from __future__ import annotations

from typing import Any, List, Union

from ..models import ContainerDefinition, FieldSet, SelectionMode
from ..query import QueryProvider

Definition = Union[FieldSet, ContainerDefinition]


def ensure_string_list(value: Any) -> List[str]:
    """Return a sanitized string list; a bare string becomes a one-item list."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    results: List[str] = []
    for item in value:
        if isinstance(item, str):
            stripped = item.strip()
            if stripped:
                results.append(stripped)
    return results


def ensure_mode(value: Any) -> SelectionMode:
    if isinstance(value, str) and value.strip().lower() in SelectionMode._value2member_map_:
        return SelectionMode(value.strip().lower())
    return SelectionMode.AUTO


def parse_structure(payload: Any, query: QueryProvider) -> List[Definition]:
    """Build field and container definitions from decoded JSON.

    ``payload`` is a list of entries (or a single entry). Entries with a
    ``children`` list are containers; the others are fields carrying
    ``accept``/``reject`` selector lists and an optional ``mode``. Entries that
    are not objects are ignored.
    """
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return []

    definitions: List[Definition] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            name = f"entry {index + 1}"
        if isinstance(entry.get("children"), list):
            definitions.append(ContainerDefinition(name=name, children=parse_structure(entry["children"], query)))
            continue
        definitions.append(
            FieldSet.from_selectors(
                name,
                query,
                ensure_string_list(entry.get("accept")),
                ensure_string_list(entry.get("reject")),
                mode=ensure_mode(entry.get("mode")),
            )
        )
    return definitions
