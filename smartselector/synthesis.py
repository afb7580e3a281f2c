"""Selector synthesis over shape groups of element paths.

Selectors are built depth by depth, from the group's root towards its leaves.
At each depth a ranked list of candidate fragments is evaluated and the first
one matching the nodes observed at that depth is kept. Exact synthesis requires
the evaluated matches to equal the observed nodes; generalized synthesis keeps
the first candidate covering them.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence

from .config import settings
from .paths import (
    ShapeGroup,
    element_path,
    group_elements_at,
    group_paths,
    unique_path_selector,
)
from .query import QueryProvider, escape_identifier, merge_selectors
from .tree import Node

logger = logging.getLogger(__name__)

ParentMap = Mapping[Node, List[str]]


def class_selectors(elements: Sequence[Node]) -> List[str]:
    """Class selectors shared by every node in ``elements``."""
    counts: Dict[str, int] = {}
    for element in elements:
        if not element.classes:
            return []
        for class_name in element.classes:
            counts[class_name] = counts.get(class_name, 0) + 1
    return ["." + escape_identifier(name) for name, count in counts.items() if count == len(elements)]


def element_indices(elements: Sequence[Node]) -> List[int]:
    return sorted({element.position for element in elements})


def arithmetic_stride(indices: Sequence[int]) -> Optional[int]:
    """Common difference of ``indices`` when it has two or more terms in progression."""
    if len(indices) < 2:
        return None
    delta = indices[1] - indices[0]
    for i in range(2, len(indices)):
        if indices[i] - indices[i - 1] != delta:
            return None
    return delta


def _formula_fragments(tag_name: str, classes: List[str], stride: int, first: int, last: int) -> List[List[str]]:
    step = "" if stride == 1 else str(stride)
    lower = f":nth-child({step}n+{first})"
    upper = f":nth-child(-{step}n+{last})"
    bases = [tag_name]
    for class_selector in classes:
        bases.extend([class_selector, tag_name + class_selector])
    fragments: List[List[str]] = []
    for base in bases:
        fragments.extend([[base + lower], [base + upper], [base + lower + upper]])
    return fragments


def candidate_fragments(elements: Sequence[Node], allow_id: bool = True, generalize: bool = False) -> List[List[str]]:
    """Ranked candidate fragment lists describing ``elements`` at one depth."""
    candidates: List[List[str]] = []
    tag_name = elements[0].name
    classes = class_selectors(elements)
    all_classes = tag_name + "".join(classes)
    implicit = tag_name in settings.implicit_tags

    if not generalize:
        if allow_id and len(elements) == 1 and elements[0].id:
            candidates.append(["#" + escape_identifier(elements[0].id)])
        candidates.extend([class_selector] for class_selector in classes)
        if not implicit:
            candidates.append([tag_name])
        candidates.extend([tag_name + class_selector] for class_selector in classes)

    if not implicit:
        indices = element_indices(elements)
        if not generalize:
            stride = arithmetic_stride(indices)
            if stride is not None:
                candidates.extend(_formula_fragments(tag_name, classes, stride, indices[0], indices[-1]))
            # enumerate every observed position
            candidates.append([f"{tag_name}:nth-child({index})" for index in indices])
            for class_selector in classes:
                candidates.append([f"{class_selector}:nth-child({index})" for index in indices])
                candidates.append([f"{tag_name}{class_selector}:nth-child({index})" for index in indices])
        elif len(indices) == 1:
            candidates.append([f"{all_classes}:nth-child({indices[0]})"])

    if generalize:
        candidates.append([all_classes])
    return candidates


def _evaluate(query: QueryProvider, selector: str, scopes: Optional[List[Node]]) -> List[Node]:
    # without a parent context the selector is used against the whole document
    if scopes:
        return query.query_within(selector, scopes)
    return query.query(selector)


def _accepts(matches: Sequence[Node], elements: Sequence[Node], generalize: bool) -> bool:
    found = set(matches)
    if generalize:
        return bool(found) and found.issuperset(elements)
    return found == set(elements)


def create_group_selectors(
    group: ShapeGroup,
    query: QueryProvider,
    parent_map: Optional[ParentMap] = None,
    generalize: bool = False,
) -> List[str]:
    """Return selector alternatives matching the leaves of ``group``.

    ``parent_map`` maps ancestors already isolated by an enclosing container to
    their selector alternatives; the deepest mapped ancestor seeds the walk.
    """
    if not group or not group[0]:
        return []
    root = group[0][0]
    path_length = len(group[0])
    parent_index = 0
    parent_elements: Optional[List[Node]] = None
    selectors = [root.name]

    if parent_map:
        for index in range(1, path_length):
            if group[0][index] in parent_map:
                parent_index = index
    if parent_index:
        parent_elements = group_elements_at(group, parent_index)
        selectors = list(parent_map[parent_elements[0]])

    skipped_tag: Optional[str] = None
    for index in range(parent_index + 1, path_length):
        elements = group_elements_at(group, index)
        candidates = candidate_fragments(elements, allow_id=parent_elements is None, generalize=generalize)
        resolved: Optional[List[str]] = None

        if parent_elements is None and (not generalize or len(elements) == 1):
            for fragments in candidates:
                matches = query.query(merge_selectors(fragments))
                if _accepts(matches, elements, generalize=False):
                    resolved = list(fragments)
                    break

        if resolved is None:
            for fragments in candidates:
                combined = [f"{selector} > {fragment}" for selector in selectors for fragment in fragments]
                if skipped_tag:
                    # the skipped tag may or may not exist in the source markup
                    combined.extend(
                        f"{selector} > {skipped_tag} > {fragment}" for selector in selectors for fragment in fragments
                    )
                matches = _evaluate(query, merge_selectors(combined), parent_elements)
                if _accepts(matches, elements, generalize):
                    resolved = combined
                    break

        if resolved is None:
            skipped_tag = elements[0].name
            logger.debug("No candidate resolved depth %d (%s), skipping it", index, skipped_tag)
            continue
        selectors = resolved
        skipped_tag = None

    if skipped_tag:
        if any(" + " in selector for selector in selectors):
            logger.warning(
                "Trailing tag %r left unresolved under a sibling context %r",
                skipped_tag,
                merge_selectors(selectors),
            )
        selectors = selectors + [f"{selector} > {skipped_tag}" for selector in selectors]

    if not generalize:
        leaves = group_elements_at(group, path_length - 1)
        matches = _evaluate(query, merge_selectors(selectors), parent_elements)
        if set(matches) != set(leaves):
            logger.debug("Selector %r is not exact for %d nodes, pinning paths", merge_selectors(selectors), len(leaves))
            selectors = [unique_path_selector(leaf) for leaf in leaves]
    return selectors


def create_selectors(
    grouped_paths: Sequence[ShapeGroup],
    query: QueryProvider,
    parent_map: Optional[ParentMap] = None,
) -> List[List[str]]:
    return [create_group_selectors(group, query, parent_map) for group in grouped_paths]


def create_generalized_selectors(
    grouped_paths: Sequence[ShapeGroup],
    query: QueryProvider,
    reject: Sequence[Node] = (),
) -> List[List[str]]:
    selectors = [create_group_selectors(group, query, None, generalize=True) for group in grouped_paths]
    return filter_rejected_selectors(selectors, query, reject)


def filter_rejected_selectors(
    selector_groups: Sequence[List[str]],
    query: QueryProvider,
    reject: Sequence[Node],
) -> List[List[str]]:
    """Replace groups matching a rejected node with exact selectors for the rest."""
    rejected = set(reject)
    filtered: List[List[str]] = []
    for selectors in selector_groups:
        elements = query.query(merge_selectors(selectors))
        allowed = [element for element in elements if element not in rejected]
        if len(allowed) == len(elements):
            filtered.append(list(selectors))
            continue
        logger.debug(
            "Selector %r matches %d rejected nodes, rebuilding for %d nodes",
            merge_selectors(selectors),
            len(elements) - len(allowed),
            len(allowed),
        )
        replacement = create_selectors(group_paths([element_path(element) for element in allowed]), query)
        filtered.append([selector for group in replacement for selector in group])
    return filtered


def drop_implicit_trailing(selector_groups: Sequence[List[str]]) -> List[str]:
    """Flatten groups, dropping ``x > tbody`` when ``x`` is also an alternative."""
    filtered: List[str] = []
    for group in selector_groups:
        for selector in group:
            parts = selector.split(" > ")
            if parts[-1] not in settings.implicit_tags or " > ".join(parts[:-1]) not in group:
                filtered.append(selector)
    return filtered


def generalization_distance(node: Node, nodes: Sequence[Node]) -> float:
    """Cost of adding ``node`` to the shape group it shares with ``nodes``.

    Returns ``math.inf`` when no group has the node's shape, when a depth would
    lose more than one shared class (or all of them), or when a new position
    breaks a positional progression. Every depth losing one class or gaining a
    position adds 1.
    """
    paths = [element_path(element) for element in nodes]
    new_path = element_path(node)
    grouped = group_paths(paths)
    new_grouped = group_paths([new_path] + paths)
    if len(new_grouped) > len(grouped):
        return math.inf

    group = next(group for group in new_grouped if group[0] is new_path)
    existing = [path for path in group if path is not new_path]
    distance = 0
    for index in range(len(new_path)):
        elements = group_elements_at(group, index)
        if len(elements) == 1:
            continue
        current = group_elements_at(existing, index)

        new_classes = class_selectors(elements)
        current_classes = class_selectors(current)
        lost = len(current_classes) - len(new_classes)
        if lost > 0:
            if lost == 1 and new_classes:
                distance += 1
            else:
                return math.inf

        new_indices = element_indices(elements)
        current_indices = element_indices(current)
        if len(new_indices) > len(current_indices):
            if arithmetic_stride(current_indices) is not None and arithmetic_stride(new_indices) is None:
                return math.inf
            distance += 1
    return distance


def exact_selector(nodes: Sequence[Node], query: QueryProvider) -> str:
    """Selector text matching exactly ``nodes``."""
    grouped = group_paths([element_path(node) for node in nodes])
    return merge_selectors(drop_implicit_trailing(create_selectors(grouped, query)))


def smart_selector(node: Node, query: QueryProvider) -> str:
    return exact_selector([node], query)
