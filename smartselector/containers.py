"""Record container detection and item grouping."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .models import RepeatedContainers
from .paths import get_parents, get_previous_siblings
from .tree import Node

logger = logging.getLogger(__name__)

Item = List[Node]


def find_containers(nodes: Sequence[Node], upto: Optional[Node] = None) -> List[Node]:
    """Ancestors shared by every node, nearest first, stopping before ``upto``."""
    chains = [get_parents(node, upto) for node in nodes]
    if not chains:
        return []
    common = set(chains[0])
    for chain in chains[1:]:
        common &= set(chain)
    return [parent for parent in chains[0] if parent in common]


def find_container(field_nodes: Sequence[Sequence[Node]]) -> Optional[Node]:
    """Nearest common ancestor of every node of every field."""
    containers = find_containers([node for nodes in field_nodes for node in nodes])
    return containers[0] if containers else None


def make_items_from_groups(groups: Sequence[Sequence[Node]]) -> List[Item]:
    items: List[Item] = []
    for nodes in groups:
        for index, node in enumerate(nodes):
            if index >= len(items):
                items.append([])
            items[index].append(node)
    return items


def get_item_bounds(items: Sequence[Item]) -> List[Tuple[Node, Node]]:
    """First and last node of each item in document order."""
    bounds = []
    for item in items:
        ordered = sorted(item, key=lambda node: node.order)
        bounds.append((ordered[0], ordered[-1]))
    return bounds


def _private_owners(node_sets: Sequence[Sequence[Node]]) -> Dict[Node, int]:
    """Map each node to the index of the only set it occurs in."""
    owners: Dict[Node, int] = {}
    shared: Set[Node] = set()
    for index, nodes in enumerate(node_sets):
        for node in nodes:
            owner = owners.setdefault(node, index)
            if owner != index:
                shared.add(node)
    for node in shared:
        del owners[node]
    return owners


def group_items(extracted: Sequence[Sequence[Node]], upto: Optional[Node] = None) -> List[Item]:
    """Partition per-field node lists into per-record items.

    Fields sharing the longest length are zipped into baseline items. Nodes of
    shorter fields go to the item whose order bounds strictly enclose them,
    otherwise to the item owning one of their ancestors exclusively. Nodes
    matching neither rule are dropped.
    """
    groups = [list(nodes) for nodes in extracted if nodes]
    if not groups:
        return []
    lengths = {len(nodes) for nodes in groups}
    if len(lengths) == 1:
        return make_items_from_groups(groups)

    longest = max(lengths)
    items = make_items_from_groups([nodes for nodes in groups if len(nodes) == longest])
    bounds = [(low.order, high.order) for low, high in get_item_bounds(items)]
    seen = {node for item in items for node in item}

    remaining: List[Tuple[Node, List[Node]]] = []
    for nodes in groups:
        if len(nodes) == longest:
            continue
        for node in nodes:
            if node in seen:
                continue
            for item, (low, high) in zip(items, bounds):
                if low < node.order < high:
                    item.append(node)
                    seen.add(node)
                    break
            else:
                remaining.append((node, get_parents(node, upto)))

    if not remaining:
        return items

    item_parents = [{parent for node in item for parent in get_parents(node, upto)} for item in items]
    owners = _private_owners([list(parents) for parents in item_parents])
    for node, parents in remaining:
        if node in seen:
            continue
        owner = next((owners[parent] for parent in parents if parent in owners), None)
        if owner is None:
            logger.debug("Dropping %r: no item owns any of its ancestors", node)
            continue
        items[owner].append(node)
        seen.add(node)
    return items


def _distinct_heads(chains: Sequence[List[Node]]) -> bool:
    heads = {chain[0] if chain else None for chain in chains}
    return None not in heads and len(heads) == len(chains)


def find_repeated_containers(extracted: Sequence[Sequence[Node]], boundary: Optional[Node] = None) -> RepeatedContainers:
    """Locate the element bounding each repeated record below ``boundary``."""
    items = group_items(extracted, boundary)
    if len(items) <= 1:
        return RepeatedContainers([], 0)

    chains = [find_containers(item, boundary) for item in items]
    if all(len(chain) == len(chains[0]) for chain in chains) and _distinct_heads(chains):
        return RepeatedContainers([chain[0] for chain in chains], 0)

    # align chains on the ancestors next to the boundary
    shortest = min(len(chain) for chain in chains)
    trimmed = [chain[len(chain) - shortest:] for chain in chains]
    if _distinct_heads(trimmed):
        return RepeatedContainers([chain[0] for chain in trimmed], 0)
    return parent_with_siblings(items, boundary)


def _sibling_steps(low: Node, high: Node) -> Optional[int]:
    if low is high:
        return 0
    if low.parent is not high.parent or high.position < low.position:
        return None
    return len(get_previous_siblings(high, low)) + 1


def parent_with_siblings(items: Sequence[Item], boundary: Optional[Node] = None) -> RepeatedContainers:
    """Records made of several consecutive siblings without a wrapper element.

    Each item's container is the outermost ancestor of its first node that no
    other item shares; the sibling span is the smallest number of sibling steps
    from that ancestor to the matching ancestor of the item's last node.
    """
    chains = []
    for low, high in get_item_bounds(items):
        low_chain = list(reversed(get_parents(low, boundary))) + [low]
        high_chain = list(reversed(get_parents(high, boundary))) + [high]
        chains.append((low_chain, high_chain))

    owners = _private_owners([low_chain + high_chain for low_chain, high_chain in chains])
    containers: List[Node] = []
    spans: List[int] = []
    for index, (low_chain, high_chain) in enumerate(chains):
        low_unshared = [node for node in low_chain if owners.get(node) == index]
        high_unshared = [node for node in high_chain if owners.get(node) == index]
        if not low_unshared:
            continue
        containers.append(low_unshared[0])
        if high_unshared:
            steps = _sibling_steps(low_unshared[0], high_unshared[0])
            if steps is not None:
                spans.append(steps)
    return RepeatedContainers(containers, min(spans) if spans else 0)
