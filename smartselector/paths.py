"""Root-to-node paths and shape grouping."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .tree import Node

Path = Tuple[Node, ...]
ShapeGroup = List[Path]


def element_path(node: Node) -> Path:
    """Return the nodes from the document element's child down to ``node``."""
    elements = [node]
    while node.parent is not None and node.parent.parent is not None:
        node = node.parent
        elements.insert(0, node)
    return tuple(elements)


def position_in_parent(node: Node) -> int:
    return node.position


def shape_signature(path: Path) -> Tuple[object, ...]:
    """Root identity followed by the tag names along ``path``."""
    if not path:
        return ()
    return (path[0].order,) + tuple(element.name for element in path)


def group_paths(paths: Sequence[Path]) -> List[ShapeGroup]:
    """Bucket paths by root identity and tag-name sequence, in first-seen order."""
    grouped: Dict[Tuple[object, ...], ShapeGroup] = {}
    for path in paths:
        if not path:
            continue
        grouped.setdefault(shape_signature(path), []).append(path)
    return list(grouped.values())


def group_elements_at(group: ShapeGroup, index: int) -> List[Node]:
    """Distinct nodes found at depth ``index`` across ``group``, first-seen order."""
    seen: Dict[Node, None] = {}
    for path in group:
        seen.setdefault(path[index], None)
    return list(seen)


def get_parents(node: Node, upto: Optional[Node] = None) -> List[Node]:
    """Ancestors of ``node``, nearest first, stopping before ``upto``."""
    parents: List[Node] = []
    for ancestor in node.ancestors():
        if ancestor is upto:
            break
        parents.append(ancestor)
    return parents


def get_previous_siblings(node: Optional[Node], upto: Optional[Node] = None) -> List[Node]:
    """Element siblings before ``node``, nearest first, stopping before ``upto``."""
    if node is None:
        return []
    siblings: List[Node] = []
    sibling = node.previous_sibling
    while sibling is not None and sibling is not upto:
        siblings.append(sibling)
        sibling = sibling.previous_sibling
    return siblings


def path_selector(node: Node) -> str:
    return " > ".join(element.name for element in element_path(node))


def unique_path_selector(node: Node) -> str:
    """Selector pinning every step of the path with ``:nth-child``."""
    parts = []
    for index, element in enumerate(element_path(node)):
        if index == 0:
            parts.append(element.name)
        else:
            parts.append(f"{element.name}:nth-child({position_in_parent(element)})")
    return " > ".join(parts)
