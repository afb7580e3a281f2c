"""Element arena built on top of BeautifulSoup documents."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .config import settings


class Node:
    """Handle to one element of a :class:`DocumentTree`.

    Nodes are hashed by identity; a tree creates exactly one Node per element,
    so they can key ordinary dicts and sets. ``order`` is the pre-order index of
    the element and grows strictly in document order.
    """

    __slots__ = ("tree", "order", "element", "_parent", "_children", "_position")

    def __init__(self, tree: "DocumentTree", order: int, element: Tag, parent: Optional[int]) -> None:
        self.tree = tree
        self.order = order
        self.element = element
        self._parent = parent
        self._children: List[int] = []
        self._position = 1

    @property
    def name(self) -> str:
        return (self.element.name or "").lower()

    @property
    def id(self) -> Optional[str]:
        value = self.element.get("id")
        if isinstance(value, list):
            value = " ".join(value)
        return value or None

    @property
    def classes(self) -> Tuple[str, ...]:
        classes = self.element.get("class", [])
        if isinstance(classes, str):
            classes = classes.split()
        seen: Dict[str, None] = {}
        for class_name in classes:
            if class_name:
                seen.setdefault(class_name, None)
        return tuple(seen)

    @property
    def text(self) -> str:
        return self.element.get_text(" ", strip=True)

    @property
    def position(self) -> int:
        return self._position

    @property
    def parent(self) -> Optional["Node"]:
        if self._parent is None:
            return None
        return self.tree.nodes[self._parent]

    @property
    def children(self) -> List["Node"]:
        return [self.tree.nodes[index] for index in self._children]

    @property
    def previous_sibling(self) -> Optional["Node"]:
        parent = self.parent
        if parent is None or self._position == 1:
            return None
        return self.tree.nodes[parent._children[self._position - 2]]

    @property
    def next_sibling(self) -> Optional["Node"]:
        parent = self.parent
        if parent is None or self._position >= len(parent._children):
            return None
        return self.tree.nodes[parent._children[self._position]]

    def ancestors(self) -> Iterator["Node"]:
        parent = self.parent
        while parent is not None:
            yield parent
            parent = parent.parent

    def contains(self, other: "Node") -> bool:
        """Return True when ``other`` is this node or one of its descendants."""
        if other is self:
            return True
        return any(ancestor is self for ancestor in other.ancestors())

    def __repr__(self) -> str:
        label = self.name
        if self.id:
            label += f"#{self.id}"
        if self.classes:
            label += "." + ".".join(self.classes)
        return f"<Node {label} @{self.order}>"


class DocumentTree:
    """Arena of :class:`Node` entries for one parsed document.

    Entries are addressed by their pre-order index; each entry stores its parent
    index and the indices of its element children.
    """

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup
        self.nodes: List[Node] = []
        self._by_element: Dict[int, int] = {}
        root = next((child for child in soup.children if isinstance(child, Tag)), None)
        if root is not None:
            self._build(root)

    @classmethod
    def from_html(cls, html: str, parser: Optional[str] = None) -> "DocumentTree":
        return cls(BeautifulSoup(html, parser or settings.parser))

    def _build(self, root: Tag) -> None:
        stack: List[Tuple[Tag, Optional[int]]] = [(root, None)]
        while stack:
            element, parent = stack.pop()
            order = len(self.nodes)
            node = Node(self, order, element, parent)
            self.nodes.append(node)
            self._by_element[id(element)] = order
            if parent is not None:
                siblings = self.nodes[parent]._children
                siblings.append(order)
                node._position = len(siblings)
            children = [child for child in element.children if isinstance(child, Tag)]
            for child in reversed(children):
                stack.append((child, order))

    @property
    def root(self) -> Optional[Node]:
        """The document element (``html`` for lxml-parsed pages)."""
        return self.nodes[0] if self.nodes else None

    def node_for(self, element: Tag) -> Optional[Node]:
        index = self._by_element.get(id(element))
        if index is None:
            return None
        return self.nodes[index]

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)
