"""Selector evaluation against a document tree."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Union

import soupsieve

from .tree import DocumentTree, Node

SelectorLike = Union[str, Sequence["SelectorLike"]]


class QueryProvider(ABC):
    """Base interface for evaluating selector text against a tree snapshot."""

    @abstractmethod
    def query(self, selector: str, scope: Optional[Node] = None) -> List[Node]:
        """Return matched nodes in document order, restricted to descendants of ``scope``."""

    def query_within(self, selector: str, scopes: Iterable[Node]) -> List[Node]:
        """Union of :meth:`query` over several scopes, in document order."""
        matches: Dict[Node, None] = {}
        for scope in scopes:
            for node in self.query(selector, scope):
                matches.setdefault(node, None)
        return sorted(matches, key=lambda node: node.order)


class SoupQuery(QueryProvider):
    """Evaluate selectors with BeautifulSoup's soupsieve integration."""

    def __init__(self, tree: DocumentTree) -> None:
        self.tree = tree

    def query(self, selector: str, scope: Optional[Node] = None) -> List[Node]:
        if not selector:
            return []
        target = scope.element if scope is not None else self.tree.soup
        results: List[Node] = []
        for element in target.select(selector):
            node = self.tree.node_for(element)
            if node is not None:
                results.append(node)
        return results


def merge_selectors(selectors: SelectorLike) -> str:
    """Flatten nested selector lists into one alternation string."""
    if isinstance(selectors, str):
        return selectors
    return ", ".join(part for part in (merge_selectors(item) for item in selectors) if part)


def escape_identifier(value: str) -> str:
    return soupsieve.escape(value)
