"""Selector contexts for annotated fields and the containers grouping them.

Contexts live in a :class:`SelectorArena` and refer to each other by index.
Every computed value is cached on the context, so a context must be discarded
once the tree or the field definitions change.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .containers import find_container, find_repeated_containers
from .models import (
    ContainerDefinition,
    FieldSet,
    RepeatedContainers,
    SelectionMode,
    StructureResult,
)
from .paths import Path, ShapeGroup, element_path, group_paths
from .query import QueryProvider, merge_selectors
from .synthesis import (
    ParentMap,
    create_generalized_selectors,
    create_selectors,
    drop_implicit_trailing,
    exact_selector,
    filter_rejected_selectors,
    generalization_distance,
)
from .tree import Node
from .xpath import css_to_xpath

logger = logging.getLogger(__name__)

Context = Union["FieldSelectorContext", "ContainerSelectorContext"]


class SelectorArena:
    """Owns selector contexts, their parent indices and children index lists."""

    def __init__(self, query: QueryProvider) -> None:
        self.query = query
        self._contexts: List[Context] = []
        self._parents: List[Optional[int]] = []
        self._children: List[List[int]] = []

    def add_field(self, field_set: FieldSet, parent: Optional[int] = None) -> "FieldSelectorContext":
        context = FieldSelectorContext(self, len(self._contexts), field_set)
        self._register(context, parent)
        return context

    def add_container(self, name: str = "", parent: Optional[int] = None) -> "ContainerSelectorContext":
        context = ContainerSelectorContext(self, len(self._contexts), name)
        self._register(context, parent)
        return context

    def _register(self, context: Context, parent: Optional[int]) -> None:
        if parent is not None and not isinstance(self._contexts[parent], ContainerSelectorContext):
            raise TypeError("Only containers can hold children")
        self._contexts.append(context)
        self._parents.append(parent)
        self._children.append([])
        if parent is not None:
            self._children[parent].append(context.index)

    def parent_of(self, index: int) -> Optional["ContainerSelectorContext"]:
        parent = self._parents[index]
        if parent is None:
            return None
        return self._contexts[parent]  # type: ignore[return-value]

    def children_of(self, index: int) -> List[Context]:
        return [self._contexts[child] for child in self._children[index]]

    def __getitem__(self, index: int) -> Context:
        return self._contexts[index]

    def __len__(self) -> int:
        return len(self._contexts)


def _final_selector(selector_groups: Sequence[List[str]]) -> str:
    return merge_selectors(drop_implicit_trailing(selector_groups))


class FieldSelectorContext:
    """Selectors for one annotated field."""

    def __init__(self, arena: SelectorArena, index: int, field_set: FieldSet) -> None:
        self.arena = arena
        self.index = index
        self.field_set = field_set

    @property
    def name(self) -> str:
        return self.field_set.name

    @property
    def query(self) -> QueryProvider:
        return self.arena.query

    @property
    def parent(self) -> Optional["ContainerSelectorContext"]:
        return self.arena.parent_of(self.index)

    @property
    def accept_elements(self) -> List[Node]:
        return self.field_set.accept

    @property
    def reject_elements(self) -> List[Node]:
        return self.field_set.reject

    @property
    def literal(self) -> bool:
        return self.field_set.mode == SelectionMode.CSS

    @cached_property
    def generalized_selector(self) -> str:
        """Selector widened from the accepted nodes, never matching a rejected one."""
        if self.literal:
            if self.field_set.accept_selectors:
                return merge_selectors(self.field_set.accept_selectors)
            return exact_selector(self.accept_elements, self.query)
        paths = [element_path(node) for node in self.accept_elements]
        selectors = create_generalized_selectors(group_paths(paths), self.query, self.reject_elements)
        return merge_selectors(selectors)

    @cached_property
    def elements(self) -> List[Node]:
        return self.query.query(self.generalized_selector)

    @cached_property
    def paths(self) -> List[Path]:
        return [element_path(node) for node in self.elements]

    @cached_property
    def grouped_paths(self) -> List[ShapeGroup]:
        return group_paths(self.paths)

    @cached_property
    def selectors(self) -> List[List[str]]:
        parent = self.parent
        parent_map = parent.parent_map if parent is not None else None
        return create_selectors(self.grouped_paths, self.query, parent_map)

    @cached_property
    def selector(self) -> str:
        if self.literal:
            if len(self.field_set.accept_selectors) == 1:
                return self.field_set.accept_selectors[0]
            return exact_selector(self.accept_elements, self.query)
        filtered = filter_rejected_selectors(self.selectors, self.query, self.reject_elements)
        return _final_selector(filtered)

    @property
    def xpath(self) -> Optional[str]:
        return css_to_xpath(self.selector) if self.selector else None

    @cached_property
    def repeated(self) -> bool:
        """Whether the field yields several values within one record."""
        parent = self.parent
        if parent is None or not self.selector:
            return False
        elements = self.query.query(self.selector)
        if len(elements) <= 1:
            return False
        containers = parent.repeated_containers
        if len(containers) > 1:
            return any(
                sum(1 for element in elements if container.contains(element)) > 1 for container in containers
            )
        container = parent.container
        if container is not None:
            grandparent = parent.parent
            others = grandparent.children if grandparent is not None else []
            return not any(
                isinstance(other, ContainerSelectorContext) and other is not parent and other.container is container
                for other in others
            )
        return False

    def generalization_distance(self, node: Node) -> float:
        return generalization_distance(node, self.elements)


class ContainerSelectorContext:
    """Selectors for the element(s) enclosing a group of fields."""

    def __init__(self, arena: SelectorArena, index: int, name: str = "") -> None:
        self.arena = arena
        self.index = index
        self.name = name

    @property
    def query(self) -> QueryProvider:
        return self.arena.query

    @property
    def parent(self) -> Optional["ContainerSelectorContext"]:
        return self.arena.parent_of(self.index)

    @property
    def children(self) -> List[Context]:
        return self.arena.children_of(self.index)

    @cached_property
    def child_elements(self) -> List[List[Node]]:
        return [child.elements for child in self.children]

    @cached_property
    def container(self) -> Optional[Node]:
        return find_container(self.child_elements)

    @cached_property
    def container_selector(self) -> str:
        if self.container is not None:
            return exact_selector([self.container], self.query)
        return "body"

    @cached_property
    def repeated(self) -> RepeatedContainers:
        # TODO: records spread over separate subtrees of the container are not detected
        return find_repeated_containers(self.child_elements, self.container)

    @property
    def repeated_containers(self) -> List[Node]:
        return self.repeated.containers

    @property
    def siblings(self) -> int:
        return self.repeated.siblings

    @cached_property
    def elements(self) -> List[Node]:
        if self.repeated_containers:
            return list(self.repeated_containers)
        if self.container is not None:
            return [self.container]
        return []

    @cached_property
    def grouped_paths(self) -> List[ShapeGroup]:
        return group_paths([element_path(node) for node in self.elements])

    @cached_property
    def selectors(self) -> List[List[str]]:
        parent = self.parent
        parent_map = parent.parent_map if parent is not None else None
        return create_selectors(self.grouped_paths, self.query, parent_map)

    @cached_property
    def selector(self) -> str:
        return _final_selector(self.selectors)

    @property
    def xpath(self) -> Optional[str]:
        return css_to_xpath(self.selector) if self.selector else None

    @cached_property
    def parent_map(self) -> ParentMap:
        """Selectors for each record element and the siblings it spans."""
        mapping: Dict[Node, List[str]] = {}
        siblings = self.siblings
        for paths, path_selectors in zip(self.grouped_paths, self.selectors):
            sibling_selectors = [path_selectors]
            for _ in range(siblings):
                sibling_selectors.append([f"{selector} + *" for selector in sibling_selectors[-1]])
            for path in paths:
                element: Optional[Node] = path[-1]
                mapping[element] = path_selectors
                for offset in range(1, siblings + 1):
                    element = element.next_sibling
                    if element is None:
                        break
                    mapping[element] = sibling_selectors[offset]
        return mapping


def _populate(
    arena: SelectorArena,
    structure: Sequence[Union[FieldSet, ContainerDefinition]],
    parent: Optional[int],
    accumulator: List[Tuple[Union[FieldSet, ContainerDefinition], Context]],
) -> None:
    for definition in structure:
        if isinstance(definition, ContainerDefinition):
            context: Context = arena.add_container(definition.name, parent)
            _populate(arena, definition.children, context.index, accumulator)
        else:
            context = arena.add_field(definition, parent)
        accumulator.append((definition, context))


def update_structure_selectors(
    structure: Sequence[Union[FieldSet, ContainerDefinition]],
    query: QueryProvider,
) -> List[StructureResult]:
    """Compute selectors for every field and container, children before parents."""
    arena = SelectorArena(query)
    accumulator: List[Tuple[Union[FieldSet, ContainerDefinition], Context]] = []
    _populate(arena, structure, None, accumulator)

    results: List[StructureResult] = []
    for definition, context in accumulator:
        if isinstance(context, FieldSelectorContext):
            results.append(
                StructureResult(
                    name=definition.name,
                    kind="field",
                    selector=context.selector or None,
                    xpath=context.xpath,
                    repeated=context.repeated,
                )
            )
            continue

        selector = context.selector
        elements = query.query(selector) if selector else []
        if not elements:
            logger.debug("Container %r matches nothing", definition.name)
            results.append(StructureResult(name=definition.name, kind="container", selector=None))
        elif len(elements) > 1:
            results.append(
                StructureResult(
                    name=definition.name,
                    kind="container",
                    selector=context.container_selector,
                    xpath=css_to_xpath(context.container_selector),
                    repeated_selector=selector,
                    siblings=context.siblings,
                    repeated=True,
                )
            )
        else:
            results.append(
                StructureResult(
                    name=definition.name,
                    kind="container",
                    selector=selector,
                    xpath=context.xpath,
                    siblings=context.siblings,
                )
            )
    return results
