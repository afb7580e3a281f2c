"""smartselector package exports."""

from .models import (
    SelectionMode,
    FieldSet,
    ContainerDefinition,
    RepeatedContainers,
    StructureResult,
)
from .tree import Node, DocumentTree
from .query import QueryProvider, SoupQuery, merge_selectors
from .paths import (
    element_path,
    position_in_parent,
    group_paths,
    path_selector,
    unique_path_selector,
)
from .synthesis import (
    create_group_selectors,
    create_selectors,
    create_generalized_selectors,
    filter_rejected_selectors,
    generalization_distance,
    exact_selector,
    smart_selector,
)
from .containers import (
    find_containers,
    find_container,
    find_repeated_containers,
    group_items,
)
from .generators import (
    SelectorArena,
    FieldSelectorContext,
    ContainerSelectorContext,
    update_structure_selectors,
)
from .xpath import css_to_xpath, UnsupportedSelectorError

__all__ = [
    "SelectionMode",
    "FieldSet",
    "ContainerDefinition",
    "RepeatedContainers",
    "StructureResult",
    "Node",
    "DocumentTree",
    "QueryProvider",
    "SoupQuery",
    "merge_selectors",
    "element_path",
    "position_in_parent",
    "group_paths",
    "path_selector",
    "unique_path_selector",
    "create_group_selectors",
    "create_selectors",
    "create_generalized_selectors",
    "filter_rejected_selectors",
    "generalization_distance",
    "exact_selector",
    "smart_selector",
    "find_containers",
    "find_container",
    "find_repeated_containers",
    "group_items",
    "SelectorArena",
    "FieldSelectorContext",
    "ContainerSelectorContext",
    "update_structure_selectors",
    "css_to_xpath",
    "UnsupportedSelectorError",
]
