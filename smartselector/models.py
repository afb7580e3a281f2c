"""Shared dataclasses and enumerations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from .query import QueryProvider, merge_selectors
from .tree import Node


class SelectionMode(str, Enum):
    AUTO = "auto"
    CSS = "css"


@dataclass
class FieldSet:
    """Nodes a user associated with one logical field."""

    name: str
    accept: List[Node] = field(default_factory=list)
    reject: List[Node] = field(default_factory=list)
    mode: SelectionMode = SelectionMode.AUTO
    accept_selectors: List[str] = field(default_factory=list)

    @classmethod
    def from_selectors(
        cls,
        name: str,
        query: QueryProvider,
        accept_selectors: Sequence[str],
        reject_selectors: Sequence[str] = (),
        mode: SelectionMode = SelectionMode.AUTO,
    ) -> "FieldSet":
        accept_selectors = [selector for selector in accept_selectors if selector]
        reject_selectors = [selector for selector in reject_selectors if selector]
        return cls(
            name=name,
            accept=query.query(merge_selectors(accept_selectors)),
            reject=query.query(merge_selectors(reject_selectors)),
            mode=mode,
            accept_selectors=list(accept_selectors),
        )


@dataclass
class ContainerDefinition:
    name: str
    children: List[Union[FieldSet, "ContainerDefinition"]] = field(default_factory=list)


@dataclass
class RepeatedContainers:
    containers: List[Node]
    siblings: int = 0


@dataclass
class StructureResult:
    name: str
    kind: str
    selector: Optional[str]
    xpath: Optional[str] = None
    repeated_selector: Optional[str] = None
    siblings: int = 0
    repeated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "selector": self.selector,
            "xpath": self.xpath,
            "repeated_selector": self.repeated_selector,
            "siblings": self.siblings,
            "repeated": self.repeated,
        }
