"""Result writer interfaces and implementations."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, TextIO

from .config import settings
from .models import StructureResult


class ResultWriter(ABC):
    """Base interface for output adapters."""

    @abstractmethod
    def write(self, results: List[StructureResult]) -> None:
        """Emit structure results to the desired sink."""


class PrintWriter(ResultWriter):
    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream

    def write(self, results: List[StructureResult]) -> None:
        for result in results:
            print(f"[{result.kind}] {result.name}", file=self.stream)
            print(f"  selector: {result.selector or '-'}", file=self.stream)
            if result.repeated_selector:
                print(f"  repeated: {result.repeated_selector}", file=self.stream)
            if result.siblings:
                print(f"  siblings: {result.siblings}", file=self.stream)
            if result.xpath:
                print(f"  xpath:    {result.xpath}", file=self.stream)


class TxtWriter(ResultWriter):
    """One JSON document per line."""

    def __init__(self, path: str = "selectors.txt") -> None:
        self.path = Path(path)

    def write(self, results: List[StructureResult]) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            for result in results:
                handle.write(json.dumps(result.to_dict(), ensure_ascii=False))
                handle.write("\n")


class JsonWriter(ResultWriter):
    def __init__(self, path: str = "selectors.json") -> None:
        self.path = Path(path)

    def write(self, results: List[StructureResult]) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump([result.to_dict() for result in results], handle, ensure_ascii=False, indent=settings.indent)
