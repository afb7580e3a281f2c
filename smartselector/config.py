"""Global settings for smartselector."""

from dataclasses import dataclass, field
from typing import FrozenSet


@dataclass
class Settings:
    parser: str = "lxml"
    # Tags a browser may inject without them being present in the markup.
    implicit_tags: FrozenSet[str] = field(default_factory=lambda: frozenset({"tbody"}))
    log_level: str = "WARNING"
    indent: int = 2


settings = Settings()
