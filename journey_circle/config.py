"""
Engine options: defaults, JSON loading, and validation.
"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from ._common import DEFAULT_DURATION_MS, DEFAULT_LOGICAL_SIZE, STYLE
from .animation import EASINGS


@dataclass(frozen=True)
class EngineOptions:
    """Options for ``DiagramEngine.attach``."""
    logical_size: float = DEFAULT_LOGICAL_SIZE
    max_size: float = DEFAULT_LOGICAL_SIZE
    duration_ms: float = DEFAULT_DURATION_MS
    easing: str = "ease_out_cubic"
    circle_id: Optional[Any] = None
    colors: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check option values.

        Raises:
            ValueError: If a value is out of range or unknown
        """
        if self.logical_size < 0:
            raise ValueError(f"logical_size must be >= 0, got {self.logical_size}")
        if self.max_size <= 0:
            raise ValueError(f"max_size must be > 0, got {self.max_size}")
        if self.duration_ms < 0:
            raise ValueError(f"duration_ms must be >= 0, got {self.duration_ms}")
        if self.easing not in EASINGS:
            raise ValueError(
                f"Unknown easing {self.easing!r}; choose one of {', '.join(sorted(EASINGS))}"
            )
        unknown = set(self.colors) - set(STYLE)
        if unknown:
            raise ValueError(f"Unknown color keys: {', '.join(sorted(unknown))}")

    @property
    def style(self) -> Dict[str, str]:
        return {**STYLE, **self.colors}

    def with_overrides(self, **overrides) -> "EngineOptions":
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineOptions":
        """
        Build options from a mapping.

        Raises:
            ValueError: If the mapping has keys that are not options
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown option keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_file(cls, filepath: Path) -> "EngineOptions":
        """Load options from a JSON file."""
        with open(filepath, "r") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
