"""Device model for the collection case study."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass
class Device:
    """A single device in the network.

    Each device has a unique ID, a 2D position, a storage of named values
    (configuration read by the program and outputs written by it), private
    state that is never shared, and the export tree neighbors read in the
    next round.
    """

    id: int
    position: np.ndarray  # shape (2,)
    storage: dict[str, Any] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)
    exports: dict[str, Any] = field(default_factory=dict)
    neighbors: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float)

    def distance_to(self, other: Device) -> float:
        return float(np.linalg.norm(self.position - other.position))

    def read(self, name: str, default: Any = None) -> Any:
        return self.storage.get(name, default)
