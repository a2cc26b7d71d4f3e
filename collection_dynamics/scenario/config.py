"""Scenario parameters for the collection dynamics case study."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..simulation.network import Network

#: Number of randomised runs of the experiment.
RUNS = 100
#: Last simulated time of a run.
END_TIME = 250
#: Communication range.
COMM = 100.0


def side_for(devices: int) -> float:
    """Side of the square deployment area keeping density constant."""
    return math.sqrt(3000 * devices)


def hop_radius_for(side: float, comm: float) -> int:
    """Estimated hop count across a square of *side* with range *comm*."""
    return max(1, int(2.5 * side / comm))


@dataclass(frozen=True)
class ScenarioConfig:
    """Constants of one simulation run.

    ``side`` defaults to :func:`side_for` ``devices``.
    """

    devices: int = 100
    speed: float = 0.0
    seed: int = 0
    side: float | None = None
    comm: float = COMM
    end_time: int = END_TIME

    def __post_init__(self) -> None:
        if self.devices <= 0:
            raise ValueError(f"devices must be positive, got {self.devices}")
        if self.speed < 0:
            raise ValueError(f"speed must be non-negative, got {self.speed}")
        if self.comm <= 0:
            raise ValueError(f"comm must be positive, got {self.comm}")
        if self.end_time < 0:
            raise ValueError(f"end_time must be non-negative, got {self.end_time}")
        if self.side is None:
            object.__setattr__(self, "side", side_for(self.devices))
        elif self.side <= 0:
            raise ValueError(f"side must be positive, got {self.side}")

    @property
    def hop_radius(self) -> int:
        """Estimated hop count across the deployment area."""
        return hop_radius_for(self.side, self.comm)

    def storage(self) -> dict[str, float | int]:
        """Per-device storage entries read by the device program."""
        return {
            "devices": self.devices,
            "side": self.side,
            "speed": self.speed,
            "comm": self.comm,
        }

    def build_network(self) -> Network:
        """Uniform random deployment of ``devices`` in the square area."""
        storage = self.storage()
        return Network.random(
            self.devices,
            width=self.side,
            height=self.side,
            comm_range=self.comm,
            storage_fn=lambda _did: dict(storage),
            rng=np.random.default_rng(self.seed),
        )
