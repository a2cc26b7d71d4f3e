"""Simulation engine — orchestrates round execution across the network."""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from ..core.context import Context
from ..core.device import Device
from .network import Network

logger = logging.getLogger(__name__)


class SimulationEngine:
    """Synchronous simulation engine for aggregate programs.

    Each :meth:`step` executes the aggregate program on every device,
    collects exports, and makes them available to neighbors in the next
    round.  Devices may move during their round; connectivity is recomputed
    once all exports are committed.

    With ``keep_history=False`` only the latest round's results are kept;
    long batch runs read each round through the ``on_round`` hook instead.
    """

    def __init__(
        self,
        network: Network,
        program: Callable[[Context], Any],
        delta_time: float = 1.0,
        seed: int | None = None,
        keep_history: bool = True,
    ) -> None:
        self.network = network
        self.program = program
        self.delta_time = delta_time
        self.rng = np.random.default_rng(seed)
        self.keep_history = keep_history
        self.round_count = 0
        self.results: dict[int, Any] = {}
        # Per-round history for visualization / analysis
        self.history: list[dict[int, Any]] = []

    @property
    def current_time(self) -> float:
        """Simulated time of the next round to execute."""
        return self.round_count * self.delta_time

    def _build_context(self, device: Device) -> Context:
        neighbor_devices = {
            nid: self.network.devices[nid]
            for nid in device.neighbors
            if nid in self.network.devices
        }
        return Context(
            device=device,
            neighbor_devices=neighbor_devices,
            round_count=self.round_count,
            delta_time=self.delta_time,
            rng=self.rng,
        )

    def step(self) -> dict[int, Any]:
        """Execute one synchronous round for all devices.

        Returns a dict mapping device IDs to their program outputs.
        """
        round_results: dict[int, Any] = {}
        new_exports: dict[int, dict[str, Any]] = {}

        for dev in self.network.devices.values():
            ctx = self._build_context(dev)
            result = self.program(ctx)
            new_exports[dev.id] = ctx.get_exports()
            round_results[dev.id] = result

        # Commit exports after all devices have executed (synchronous).
        for did, exports in new_exports.items():
            self.network.devices[did].exports = exports
        self.network.update_neighbors()

        logger.debug(
            "round %d: %d devices, %d links",
            self.round_count,
            len(self.network.devices),
            sum(len(d.neighbors) for d in self.network.devices.values()) // 2,
        )
        self.round_count += 1
        self.results = round_results
        if self.keep_history:
            self.history.append(dict(round_results))
        return round_results

    def run(
        self,
        num_rounds: int,
        on_round: Callable[[float, dict[int, Any]], None] | None = None,
    ) -> list[dict[int, Any]]:
        """Run *num_rounds* synchronous rounds. Returns full history.

        *on_round*, if given, is called after every round with the round's
        simulated time and results.
        """
        logger.info(
            "running %d rounds on %d devices", num_rounds, len(self.network.devices),
        )
        for _ in range(num_rounds):
            t = self.current_time
            results = self.step()
            if on_round is not None:
                on_round(t, results)
        logger.info("simulation reached round %d", self.round_count)
        return self.history

    def get_field(self, key: str | None = None) -> dict[int, Any]:
        """Extract a named sub-field from the latest results.

        If results are dicts, returns ``{id: result[key]}``.
        If *key* is ``None``, returns the raw results.
        """
        if key is None:
            return dict(self.results)
        return {
            did: (r[key] if isinstance(r, dict) else r)
            for did, r in self.results.items()
        }
