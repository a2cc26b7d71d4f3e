"""Network topology management.

Manages a collection of devices, computes neighbor relationships based on
Euclidean distance, and supports dynamic topology changes.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Any, Callable

import numpy as np

from ..core.device import Device

StorageFn = Callable[..., dict[str, Any]]


class Network:
    """A spatial network of devices with distance-based neighbor discovery."""

    def __init__(self, comm_range: float = 1.5) -> None:
        self.devices: dict[int, Device] = {}
        self.comm_range = comm_range
        self._next_id = 0

    def add_device(
        self,
        position: tuple[float, float] | np.ndarray,
        storage: dict[str, Any] | None = None,
        device_id: int | None = None,
    ) -> Device:
        """Add a device and return it."""
        did = device_id if device_id is not None else self._next_id
        if did in self.devices:
            raise ValueError(f"device {did} already in the network")
        self._next_id = max(self._next_id, did + 1)
        dev = Device(id=did, position=np.asarray(position, dtype=float),
                     storage=storage or {})
        self.devices[did] = dev
        return dev

    def remove_device(self, device_id: int) -> None:
        self.devices.pop(device_id, None)
        for dev in self.devices.values():
            if device_id in dev.neighbors:
                dev.neighbors.remove(device_id)

    def update_neighbors(self) -> None:
        """Recompute neighbor lists based on Euclidean distance."""
        ids = list(self.devices.keys())
        if not ids:
            return
        pos = np.stack([self.devices[i].position for i in ids])
        diff = pos[:, None, :] - pos[None, :, :]
        in_range = np.linalg.norm(diff, axis=-1) <= self.comm_range
        np.fill_diagonal(in_range, False)
        for row, did in enumerate(ids):
            self.devices[did].neighbors = [ids[j] for j in np.flatnonzero(in_range[row])]

    def get_distance(self, id_a: int, id_b: int) -> float:
        da = self.devices.get(id_a)
        db = self.devices.get(id_b)
        if da is None or db is None:
            return math.inf
        return da.distance_to(db)

    def hop_distances(self, root: int) -> dict[int, int]:
        """Breadth-first hop counts from *root* over the current topology.

        Devices not connected to *root* are absent from the result.
        """
        if root not in self.devices:
            return {}
        hops = {root: 0}
        queue = deque([root])
        while queue:
            did = queue.popleft()
            for nid in self.devices[did].neighbors:
                if nid not in hops:
                    hops[nid] = hops[did] + 1
                    queue.append(nid)
        return hops

    def connected_component(self, root: int) -> set[int]:
        """IDs of the devices reachable from *root*, *root* included."""
        return set(self.hop_distances(root))

    # ── Factory helpers ──────────────────────────────────────────────

    @classmethod
    def grid(
        cls,
        rows: int,
        cols: int,
        spacing: float = 1.0,
        comm_range: float | None = None,
        storage_fn: StorageFn | None = None,
    ) -> Network:
        """Create a regular grid network.

        Parameters
        ----------
        storage_fn:
            Optional callable ``(device_id, row, col) -> dict`` that
            provides the initial storage of each device.
        """
        cr = comm_range if comm_range is not None else spacing * 1.5
        net = cls(comm_range=cr)
        for r in range(rows):
            for c in range(cols):
                did = r * cols + c
                pos = (c * spacing, r * spacing)
                storage: dict[str, Any] = {}
                if storage_fn is not None:
                    storage = storage_fn(did, r, c)
                net.add_device(pos, storage, device_id=did)
        net.update_neighbors()
        return net

    @classmethod
    def line(
        cls,
        n: int,
        spacing: float = 1.0,
        storage_fn: StorageFn | None = None,
    ) -> Network:
        """Chain of *n* devices, each in range of its two adjacent ones."""
        return cls.grid(
            1, n, spacing=spacing, comm_range=spacing * 1.1,
            storage_fn=(lambda did, _r, _c: storage_fn(did)) if storage_fn else None,
        )

    @classmethod
    def random(
        cls,
        n: int,
        width: float = 10.0,
        height: float = 10.0,
        comm_range: float = 2.0,
        storage_fn: StorageFn | None = None,
        rng: np.random.Generator | None = None,
    ) -> Network:
        """Create a random network with *n* devices in a rectangular area."""
        rng = rng or np.random.default_rng()
        net = cls(comm_range=comm_range)
        for i in range(n):
            pos = (rng.uniform(0, width), rng.uniform(0, height))
            storage: dict[str, Any] = {}
            if storage_fn is not None:
                storage = storage_fn(i)
            net.add_device(pos, storage, device_id=i)
        net.update_neighbors()
        return net
