"""Execution context for a single device round.

The context tracks the current device, its neighbors' committed exports, a
call-path stack for alignment, and the export tree being built this round.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from .device import Device


class Context:
    """Per-round execution context for one device.

    The call stack produces a *call path* string that uniquely identifies each
    primitive invocation site.  Neighbor exports are keyed by the same paths,
    which ensures alignment: a field only holds values from neighbors that
    executed the same code path.

    Exports are double-buffered.  Values written with :meth:`export` go into
    a fresh tree that the engine commits to ``device.exports`` only after
    every device has run, so a round never observes same-round values.
    """

    def __init__(
        self,
        device: Device,
        neighbor_devices: dict[int, Device],
        round_count: int = 0,
        delta_time: float = 1.0,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.device = device
        self.neighbor_devices = neighbor_devices
        # Snapshot of committed exports at the start of this round.
        self.neighbor_exports: dict[int, dict[str, Any]] = {
            nid: dict(nd.exports) for nid, nd in neighbor_devices.items()
        }
        self.own_exports: dict[str, Any] = dict(device.exports)
        self.round_count = round_count
        self.delta_time = delta_time
        self.rng = rng if rng is not None else np.random.default_rng()

        # Call-path alignment machinery
        self._call_stack: list[str] = []
        self._slot_counters: list[int] = []  # per-level counters
        self._new_exports: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Call-path helpers
    # ------------------------------------------------------------------

    def _next_slot(self) -> int:
        """Return and increment the counter at the current stack depth."""
        if not self._slot_counters:
            self._slot_counters.append(0)
        idx = self._slot_counters[-1]
        self._slot_counters[-1] += 1
        return idx

    def push(self, tag: str) -> str:
        """Push *tag* onto the call stack and return the full call path."""
        slot = self._next_slot()
        label = f"{tag}@{slot}"
        self._call_stack.append(label)
        self._slot_counters.append(0)
        return self.call_path

    def pop(self) -> None:
        """Pop the most recent call-stack entry."""
        self._call_stack.pop()
        self._slot_counters.pop()

    @property
    def call_path(self) -> str:
        return "/".join(self._call_stack)

    # ------------------------------------------------------------------
    # Export read/write
    # ------------------------------------------------------------------

    def export(self, value: Any) -> None:
        """Write *value* to the export tree at the current call path."""
        self._new_exports[self.call_path] = value

    def read_neighbor_export(self, neighbor_id: int, path: str) -> Any | None:
        """Read a neighbor's export at the given call path, or ``None``."""
        nexp = self.neighbor_exports.get(neighbor_id, {})
        return nexp.get(path)

    def read_own_export(self, path: str, default: Any = None) -> Any:
        """This device's committed export at *path* from the last round."""
        return self.own_exports.get(path, default)

    def get_exports(self) -> dict[str, Any]:
        """Return the full export tree produced during this round."""
        return dict(self._new_exports)

    def aligned_neighbors(self, path: str | None = None) -> list[int]:
        """Return neighbor IDs whose exports contain the given path."""
        p = path if path is not None else self.call_path
        return [
            nid
            for nid, nexp in self.neighbor_exports.items()
            if p in nexp
        ]

    # ------------------------------------------------------------------
    # Storage and time
    # ------------------------------------------------------------------

    @property
    def current_time(self) -> float:
        return self.round_count * self.delta_time

    def storage(self, name: str, default: Any = None) -> Any:
        return self.device.read(name, default)

    def store(self, name: str, value: Any) -> None:
        self.device.storage[name] = value

    def mid(self) -> int:
        return self.device.id
