"""Network-wide metrics over device outputs.

Each tracked quantity is a named metric mapped to a reducer that folds the
value every device stored under that name into one number per round.  New
quantities are tracked by registering them; the recorder turns the per-round
aggregates into a :class:`pandas.DataFrame` for plotting and comparison.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Mapping, Sequence

import pandas as pd

Reducer = Callable[[Sequence[float]], float]


def max_reducer(values: Sequence[float]) -> float:
    return max(values) if values else math.nan


METRICS: dict[str, Reducer] = {}


def register_metric(name: str, reducer: Reducer = max_reducer) -> None:
    """Track output *name*, folded across devices with *reducer*."""
    METRICS[name] = reducer


for _name in (
    "diam",
    "diamdev",
    "coll_ideal",
    "coll_simple",
    "coll_filtered",
    "coll_max_ideal",
    "coll_max_simple",
    "coll_max_filtered",
):
    register_metric(_name)


def aggregate(
    results: Mapping[int, Mapping[str, Any]],
    names: Iterable[str] | None = None,
) -> dict[str, float]:
    """Fold one round of per-device outputs into network-wide metrics.

    Raises ``KeyError`` for a name that was never registered.
    """
    selected = list(names) if names is not None else list(METRICS)
    row: dict[str, float] = {}
    for name in selected:
        reducer = METRICS[name]
        values = [float(out[name]) for out in results.values() if name in out]
        row[name] = reducer(values)
    return row


class MetricsRecorder:
    """Collects :func:`aggregate` rows, one per round.

    Instances are callables matching the engine's ``on_round`` hook.
    """

    def __init__(self, names: Iterable[str] | None = None, **tags: Any) -> None:
        self.names = list(names) if names is not None else None
        self.tags = tags
        self.rows: list[dict[str, Any]] = []

    def __call__(self, time: float, results: Mapping[int, Mapping[str, Any]]) -> None:
        self.record(time, results)

    def record(self, time: float, results: Mapping[int, Mapping[str, Any]]) -> dict[str, Any]:
        row: dict[str, Any] = {**self.tags, "time": time}
        row.update(aggregate(results, self.names))
        self.rows.append(row)
        return row

    def frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows)
