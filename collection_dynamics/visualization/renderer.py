"""Matplotlib-based 2D visualization of collection networks."""

from __future__ import annotations

from typing import Any, Iterable

import numpy as np
import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.animation import FuncAnimation

from ..simulation.engine import SimulationEngine


class FieldRenderer:
    """Renders a snapshot or animation of a collection network."""

    def __init__(self, engine: SimulationEngine) -> None:
        self.engine = engine

    def _device_positions(self) -> tuple[np.ndarray, np.ndarray, list[int]]:
        ids = sorted(self.engine.network.devices.keys())
        xs = np.array([self.engine.network.devices[i].position[0] for i in ids])
        ys = np.array([self.engine.network.devices[i].position[1] for i in ids])
        return xs, ys, ids

    def _edges(self) -> list[tuple[int, int]]:
        seen: set[tuple[int, int]] = set()
        edges: list[tuple[int, int]] = []
        for dev in self.engine.network.devices.values():
            for nid in dev.neighbors:
                pair = (min(dev.id, nid), max(dev.id, nid))
                if pair not in seen:
                    seen.add(pair)
                    edges.append((dev.id, nid))
        return edges

    def _tree_edges(self, results: dict[int, Any]) -> list[tuple[int, int]]:
        """Parent-pointer edges ``(child, parent)`` of the latest round."""
        devs = self.engine.network.devices
        return [
            (did, out["parent"])
            for did, out in results.items()
            if isinstance(out, dict)
            and out.get("parent", did) != did
            and out["parent"] in devs
        ]

    def _draw_segments(self, ax: Any, edges: Iterable[tuple[int, int]], **style: Any) -> None:
        devs = self.engine.network.devices
        for a, b in edges:
            ax.plot(
                [devs[a].position[0], devs[b].position[0]],
                [devs[a].position[1], devs[b].position[1]],
                **style,
            )

    def render_color_field(
        self,
        results: dict[int, Any],
        color_key: str,
        *,
        size_key: str = "node_size",
        title: str = "Collection",
        show_edges: bool = False,
        show_tree: bool = True,
        ax: Any = None,
    ) -> Any:
        """Draw devices with the RGB color each stored under *color_key*."""
        if ax is None:
            _fig, ax = plt.subplots(1, 1, figsize=(8, 8))

        xs, ys, ids = self._device_positions()
        colors = [results.get(i, {}).get(color_key, (0.5, 0.5, 0.5)) for i in ids]
        sizes = [results.get(i, {}).get(size_key, 12) * 4 for i in ids]

        if show_edges:
            self._draw_segments(ax, self._edges(),
                                color="lightgray", linewidth=0.5, zorder=1)
        if show_tree:
            self._draw_segments(ax, self._tree_edges(results),
                                color="dimgray", linewidth=0.8, zorder=1)

        ax.scatter(xs, ys, c=colors, s=sizes, edgecolors="black",
                   linewidths=0.5, zorder=2)
        ax.set_title(title)
        ax.set_aspect("equal")
        return ax

    def animate_color_field(
        self,
        num_rounds: int,
        color_key: str,
        *,
        title: str = "Collection Dynamics",
        interval_ms: int = 100,
    ) -> FuncAnimation:
        """Step the engine and redraw devices colored by *color_key*."""
        fig, ax = plt.subplots(1, 1, figsize=(8, 8))

        def update(frame: int) -> Any:
            self.engine.step()
            ax.clear()
            self.render_color_field(
                self.engine.results, color_key,
                title=f"{title} — Round {frame + 1}", ax=ax,
            )
            return (ax,)

        return FuncAnimation(fig, update, frames=num_rounds,
                             interval=interval_ms, blit=False)


def plot_metrics(
    frame: pd.DataFrame,
    names: Iterable[str] = ("coll_ideal", "coll_simple", "coll_filtered"),
    *,
    x: str = "time",
    title: str = "Collection",
    ax: Any = None,
) -> Any:
    """Line plot of aggregated metrics against *x*."""
    if ax is None:
        _fig, ax = plt.subplots(1, 1, figsize=(10, 5))
    for name in names:
        ax.plot(frame[x], frame[name], label=name)
    ax.set_xlabel(x)
    ax.set_title(title)
    ax.legend(loc="upper right", fontsize=8)
    return ax


def plot_batch_time(
    frame: pd.DataFrame,
    names: Iterable[str] = ("coll_ideal", "coll_simple", "coll_filtered"),
) -> Any:
    """Mean of *names* over time, one panel per speed and device count."""
    names = list(names)
    speeds = sorted(frame["speed"].unique())
    devices = sorted(frame["devices"].unique())
    over_time = (
        frame.drop(columns=["seed"], errors="ignore")
        .groupby(["speed", "devices", "time"]).mean().reset_index()
    )
    fig, axes = plt.subplots(len(speeds), len(devices), squeeze=False,
                             figsize=(8 * len(devices), 4 * len(speeds)))
    for (speed, count), group in over_time.groupby(["speed", "devices"]):
        ax = axes[speeds.index(speed)][devices.index(count)]
        plot_metrics(group, names,
                     title=f"speed {speed:g}, {count} devices", ax=ax)
    fig.tight_layout()
    return fig


def plot_batch_final(
    final: pd.DataFrame,
    names: Iterable[str] = ("coll_max_ideal", "coll_max_simple", "coll_max_filtered"),
) -> Any:
    """Mean of *names* at the end of the runs against each swept quantity.

    Panels plot against speed, device count, estimated diameter and diameter
    times devices.
    """
    names = list(names)
    runs = final.drop(columns=["seed"], errors="ignore")
    by_setup = runs.groupby(["speed", "devices"]).mean().reset_index()
    fig, axes = plt.subplots(2, 2, figsize=(16, 10))
    panels = [
        (runs.groupby("speed").mean().reset_index(), "speed"),
        (runs.groupby("devices").mean().reset_index(), "devices"),
        (by_setup.sort_values("diam"), "diam"),
        (by_setup.sort_values("diamdev"), "diamdev"),
    ]
    for ax, (data, x) in zip(axes.flat, panels):
        plot_metrics(data, names, x=x, title=f"Maximum collected by {x}", ax=ax)
    fig.tight_layout()
    return fig
