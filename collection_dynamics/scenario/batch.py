"""Parameter sweeps over seeds, device counts and speeds."""

from __future__ import annotations

import itertools
import logging
from typing import Iterable, Sequence

import pandas as pd

from ..simulation.engine import SimulationEngine
from ..simulation.metrics import MetricsRecorder
from .config import END_TIME, RUNS, ScenarioConfig
from .program import CollectionProgram

logger = logging.getLogger(__name__)

DEFAULT_DEVICES = (100, 400, 700, 1000)
DEFAULT_SPEEDS = (0.0, 1.0, 2.0)


def make_parameters(
    seeds: Iterable[int] = range(RUNS),
    devices: Iterable[int] = DEFAULT_DEVICES,
    speeds: Iterable[float] = DEFAULT_SPEEDS,
    end_time: int = END_TIME,
) -> list[ScenarioConfig]:
    """Cartesian product of the swept parameters."""
    return [
        ScenarioConfig(devices=d, speed=v, seed=s, end_time=end_time)
        for s, d, v in itertools.product(seeds, devices, speeds)
    ]


def run_scenario(
    config: ScenarioConfig,
    program: CollectionProgram | None = None,
) -> pd.DataFrame:
    """Run one scenario from time 0 to ``end_time`` included.

    Returns one row of network-wide metrics per round, tagged with the run
    parameters.
    """
    program = program or CollectionProgram()
    engine = SimulationEngine(config.build_network(), program, seed=config.seed,
                              keep_history=False)
    recorder = MetricsRecorder(
        seed=config.seed, devices=config.devices, speed=config.speed,
    )
    engine.run(config.end_time + 1, on_round=recorder)
    return recorder.frame()


def run_batch(
    params: Sequence[ScenarioConfig],
    program: CollectionProgram | None = None,
) -> pd.DataFrame:
    """Run every scenario in *params* and concatenate their metrics."""
    frames = []
    for i, config in enumerate(params, start=1):
        logger.info(
            "run %d/%d: seed=%d devices=%d speed=%g",
            i, len(params), config.seed, config.devices, config.speed,
        )
        frames.append(run_scenario(config, program))
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def final_rows(frame: pd.DataFrame, end_time: int = END_TIME) -> pd.DataFrame:
    """Rows at the last simulated time, where the maxima are compared."""
    return frame[frame["time"] == end_time]


def mean_by(frame: pd.DataFrame, *keys: str) -> pd.DataFrame:
    """Average the metrics over runs, grouping by *keys*."""
    return frame.drop(columns=["seed"], errors="ignore").groupby(list(keys)).mean().reset_index()
