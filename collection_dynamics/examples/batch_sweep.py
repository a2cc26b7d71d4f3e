"""Batch comparison of the collection strategies.

Sweeps seeds, device counts and speeds, then plots the collected values over
time for every speed and device count, and the maxima reached at the end of
the runs against speed, device count, estimated diameter and diameter times
devices.
"""

from __future__ import annotations

import matplotlib.pyplot as plt

from ..logging_setup import setup_logging
from ..scenario.batch import final_rows, make_parameters, run_batch
from ..visualization.renderer import plot_batch_final, plot_batch_time


def main(runs: int = 10) -> None:
    setup_logging()
    params = make_parameters(seeds=range(runs), devices=(100, 400),
                             speeds=(0.0, 1.0, 2.0))
    frame = run_batch(params)
    frame.to_csv("batch.csv", index=False)

    plot_batch_time(frame).savefig("batch_time.png", dpi=150)
    plot_batch_final(final_rows(frame)).savefig("batch_final.png", dpi=150)
    plt.show()


if __name__ == "__main__":
    main()
