"""Analysis routines orchestrating the STN-i pipeline."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence, TypeVar

from tqdm import tqdm

from .aggregator import LocationAggregator
from .config import STNConfig
from .data_io import RunResultSource
from .network import Edge, build_run_edges, orphaned_regulars
from .parameters import Catalog, read_parameters_file
from .runs import RunRecord
from .trajectory import RunTrajectory, collect_run

T = TypeVar("T")
R = TypeVar("R")


def _get_verbosity() -> int:
    """Get verbosity level from environment: 0=quiet, 1=normal, 2=verbose."""
    return int(os.environ.get("STN_VERBOSITY", "1"))


@dataclass(slots=True)
class STNResult:
    config: STNConfig
    catalog: Catalog
    edges: list[Edge]
    aggregator: LocationAggregator
    trajectories: list[RunTrajectory]

    @property
    def runs(self) -> int:
        return len(self.trajectories)


class STNAnalysis:
    """Builds one STN-i network from all runs of an experiment.

    Pass 1 locates every configuration of every run and fills the location
    table; the table is then frozen and Pass 2 emits the edges. With more than
    one worker, runs inside a pass are processed on a thread pool but results
    are always gathered in run order, so the output does not depend on
    ``workers``.
    """

    def __init__(self, config: STNConfig | None = None) -> None:
        self.config = config or STNConfig()

    def _map(self, fn: Callable[[T], R], items: Sequence[T], desc: str) -> list[R]:
        disable_pbar = _get_verbosity() == 0
        if self.config.workers == 1 or len(items) <= 1:
            return [fn(item) for item in tqdm(items, desc=desc, disable=disable_pbar, leave=False)]
        with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
            # Executor.map yields in submission order; the first failure is re-raised here.
            return list(tqdm(pool.map(fn, items), total=len(items), desc=desc, disable=disable_pbar, leave=False))

    def new_aggregator(self) -> LocationAggregator:
        return LocationAggregator(
            type_priority=self.config.type_priority,
            original_elite=self.config.original_elite,
            original_type=self.config.original_type,
        )

    def run(self, catalog: Catalog, runs: Iterable[RunRecord]) -> STNResult:
        runs = list(runs)
        if not runs:
            raise ValueError("At least one run is required to build a network.")
        verbosity = _get_verbosity()
        aggregator = self.new_aggregator()

        if verbosity >= 1:
            print(f"Collecting trajectories from {len(runs)} run(s)...")
        trajectories = self._map(lambda run: collect_run(run, catalog, aggregator), runs, "Pass 1: locations")

        aggregator.freeze(self.config.criteria, self.config.significance)
        if verbosity >= 1:
            print(f"Aggregated {len(aggregator)} location(s) using '{self.config.criteria}'.")

        if verbosity >= 2:
            for trajectory in trajectories:
                orphans = orphaned_regulars(trajectory)
                if orphans:
                    listed = ", ".join(f"{cid}@{it}" for it, cid in orphans[:10])
                    more = "..." if len(orphans) > 10 else ""
                    print(
                        f"  Run {trajectory.run_id} ({trajectory.label}): {len(orphans)} REGULAR "
                        f"configuration(s) without parent emit no edge: {listed}{more}"
                    )

        if verbosity >= 1:
            print("Building edges...")
        per_run = self._map(
            lambda trajectory: build_run_edges(
                trajectory,
                aggregator,
                original_elite=self.config.original_elite,
                original_type=self.config.original_type,
            ),
            trajectories,
            "Pass 2: edges",
        )
        edges = [edge for run_edges in per_run for edge in run_edges]

        return STNResult(
            config=self.config,
            catalog=catalog,
            edges=edges,
            aggregator=aggregator,
            trajectories=trajectories,
        )


def run_stn_pipeline(
    input_dir: str | Path,
    parameters_path: str | Path,
    config: STNConfig | None = None,
) -> STNResult:
    """Read the parameter definitions and every run, then build the network.

    Definitions and runs are fully validated before any computation starts.
    """
    config = config or STNConfig()
    catalog = read_parameters_file(parameters_path, sep=config.parameters_sep)
    source = RunResultSource(input_dir, catalog)
    if _get_verbosity() >= 1:
        print(f"Loading {len(source)} run(s) from {source.input_dir}...")
    runs = source.load_runs()
    return STNAnalysis(config).run(catalog, runs)
