"""Pass 2 of the STN-i construction: emit the edges of every run.

Edges are produced per run, iteration by iteration, in configuration order:

- Iteration 1: a REGULAR configuration is a dead branch and becomes a self-loop
  (1 -> 1). An ELITE one emits nothing yet; its continuation shows up when a
  child in iteration 2 names it as parent.
- Iteration i > 1: if the parent is among iteration i-1's configurations the
  edge parent -> child (i-1 -> i) is emitted. Otherwise an ELITE configuration
  becomes a self-loop (i-1 -> i), modelling an elite that persisted across
  iterations, and a REGULAR one emits nothing.

Fitness always comes from the frozen aggregator. Elite and type come from the
aggregator too, unless the corresponding original flag asks for the
configuration's own labels.
"""

from __future__ import annotations

from dataclasses import dataclass

from .aggregator import LocationAggregator
from .runs import EliteStatus, NodeType
from .trajectory import ConfigRecord, RunTrajectory


@dataclass(frozen=True, slots=True)
class Endpoint:
    location: str
    fitness: str
    elite: EliteStatus
    node_type: NodeType
    iteration: int
    original_elite: EliteStatus
    original_type: NodeType


@dataclass(frozen=True, slots=True)
class Edge:
    run_id: int
    source: Endpoint
    target: Endpoint
    path: bool

    @property
    def is_self_loop(self) -> bool:
        return not self.path


def _endpoint(
    record: ConfigRecord,
    iteration: int,
    aggregator: LocationAggregator,
    original_elite: bool,
    original_type: bool,
) -> Endpoint:
    location = record.location
    return Endpoint(
        location=location,
        fitness=aggregator.fitness(location),
        elite=record.elite if original_elite else aggregator.elite(location),
        node_type=record.node_type if original_type else aggregator.node_type(location),
        iteration=iteration,
        original_elite=record.elite,
        original_type=record.node_type,
    )


def build_run_edges(
    trajectory: RunTrajectory,
    aggregator: LocationAggregator,
    original_elite: bool = False,
    original_type: bool = False,
) -> list[Edge]:
    """Emit the edges of one run from its Pass 1 trajectory.

    Args:
        trajectory: Pass 1 records of the run.
        aggregator: The aggregator after every run has been ingested.
        original_elite: Report each configuration's own elite flag.
        original_type: Report each configuration's own type.

    Returns:
        Edges in (iteration, configuration) order.

    Raises:
        RuntimeError: If the aggregator has not been frozen yet.
    """
    if not aggregator.frozen:
        raise RuntimeError("Edges can only be built once the aggregator is frozen.")

    def endpoint(record: ConfigRecord, iteration: int) -> Endpoint:
        return _endpoint(record, iteration, aggregator, original_elite, original_type)

    edges: list[Edge] = []
    previous: dict[str, ConfigRecord] = {}
    for iteration, current in enumerate(trajectory.iterations, start=1):
        for record in current.values():
            if iteration == 1:
                if record.elite is EliteStatus.REGULAR:
                    node = endpoint(record, 1)
                    edges.append(Edge(trajectory.run_id, node, node, path=False))
                continue

            parent = previous.get(record.parent_id) if record.parent_id is not None else None
            if parent is not None:
                edges.append(
                    Edge(
                        trajectory.run_id,
                        endpoint(parent, iteration - 1),
                        endpoint(record, iteration),
                        path=True,
                    )
                )
            elif record.elite is EliteStatus.ELITE:
                edges.append(
                    Edge(
                        trajectory.run_id,
                        endpoint(record, iteration - 1),
                        endpoint(record, iteration),
                        path=False,
                    )
                )
        previous = current
    return edges


def orphaned_regulars(trajectory: RunTrajectory) -> list[tuple[int, str]]:
    """(iteration, config id) of REGULAR configurations that emit no edge.

    These are configurations after the first iteration whose parent is not in
    the previous iteration.
    """
    orphans: list[tuple[int, str]] = []
    for iteration in range(2, trajectory.total_iterations + 1):
        previous = trajectory.iterations[iteration - 2]
        for record in trajectory.iterations[iteration - 1].values():
            if record.elite is EliteStatus.REGULAR and record.parent_id not in previous:
                orphans.append((iteration, record.config_id))
    return orphans
