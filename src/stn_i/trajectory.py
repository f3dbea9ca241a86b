"""Pass 1 of the STN-i construction: locate and classify every configuration.

For a run with N iterations each configuration gets:

- a type: START in iteration 1, END in iteration N, STANDARD otherwise. A run
  with a single iteration is START, since the first-iteration rule is applied
  first.
- an elite flag: ELITE when its id is among that iteration's elites.
- a location: the encoder's code for its parameter values.

The per-iteration records are kept for Pass 2 and the configuration's quality
samples are forwarded to the shared :class:`LocationAggregator`.
"""

from __future__ import annotations

from dataclasses import dataclass

from .aggregator import LocationAggregator
from .encoder import encode_location
from .errors import DomainError
from .parameters import Catalog
from .runs import EliteStatus, NodeType, RunRecord


@dataclass(frozen=True, slots=True)
class ConfigRecord:
    config_id: str
    location: str
    elite: EliteStatus
    node_type: NodeType
    parent_id: str | None


@dataclass(frozen=True, slots=True)
class RunTrajectory:
    """Pass 1 output for one run.

    ``iterations[k]`` maps configuration id to its record for iteration ``k + 1``,
    in the order the configurations were listed.
    """

    run_id: int
    label: str
    iterations: tuple[dict[str, ConfigRecord], ...]

    @property
    def total_iterations(self) -> int:
        return len(self.iterations)


def classify_type(iteration: int, total_iterations: int) -> NodeType:
    if iteration == 1:
        return NodeType.START
    if iteration == total_iterations:
        return NodeType.END
    return NodeType.STANDARD


def collect_run(run: RunRecord, catalog: Catalog, aggregator: LocationAggregator) -> RunTrajectory:
    """Locate every configuration of ``run`` and feed the aggregator.

    Raises:
        DomainError: If a configuration cannot be encoded; the error names the
            run and configuration. Nothing is skipped silently.
    """
    total = run.total_iterations
    iterations: list[dict[str, ConfigRecord]] = []
    for iteration in run.iterations:
        node_type = classify_type(iteration.index, total)
        records: dict[str, ConfigRecord] = {}
        for config in iteration.configurations:
            try:
                location = encode_location(config.values, catalog)
            except DomainError as exc:
                raise exc.with_context(
                    run=run.label,
                    configuration=f"{config.config_id} (iteration {iteration.index})",
                ) from exc
            elite = EliteStatus.ELITE if iteration.is_elite(config.config_id) else EliteStatus.REGULAR
            aggregator.add(location, config.qualities, elite, node_type)
            records[config.config_id] = ConfigRecord(
                config_id=config.config_id,
                location=location,
                elite=elite,
                node_type=node_type,
                parent_id=config.parent_id,
            )
        iterations.append(records)
    return RunTrajectory(run_id=run.run_id, label=run.label, iterations=tuple(iterations))
