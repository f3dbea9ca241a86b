"""Per-location aggregation across all runs of an experiment.

Pass 1 feeds every configuration's quality samples, elite flag and type into a
single table keyed by location code. Once every run has been ingested the table
is frozen: each location's pool is reduced to one fitness string and the table
becomes read-only for Pass 2.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

from .config import DEFAULT_TYPE_PRIORITY, Criteria
from .runs import EliteStatus, NodeType


def select_quality(samples: Sequence[float], criteria: Criteria | str) -> float:
    """Reduce a pool of quality samples to a single value.

    ``mode`` returns the most frequent value; when several values share the
    highest count the smallest of them wins.

    Raises:
        ValueError: If ``samples`` is empty.
    """
    criteria = Criteria(criteria)
    if len(samples) == 0:
        raise ValueError("Cannot select a quality from an empty sample pool.")
    # Sorting makes floating point reductions independent of ingestion order.
    pool = np.sort(np.asarray(samples, dtype=float))
    if criteria is Criteria.MIN:
        return float(pool[0])
    if criteria is Criteria.MAX:
        return float(pool[-1])
    if criteria is Criteria.MEAN:
        return float(np.mean(pool))
    if criteria is Criteria.MEDIAN:
        return float(np.median(pool))
    if criteria is Criteria.MODE:
        unique, counts = np.unique(pool, return_counts=True)
        return float(unique[int(np.argmax(counts))])
    raise AssertionError(f"Unhandled criteria {criteria!r}")


def format_quality(value: float, significance: int) -> str:
    """Round to ``significance`` decimals and render with exactly that many digits."""
    rounded = round(value, significance)
    return f"{rounded:.{significance}f}"


@dataclass(slots=True)
class LocationRecord:
    samples: list[float]
    elite: EliteStatus
    node_type: NodeType
    fitness: str | None = field(default=None)


class LocationAggregator:
    """Accumulates quality samples, elite status and type per location.

    Args:
        type_priority: START/STANDARD/END from lowest to highest rank. A location
            switches to an incoming type only when its rank is strictly higher.
        original_elite: Keep the first elite flag seen instead of upgrading to
            ELITE; edges then report their own configuration's flag.
        original_type: Keep the first type seen instead of resolving by rank.
    """

    def __init__(
        self,
        type_priority: Iterable[str | NodeType] = DEFAULT_TYPE_PRIORITY,
        original_elite: bool = False,
        original_type: bool = False,
    ) -> None:
        priority = [NodeType(t) for t in type_priority]
        if sorted(priority, key=lambda t: t.value) != sorted(NodeType, key=lambda t: t.value):
            raise ValueError(
                "type_priority must list START, STANDARD and END exactly once, "
                f"got {[t.value for t in priority]}."
            )
        self._rank = {node_type: rank for rank, node_type in enumerate(priority)}
        self.original_elite = original_elite
        self.original_type = original_type
        self._records: dict[str, LocationRecord] = {}
        self._lock = threading.Lock()
        self._frozen = False
        self.criteria: Criteria | None = None
        self.significance: int | None = None

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, location: object) -> bool:
        return location in self._records

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def locations(self) -> list[str]:
        return sorted(self._records)

    def rank(self, node_type: NodeType) -> int:
        return self._rank[node_type]

    def add(
        self,
        location: str,
        samples: Iterable[float],
        elite: EliteStatus,
        node_type: NodeType,
    ) -> None:
        """Merge one configuration's samples and labels into ``location``."""
        incoming = [float(s) for s in samples]
        with self._lock:
            if self._frozen:
                raise RuntimeError(
                    f"Cannot add samples to location {location!r}: the aggregator is frozen."
                )
            record = self._records.get(location)
            if record is None:
                self._records[location] = LocationRecord(incoming, elite, node_type)
                return
            record.samples.extend(incoming)
            if not self.original_elite and elite is EliteStatus.ELITE:
                record.elite = EliteStatus.ELITE
            if not self.original_type and self._rank[node_type] > self._rank[record.node_type]:
                record.node_type = node_type

    def freeze(self, criteria: Criteria | str, significance: int) -> None:
        """Compute every location's fitness and make the table read-only."""
        criteria = Criteria(criteria)
        with self._lock:
            if self._frozen:
                raise RuntimeError("The aggregator has already been frozen.")
            for location, record in self._records.items():
                if not record.samples:
                    raise RuntimeError(
                        f"Location {location!r} has an empty sample pool; every located "
                        f"configuration must contribute at least one measurement."
                    )
                record.fitness = format_quality(select_quality(record.samples, criteria), significance)
            self.criteria = criteria
            self.significance = significance
            self._frozen = True

    def _frozen_record(self, location: str) -> LocationRecord:
        if not self._frozen:
            raise RuntimeError(
                "Location results are not final until every run has been ingested; "
                "call freeze() first."
            )
        try:
            return self._records[location]
        except KeyError:
            raise RuntimeError(f"Location {location!r} was never ingested.") from None

    def fitness(self, location: str) -> str:
        fitness = self._frozen_record(location).fitness
        assert fitness is not None
        return fitness

    def elite(self, location: str) -> EliteStatus:
        return self._frozen_record(location).elite

    def node_type(self, location: str) -> NodeType:
        return self._frozen_record(location).node_type

    def samples(self, location: str) -> tuple[float, ...]:
        return tuple(self._frozen_record(location).samples)
