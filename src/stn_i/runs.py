"""Run data structures for STN-i."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .errors import SourceError, SourceReason

ParameterValue = str | float | None


class EliteStatus(str, Enum):
    ELITE = "ELITE"
    REGULAR = "REGULAR"


class NodeType(str, Enum):
    START = "START"
    STANDARD = "STANDARD"
    END = "END"


@dataclass(frozen=True, slots=True)
class Configuration:
    """One candidate configuration as seen in one tuning iteration.

    Attributes:
        config_id: Identifier assigned by the tuner, unique within a run.
        parent_id: Identifier of the configuration it was sampled from, or None
            for configurations of the initial population.
        values: Parameter name to value; None marks an inactive conditional
            parameter. Labels for categorical/ordinal parameters, numbers for
            integer/real ones.
        qualities: Every quality measurement recorded for the configuration.
    """

    config_id: str
    parent_id: str | None
    values: Mapping[str, ParameterValue]
    qualities: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "config_id", str(self.config_id))
        if self.parent_id is not None:
            object.__setattr__(self, "parent_id", str(self.parent_id))
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        qualities = tuple(float(q) for q in self.qualities)
        if not qualities:
            raise SourceError(
                SourceReason.NO_MEASUREMENTS,
                "Configuration has no quality measurement.\n"
                "Every raced configuration must be evaluated at least once.",
                configuration=self.config_id,
            )
        if not all(math.isfinite(q) for q in qualities):
            raise SourceError(
                SourceReason.BAD_VALUE,
                f"Quality measurements must be finite, got {qualities}.",
                configuration=self.config_id,
            )
        object.__setattr__(self, "qualities", qualities)


@dataclass(frozen=True, slots=True)
class Iteration:
    """Configurations raced in one iteration plus the ids of its elites."""

    index: int
    configurations: tuple[Configuration, ...]
    elite_ids: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "configurations", tuple(self.configurations))
        object.__setattr__(self, "elite_ids", frozenset(str(e) for e in self.elite_ids))
        ids = [c.config_id for c in self.configurations]
        if len(set(ids)) != len(ids):
            duplicated = sorted({i for i in ids if ids.count(i) > 1})
            raise SourceError(
                SourceReason.BAD_ITERATIONS,
                f"Iteration {self.index} lists configuration(s) {', '.join(duplicated)} more than once.",
            )

    def is_elite(self, config_id: str) -> bool:
        return config_id in self.elite_ids


@dataclass(frozen=True, slots=True)
class RunRecord:
    """All iterations of one tuning run.

    ``run_id`` is the 1-based position of the run among all runs of the
    experiment; ``label`` names the run in messages (usually its directory).
    """

    run_id: int
    label: str
    iterations: tuple[Iteration, ...]

    def __post_init__(self) -> None:
        iterations = tuple(self.iterations)
        object.__setattr__(self, "iterations", iterations)
        if not iterations:
            raise SourceError(
                SourceReason.BAD_ITERATIONS,
                "Run contains no iteration.",
                run=self.label,
            )
        indices = [it.index for it in iterations]
        expected = list(range(1, len(iterations) + 1))
        if indices != expected:
            raise SourceError(
                SourceReason.BAD_ITERATIONS,
                f"Iterations must be numbered 1..{len(iterations)} in order, got {indices}.",
                run=self.label,
            )

    @property
    def total_iterations(self) -> int:
        return len(self.iterations)
