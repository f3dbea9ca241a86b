"""Configuration primitives for STN-i network generation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Criteria(str, Enum):
    """Reduction applied to a location's pooled quality samples."""

    MIN = "min"
    MAX = "max"
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"


NODE_TYPES = ("START", "STANDARD", "END")
DEFAULT_TYPE_PRIORITY = ("STANDARD", "START", "END")


def parse_type_priority(text: str) -> tuple[str, ...]:
    """Split a comma list such as ``"STANDARD,START,END"`` into a priority tuple.

    The first entry has the lowest rank. Validation of the permutation itself is
    left to :class:`STNConfig`.
    """
    return tuple(part.strip().upper() for part in text.split(",") if part.strip())


@dataclass(frozen=True, slots=True)
class STNConfig:
    """Holds the knobs of the STN-i aggregation and output.

    **Aggregation:**
    - criteria: How a location's pooled qualities collapse into one fitness
      (min, max, mean, median or mode).
    - significance: Decimal digits kept when rounding and printing fitness.
    - type_priority: Ordering of START/STANDARD/END from lowest to highest rank;
      a location keeps the highest-ranked type it was seen with.

    **Original mode:**
    - original_elite: Report each configuration's own elite flag instead of the
      location-wide (monotone) one.
    - original_type: Report each configuration's own type instead of the
      location-wide one.

    **I/O and execution:**
    - output_file: Name of the STN file written in the output directory.
    - parameters_sep: Field separator of the parameter definitions table.
    - workers: Threads used per pass; 1 processes runs sequentially.
    """

    criteria: str = "min"
    significance: int = 2
    type_priority: tuple[str, ...] = DEFAULT_TYPE_PRIORITY
    original_elite: bool = False
    original_type: bool = False
    output_file: str = "stn_i_file.txt"
    parameters_sep: str = ";"
    workers: int = 1

    def __post_init__(self) -> None:
        valid = [c.value for c in Criteria]
        if self.criteria not in valid:
            raise ValueError(
                f"Invalid criteria '{self.criteria}'.\n"
                f"Options: {', '.join(valid)}."
            )
        if isinstance(self.significance, bool) or not isinstance(self.significance, int):
            raise ValueError(f"significance must be an integer, got {self.significance!r}.")
        if self.significance < 0:
            raise ValueError(
                f"significance must be non-negative, got {self.significance}.\n"
                f"It is the number of decimals kept for fitness values."
            )
        priority = tuple(self.type_priority)
        if sorted(priority) != sorted(NODE_TYPES):
            raise ValueError(
                f"type_priority must be a permutation of {', '.join(NODE_TYPES)}, "
                f"got {', '.join(priority) or '<empty>'}."
            )
        object.__setattr__(self, "type_priority", priority)
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}.")
        if not self.output_file:
            raise ValueError("output_file must be a non-empty file name.")

    @property
    def criteria_enum(self) -> Criteria:
        return Criteria(self.criteria)

    @property
    def original_mode(self) -> bool:
        """True when either original flag is set; the output then gains extra columns."""
        return self.original_elite or self.original_type
