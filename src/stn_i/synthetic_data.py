"""Synthetic tuning experiment for STN-i demos and tests.

The scenario tunes three parameters of an imaginary local search:

- algorithm: categorical {sa, ts, ils} with codes 1, 2, 3.
- tenure: integer in [0, 50], discretized in steps of 10; only active when
  algorithm is ts.
- alpha: real in [0, 1], discretized in steps of 0.25 with two decimals.

Two runs are provided: a three-iteration run and a two-iteration run that
revisit some of the same locations, which makes the cross-run aggregation
visible.

Example:
    >>> from stn_i.synthetic_data import load_synthetic_experiment
    >>> from stn_i.analysis import STNAnalysis
    >>>
    >>> catalog, runs = load_synthetic_experiment()
    >>> result = STNAnalysis().run(catalog, runs)
    >>> len(result.edges)
    8

Note: the data is hand-made for illustration, not the output of a real irace
run.
"""

from __future__ import annotations

from .parameters import Catalog, parse_definitions
from .runs import Configuration, Iteration, RunRecord


SYNTHETIC_DEFINITIONS = [
    {
        "NAME": "algorithm",
        "CONDITIONAL": "FALSE",
        "TYPE": "c",
        "VALUES_ARRAY": "(sa,ts,ils)",
        "LOCATIONS_ARRAY": "(sa:1,ts:2,ils:3)",
    },
    {
        "NAME": "tenure",
        "CONDITIONAL": "TRUE",
        "TYPE": "i",
        "VALUES_ARRAY": "(0,50)",
        "LOCATIONS_ARRAY": "(10,0)",
    },
    {
        "NAME": "alpha",
        "CONDITIONAL": "FALSE",
        "TYPE": "r",
        "VALUES_ARRAY": "(0,1)",
        "LOCATIONS_ARRAY": "(0.25,2)",
    },
]


def _config(config_id: str, parent: str | None, algorithm: str, tenure: float | None, alpha: float, *qualities: float) -> Configuration:
    return Configuration(
        config_id=config_id,
        parent_id=parent,
        values={"algorithm": algorithm, "tenure": tenure, "alpha": alpha},
        qualities=qualities,
    )


def _make_run_one() -> RunRecord:
    c1 = _config("1", None, "sa", None, 0.10, 120.0, 118.0)
    c2 = _config("2", None, "ts", 12, 0.60, 110.0, 112.0)
    c3 = _config("3", None, "ils", None, 0.90, 130.0)
    c4 = _config("4", "2", "ts", 17, 0.55, 104.0, 106.0)
    c5 = _config("5", "2", "ts", 33, 0.70, 108.0)
    c6 = _config("6", "4", "ts", 19, 0.52, 101.0, 103.0)
    return RunRecord(
        run_id=1,
        label="synthetic_run_1",
        iterations=(
            Iteration(1, (c1, c2, c3), frozenset({"2"})),
            Iteration(2, (c4, c5), frozenset({"4"})),
            Iteration(3, (c4, c6), frozenset({"4", "6"})),
        ),
    )


def _make_run_two() -> RunRecord:
    c1 = _config("1", None, "ts", 14, 0.58, 111.0)
    c2 = _config("2", None, "sa", None, 0.30, 125.0, 127.0)
    c3 = _config("3", "1", "ts", 11, 0.51, 102.0, 100.0)
    return RunRecord(
        run_id=2,
        label="synthetic_run_2",
        iterations=(
            Iteration(1, (c1, c2), frozenset({"1"})),
            Iteration(2, (c3,), frozenset({"3"})),
        ),
    )


def load_synthetic_catalog() -> Catalog:
    return parse_definitions(SYNTHETIC_DEFINITIONS)


def load_synthetic_experiment() -> tuple[Catalog, list[RunRecord]]:
    return load_synthetic_catalog(), [_make_run_one(), _make_run_two()]
