"""Reporting utilities for the STN-i pipeline."""

from __future__ import annotations

import os
import tempfile
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import pandas as pd
from tabulate import tabulate

from .aggregator import LocationAggregator
from .network import Edge, Endpoint
from .runs import EliteStatus, NodeType


BASE_COLUMNS = [
    "Run",
    "Fitness1",
    "Solution1",
    "Elite1",
    "Type1",
    "Iteration1",
    "Fitness2",
    "Solution2",
    "Elite2",
    "Type2",
    "Iteration2",
]
ORIGINAL_COLUMNS = ["Original_Elite1", "Original_Type1", "Original_Elite2", "Original_Type2", "Path"]


def _endpoint_fields(endpoint: Endpoint) -> tuple:
    return (
        endpoint.fitness,
        endpoint.location,
        endpoint.elite.value,
        endpoint.node_type.value,
        endpoint.iteration,
    )


def edges_to_frame(edges: Iterable[Edge], extended: bool = False) -> pd.DataFrame:
    """Lay edges out as STN rows.

    Args:
        edges: Edges in emission order.
        extended: Append the configurations' own elite/type labels and the
            ``Path`` flag (True for parent -> child steps, False for self-loops).
    """
    rows = []
    for edge in edges:
        row = (edge.run_id, *_endpoint_fields(edge.source), *_endpoint_fields(edge.target))
        if extended:
            row += (
                edge.source.original_elite.value,
                edge.source.original_type.value,
                edge.target.original_elite.value,
                edge.target.original_type.value,
                "TRUE" if edge.path else "FALSE",
            )
        rows.append(row)
    columns = BASE_COLUMNS + (ORIGINAL_COLUMNS if extended else [])
    return pd.DataFrame(rows, columns=columns)


def write_stn_file(edges: Sequence[Edge], path: str | Path, extended: bool = False) -> Path:
    """Write the STN table as tab-separated text with a header row.

    The table is written to a temporary file next to ``path`` and renamed into
    place, so a failure never leaves a partial STN file behind.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame = edges_to_frame(edges, extended=extended)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            frame.to_csv(handle, sep="\t", index=False, lineterminator="\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


@dataclass(frozen=True)
class NetworkSummary:
    runs: int
    edges: int
    self_loops: int
    locations: int
    elite_locations: int
    type_counts: dict[str, int]
    best_fitness: str | None


def summarize_network(edges: Sequence[Edge], aggregator: LocationAggregator) -> NetworkSummary:
    """Collect headline numbers of a built network.

    Elite and type per location are taken from the edges' endpoints, which
    carry the configurations' own labels in original mode. A location counts as
    ELITE when any endpoint on it is, and takes its highest-ranked type.
    """
    endpoints = [e.source for e in edges] + [e.target for e in edges]
    used = sorted({p.location for p in endpoints})
    elite_used = {p.location for p in endpoints if p.elite is EliteStatus.ELITE}
    node_types: dict[str, NodeType] = {}
    for p in endpoints:
        current = node_types.get(p.location)
        if current is None or aggregator.rank(p.node_type) > aggregator.rank(current):
            node_types[p.location] = p.node_type
    type_counts = Counter(node_types[loc].value for loc in used)
    fitnesses = [float(aggregator.fitness(loc)) for loc in used]
    best = None
    if fitnesses:
        best_value = min(fitnesses)
        best = next(aggregator.fitness(loc) for loc in used if float(aggregator.fitness(loc)) == best_value)
    return NetworkSummary(
        runs=len({e.run_id for e in edges}),
        edges=len(edges),
        self_loops=sum(1 for e in edges if e.is_self_loop),
        locations=len(used),
        elite_locations=len(elite_used),
        type_counts={t.value: type_counts.get(t.value, 0) for t in NodeType},
        best_fitness=best,
    )


def format_network_summary(summary: NetworkSummary) -> str:
    rows = [
        ("Runs", summary.runs),
        ("Edges", summary.edges),
        ("Self-loops", summary.self_loops),
        ("Locations", summary.locations),
        ("ELITE locations", summary.elite_locations),
    ]
    rows.extend((f"{name} locations", count) for name, count in summary.type_counts.items())
    rows.append(("Lowest fitness", summary.best_fitness if summary.best_fitness is not None else "-"))
    return tabulate(rows, headers=["Metric", "Value"], tablefmt="github", disable_numparse=True)
