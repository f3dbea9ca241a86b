"""STN-i: Search Trajectory Networks built from irace tuning runs.

An STN-i consolidates many independent runs of an iterated-racing tuner into a
single directed graph. Nodes are locations (discretized regions of parameter
space) and edges record how configurations moved between locations from one
iteration to the next.

Main Components:
    - parse_definitions / read_parameters_file: Build the parameter Catalog
    - encode_location: Map a configuration's values to its location code
    - LocationAggregator: Pool qualities, elite and type per location
    - STNAnalysis: Two-pass construction over all runs
    - RunResultSource: Load run directories from disk
    - write_stn_file: Write the tab-separated STN table

Quick Start:
    >>> from stn_i import STNAnalysis, STNConfig
    >>> from stn_i.synthetic_data import load_synthetic_experiment
    >>>
    >>> catalog, runs = load_synthetic_experiment()
    >>> result = STNAnalysis(STNConfig(criteria="mean")).run(catalog, runs)
    >>> result.edges[0].source.location
    '1XX000'
"""

from .aggregator import LocationAggregator
from .analysis import STNAnalysis, STNResult, run_stn_pipeline
from .config import STNConfig
from .data_io import RunResultSource
from .encoder import encode_location
from .errors import DomainError, ParseError, SourceError, STNError
from .parameters import Catalog, parse_definitions, read_parameters_file
from .reporting import write_stn_file

__all__ = [
    "Catalog",
    "DomainError",
    "LocationAggregator",
    "ParseError",
    "RunResultSource",
    "STNAnalysis",
    "STNConfig",
    "STNError",
    "STNResult",
    "SourceError",
    "encode_location",
    "parse_definitions",
    "read_parameters_file",
    "run_stn_pipeline",
    "write_stn_file",
]
