"""Reading irace run results for STN-i.

An experiment directory holds one sub-directory per tuning run. Each run
directory contains three tab-separated tables exported from the irace log:

- ``configurations.tsv``: ``ID``, ``PARENT`` and one column per parameter
  (empty or ``NA`` when a conditional parameter is inactive).
- ``iterations.tsv``: ``ITERATION``, ``ID``, ``ELITE``: which configurations
  were raced in each iteration and whether they ended it as elites.
- ``experiments.tsv``: ``ID``, ``INSTANCE``, ``VALUE``: one quality
  measurement per row; ``NA`` values are dropped.

Runs are numbered from 1 in directory-name order.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pandas as pd

from .errors import SourceError, SourceReason
from .parameters import Catalog, ParameterKind
from .runs import Configuration, Iteration, ParameterValue, RunRecord


CONFIGURATIONS_FILE = "configurations.tsv"
ITERATIONS_FILE = "iterations.tsv"
EXPERIMENTS_FILE = "experiments.tsv"
RUN_FILES = (CONFIGURATIONS_FILE, ITERATIONS_FILE, EXPERIMENTS_FILE)

# irace writes its metadata columns as .ID. and .PARENT.
COLUMN_ALIASES = {".ID.": "ID", ".PARENT.": "PARENT"}
NA_TOKENS = ["", "NA", "<NA>", "NaN", "nan"]

_TRUE_TOKENS = {"TRUE", "T", "1", "YES", "ELITE"}
_FALSE_TOKENS = {"FALSE", "F", "0", "NO", "REGULAR"}


def _read_table(path: Path, run: str, required: list[str]) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False, na_values=NA_TOKENS)
    except pd.errors.EmptyDataError:
        raise SourceError(SourceReason.MISSING_FIELD, f"{path.name} is empty.", run=run) from None
    df.columns = [COLUMN_ALIASES.get(str(col).strip(), str(col).strip()) for col in df.columns]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SourceError(
            SourceReason.MISSING_FIELD,
            f"{path.name} lacks column(s): {', '.join(missing)}.\n"
            f"Found columns: {', '.join(df.columns)}",
            run=run,
        )
    return df


def _is_na(value: object) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value))


def _clean_id(value: object) -> str | None:
    if _is_na(value):
        return None
    text = str(value).strip()
    return text or None


class RunResultSource:
    """Discovers and loads the runs of one experiment.

    Args:
        input_dir: Directory with one sub-directory per run.
        catalog: Parameter catalog; it names the parameter columns to read and
            decides whether each value is a label or a number.
    """

    def __init__(self, input_dir: str | Path, catalog: Catalog) -> None:
        self.input_dir = Path(input_dir)
        self.catalog = catalog

        if not self.input_dir.exists():
            raise FileNotFoundError(
                f"Input folder not found at: {self.input_dir}\n"
                f"Expected one sub-directory per irace run."
            )
        if not self.input_dir.is_dir():
            raise ValueError(f"Input path is not a directory: {self.input_dir}")

        self.run_dirs = self._discover()
        if not self.run_dirs:
            raise SourceError(
                SourceReason.NO_RUNS,
                f"No run directories found in {self.input_dir}.\n"
                f"Each run directory must contain {', '.join(RUN_FILES)}.",
            )

    def _discover(self) -> list[Path]:
        run_dirs: list[Path] = []
        for candidate in sorted(p for p in self.input_dir.iterdir() if p.is_dir()):
            present = [name for name in RUN_FILES if (candidate / name).is_file()]
            if not present:
                continue
            if len(present) != len(RUN_FILES):
                missing = [name for name in RUN_FILES if name not in present]
                raise SourceError(
                    SourceReason.MISSING_FILE,
                    f"Missing file(s): {', '.join(missing)}.",
                    run=candidate.name,
                )
            run_dirs.append(candidate)
        return run_dirs

    def __len__(self) -> int:
        return len(self.run_dirs)

    def list_runs(self) -> list[str]:
        return [path.name for path in self.run_dirs]

    def _resolve_value(self, name: str, raw: object, run: str, config_id: str) -> ParameterValue:
        if _is_na(raw):
            return None
        spec = self.catalog[name]
        text = str(raw).strip()
        if spec.kind in (ParameterKind.CATEGORICAL, ParameterKind.ORDINAL):
            return text
        if spec.kind in (ParameterKind.INTEGER, ParameterKind.REAL):
            try:
                return float(text)
            except ValueError:
                raise SourceError(
                    SourceReason.BAD_VALUE,
                    f"Parameter '{name}' expects a number, got {text!r}.",
                    run=run,
                    configuration=config_id,
                ) from None
        raise AssertionError(f"Unhandled parameter kind {spec.kind!r}")

    def _load_configurations(self, run_dir: Path) -> dict[str, tuple[str | None, dict[str, ParameterValue]]]:
        run = run_dir.name
        df = _read_table(run_dir / CONFIGURATIONS_FILE, run, ["ID", "PARENT", *self.catalog.names])
        configurations: dict[str, tuple[str | None, dict[str, ParameterValue]]] = {}
        for row in df.to_dict(orient="records"):
            config_id = _clean_id(row["ID"])
            if config_id is None:
                raise SourceError(
                    SourceReason.MISSING_FIELD, f"{CONFIGURATIONS_FILE} has a row without ID.", run=run
                )
            if config_id in configurations:
                raise SourceError(
                    SourceReason.BAD_VALUE,
                    f"{CONFIGURATIONS_FILE} defines the configuration twice.",
                    run=run,
                    configuration=config_id,
                )
            values = {
                name: self._resolve_value(name, row[name], run, config_id) for name in self.catalog.names
            }
            configurations[config_id] = (_clean_id(row["PARENT"]), values)
        return configurations

    def _load_qualities(self, run_dir: Path) -> dict[str, list[float]]:
        run = run_dir.name
        df = _read_table(run_dir / EXPERIMENTS_FILE, run, ["ID", "VALUE"])
        qualities: dict[str, list[float]] = {}
        for row in df.to_dict(orient="records"):
            config_id = _clean_id(row["ID"])
            if config_id is None or _is_na(row["VALUE"]):
                continue
            try:
                value = float(row["VALUE"])
            except ValueError:
                raise SourceError(
                    SourceReason.BAD_VALUE,
                    f"{EXPERIMENTS_FILE} holds a non-numeric VALUE {row['VALUE']!r}.",
                    run=run,
                    configuration=config_id,
                ) from None
            qualities.setdefault(config_id, []).append(value)
        return qualities

    def _load_iterations(self, run_dir: Path) -> dict[int, list[tuple[str, bool]]]:
        run = run_dir.name
        df = _read_table(run_dir / ITERATIONS_FILE, run, ["ITERATION", "ID", "ELITE"])
        iterations: dict[int, list[tuple[str, bool]]] = {}
        for row in df.to_dict(orient="records"):
            config_id = _clean_id(row["ID"])
            try:
                index = int(float(row["ITERATION"]))
            except (TypeError, ValueError):
                raise SourceError(
                    SourceReason.BAD_VALUE,
                    f"{ITERATIONS_FILE} holds a non-numeric ITERATION {row['ITERATION']!r}.",
                    run=run,
                ) from None
            if config_id is None:
                raise SourceError(
                    SourceReason.MISSING_FIELD,
                    f"{ITERATIONS_FILE} has a row without ID in iteration {index}.",
                    run=run,
                )
            flag = "" if _is_na(row["ELITE"]) else str(row["ELITE"]).strip().upper()
            if flag in _TRUE_TOKENS:
                elite = True
            elif flag in _FALSE_TOKENS:
                elite = False
            else:
                raise SourceError(
                    SourceReason.BAD_VALUE,
                    f"ELITE must be TRUE or FALSE in iteration {index}, got {row['ELITE']!r}.",
                    run=run,
                    configuration=config_id,
                )
            iterations.setdefault(index, []).append((config_id, elite))
        return iterations

    def load_run(self, run_id: int) -> RunRecord:
        """Load the run numbered ``run_id`` (1-based)."""
        if not 1 <= run_id <= len(self.run_dirs):
            raise IndexError(f"run_id {run_id} out of range 1..{len(self.run_dirs)}")
        run_dir = self.run_dirs[run_id - 1]
        run = run_dir.name

        configurations = self._load_configurations(run_dir)
        qualities = self._load_qualities(run_dir)
        membership = self._load_iterations(run_dir)

        iterations: list[Iteration] = []
        for index in sorted(membership):
            members: list[Configuration] = []
            elites: set[str] = set()
            for config_id, elite in membership[index]:
                if config_id not in configurations:
                    raise SourceError(
                        SourceReason.UNKNOWN_CONFIGURATION,
                        f"Iteration {index} references a configuration missing from "
                        f"{CONFIGURATIONS_FILE}.",
                        run=run,
                        configuration=config_id,
                    )
                if not qualities.get(config_id):
                    raise SourceError(
                        SourceReason.NO_MEASUREMENTS,
                        f"No quality measurement in {EXPERIMENTS_FILE}.",
                        run=run,
                        configuration=config_id,
                    )
                parent_id, values = configurations[config_id]
                try:
                    config = Configuration(
                        config_id=config_id,
                        parent_id=parent_id,
                        values=values,
                        qualities=tuple(qualities[config_id]),
                    )
                except SourceError as exc:
                    raise exc.with_run(run) from exc
                members.append(config)
                if elite:
                    elites.add(config_id)
            try:
                iterations.append(Iteration(index=index, configurations=tuple(members), elite_ids=frozenset(elites)))
            except SourceError as exc:
                raise exc.with_run(run) from exc

        return RunRecord(run_id=run_id, label=run, iterations=tuple(iterations))

    def iter_runs(self) -> Iterator[RunRecord]:
        for run_id in range(1, len(self.run_dirs) + 1):
            yield self.load_run(run_id)

    def load_runs(self) -> list[RunRecord]:
        """Load every run; any invalid run aborts the whole load."""
        return list(self.iter_runs())
