"""Parameter domain catalog for STN-i.

The catalog is built once from the parameter definitions table that accompanies
an irace scenario and is read-only afterwards. Each row of the table describes
one tunable parameter:

- NAME: parameter name, matching the run result columns.
- CONDITIONAL: whether the parameter can be inactive (TRUE|FALSE).
- TYPE: c (categorical), o (ordinal), i (integer) or r (real).
- VALUES_ARRAY: ``(a,b,c)`` allowed values for c/o, ``(min,max)`` for i/r.
- LOCATIONS_ARRAY: ``(a:1,b:2,c:3)`` value-to-code pairs for c/o,
  ``(step,significance)`` discretization for i/r.

Row order is significant: it is the order in which location segments are
concatenated.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

import pandas as pd

from .errors import ParseError, ParseReason


REQUIRED_COLUMNS = ["NAME", "CONDITIONAL", "TYPE", "VALUES_ARRAY", "LOCATIONS_ARRAY"]

_TRUE_TOKENS = {"true", "t", "1", "yes", "y"}
_FALSE_TOKENS = {"false", "f", "0", "no", "n"}


class ParameterKind(str, Enum):
    CATEGORICAL = "c"
    ORDINAL = "o"
    INTEGER = "i"
    REAL = "r"

    @property
    def is_numeric(self) -> bool:
        return self in (ParameterKind.INTEGER, ParameterKind.REAL)


@dataclass(frozen=True, slots=True)
class CategoricalDomain:
    """Allowed labels of a categorical or ordinal parameter and their codes."""

    values: tuple[str, ...]
    codes: Mapping[str, int]

    @property
    def max_code(self) -> int:
        return max(self.codes.values())


@dataclass(frozen=True, slots=True)
class NumericDomain:
    """Range and discretization of an integer or real parameter.

    ``step`` is the width of one sub-range and ``significance`` the number of
    decimals kept from the sub-range's lower bound.
    """

    minimum: float
    maximum: float
    step: float
    significance: float


Domain = CategoricalDomain | NumericDomain


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    name: str
    conditional: bool
    kind: ParameterKind
    domain: Domain


@dataclass(frozen=True)
class Catalog:
    """Ordered, immutable collection of parameter specifications."""

    specs: tuple[ParameterSpec, ...]
    _index: Mapping[str, ParameterSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_index", MappingProxyType({spec.name: spec for spec in self.specs})
        )

    def __iter__(self) -> Iterator[ParameterSpec]:
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __getitem__(self, name: str) -> ParameterSpec:
        return self._index[name]

    @property
    def names(self) -> list[str]:
        return [spec.name for spec in self.specs]


def _clean_items(cell: object) -> list[str]:
    """Strip the wrapping parentheses of a list cell and split it on commas."""
    if cell is None or (isinstance(cell, float) and math.isnan(cell)):
        return []
    text = str(cell).replace("(", "").replace(")", "").strip()
    if not text:
        return []
    return [item.strip() for item in text.split(",")]


def _parse_bool(cell: object, name: str) -> bool:
    token = str(cell).strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    raise ParseError(
        ParseReason.BAD_CONDITIONAL,
        f"CONDITIONAL must be TRUE or FALSE, got {cell!r}.",
        parameter=name,
    )


def _parse_numbers(items: list[str], reason: ParseReason, what: str, name: str) -> list[float]:
    if len(items) != 2:
        raise ParseError(
            reason,
            f"{what} must hold exactly two values, got {len(items)} ({', '.join(items) or 'none'}).",
            parameter=name,
        )
    try:
        return [float(item) for item in items]
    except ValueError:
        raise ParseError(
            reason,
            f"{what} must be numeric, got ({', '.join(items)}).",
            parameter=name,
        ) from None


def _parse_categorical(name: str, values_cell: object, locations_cell: object) -> CategoricalDomain:
    values = _clean_items(values_cell)
    pairs = _clean_items(locations_cell)
    codes: dict[str, int] = {}
    for pair in pairs:
        parts = pair.split(":")
        if len(parts) != 2:
            raise ParseError(
                ParseReason.MALFORMED_LOCATION,
                f"LOCATIONS_ARRAY entries must look like 'value:code', got {pair!r}.",
                parameter=name,
            )
        label, raw_code = parts[0].strip(), parts[1].strip()
        try:
            code_float = float(raw_code)
        except ValueError:
            code_float = math.nan
        if not math.isfinite(code_float) or code_float != int(code_float) or code_float < 0:
            raise ParseError(
                ParseReason.MALFORMED_LOCATION,
                f"Location code for {label!r} must be a non-negative integer, got {raw_code!r}.",
                parameter=name,
            )
        if label in codes:
            raise ParseError(
                ParseReason.MALFORMED_LOCATION,
                f"LOCATIONS_ARRAY assigns a code to {label!r} more than once.",
                parameter=name,
            )
        codes[label] = int(code_float)
    if len(values) != len(pairs) or not values:
        raise ParseError(
            ParseReason.MISMATCHED_DOMAIN,
            f"VALUES_ARRAY has {len(values)} entries but LOCATIONS_ARRAY has {len(pairs)}.",
            parameter=name,
        )
    return CategoricalDomain(values=tuple(values), codes=MappingProxyType(codes))


def _parse_numeric(name: str, values_cell: object, locations_cell: object) -> NumericDomain:
    minimum, maximum = _parse_numbers(
        _clean_items(values_cell), ParseReason.BAD_RANGE, "VALUES_ARRAY (min,max)", name
    )
    step, significance = _parse_numbers(
        _clean_items(locations_cell),
        ParseReason.BAD_DISCRETIZATION,
        "LOCATIONS_ARRAY (step,significance)",
        name,
    )
    # Non-finite numbers are let through here and rejected when encoding.
    if math.isfinite(significance) and (significance < 0 or significance != int(significance)):
        raise ParseError(
            ParseReason.BAD_DISCRETIZATION,
            f"significance must be a non-negative integer, got {significance:g}.",
            parameter=name,
        )
    return NumericDomain(minimum=minimum, maximum=maximum, step=step, significance=significance)


def parse_definition(row: Mapping[str, object]) -> ParameterSpec:
    """Turn one definitions row into a :class:`ParameterSpec`."""
    name = str(row["NAME"]).strip()
    conditional = _parse_bool(row["CONDITIONAL"], name)
    type_code = str(row["TYPE"]).strip().lower()
    try:
        kind = ParameterKind(type_code)
    except ValueError:
        raise ParseError(
            ParseReason.UNKNOWN_TYPE,
            f"Unknown parameter type {row['TYPE']!r}; expected one of c, o, i, r.",
            parameter=name,
        ) from None

    if kind in (ParameterKind.CATEGORICAL, ParameterKind.ORDINAL):
        domain: Domain = _parse_categorical(name, row["VALUES_ARRAY"], row["LOCATIONS_ARRAY"])
    elif kind in (ParameterKind.INTEGER, ParameterKind.REAL):
        domain = _parse_numeric(name, row["VALUES_ARRAY"], row["LOCATIONS_ARRAY"])
    else:  # pragma: no cover - ParameterKind has exactly four members
        raise AssertionError(f"Unhandled parameter kind {kind!r}")
    return ParameterSpec(name=name, conditional=conditional, kind=kind, domain=domain)


def parse_definitions(rows: Iterable[Mapping[str, object]] | pd.DataFrame) -> Catalog:
    """Build a catalog from definition rows, keeping their order.

    Args:
        rows: A DataFrame with the five definition columns, or any iterable of
            mappings keyed by those column names.

    Returns:
        The catalog, in row order.

    Raises:
        ParseError: On a missing column, an empty table, a duplicated name or any
            malformed row.
    """
    if isinstance(rows, pd.DataFrame):
        missing = [col for col in REQUIRED_COLUMNS if col not in rows.columns]
        if missing:
            raise ParseError(
                ParseReason.MISSING_COLUMN,
                f"Parameter definitions lack column(s): {', '.join(missing)}.\n"
                f"Expected header: {';'.join(REQUIRED_COLUMNS)}",
            )
        records: list[Mapping[str, object]] = rows.to_dict(orient="records")
    else:
        records = list(rows)
        for record in records:
            missing = [col for col in REQUIRED_COLUMNS if col not in record]
            if missing:
                raise ParseError(
                    ParseReason.MISSING_COLUMN,
                    f"Parameter definition row lacks field(s): {', '.join(missing)}.",
                )

    if not records:
        raise ParseError(ParseReason.EMPTY, "Parameter definitions contain no rows.")

    specs: list[ParameterSpec] = []
    seen: set[str] = set()
    for record in records:
        spec = parse_definition(record)
        if spec.name in seen:
            raise ParseError(
                ParseReason.DUPLICATE_NAME,
                "Parameter is defined more than once.",
                parameter=spec.name,
            )
        seen.add(spec.name)
        specs.append(spec)
    return Catalog(specs=tuple(specs))


def read_parameters_file(path: str | Path, sep: str = ";") -> Catalog:
    """Read and parse a parameter definitions file.

    Args:
        path: Location of the definitions table.
        sep: Field separator; irace scenario tables are usually semicolon separated.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ParseError: If the table is malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(
            f"Parameters file not found at: {path}\n"
            f"Pass the definitions table with --parameters."
        )
    try:
        df = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        raise ParseError(ParseReason.EMPTY, f"Parameters file is empty: {path}") from None
    df.columns = [str(col).strip().upper() for col in df.columns]
    return parse_definitions(df)
