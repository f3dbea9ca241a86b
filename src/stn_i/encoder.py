"""Location encoding for STN-i.

A location is a discretized region of parameter space. Each parameter
contributes one fixed-width segment to the location code and the segments are
concatenated in catalog order, so two configurations share a location exactly
when every segment matches:

- Categorical/ordinal: the value's code, left-padded with zeros to the width of
  the largest code.
- Integer/real: the lower bound of the step-wide sub-range holding the value,
  scaled by ``10**significance`` and left-padded to the width of the scaled
  maximum.
- Absent value (inactive conditional) or unknown label: ``X`` repeated to the
  segment width.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from fractions import Fraction

from .errors import DomainError, DomainReason
from .parameters import Catalog, CategoricalDomain, NumericDomain, ParameterSpec

WILDCARD = "X"

def _exact(number: float) -> Fraction:
    """Exact value of the shortest decimal that reads back as ``number``.

    Sub-range arithmetic is done on these, so ``0.3`` is three tenths rather than
    the binary float just below it.
    """
    return Fraction(repr(float(number)))


def is_absent(value: object) -> bool:
    """True for values that stand for an inactive parameter."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() in ("", "NA", "<NA>")


def _check_numeric_domain(spec: ParameterSpec, domain: NumericDomain) -> int:
    """Validate a numeric domain and return its significance as an int."""
    bounds = {
        "min": domain.minimum,
        "max": domain.maximum,
        "step": domain.step,
        "significance": domain.significance,
    }
    bad = [label for label, number in bounds.items() if not math.isfinite(number)]
    if bad:
        raise DomainError(
            DomainReason.NON_FINITE,
            f"Domain is not properly defined: non-finite {', '.join(bad)}.",
            parameter=spec.name,
        )
    if domain.step <= 0:
        raise DomainError(
            DomainReason.BAD_STEP,
            f"step must be positive, got {domain.step:g}.",
            parameter=spec.name,
        )
    return int(domain.significance)


def _max_scaled(spec: ParameterSpec, domain: NumericDomain) -> int:
    significance = _check_numeric_domain(spec, domain)
    try:
        bound = abs(domain.maximum) * 10.0**significance
    except OverflowError:
        bound = math.inf
    if not math.isfinite(bound):
        raise DomainError(
            DomainReason.OUT_OF_RANGE,
            f"Maximum {domain.maximum:g} scaled by 10**{significance} exceeds the floating point range.",
            parameter=spec.name,
        )
    scaled = math.floor(_exact(domain.maximum) * 10**significance)
    if scaled < 0:
        raise DomainError(
            DomainReason.OUT_OF_RANGE,
            f"Scaled maximum {scaled} is negative; location codes cannot represent it.",
            parameter=spec.name,
        )
    return scaled


def segment_width(spec: ParameterSpec) -> int:
    """Number of characters the parameter contributes to every location code."""
    domain = spec.domain
    if isinstance(domain, CategoricalDomain):
        return len(str(domain.max_code))
    if isinstance(domain, NumericDomain):
        return len(str(_max_scaled(spec, domain)))
    raise AssertionError(f"Unhandled domain for parameter {spec.name!r}: {domain!r}")


def wildcard_segment(spec: ParameterSpec) -> str:
    return WILDCARD * segment_width(spec)


def _categorical_segment(spec: ParameterSpec, domain: CategoricalDomain, value: object) -> str:
    width = len(str(domain.max_code))
    code = domain.codes.get(str(value).strip())
    if code is None:
        return WILDCARD * width
    return str(code).zfill(width)


def _numeric_segment(spec: ParameterSpec, domain: NumericDomain, value: object) -> str:
    max_scaled = _max_scaled(spec, domain)
    width = len(str(max_scaled))
    significance = int(domain.significance)
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise DomainError(
            DomainReason.NON_FINITE,
            f"Value {value!r} is not numeric.",
            parameter=spec.name,
        ) from None
    if not math.isfinite(number):
        raise DomainError(
            DomainReason.NON_FINITE,
            f"Value {number!r} is not finite.",
            parameter=spec.name,
        )

    minimum, step = _exact(domain.minimum), _exact(domain.step)
    subrange_index = math.floor((_exact(number) - minimum) / step)
    representative = minimum + subrange_index * step
    scaled = math.floor(representative * 10**significance)
    digits = str(scaled)
    if scaled < 0 or len(digits) > width:
        raise DomainError(
            DomainReason.OUT_OF_RANGE,
            f"Value {number:g} falls outside the {width}-digit segment "
            f"(scaled maximum {max_scaled}).",
            parameter=spec.name,
        )
    return digits.zfill(width)


def encode_segment(spec: ParameterSpec, value: object) -> str:
    """Encode a single parameter value into its location segment."""
    if is_absent(value):
        return wildcard_segment(spec)
    domain = spec.domain
    if isinstance(domain, CategoricalDomain):
        return _categorical_segment(spec, domain, value)
    if isinstance(domain, NumericDomain):
        return _numeric_segment(spec, domain, value)
    raise AssertionError(f"Unhandled domain for parameter {spec.name!r}: {domain!r}")


def encode_location(values: Mapping[str, object], catalog: Catalog) -> str:
    """Map a configuration's parameter values to its location code.

    Args:
        values: Parameter name to value. Missing keys and ``None``/NaN values are
            treated as inactive; names not in the catalog are ignored.
        catalog: Parameter domains in canonical order.

    Returns:
        The concatenation of every parameter's segment, in catalog order.

    Raises:
        DomainError: If a numeric value or domain cannot be represented.
    """
    return "".join(encode_segment(spec, values.get(spec.name)) for spec in catalog)


def location_width(catalog: Catalog) -> int:
    """Total length shared by every location code built from ``catalog``."""
    return sum(segment_width(spec) for spec in catalog)
