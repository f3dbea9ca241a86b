"""Error types raised while building an STN-i network.

Every error carries a ``reason`` plus whatever context identifies the offending
input (parameter name, run, configuration), and all of them derive from
``ValueError`` so callers that only care about bad input can catch one class.
"""

from __future__ import annotations

from enum import Enum


class ParseReason(str, Enum):
    MISSING_COLUMN = "MissingColumn"
    EMPTY = "Empty"
    DUPLICATE_NAME = "DuplicateName"
    MISMATCHED_DOMAIN = "MismatchedDomain"
    MALFORMED_LOCATION = "MalformedLocation"
    BAD_RANGE = "BadRange"
    BAD_DISCRETIZATION = "BadDiscretization"
    BAD_CONDITIONAL = "BadConditional"
    UNKNOWN_TYPE = "UnknownType"


class DomainReason(str, Enum):
    OUT_OF_RANGE = "OutOfRange"
    NON_FINITE = "NonFinite"
    BAD_STEP = "BadStep"


class SourceReason(str, Enum):
    NO_RUNS = "NoRuns"
    MISSING_FILE = "MissingFile"
    MISSING_FIELD = "MissingField"
    BAD_VALUE = "BadValue"
    UNKNOWN_CONFIGURATION = "UnknownConfiguration"
    BAD_ITERATIONS = "BadIterations"
    NO_MEASUREMENTS = "NoMeasurements"


class STNError(ValueError):
    """Base class for all STN-i input errors.

    Attributes:
        reason: Machine-readable cause.
        detail: The message without the identifying context.
    """

    def __init__(self, reason: Enum, detail: str, context: list[str] | None = None) -> None:
        self.reason = reason
        self.detail = detail
        message = f"{', '.join(context)}: {detail}" if context else detail
        super().__init__(f"[{reason.value}] {message}")


class ParseError(STNError):
    """Malformed parameter definitions."""

    def __init__(self, reason: ParseReason, detail: str, parameter: str | None = None) -> None:
        self.parameter = parameter
        context = [f"parameter '{parameter}'"] if parameter is not None else None
        super().__init__(reason, detail, context)


class DomainError(STNError):
    """A parameter value that cannot be turned into a location segment."""

    def __init__(
        self,
        reason: DomainReason,
        detail: str,
        parameter: str | None = None,
        run: str | None = None,
        configuration: str | None = None,
    ) -> None:
        self.parameter = parameter
        self.run = run
        self.configuration = configuration
        context = []
        if run is not None:
            context.append(f"run '{run}'")
        if configuration is not None:
            context.append(f"configuration {configuration}")
        if parameter is not None:
            context.append(f"parameter '{parameter}'")
        super().__init__(reason, detail, context)

    def with_context(self, run: str | None = None, configuration: str | None = None) -> DomainError:
        """Return a copy of this error that also names the run and configuration."""
        return DomainError(
            self.reason,
            self.detail,
            parameter=self.parameter,
            run=run,
            configuration=configuration,
        )


class SourceError(STNError):
    """Run results that are missing or incomplete."""

    def __init__(
        self,
        reason: SourceReason,
        detail: str,
        run: str | None = None,
        configuration: str | None = None,
    ) -> None:
        self.run = run
        self.configuration = configuration
        context = []
        if run is not None:
            context.append(f"run '{run}'")
        if configuration is not None:
            context.append(f"configuration {configuration}")
        super().__init__(reason, detail, context)

    def with_run(self, run: str) -> SourceError:
        if self.run is not None:
            return self
        return SourceError(self.reason, self.detail, run=run, configuration=self.configuration)
