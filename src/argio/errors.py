"""Structured error types for definition-time/runtime separation."""

from __future__ import annotations

from dataclasses import dataclass

from .parser import ParseError


class ArgioError(Exception):
    """Base class for structured argio errors."""


class ArgioDefinitionError(ArgioError):
    """Contract violation detected while deriving plans, before any I/O."""


@dataclass(frozen=True)
class MalformedShapeError(ArgioDefinitionError):
    """A parameter annotation does not match the shape grammar."""

    message: str
    parameter: str | None = None
    source: str | None = None
    start: int | None = None
    end: int | None = None

    @classmethod
    def from_parse_error(cls, err: ParseError, *, parameter: str | None, source: str) -> "MalformedShapeError":
        return cls(
            message=str(err),
            parameter=parameter,
            source=source,
            start=err.start,
            end=err.end,
        )

    def __str__(self) -> str:
        where = f"parameter {self.parameter!r}: " if self.parameter is not None else ""
        shape = f" in shape {self.source!r}" if self.source is not None else ""
        return f"{where}{self.message}{shape}"


@dataclass(frozen=True)
class NotDisplayableError(ArgioDefinitionError):
    """The return type has no native text form and no wrapper was given."""

    function: str
    annotation: str

    def __str__(self) -> str:
        return (
            f"return type {self.annotation!r} of {self.function!r} has no native display; "
            "pass output=<wrapper> or return a displayable value"
        )


@dataclass(frozen=True)
class InvalidHeaderTemplateError(ArgioDefinitionError):
    message: str
    template: str

    def __str__(self) -> str:
        return f"Invalid multicase format {self.template!r}: {self.message}"


class ArgioRuntimeError(ArgioError):
    """Failure while executing a plan against real input."""


@dataclass(frozen=True)
class InputExhaustedError(ArgioRuntimeError):
    expected: str
    position: int

    def __str__(self) -> str:
        return f"input exhausted at token {self.position}; expected {self.expected}"


@dataclass(frozen=True)
class TypeMismatchError(ArgioRuntimeError):
    expected: str
    position: int
    found: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        where = f"token {self.position}"
        if self.line is not None:
            where += f" (line {self.line})"
        found = f"; found {self.found!r}" if self.found is not None else ""
        return f"type mismatch at {where}; expected {self.expected}{found}"


@dataclass(frozen=True)
class InvalidLengthExprError(ArgioRuntimeError):
    expression: str
    value: object = None
    parameter: str | None = None
    reason: str | None = None

    def __str__(self) -> str:
        where = f" for parameter {self.parameter!r}" if self.parameter is not None else ""
        if self.reason is not None:
            return f"length expression {self.expression!r}{where} failed: {self.reason}"
        return f"length expression {self.expression!r}{where} evaluated to {self.value!r}; expected a non-negative integer"
