"""Signature derivation and dependency-ordered input planning."""

from __future__ import annotations

import inspect
import logging
import os
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Final, Union

from .ast import CountedArray, FixedArray, FunctionSignature, LengthExpr, Parameter, Scalar, Shape, Tuple, Unit
from .errors import MalformedShapeError
from .evaluator import free_names
from .parser import ParseError, parse_shape
from .scanner import scalar_type

logger = logging.getLogger(__name__)

_SHAPE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("ARGIO_SHAPE_CACHE_MAX", "256")))


@lru_cache(maxsize=_SHAPE_CACHE_MAX)
def _parse_shape_cached(source: str) -> Shape:
    return parse_shape(source)


@dataclass(frozen=True)
class ReadScalar:
    tag: str


@dataclass(frozen=True)
class Repeat:
    """Perform ``step`` ``length`` times, collecting the results in a list.

    ``length`` is ``None`` for a counted array: an ``int`` count is read from
    the input first.
    """

    step: "Step"
    length: LengthExpr | None = None
    index: str | None = None


@dataclass(frozen=True)
class Group:
    steps: tuple["Step", ...]


Step = Union[ReadScalar, Repeat, Group]


@dataclass(frozen=True)
class Bind:
    name: str
    step: Step


@dataclass(frozen=True)
class InputPlan:
    steps: tuple[Bind, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(bind.name for bind in self.steps)

    def describe(self) -> str:
        return "\n".join(f"{bind.name}: {describe_step(bind.step)}" for bind in self.steps)


def describe_step(step: Step) -> str:
    if isinstance(step, ReadScalar):
        return f"read {step.tag}"
    if isinstance(step, Repeat):
        count = "a counted number of" if step.length is None else f"({step.length.source})"
        index = f" as {step.index}" if step.index is not None else ""
        return f"repeat {count} times{index}: {describe_step(step.step)}"
    if isinstance(step, Group):
        return "(" + ", ".join(describe_step(item) for item in step.steps) + ")"
    raise TypeError(f"Unsupported plan step {type(step).__name__}")


def annotation_text(annotation: object) -> str:
    """Verbatim text of a parameter annotation.

    A shape string written under ``from __future__ import annotations``
    arrives still quoted; the quotes are removed.
    """
    if isinstance(annotation, str):
        text = annotation.strip()
        if len(text) >= 2 and text[0] == text[-1] and text[0] in {"'", '"'}:
            return text[1:-1]
        return text
    if typing.get_origin(annotation) is None and isinstance(annotation, type):
        return annotation.__name__
    return str(annotation)


def parse_annotation(name: str, annotation: object) -> Shape:
    source = annotation_text(annotation)
    try:
        return _parse_shape_cached(source)
    except ParseError as err:
        raise MalformedShapeError.from_parse_error(err, parameter=name, source=source) from err


def derive_signature(fn: Callable[..., object], *, parse_shapes: bool = True) -> FunctionSignature:
    """Read a function's declared parameters and return annotation.

    With ``parse_shapes=False`` annotations are kept only as raw text, for
    binders that interpret the declaration themselves.
    """
    name = getattr(fn, "__name__", type(fn).__name__)
    sig = inspect.signature(fn)
    parameters: list[Parameter] = []
    for param in sig.parameters.values():
        if param.kind in {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}:
            raise MalformedShapeError(message="variadic parameters cannot be bound from input", parameter=param.name)
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            raise MalformedShapeError(message="positional-only parameters cannot be bound by name", parameter=param.name)
        if param.annotation is inspect.Parameter.empty:
            raise MalformedShapeError(message="missing shape annotation", parameter=param.name)
        text = annotation_text(param.annotation)
        shape = parse_annotation(param.name, param.annotation) if parse_shapes else None
        parameters.append(Parameter(name=param.name, shape=shape, annotation=text))

    returned = sig.return_annotation
    if isinstance(returned, str):
        returned = annotation_text(returned)
    if returned is inspect.Signature.empty or returned is None or returned == "None":
        return_shape: object = Unit()
        return_text = "None"
    else:
        return_shape = returned
        return_text = annotation_text(returned)

    return FunctionSignature(
        name=name,
        parameters=tuple(parameters),
        return_shape=return_shape,
        return_annotation=return_text,
    )


@dataclass
class _Planner:
    parameter: Parameter

    def _error(self, message: str) -> None:
        raise MalformedShapeError(message=message, parameter=self.parameter.name, source=self.parameter.annotation)

    def _check_length(self, length: LengthExpr, scope: frozenset[str]) -> None:
        for ref in free_names(length.expr):
            if ref in scope:
                continue
            if ref == self.parameter.name:
                self._error(f"length expression {length.source!r} refers to the parameter itself")
            self._error(
                f"length expression {length.source!r} refers to {ref!r}, "
                "which is not a parameter declared earlier or an enclosing index"
            )

    def plan(self, shape: Shape, scope: frozenset[str]) -> Step:
        if isinstance(shape, Scalar):
            if scalar_type(shape.name) is None:
                self._error(f"unknown scalar type {shape.name!r}")
            return ReadScalar(tag=shape.name)

        if isinstance(shape, FixedArray):
            self._check_length(shape.length, scope)
            inner_scope = scope
            if shape.index is not None:
                if shape.index in scope or shape.index == self.parameter.name:
                    self._error(f"index name {shape.index!r} shadows an existing binding")
                inner_scope = scope | {shape.index}
            return Repeat(step=self.plan(shape.element, inner_scope), length=shape.length, index=shape.index)

        if isinstance(shape, CountedArray):
            return Repeat(step=self.plan(shape.element, scope))

        if isinstance(shape, Tuple):
            if not shape.elements:
                self._error("empty tuple shape")
            return Group(steps=tuple(self.plan(element, scope) for element in shape.elements))

        raise TypeError(f"Unsupported shape node {type(shape).__name__}")


def plan_inputs(signature: FunctionSignature) -> InputPlan:
    """Expand every parameter shape, in declaration order, into bind steps.

    A single forward scan suffices: a length expression may only read names
    that are already bound when its parameter is reached.
    """
    visible: frozenset[str] = frozenset()
    steps: list[Bind] = []
    for parameter in signature.parameters:
        if parameter.shape is None:
            parameter = Parameter(
                name=parameter.name,
                shape=parse_annotation(parameter.name, parameter.annotation),
                annotation=parameter.annotation,
            )
        planner = _Planner(parameter=parameter)
        steps.append(Bind(name=parameter.name, step=planner.plan(parameter.shape, visible)))
        visible = visible | {parameter.name}

    plan = InputPlan(steps=tuple(steps))
    logger.debug("planned input for %s: %s", signature.name, plan.names)
    return plan
