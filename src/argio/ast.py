"""AST nodes for parameter shapes and length expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Number:
    value: int


@dataclass(frozen=True)
class Name:
    value: str


@dataclass(frozen=True)
class Prefix:
    op: str
    right: "Expr"


@dataclass(frozen=True)
class Infix:
    op: str
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class Subscript:
    value: "Expr"
    index: "Expr"


@dataclass(frozen=True)
class Call:
    func: str
    args: tuple["Expr", ...]


Expr = Union[Number, Name, Prefix, Infix, Subscript, Call]


@dataclass(frozen=True)
class LengthExpr:
    """Length expression kept alongside its verbatim source text."""

    source: str
    expr: Expr


@dataclass(frozen=True)
class Scalar:
    name: str


@dataclass(frozen=True)
class FixedArray:
    element: "Shape"
    length: LengthExpr
    index: str | None = None


@dataclass(frozen=True)
class CountedArray:
    """Array whose length is read from the input right before its elements."""

    element: "Shape"


@dataclass(frozen=True)
class Tuple:
    elements: tuple["Shape", ...]


Shape = Union[Scalar, FixedArray, CountedArray, Tuple]


@dataclass(frozen=True)
class Unit:
    pass


@dataclass(frozen=True)
class Parameter:
    name: str
    shape: Shape | None
    annotation: str


@dataclass(frozen=True)
class RawParameter:
    """A declared parameter exactly as written, handed to custom binders."""

    name: str
    annotation: str


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    parameters: tuple[Parameter, ...]
    return_shape: object
    return_annotation: str

    @property
    def is_unit(self) -> bool:
        return isinstance(self.return_shape, Unit)

    @property
    def raw_parameters(self) -> tuple[RawParameter, ...]:
        return tuple(RawParameter(name=p.name, annotation=p.annotation) for p in self.parameters)
