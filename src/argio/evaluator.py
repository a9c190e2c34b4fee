"""Interpreter for length expressions over an explicit binding environment."""

from __future__ import annotations

import numbers
from collections.abc import MutableMapping, Sequence
from typing import Callable, Final

from .ast import Call, Expr, Infix, Name, Number, Prefix, Subscript


class EvaluationError(ValueError):
    """Length expression could not be evaluated against the current bindings."""


class Environment(MutableMapping[str, object]):
    """Name -> value bindings, optionally chained to an enclosing environment."""

    def __init__(self, data: MutableMapping[str, object] | None = None, parent: "Environment | None" = None) -> None:
        self.data: dict[str, object] = {} if data is None else dict(data)
        self.parent = parent

    def __getitem__(self, key: str) -> object:
        if key in self.data:
            return self.data[key]
        if self.parent is not None:
            return self.parent[key]
        raise KeyError(key)

    def __setitem__(self, key: str, value: object) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __iter__(self):
        seen: set[str] = set()
        current: Environment | None = self
        while current is not None:
            for name in current.data:
                if name not in seen:
                    seen.add(name)
                    yield name
            current = current.parent

    def __len__(self) -> int:
        return sum(1 for _ in self.__iter__())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        if key in self.data:
            return True
        return self.parent is not None and key in self.parent

    def child(self, data: MutableMapping[str, object] | None = None) -> "Environment":
        return Environment(data=data, parent=self)

    def define(self, key: str, value: object) -> None:
        if key in self.data:
            raise NameError(f"Duplicate binding for name {key!r}")
        self.data[key] = value


def _as_int(value: object, *, where: str) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        real = float(value)
        if real.is_integer():
            return int(real)
    raise EvaluationError(f"{where} requires an integer, got {value!r}")


def _require_number(value: object, *, where: str):
    if isinstance(value, numbers.Number):
        return value
    raise EvaluationError(f"{where} requires a number, got {type(value).__name__}")


def _floordiv(left, right):
    if right == 0:
        raise EvaluationError("division by zero")
    return left // right


def _truediv(left, right):
    if right == 0:
        raise EvaluationError("division by zero")
    quotient = left / right
    if isinstance(quotient, float) and quotient.is_integer():
        return int(quotient)
    return quotient


def _mod(left, right):
    if right == 0:
        raise EvaluationError("modulo by zero")
    return left % right


_INFIX_OPS: Final[dict[str, Callable[[object, object], object]]] = {
    "+": lambda w, x: w + x,
    "-": lambda w, x: w - x,
    "*": lambda w, x: w * x,
    "/": _truediv,
    "//": _floordiv,
    "%": _mod,
    "**": lambda w, x: w**x,
}


def _builtin_len(value: object) -> int:
    if isinstance(value, (Sequence, str)):
        return len(value)
    raise EvaluationError(f"len() requires a sequence, got {type(value).__name__}")


_BUILTINS: Final[dict[str, Callable[..., object]]] = {
    "len": _builtin_len,
    "min": min,
    "max": max,
    "abs": abs,
}


def evaluate(expr: Expr, env: MutableMapping[str, object]) -> object:
    """Evaluate an arithmetic length expression with ordinary integer semantics."""
    if isinstance(expr, Number):
        return expr.value

    if isinstance(expr, Name):
        try:
            return env[expr.value]
        except KeyError:
            raise EvaluationError(f"name {expr.value!r} is not bound") from None

    if isinstance(expr, Prefix):
        right = _require_number(evaluate(expr.right, env), where=f"prefix {expr.op}")
        return -right if expr.op == "-" else +right

    if isinstance(expr, Infix):
        left = _require_number(evaluate(expr.left, env), where=f"operator {expr.op}")
        right = _require_number(evaluate(expr.right, env), where=f"operator {expr.op}")
        return _INFIX_OPS[expr.op](left, right)

    if isinstance(expr, Subscript):
        value = evaluate(expr.value, env)
        index = _as_int(evaluate(expr.index, env), where="subscript")
        if not isinstance(value, Sequence):
            raise EvaluationError(f"cannot subscript {type(value).__name__}")
        if index < 0:
            raise EvaluationError(f"index {index} out of range for length {len(value)}")
        try:
            return value[index]
        except IndexError:
            raise EvaluationError(f"index {index} out of range for length {len(value)}") from None

    if isinstance(expr, Call):
        args = [evaluate(arg, env) for arg in expr.args]
        if expr.func == "len" and len(args) != 1:
            raise EvaluationError("len() takes exactly one argument")
        if expr.func == "abs" and len(args) != 1:
            raise EvaluationError("abs() takes exactly one argument")
        if expr.func in {"min", "max"} and not args:
            raise EvaluationError(f"{expr.func}() requires at least one argument")
        try:
            return _BUILTINS[expr.func](*args)
        except (TypeError, ValueError) as exc:
            raise EvaluationError(f"{expr.func}() failed: {exc}") from exc

    raise TypeError(f"Unsupported expression node {type(expr).__name__}")


def evaluate_length(expr: Expr, env: MutableMapping[str, object]) -> int:
    """Evaluate ``expr`` and require a non-negative integer result."""
    value = evaluate(expr, env)
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise EvaluationError(f"length must be an integer, got {value!r}")
    if isinstance(value, numbers.Integral):
        length = int(value)
    elif float(value).is_integer():
        length = int(value)
    else:
        raise EvaluationError(f"length must be an integer, got {value!r}")
    if length < 0:
        raise EvaluationError(f"length must be non-negative, got {length}")
    return length


def free_names(expr: Expr) -> tuple[str, ...]:
    """Names an expression reads, in first-occurrence order."""
    out: dict[str, None] = {}

    def visit(node: Expr) -> None:
        if isinstance(node, Name):
            out.setdefault(node.value, None)
        elif isinstance(node, Prefix):
            visit(node.right)
        elif isinstance(node, Infix):
            visit(node.left)
            visit(node.right)
        elif isinstance(node, Subscript):
            visit(node.value)
            visit(node.index)
        elif isinstance(node, Call):
            for arg in node.args:
                visit(arg)

    visit(expr)
    return tuple(out)
