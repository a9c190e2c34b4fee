"""Textual display of results and the output plan."""

from __future__ import annotations

import builtins
import collections.abc
import logging
import typing
from dataclasses import dataclass
from typing import Callable

import jax
import jax.numpy as jnp

from .ast import FunctionSignature
from .errors import NotDisplayableError

logger = logging.getLogger(__name__)

_SEQUENCE_NAMES = {
    "list",
    "tuple",
    "set",
    "frozenset",
    "dict",
    "deque",
    "sequence",
    "mutablesequence",
    "iterable",
    "iterator",
    "collection",
    "mapping",
    "generator",
}
_ARRAY_NAMES = {"Array", "ndarray"}


def _render_array(value) -> str:
    arr = jnp.asarray(value)
    if arr.ndim == 0:
        return str(arr.item())
    if arr.ndim == 1:
        return " ".join(str(item) for item in arr.tolist())
    rows = arr.reshape(-1, arr.shape[-1]).tolist()
    return "\n".join(" ".join(str(item) for item in row) for row in rows)


def display(value: object) -> str:
    """Canonical text form of a value."""
    if isinstance(value, jax.Array):
        return _render_array(value)
    return str(value)


def _is_nested(item: object) -> bool:
    if isinstance(item, jax.Array):
        return item.ndim > 0
    return isinstance(item, collections.abc.Iterable) and not isinstance(item, (str, bytes))


class Wrap:
    """Output wrapper rendering a sequence with single spaces between elements.

    Two-level data (a sequence of sequences) renders one inner sequence per
    line. Anything that is not iterable renders with ``display``.
    """

    def __init__(self, value: object) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Wrap({self.value!r})"

    def __str__(self) -> str:
        value = self.value
        if isinstance(value, jax.Array):
            return _render_array(value)
        if not _is_nested(value):
            return display(value)
        items = list(value)
        if items and all(_is_nested(item) for item in items):
            return "\n".join(str(Wrap(item)) for item in items)
        return " ".join(display(item) for item in items)


def _head_name(text: str) -> str:
    head = text.split("[", 1)[0].strip()
    return head.rsplit(".", 1)[-1]


def _resolve(text: str, namespace: dict[str, object]) -> object | None:
    path = text.split("[", 1)[0].strip().split(".")
    obj = namespace.get(path[0], getattr(builtins, path[0], None))
    for attr in path[1:]:
        if obj is None:
            return None
        obj = getattr(obj, attr, None)
    return obj


def _type_is_displayable(tp: type) -> bool:
    if issubclass(tp, (str, bytes)):
        return True
    if issubclass(tp, jax.Array):
        return True
    if issubclass(tp, collections.abc.Iterable):
        return False
    return not (tp.__str__ is object.__str__ and tp.__repr__ is object.__repr__)


def is_natively_displayable(annotation: object, namespace: dict[str, object] | None = None) -> bool:
    """Whether a return annotation has a usable text form without a wrapper."""
    if isinstance(annotation, str):
        text = annotation.strip()
        if text.startswith(("[", "(")):
            return False
        head = _head_name(text)
        if head.casefold() in _SEQUENCE_NAMES:
            return False
        if head in _ARRAY_NAMES:
            return True
        resolved = _resolve(text, namespace or {})
        if resolved is None:
            return True
        return is_natively_displayable(resolved, namespace)

    origin = typing.get_origin(annotation)
    if origin is not None:
        if isinstance(origin, type):
            return _type_is_displayable(origin)
        return True

    if isinstance(annotation, type):
        return _type_is_displayable(annotation)
    return True


@dataclass(frozen=True)
class OutputPlan:
    """How a result becomes one line of output.

    ``enabled`` is false for unit-returning functions: nothing is written.
    """

    enabled: bool
    wrapper: Callable[[object], object] | None = None

    def render(self, result: object) -> str | None:
        if not self.enabled:
            return None
        shown = result if self.wrapper is None else self.wrapper(result)
        return display(shown) + "\n"

    def describe(self) -> str:
        if not self.enabled:
            return "no output"
        if self.wrapper is None:
            return "display result"
        return f"display {getattr(self.wrapper, '__name__', repr(self.wrapper))}(result)"


def plan_output(
    signature: FunctionSignature,
    wrapper: Callable[[object], object] | None = None,
    namespace: dict[str, object] | None = None,
) -> OutputPlan:
    if signature.is_unit:
        plan = OutputPlan(enabled=False)
    elif wrapper is not None:
        plan = OutputPlan(enabled=True, wrapper=wrapper)
    elif is_natively_displayable(signature.return_shape, namespace):
        plan = OutputPlan(enabled=True)
    else:
        raise NotDisplayableError(function=signature.name, annotation=signature.return_annotation)
    logger.debug("planned output for %s: %s", signature.name, plan.describe())
    return plan
