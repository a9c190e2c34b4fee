"""Whitespace-delimited token scanner and the scalar type registry."""

from __future__ import annotations

import io
from collections import deque
from dataclasses import dataclass
from typing import Callable, TextIO

from .errors import InputExhaustedError, TypeMismatchError


class Int1:
    """Annotation marker: a 1-based integer token bound as its 0-based value."""


class Chars:
    """Annotation marker: a token bound as a list of its characters."""


class Bytes:
    """Annotation marker: a token bound as a list of its byte values."""


@dataclass(frozen=True)
class ScalarType:
    name: str
    convert: Callable[[str], object]


_TRUE_WORDS = {"1", "true", "yes"}
_FALSE_WORDS = {"0", "false", "no"}


def _to_bool(token: str) -> bool:
    lowered = token.casefold()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {token!r}")


SCALAR_TYPES: dict[str, ScalarType] = {}


def register_scalar(name: str | type, convert: Callable[[str], object]) -> ScalarType:
    """Register (or replace) a scalar type tag usable in parameter shapes."""
    key = name if isinstance(name, str) else name.__name__
    scalar = ScalarType(name=key, convert=convert)
    SCALAR_TYPES[key] = scalar
    return scalar


def scalar_type(name: str) -> ScalarType | None:
    return SCALAR_TYPES.get(name)


register_scalar(int, int)
register_scalar(float, float)
register_scalar(str, str)
register_scalar(bytes, lambda token: token.encode())
register_scalar(bool, _to_bool)
register_scalar(Int1, lambda token: int(token) - 1)
register_scalar(Chars, list)
register_scalar(Bytes, lambda token: list(token.encode()))


class Scanner:
    """Reads whitespace-separated tokens lazily from a text stream.

    Lines are pulled only when the buffered tokens run out, so interactive
    input is consumed no further than the current read requires. The cursor
    only moves forward.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.position = 0
        self.line = 0
        self._pending: deque[str] = deque()

    @classmethod
    def from_text(cls, text: str) -> "Scanner":
        return cls(io.StringIO(text))

    def _fill(self) -> bool:
        while not self._pending:
            raw = self.stream.readline()
            if raw == "":
                return False
            self.line += 1
            self._pending.extend(raw.split())
        return True

    def next_token(self, expected: str = "token") -> str:
        if not self._fill():
            raise InputExhaustedError(expected=expected, position=self.position)
        token = self._pending.popleft()
        self.position += 1
        return token

    def read(self, tag: str) -> object:
        """Consume one token and convert it with the scalar type ``tag``."""
        scalar = SCALAR_TYPES.get(tag)
        if scalar is None:
            raise KeyError(f"Unknown scalar type {tag!r}")
        token = self.next_token(tag)
        try:
            return scalar.convert(token)
        except ValueError as exc:
            raise TypeMismatchError(
                expected=tag,
                position=self.position - 1,
                found=token,
                line=self.line,
            ) from exc
