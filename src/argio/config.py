"""Per-function binding configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable

from .template import DEFAULT_HEADER

_KNOWN_KEYS = ("input", "output", "multicase")


@dataclass(frozen=True)
class BindingConfig:
    """Decorator options, read once per decorated function.

    - `input`: custom binder ``binder(parameters, scanner) -> mapping``.
    - `output`: wrapper applied to the result before display.
    - `multicase`: header template; enables the case-count driver.
    """

    input: Callable[..., Mapping[str, object]] | None = None
    output: Callable[[object], object] | None = None
    multicase: str | None = None

    @classmethod
    def from_options(cls, **options: object) -> "BindingConfig":
        for key in options:
            if key not in _KNOWN_KEYS:
                raise TypeError(f"argio: invalid attr: {key}")

        binder = options.get("input")
        if binder is not None and not callable(binder):
            raise TypeError("argio: input must be callable")

        wrapper = options.get("output")
        if wrapper is not None and not callable(wrapper):
            raise TypeError("argio: output must be callable")

        multicase = options.get("multicase")
        if multicase is True:
            header: str | None = DEFAULT_HEADER
        elif multicase is None or multicase is False:
            header = None
        elif isinstance(multicase, str):
            header = multicase
        else:
            raise TypeError("argio: multicase must be a template string or True")

        return cls(input=binder, output=wrapper, multicase=header)
