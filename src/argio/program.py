"""The ``argio`` decorator and the bound entry point it produces."""

from __future__ import annotations

import contextlib
import functools
import io
import logging
import sys
from dataclasses import dataclass
from typing import Callable, TextIO

from .binders import Binder, CallableBinder, PlanBinder, read_case_count
from .config import BindingConfig
from .display import OutputPlan, plan_output
from .planner import InputPlan, derive_signature, plan_inputs
from .scanner import Scanner
from .template import HeaderTemplate, compile_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaseContext:
    case_index: int
    bound_values: dict[str, object]


class BoundProgram:
    """A function rewired to read its arguments and write its result.

    Calling the program takes no arguments: parameters are bound from
    ``sys.stdin`` and the result, if any, is written to ``sys.stdout``. All
    plans are derived at construction, so shape, display and template errors
    surface when the decorator is applied.
    """

    def __init__(self, fn: Callable[..., object], config: BindingConfig) -> None:
        functools.update_wrapper(self, fn)
        self.config = config
        self.signature = derive_signature(fn, parse_shapes=config.input is None)
        self.input_plan: InputPlan | None = None
        if config.input is None:
            self.input_plan = plan_inputs(self.signature)
        self.output_plan: OutputPlan = plan_output(self.signature, config.output, getattr(fn, "__globals__", None))
        self.header: HeaderTemplate | None = None
        if config.multicase is not None:
            self.header = compile_header(config.multicase)

    def __repr__(self) -> str:
        return f"<argio program {self.signature.name}>"

    @property
    def binder(self) -> Binder:
        if self.input_plan is not None:
            return PlanBinder(self.input_plan)
        return CallableBinder(func=self.config.input, parameters=self.signature.raw_parameters)

    def __call__(self) -> None:
        self.run(sys.stdin, sys.stdout)

    def run(self, stdin: TextIO, stdout: TextIO) -> None:
        scanner = Scanner(stdin)
        binder = self.binder
        if self.header is None:
            self._run_case(binder, scanner, stdout, case_index=0)
            return

        cases = read_case_count(scanner, self.config.input)
        for case_index in range(cases):
            stdout.write(self.header.render(case_index))
            self._run_case(binder, scanner, stdout, case_index=case_index)

    def run_text(self, text: str) -> str:
        """Run on ``text`` and return everything written, body output included."""
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.run(io.StringIO(text), out)
        return out.getvalue()

    def _run_case(self, binder: Binder, scanner: Scanner, stdout: TextIO, *, case_index: int) -> None:
        context = CaseContext(case_index=case_index, bound_values=binder.bind(scanner))
        logger.debug("%s case %d bound %s", self.signature.name, context.case_index, tuple(context.bound_values))
        result = self.__wrapped__(**context.bound_values)
        text = self.output_plan.render(result)
        if text is not None:
            stdout.write(text)

    def explain(self) -> str:
        lines = [f"{self.signature.name}:"]
        if self.header is not None:
            lines.append(f"  cases: read int, header {self.header.template!r}")
        if self.input_plan is None:
            binder_name = getattr(self.config.input, "__name__", repr(self.config.input))
            lines.append(f"  input: {binder_name}({', '.join(p.name for p in self.signature.parameters)})")
        else:
            lines.extend(f"  {line}" for line in self.input_plan.describe().splitlines())
        lines.append(f"  output: {self.output_plan.describe()}")
        return "\n".join(lines)


def argio(fn: Callable[..., object] | None = None, /, **options: object):
    """Turn ``fn`` into a zero-argument program bound to stdin/stdout.

    Usable bare (``@argio``) or with options
    (``@argio(input=..., output=..., multicase=...)``).
    """
    config = BindingConfig.from_options(**options)

    def decorate(func: Callable[..., object]) -> BoundProgram:
        return BoundProgram(func, config)

    if fn is None:
        return decorate
    return decorate(fn)
