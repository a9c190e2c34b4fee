"""Input binders: realize an input plan against a scanner, or delegate."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, Protocol

from .ast import RawParameter
from .errors import InvalidLengthExprError, TypeMismatchError
from .evaluator import Environment, EvaluationError, evaluate_length
from .planner import Bind, Group, InputPlan, ReadScalar, Repeat, Step
from .scanner import Scanner

logger = logging.getLogger(__name__)

CASE_COUNT_PARAMETERS = (RawParameter(name="cases", annotation="int"),)


class Binder(Protocol):
    def bind(self, scanner: Scanner) -> dict[str, object]:
        ...


@dataclass(frozen=True)
class PlanBinder:
    """Default binder: one scanner read per primitive step, in plan order."""

    plan: InputPlan

    def bind(self, scanner: Scanner) -> dict[str, object]:
        env = Environment()
        for bind in self.plan.steps:
            env.define(bind.name, self._run(bind, bind.step, scanner, env))
        return dict(env.data)

    def _run(self, bind: Bind, step: Step, scanner: Scanner, env: Environment) -> object:
        if isinstance(step, ReadScalar):
            return scanner.read(step.tag)

        if isinstance(step, Repeat):
            if step.length is None:
                count = scanner.read("int")
                if count < 0:
                    raise InvalidLengthExprError(expression="<counted>", value=count, parameter=bind.name)
            else:
                try:
                    count = evaluate_length(step.length.expr, env)
                except EvaluationError as exc:
                    raise InvalidLengthExprError(
                        expression=step.length.source,
                        parameter=bind.name,
                        reason=str(exc),
                    ) from exc
            items: list[object] = []
            for row in range(count):
                row_env = env if step.index is None else env.child({step.index: row})
                items.append(self._run(bind, step.step, scanner, row_env))
            return items

        if isinstance(step, Group):
            return tuple(self._run(bind, item, scanner, env) for item in step.steps)

        raise TypeError(f"Unsupported plan step {type(step).__name__}")


@dataclass(frozen=True)
class CallableBinder:
    """Delegates binding to ``func(parameters, scanner)``.

    ``parameters`` is the declared parameter list verbatim; no shape
    validation happens on this path.
    """

    func: Callable[[tuple[RawParameter, ...], Scanner], Mapping[str, object]]
    parameters: tuple[RawParameter, ...]

    def bind(self, scanner: Scanner) -> dict[str, object]:
        bound = self.func(self.parameters, scanner)
        out: dict[str, object] = {}
        for param in self.parameters:
            if param.name not in bound:
                raise TypeMismatchError(
                    expected=f"binding for {param.name!r} from {getattr(self.func, '__name__', 'custom binder')}",
                    position=scanner.position,
                )
            out[param.name] = bound[param.name]
        return out


def read_case_count(scanner: Scanner, custom: Callable[..., Mapping[str, object]] | None = None) -> int:
    """Read the leading case count with the same mechanism as any parameter."""
    if custom is None:
        count = scanner.read("int")
    else:
        count = CallableBinder(func=custom, parameters=CASE_COUNT_PARAMETERS).bind(scanner)["cases"]
    if count < 0:
        raise InvalidLengthExprError(expression="cases", value=count)
    logger.debug("multicase: %d case(s)", count)
    return count
