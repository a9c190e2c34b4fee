"""Per-case header templates for multicase mode."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .ast import Expr
from .errors import ArgioRuntimeError, InvalidHeaderTemplateError
from .evaluator import EvaluationError, evaluate, free_names
from .parser import ParseError, parse_expression

DEFAULT_HEADER = "Case #{i+1}: "
CASE_INDEX_NAME = "i"

_PLACEHOLDER_RE = re.compile(r"^([^{}]*)\{([^:{}]+)(?::([^{}]+))?\}([^{}]*)$")


@dataclass(frozen=True)
class HeaderTemplate:
    template: str
    prefix: str
    expr: Expr | None = None
    format_spec: str = ""
    suffix: str = ""

    def render(self, case_index: int) -> str:
        if self.expr is None:
            return self.prefix
        try:
            value = evaluate(self.expr, {CASE_INDEX_NAME: case_index})
            shown = format(value, self.format_spec)
        except (EvaluationError, TypeError, ValueError) as exc:
            raise ArgioRuntimeError(f"header {self.template!r} failed for case {case_index}: {exc}") from exc
        return f"{self.prefix}{shown}{self.suffix}"


def compile_header(template: str) -> HeaderTemplate:
    """Validate a header template and split it around its single placeholder."""
    if "{" not in template and "}" not in template:
        return HeaderTemplate(template=template, prefix=template)

    match = _PLACEHOLDER_RE.match(template)
    if match is None:
        raise InvalidHeaderTemplateError(message="expected exactly one {expr} or {expr:spec} placeholder", template=template)
    prefix, source, format_spec, suffix = match.groups()

    try:
        expr = parse_expression(source)
    except ParseError as err:
        raise InvalidHeaderTemplateError(message=f"{err}: `{source}`", template=template) from err

    unknown = [name for name in free_names(expr) if name != CASE_INDEX_NAME]
    if unknown:
        raise InvalidHeaderTemplateError(
            message=f"unknown name(s) {', '.join(unknown)}; only {CASE_INDEX_NAME!r} is bound",
            template=template,
        )

    format_spec = format_spec or ""
    try:
        format(0, format_spec)
    except ValueError as err:
        raise InvalidHeaderTemplateError(message=f"bad format spec {format_spec!r}: {err}", template=template) from err

    return HeaderTemplate(template=template, prefix=prefix, expr=expr, format_spec=format_spec, suffix=suffix)
