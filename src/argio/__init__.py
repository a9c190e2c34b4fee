"""argio public API."""

from .binders import Binder, CallableBinder, PlanBinder
from .config import BindingConfig
from .display import OutputPlan, Wrap, display, plan_output
from .errors import (
    ArgioDefinitionError,
    ArgioError,
    ArgioRuntimeError,
    InputExhaustedError,
    InvalidHeaderTemplateError,
    InvalidLengthExprError,
    MalformedShapeError,
    NotDisplayableError,
    TypeMismatchError,
)
from .parser import ParseError, parse_expression, parse_shape
from .planner import InputPlan, derive_signature, plan_inputs
from .program import BoundProgram, CaseContext, argio
from .scanner import Bytes, Chars, Int1, Scanner, register_scalar
from .template import DEFAULT_HEADER, HeaderTemplate, compile_header

__all__ = [
    "argio",
    "BoundProgram",
    "CaseContext",
    "BindingConfig",
    "Binder",
    "PlanBinder",
    "CallableBinder",
    "InputPlan",
    "OutputPlan",
    "HeaderTemplate",
    "DEFAULT_HEADER",
    "Scanner",
    "Wrap",
    "Int1",
    "Chars",
    "Bytes",
    "display",
    "register_scalar",
    "derive_signature",
    "plan_inputs",
    "plan_output",
    "compile_header",
    "parse_shape",
    "parse_expression",
    "ParseError",
    "ArgioError",
    "ArgioDefinitionError",
    "ArgioRuntimeError",
    "MalformedShapeError",
    "NotDisplayableError",
    "InvalidHeaderTemplateError",
    "InputExhaustedError",
    "TypeMismatchError",
    "InvalidLengthExprError",
]
