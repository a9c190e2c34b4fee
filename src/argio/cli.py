"""Run or explain a decorated function from the command line."""

from __future__ import annotations

import argparse
import importlib
import logging
import sys

from .errors import ArgioError
from .program import BoundProgram


def load_target(target: str) -> BoundProgram:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"target must look like 'module:function', got {target!r}")
    obj = importlib.import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part)
    if not isinstance(obj, BoundProgram):
        raise TypeError(f"{target} is not decorated with @argio")
    return obj


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="argio", description=__doc__)
    parser.add_argument("target", help="decorated function as module:function")
    parser.add_argument(
        "--input",
        default=None,
        help="read input from this file instead of stdin",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="print the input and output plans instead of running",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        program = load_target(args.target)
    except (ArgioError, ImportError, AttributeError, TypeError, ValueError) as exc:
        print(f"argio: cannot load {args.target}: {exc}", file=sys.stderr)
        return 1

    try:
        if args.explain:
            print(program.explain())
            return 0
        if args.input is None:
            program()
        else:
            with open(args.input, encoding="utf-8") as handle:
                program.run(handle, sys.stdout)
    except ArgioError as exc:
        print(f"argio: {exc}", file=sys.stderr)
        return 1
    return 0
