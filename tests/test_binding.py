from __future__ import annotations

import unittest

from argio.ast import RawParameter
from argio.binders import CallableBinder, PlanBinder, read_case_count
from argio.errors import InputExhaustedError, InvalidLengthExprError, TypeMismatchError
from argio.planner import derive_signature, plan_inputs
from argio.scanner import Scanner


def _bind(fn, text: str) -> tuple[dict[str, object], Scanner]:
    scanner = Scanner.from_text(text)
    binder = PlanBinder(plan_inputs(derive_signature(fn)))
    return binder.bind(scanner), scanner


class PlanBinderTests(unittest.TestCase):
    def test_scalars_consume_one_token_each_in_declaration_order(self) -> None:
        def solve(a: int, b: str, c: float):
            pass

        bound, scanner = _bind(solve, "5 five 5.5 leftover")
        self.assertEqual(bound, {"a": 5, "b": "five", "c": 5.5})
        self.assertEqual(list(bound), ["a", "b", "c"])
        self.assertEqual(scanner.position, 3)

    def test_fixed_array_consumes_exactly_k_tokens(self) -> None:
        def solve(n: int, x: "[int; n]"):
            pass

        bound, scanner = _bind(solve, "3\n10 20 30 40")
        self.assertEqual(bound["x"], [10, 20, 30])
        self.assertEqual(scanner.position, 4)

    def test_zero_length_array_consumes_nothing(self) -> None:
        def solve(n: int, x: "[int; n]", tail: str):
            pass

        bound, scanner = _bind(solve, "0 end")
        self.assertEqual(bound, {"n": 0, "x": [], "tail": "end"})
        self.assertEqual(scanner.position, 2)

    def test_length_expression_over_earlier_values(self) -> None:
        def solve(h: int, w: int, cells: "[Chars; h * w - 1]"):
            pass

        bound, _ = _bind(solve, "2 2 ab cd ef")
        self.assertEqual(bound["cells"], [["a", "b"], ["c", "d"], ["e", "f"]])

    def test_grid_and_tuples(self) -> None:
        def solve(n: int, m: int, grid: "[[int; m]; n]", edges: "[(Int1, Int1); m]"):
            pass

        bound, _ = _bind(solve, "2 2\n1 2\n3 4\n1 2\n2 1\n")
        self.assertEqual(bound["grid"], [[1, 2], [3, 4]])
        self.assertEqual(bound["edges"], [(0, 1), (1, 0)])

    def test_jagged_rows_use_row_index(self) -> None:
        def solve(n: int, tri: "[[int; i + 1]; n as i]"):
            pass

        bound, scanner = _bind(solve, "3\n1\n2 3\n4 5 6\n")
        self.assertEqual(bound["tri"], [[1], [2, 3], [4, 5, 6]])
        self.assertEqual(scanner.position, 7)

    def test_jagged_rows_from_earlier_lengths(self) -> None:
        def solve(n: int, k: "[int; n]", rows: "[[str; k[i]]; n as i]"):
            pass

        bound, _ = _bind(solve, "2\n2 1\na b\nc\n")
        self.assertEqual(bound["rows"], [["a", "b"], ["c"]])

    def test_counted_arrays_read_their_own_length(self) -> None:
        def solve(n: int, rows: "[[int]; n]"):
            pass

        bound, _ = _bind(solve, "2\n3 7 8 9\n0\n")
        self.assertEqual(bound["rows"], [[7, 8, 9], []])

    def test_insufficient_input_is_an_error_not_a_default(self) -> None:
        def solve(n: int, x: "[int; n]"):
            pass

        with self.assertRaises(InputExhaustedError) as ctx:
            _bind(solve, "3\n1 2")
        self.assertEqual(ctx.exception.expected, "int")
        self.assertEqual(ctx.exception.position, 3)

    def test_type_mismatch_propagates(self) -> None:
        def solve(n: int):
            pass

        with self.assertRaises(TypeMismatchError):
            _bind(solve, "three")

    def test_negative_or_fractional_length_fails_at_run_time(self) -> None:
        def negative(n: int, x: "[int; n - 5]"):
            pass

        def fractional(n: int, x: "[int; n / 2]"):
            pass

        for fn, text in ((negative, "2 1 1"), (fractional, "3 1 1")):
            with self.subTest(fn=fn.__name__):
                with self.assertRaises(InvalidLengthExprError) as ctx:
                    _bind(fn, text)
                self.assertEqual(ctx.exception.parameter, "x")

    def test_builtin_failures_in_lengths_are_length_errors(self) -> None:
        def empty_max(n: int, k: "[int; n]", x: "[int; max(k)]"):
            pass

        def mixed_max(n: int, k: "[int; n]", x: "[int; max(k, 1)]"):
            pass

        for fn, text in ((empty_max, "0\n"), (mixed_max, "1 2")):
            with self.subTest(fn=fn.__name__):
                with self.assertRaises(InvalidLengthExprError) as ctx:
                    _bind(fn, text)
                self.assertEqual(ctx.exception.parameter, "x")
                self.assertIn("max() failed", str(ctx.exception))

    def test_negative_subscript_does_not_wrap_around(self) -> None:
        def solve(n: int, k: "[int; n]", rows: "[[int; k[i - 1]]; n as i]"):
            pass

        with self.assertRaises(InvalidLengthExprError) as ctx:
            _bind(solve, "2 3 1\n9 9 9\n")
        self.assertEqual(ctx.exception.parameter, "rows")
        self.assertIn("index -1 out of range", str(ctx.exception))

    def test_negative_counted_length(self) -> None:
        def solve(x: "[int]"):
            pass

        with self.assertRaises(InvalidLengthExprError):
            _bind(solve, "-1")


class CallableBinderTests(unittest.TestCase):
    def test_receives_raw_parameters_and_shared_scanner(self) -> None:
        seen = []

        def my_input(parameters, scanner):
            seen.append(parameters)
            return {param.name: scanner.next_token() for param in parameters}

        params = (RawParameter("n", "whatever syntax"), RawParameter("x", "[int; n"))
        scanner = Scanner.from_text("a b c")
        bound = CallableBinder(func=my_input, parameters=params).bind(scanner)
        self.assertEqual(bound, {"n": "a", "x": "b"})
        self.assertEqual(seen, [params])
        self.assertEqual(scanner.position, 2)

    def test_missing_binding_is_reported(self) -> None:
        def incomplete(parameters, scanner):
            return {"n": 1}

        binder = CallableBinder(func=incomplete, parameters=(RawParameter("n", "int"), RawParameter("m", "int")))
        with self.assertRaises(TypeMismatchError) as ctx:
            binder.bind(Scanner.from_text(""))
        self.assertIn("'m'", str(ctx.exception))


class CaseCountTests(unittest.TestCase):
    def test_default_reads_one_int(self) -> None:
        scanner = Scanner.from_text("3 2 3 5")
        self.assertEqual(read_case_count(scanner), 3)
        self.assertEqual(scanner.position, 1)

    def test_custom_binder_reads_the_count(self) -> None:
        def my_input(parameters, scanner):
            self.assertEqual(parameters, (RawParameter("cases", "int"),))
            return {"cases": int(scanner.next_token()) * 2}

        self.assertEqual(read_case_count(Scanner.from_text("2"), my_input), 4)

    def test_negative_count(self) -> None:
        with self.assertRaises(InvalidLengthExprError):
            read_case_count(Scanner.from_text("-2"))


if __name__ == "__main__":
    unittest.main()
