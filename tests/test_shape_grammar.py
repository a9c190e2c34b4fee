from __future__ import annotations

import unittest

from argio.ast import Call, CountedArray, FixedArray, Infix, Name, Number, Prefix, Scalar, Subscript, Tuple
from argio.lexer import tokenize
from argio.parser import ParseError, parse_expression, parse_shape


class LexerTests(unittest.TestCase):
    def _tokens(self, source: str, *, with_spans: bool = False):
        if with_spans:
            return [(tok.kind, tok.text, tok.pos, tok.end) for tok in tokenize(source) if tok.kind != "EOF"]
        return [(tok.kind, tok.text) for tok in tokenize(source) if tok.kind != "EOF"]

    def test_token_golden_delimiters_and_spans(self) -> None:
        self.assertEqual(
            self._tokens("[(int, x); n as i]", with_spans=True),
            [
                ("LBRACK", "[", 0, 1),
                ("LPAREN", "(", 1, 2),
                ("NAME", "int", 2, 5),
                ("COMMA", ",", 5, 6),
                ("NAME", "x", 7, 8),
                ("RPAREN", ")", 8, 9),
                ("SEMI", ";", 9, 10),
                ("NAME", "n", 11, 12),
                ("AS", "as", 13, 15),
                ("NAME", "i", 16, 17),
                ("RBRACK", "]", 17, 18),
            ],
        )

    def test_multi_character_operators_match_longest_first(self) -> None:
        self.assertEqual(
            self._tokens("a**b//c*d/e%f"),
            [
                ("NAME", "a"),
                ("OP", "**"),
                ("NAME", "b"),
                ("OP", "//"),
                ("NAME", "c"),
                ("OP", "*"),
                ("NAME", "d"),
                ("OP", "/"),
                ("NAME", "e"),
                ("OP", "%"),
                ("NAME", "f"),
            ],
        )

    def test_numbers_allow_digit_separators(self) -> None:
        self.assertEqual(self._tokens("1_000"), [("NUMBER", "1000")])

    def test_rejects_unknown_characters(self) -> None:
        with self.assertRaises(SyntaxError):
            tokenize("[int; n!]")

    def test_rejects_number_glued_to_name(self) -> None:
        with self.assertRaises(SyntaxError):
            tokenize("2n")


class ShapeGrammarTests(unittest.TestCase):
    def test_scalar(self) -> None:
        self.assertEqual(parse_shape("int"), Scalar(name="int"))

    def test_fixed_array_keeps_length_source_verbatim(self) -> None:
        shape = parse_shape("[int;  n * 2 + 1 ]")
        self.assertIsInstance(shape, FixedArray)
        self.assertEqual(shape.element, Scalar(name="int"))
        self.assertEqual(shape.length.source, "n * 2 + 1")
        self.assertIsNone(shape.index)

    def test_nested_array_with_row_index(self) -> None:
        shape = parse_shape("[[int; i + 1]; n as i]")
        self.assertEqual(shape.index, "i")
        self.assertEqual(shape.length.expr, Name(value="n"))
        inner = shape.element
        self.assertIsInstance(inner, FixedArray)
        self.assertEqual(inner.length.expr, Infix(op="+", left=Name(value="i"), right=Number(value=1)))

    def test_subscript_inside_array_length(self) -> None:
        shape = parse_shape("[[int; k[i]]; n as i]")
        self.assertEqual(shape.element.length.expr, Subscript(value=Name(value="k"), index=Name(value="i")))
        self.assertEqual(shape.element.length.source, "k[i]")

    def test_counted_array(self) -> None:
        self.assertEqual(parse_shape("[[int]; n]").element, CountedArray(element=Scalar(name="int")))

    def test_tuple_and_trailing_comma(self) -> None:
        self.assertEqual(parse_shape("(int, str)"), Tuple(elements=(Scalar("int"), Scalar("str"))))
        self.assertEqual(parse_shape("(int,)"), Tuple(elements=(Scalar("int"),)))

    def test_array_of_tuples(self) -> None:
        shape = parse_shape("[(Int1, Int1); m]")
        self.assertEqual(shape.element, Tuple(elements=(Scalar("Int1"), Scalar("Int1"))))

    def test_malformed_shapes(self) -> None:
        cases = {
            "[int; n": "Unterminated array shape",
            "(int, str": "Unterminated tuple shape",
            "()": "Empty tuple shape",
            "[int, n]": "Unexpected token",
            "[int; ]": "Unexpected token",
            "int str": "Unexpected token",
            "": "Expected a shape",
        }
        for source, message in cases.items():
            with self.subTest(source=source):
                with self.assertRaises(ParseError) as ctx:
                    parse_shape(source)
                self.assertEqual(ctx.exception.message, message)

    def test_parse_error_reports_span_and_found_token(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_shape("[int; n,]")
        err = ctx.exception
        self.assertEqual((err.start, err.end), (7, 8))
        self.assertEqual(err.found, "COMMA(,)")
        self.assertIn("RBRACK", err.expected)
        self.assertIn("at span [7, 8)", str(err))

    def test_lexer_failures_surface_as_parse_errors(self) -> None:
        with self.assertRaises(ParseError):
            parse_shape("[int; $]")


class LengthExpressionGrammarTests(unittest.TestCase):
    def test_precedence_and_associativity(self) -> None:
        self.assertEqual(
            parse_expression("1 + 2 * 3"),
            Infix(op="+", left=Number(1), right=Infix(op="*", left=Number(2), right=Number(3))),
        )
        self.assertEqual(
            parse_expression("8 - 4 - 2"),
            Infix(op="-", left=Infix(op="-", left=Number(8), right=Number(4)), right=Number(2)),
        )
        self.assertEqual(
            parse_expression("2 ** 3 ** 2"),
            Infix(op="**", left=Number(2), right=Infix(op="**", left=Number(3), right=Number(2))),
        )

    def test_unary_minus_binds_looser_than_power(self) -> None:
        self.assertEqual(
            parse_expression("-2 ** 2"),
            Prefix(op="-", right=Infix(op="**", left=Number(2), right=Number(2))),
        )

    def test_parentheses_and_calls(self) -> None:
        self.assertEqual(
            parse_expression("max(n, len(a)) // (k + 1)"),
            Infix(
                op="//",
                left=Call(func="max", args=(Name("n"), Call(func="len", args=(Name("a"),)))),
                right=Infix(op="+", left=Name("k"), right=Number(1)),
            ),
        )

    def test_unknown_function_is_rejected(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_expression("sum(a)")
        self.assertIn("Unknown function 'sum'", str(ctx.exception))

    def test_trailing_tokens_are_rejected(self) -> None:
        with self.assertRaises(ParseError):
            parse_expression("n m")


if __name__ == "__main__":
    unittest.main()
