"""Parser for parameter shapes and the length-expression subset."""

from __future__ import annotations

from dataclasses import dataclass

from .ast import Call, CountedArray, Expr, FixedArray, Infix, LengthExpr, Name, Number, Prefix, Scalar, Shape, Subscript, Tuple
from .lexer import Token, tokenize

BUILTIN_FUNCTIONS = frozenset({"len", "min", "max", "abs"})

_PREFIX_OPS = {"+", "-"}
_PREFIX_BINDING_POWER = 30

# (left, right) binding powers; ** is right-associative.
_INFIX_BINDING_POWER = {
    "+": (10, 11),
    "-": (10, 11),
    "*": (20, 21),
    "/": (20, 21),
    "//": (20, 21),
    "%": (20, 21),
    "**": (40, 39),
}


class ParseError(SyntaxError):
    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


@dataclass
class _Parser:
    source: str
    tokens: list[Token]
    index: int = 0

    def parse_shape_only(self) -> Shape:
        shape = self._parse_shape()
        self._expect("EOF")
        return shape

    def parse_expression_only(self) -> Expr:
        expr = self._parse_expression(0)
        self._expect("EOF")
        return expr

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            self._error(tok, expected=(kind,))
        return self._advance()

    def _match(self, kind: str) -> bool:
        if self._peek().kind == kind:
            self._advance()
            return True
        return False

    def _error(self, tok: Token | None = None, *, message: str | None = None, expected: tuple[str, ...] = ()) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        normalized_expected = tuple(dict.fromkeys(expected))
        if token.kind == "EOF":
            found = "EOF"
        elif token.text:
            found = f"{token.kind}({token.text})"
        else:
            found = token.kind
        raise ParseError(detail, token.pos, token.end, expected=normalized_expected, found=found)

    def _parse_shape(self) -> Shape:
        tok = self._peek()

        if tok.kind == "NAME":
            self._advance()
            return Scalar(name=tok.text)

        if self._match("LBRACK"):
            element = self._parse_shape()
            if self._match("RBRACK"):
                return CountedArray(element=element)
            self._expect("SEMI")
            length = self._parse_length()
            index: str | None = None
            if self._match("AS"):
                index = self._expect("NAME").text
            closing = self._peek()
            if closing.kind != "RBRACK":
                if closing.kind == "EOF":
                    self._error(closing, message="Unterminated array shape", expected=("RBRACK",))
                self._error(closing, expected=("RBRACK", "AS", "OP"))
            self._advance()
            return FixedArray(element=element, length=length, index=index)

        if self._match("LPAREN"):
            if self._peek().kind == "RPAREN":
                self._error(self._peek(), message="Empty tuple shape")
            elements = [self._parse_shape()]
            while self._match("COMMA"):
                if self._peek().kind == "RPAREN":
                    break
                elements.append(self._parse_shape())
            closing = self._peek()
            if closing.kind != "RPAREN":
                if closing.kind == "EOF":
                    self._error(closing, message="Unterminated tuple shape", expected=("RPAREN",))
                self._error(closing, expected=("COMMA", "RPAREN"))
            self._advance()
            return Tuple(elements=tuple(elements))

        self._error(tok, message="Expected a shape", expected=("NAME", "LBRACK", "LPAREN"))
        raise AssertionError("unreachable")

    def _parse_length(self) -> LengthExpr:
        start = self._peek().pos
        expr = self._parse_expression(0)
        end = self.tokens[self.index - 1].end
        return LengthExpr(source=self.source[start:end], expr=expr)

    def _parse_expression(self, min_bp: int) -> Expr:
        left = self._parse_prefix()

        while True:
            tok = self._peek()
            if tok.kind != "OP":
                break
            lbp, rbp = _INFIX_BINDING_POWER[tok.text]
            if lbp < min_bp:
                break
            self._advance()
            right = self._parse_expression(rbp)
            left = Infix(op=tok.text, left=left, right=right)

        return left

    def _parse_prefix(self) -> Expr:
        tok = self._peek()
        if tok.kind == "OP" and tok.text in _PREFIX_OPS:
            self._advance()
            right = self._parse_expression(_PREFIX_BINDING_POWER)
            return Prefix(op=tok.text, right=right)
        return self._parse_postfix()

    def _parse_postfix(self) -> Expr:
        base = self._parse_atom()
        while self._match("LBRACK"):
            index = self._parse_expression(0)
            self._expect("RBRACK")
            base = Subscript(value=base, index=index)
        return base

    def _parse_atom(self) -> Expr:
        tok = self._peek()

        if tok.kind == "NUMBER":
            self._advance()
            return Number(value=int(tok.text))

        if tok.kind == "NAME":
            self._advance()
            if self._match("LPAREN"):
                if tok.text not in BUILTIN_FUNCTIONS:
                    self._error(tok, message=f"Unknown function {tok.text!r}")
                return Call(func=tok.text, args=self._parse_call_args())
            return Name(value=tok.text)

        if self._match("LPAREN"):
            expr = self._parse_expression(0)
            self._expect("RPAREN")
            return expr

        self._error(tok, expected=("NUMBER", "NAME", "LPAREN"))
        raise AssertionError("unreachable")

    def _parse_call_args(self) -> tuple[Expr, ...]:
        args: list[Expr] = []
        if self._match("RPAREN"):
            return ()
        while True:
            args.append(self._parse_expression(0))
            if self._match("RPAREN"):
                return tuple(args)
            self._expect("COMMA")


def _tokenize(source: str) -> list[Token]:
    try:
        return tokenize(source)
    except SyntaxError as exc:
        raise ParseError(str(exc), 0, len(source)) from exc


def parse_shape(source: str) -> Shape:
    parser = _Parser(source=source, tokens=_tokenize(source))
    return parser.parse_shape_only()


def parse_expression(source: str) -> Expr:
    parser = _Parser(source=source, tokens=_tokenize(source))
    return parser.parse_expression_only()
