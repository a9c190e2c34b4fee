"""Tokenization for the parameter shape grammar."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


_SINGLE_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACK",
    "]": "RBRACK",
    ";": "SEMI",
    ",": "COMMA",
    "+": "OP",
    "-": "OP",
    "%": "OP",
}

# Longest match first.
_MULTI_OPS = ("**", "//", "*", "/")

_KEYWORDS = {"as": "AS"}


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _scan_while(source: str, start: int, predicate) -> tuple[str, int]:
    i = start
    while i < len(source) and predicate(source[i]):
        i += 1
    return source[start:i], i


def _scan_number(source: str, start: int) -> tuple[str, int]:
    i = start
    while i < len(source) and (source[i].isdigit() or source[i] == "_"):
        i += 1
    text = source[start:i]
    if text.endswith("_") or "__" in text:
        raise SyntaxError(f"Invalid numeric literal {text!r} at index {start}")
    if i < len(source) and _is_ident_start(source[i]):
        raise SyntaxError(f"Invalid numeric literal {source[start:i + 1]!r} at index {start}")
    return text, i


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch.isspace():
            i += 1
            continue

        op = next((candidate for candidate in _MULTI_OPS if source.startswith(candidate, i)), None)
        if op is not None:
            tokens.append(Token("OP", op, i, i + len(op)))
            i += len(op)
            continue

        if ch in _SINGLE_TOKENS:
            tokens.append(Token(_SINGLE_TOKENS[ch], ch, i, i + 1))
            i += 1
            continue

        if ch.isdigit():
            text, end = _scan_number(source, i)
            tokens.append(Token("NUMBER", text.replace("_", ""), i, end))
            i = end
            continue

        if _is_ident_start(ch):
            ident, end = _scan_while(source, i, _is_ident_continue)
            tokens.append(Token(_KEYWORDS.get(ident, "NAME"), ident, i, end))
            i = end
            continue

        raise SyntaxError(f"Unexpected character {ch!r} at index {i}")

    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens
