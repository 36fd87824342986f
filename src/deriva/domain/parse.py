"""Type expression parser for declaration files.

Grammar::

    type := atom atom*          (left-associative application)
    atom := NAME | "(" type ")"

A NAME is a type variable when it is the designated variable or one of the
declaration's fixed parameters; every other NAME is a type constructor.
"""

from __future__ import annotations

import re
from collections.abc import Collection

from deriva.domain.errors import DeclarationError
from deriva.domain.types import TApp, TCon, TVar, TypeExpr

_TOKEN = re.compile(r"\s*(?:(?P<name>[^\W\d][\w'.]*)|(?P<punct>[()]))")


def tokenize(text: str) -> list[str]:
    """Split *text* into names and parentheses."""
    tokens: list[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN.match(text, pos)
        if m is None:
            raise DeclarationError(f"Unexpected character {text[pos:].strip()[:1]!r} in {text!r}")
        tokens.append(m.group("name") or m.group("punct"))
        pos = m.end()
    return tokens


def parse_type(text: str, variables: Collection[str]) -> TypeExpr:
    """Parse *text* into a :data:`TypeExpr`.

    Args:
        text: Source such as ``"Prod Nat (List a)"``.
        variables: Names that denote type variables.
    """
    tokens = tokenize(text)
    if not tokens:
        raise DeclarationError("Empty type expression")
    expr, pos = _parse_app(tokens, 0, variables, text)
    if pos != len(tokens):
        raise DeclarationError(f"Unbalanced parentheses in {text!r}")
    return expr


def _parse_app(
    tokens: list[str], pos: int, variables: Collection[str], source: str
) -> tuple[TypeExpr, int]:
    expr, pos = _parse_atom(tokens, pos, variables, source)
    while pos < len(tokens) and tokens[pos] != ")":
        arg, pos = _parse_atom(tokens, pos, variables, source)
        expr = TApp(expr, arg)
    return expr, pos


def _parse_atom(
    tokens: list[str], pos: int, variables: Collection[str], source: str
) -> tuple[TypeExpr, int]:
    if pos >= len(tokens):
        raise DeclarationError(f"Unexpected end of type expression {source!r}")
    tok = tokens[pos]
    if tok == "(":
        expr, pos = _parse_app(tokens, pos + 1, variables, source)
        if pos >= len(tokens) or tokens[pos] != ")":
            raise DeclarationError(f"Missing ')' in {source!r}")
        return expr, pos + 1
    if tok == ")":
        raise DeclarationError(f"Unexpected ')' in {source!r}")
    if tok in variables:
        return TVar(tok), pos + 1
    return TCon(tok), pos + 1
