"""
  Reader: turns source text into node trees.

- Precedence climbing over the operator table in tidyeval.reader.operators
- Emits immutable nodes instead of evaluating anything:

    - numbers, strings, TRUE/FALSE/NULL/Inf/NaN -> Constant
    - names and `backtick names`            -> Symbol
    - f(a, b = 1)                            -> Call(f, [Arg(None, a), Arg("b", 1)])
    - a + b, -a, x$y, x[[i]]                 -> Call of the operator symbol
    - (a)                                    -> Call(`(`, [a])   (grouping survives)
    - { a; b }                               -> Call(`{`, [a, b])
    - if (c) a else b                        -> Call(`if`, [c, a, b])
    - function(x, y = 1) body                -> Call(`function`, [PairList, body])
    - !!x / !!!x                             -> Unquote(x) / Unquote(x, splice=True)
    - f(!!nm := v), f("nm" := v)             -> named argument, name possibly unresolved
"""

from __future__ import annotations

from typing import Optional

from tidyeval.errors import TidySyntaxError, TidyTypeError
from tidyeval.reader.lexer import Token, lex, unescape
from tidyeval.reader.operators import (
    ARGUMENT_POWER,
    KEYWORD_POWER,
    RIGHT,
    UNQUOTE_POWER,
    binary_operator,
    unary_operator,
)
from tidyeval.types.nodes import MISSING, Arg, Call, Constant, Node, PairList, Unquote
from tidyeval.types.symbol import Symbol

RESERVED: dict[str, object] = {
    "TRUE": True,
    "FALSE": False,
    "NULL": None,
    "Inf": float("inf"),
    "NaN": float("nan"),
}
KEYWORDS = frozenset({"if", "else", "function"})


class TokenStream:
    def __init__(self, source: str):
        self.tokens: list[Token] = list(lex(source))
        self.pos = 0
        # > 0 inside (), [[ ]] and argument lists, where newlines mean nothing
        self.nesting = 0

    # --- token access ---
    def _index(self, offset: int, skip_newlines: bool) -> int:
        i = self.pos
        remaining = offset
        while True:
            while skip_newlines and self.tokens[i].type == "newline":
                i += 1
            if remaining == 0 or self.tokens[i].type == "eof":
                return i
            i += 1
            remaining -= 1

    def peek(self, offset: int = 0, skip_newlines: Optional[bool] = None) -> Token:
        skip = self.nesting > 0 if skip_newlines is None else skip_newlines
        return self.tokens[self._index(offset, skip)]

    def advance(self, skip_newlines: Optional[bool] = None) -> Token:
        skip = self.nesting > 0 if skip_newlines is None else skip_newlines
        i = self._index(0, skip)
        tok = self.tokens[i]
        if tok.type != "eof":
            self.pos = i + 1
        return tok

    def skip_newlines(self) -> None:
        while self.tokens[self.pos].type == "newline":
            self.pos += 1

    def at(self, value: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok.type == "op" and tok.value == value

    def expect(self, value: str) -> Token:
        tok = self.advance()
        if tok.type != "op" or tok.value != value:
            raise TidySyntaxError(f"Expected '{value}' but found {_describe(tok)}", tok.pos)
        return tok

    # --- grammar ---
    def parse_program(self) -> list[Node]:
        exprs: list[Node] = []
        while True:
            while self.peek(skip_newlines=True).type == "op" and self.peek(skip_newlines=True).value == ";":
                self.advance(skip_newlines=True)
            if self.peek(skip_newlines=True).type == "eof":
                return exprs
            self.skip_newlines()
            exprs.append(self.parse_expression(0))
            tok = self.peek(skip_newlines=False)
            if tok.type not in ("newline", "eof") and not (tok.type == "op" and tok.value == ";"):
                raise TidySyntaxError(f"Unexpected {_describe(tok)}", tok.pos)

    def parse_expression(self, min_power: int) -> Node:
        left = self.parse_prefix()
        while True:
            tok = self.peek()
            if tok.type == "op" and tok.value == "(":
                left = self.parse_call(left)
                continue
            if tok.type == "op" and tok.value == "[[":
                left = self.parse_index(left)
                continue
            if tok.type not in ("op", "special"):
                break
            info = binary_operator(tok.value)
            if info is None:
                break
            power, assoc = info
            if power <= min_power:
                break
            self.advance()
            if tok.value == "$":
                right = self.parse_dollar_name()
            else:
                self.skip_newlines()
                right = self.parse_expression(power - 1 if assoc == RIGHT else power)
            left = Call(Symbol(tok.value), [left, right])
        return left

    def parse_prefix(self) -> Node:
        tok = self.advance()
        if tok.type == "number":
            return Constant(_number(tok.value))
        if tok.type == "string":
            return Constant(unescape(tok.value[1:-1]))
        if tok.type == "backtick":
            return Symbol(unescape(tok.value[1:-1]))
        if tok.type == "name":
            if tok.value in RESERVED:
                return Constant(RESERVED[tok.value])
            if tok.value == "function":
                return self.parse_function()
            if tok.value == "if":
                return self.parse_if()
            if tok.value == "else":
                raise TidySyntaxError("Unexpected 'else'", tok.pos)
            return Symbol(tok.value)
        if tok.type == "op":
            if tok.value == "(":
                self.nesting += 1
                try:
                    inner = self.parse_expression(0)
                    self.expect(")")
                finally:
                    self.nesting -= 1
                return Call(Symbol("("), [inner])
            if tok.value == "{":
                return self.parse_block()
            if tok.value in ("!!", "!!!"):
                self.skip_newlines()
                payload = self.parse_expression(UNQUOTE_POWER)
                return Unquote(payload, splice=tok.value == "!!!")
            power = unary_operator(tok.value)
            if power is not None:
                self.skip_newlines()
                operand = self.parse_expression(power)
                return Call(Symbol(tok.value), [operand])
        if tok.type == "eof":
            raise TidySyntaxError("Unexpected end of input", tok.pos)
        raise TidySyntaxError(f"Unexpected {_describe(tok)}", tok.pos)

    def parse_block(self) -> Node:
        saved, self.nesting = self.nesting, 0
        try:
            body: list[Node] = []
            while True:
                tok = self.peek(skip_newlines=True)
                if tok.type == "op" and tok.value == ";":
                    self.advance(skip_newlines=True)
                    continue
                if tok.type == "op" and tok.value == "}":
                    self.advance(skip_newlines=True)
                    return Call(Symbol("{"), body)
                if tok.type == "eof":
                    raise TidySyntaxError("Unmatched '{'", tok.pos)
                self.skip_newlines()
                body.append(self.parse_expression(0))
                tok = self.peek(skip_newlines=False)
                if tok.type not in ("newline",) and not (tok.type == "op" and tok.value in (";", "}")):
                    raise TidySyntaxError(f"Unexpected {_describe(tok)}", tok.pos)
        finally:
            self.nesting = saved

    def parse_call(self, fn: Node) -> Node:
        self.expect("(")
        self.nesting += 1
        try:
            args: list[Arg] = []
            if self.at(")"):
                self.advance()
                return Call(fn, args)
            while True:
                args.append(self.parse_argument())
                tok = self.advance()
                if tok.type == "op" and tok.value == ")":
                    return Call(fn, args)
                if not (tok.type == "op" and tok.value == ","):
                    raise TidySyntaxError(f"Expected ',' or ')' but found {_describe(tok)}", tok.pos)
        finally:
            self.nesting -= 1

    def parse_argument(self) -> Arg:
        tok = self.peek()
        if tok.type in ("name", "string", "backtick") and self.at("=", 1):
            if tok.type == "name" and (tok.value in KEYWORDS or tok.value in RESERVED):
                raise TidySyntaxError(f"Cannot use '{tok.value}' as an argument name", tok.pos)
            self.advance()
            self.advance()
            name = tok.value if tok.type == "name" else unescape(tok.value[1:-1])
            return Arg(name, self.parse_expression(ARGUMENT_POWER))
        value = self.parse_expression(ARGUMENT_POWER)
        if self.at(":="):
            walrus = self.advance()
            return Arg(_walrus_name(value, walrus.pos), self.parse_expression(ARGUMENT_POWER))
        return Arg(None, value)

    def parse_index(self, target: Node) -> Node:
        self.expect("[[")
        self.nesting += 1
        try:
            index = self.parse_expression(0)
            self.expect("]]")
        finally:
            self.nesting -= 1
        return Call(Symbol("[["), [target, index])

    def parse_dollar_name(self) -> Node:
        tok = self.advance()
        if tok.type == "name" and tok.value not in RESERVED:
            return Symbol(tok.value)
        if tok.type == "backtick":
            return Symbol(unescape(tok.value[1:-1]))
        if tok.type == "string":
            return Constant(unescape(tok.value[1:-1]))
        raise TidySyntaxError(f"Expected a name after '$' but found {_describe(tok)}", tok.pos)

    def parse_function(self) -> Node:
        self.expect("(")
        self.nesting += 1
        try:
            entries: list[Arg] = []
            if self.at(")"):
                self.advance()
            else:
                while True:
                    tok = self.advance()
                    if tok.type == "name" and tok.value not in KEYWORDS and tok.value not in RESERVED:
                        name = tok.value
                    elif tok.type == "backtick":
                        name = unescape(tok.value[1:-1])
                    else:
                        raise TidySyntaxError(f"Expected a formal argument name but found {_describe(tok)}", tok.pos)
                    default: Node = MISSING
                    if self.at("="):
                        self.advance()
                        default = self.parse_expression(ARGUMENT_POWER)
                    entries.append(Arg(name, default))
                    tok = self.advance()
                    if tok.type == "op" and tok.value == ")":
                        break
                    if not (tok.type == "op" and tok.value == ","):
                        raise TidySyntaxError(f"Expected ',' or ')' but found {_describe(tok)}", tok.pos)
        finally:
            self.nesting -= 1
        self.skip_newlines()
        try:
            formals = PairList(entries)
        except TidyTypeError as exc:
            raise TidySyntaxError(str(exc)) from exc
        body = self.parse_expression(KEYWORD_POWER)
        return Call(Symbol("function"), [formals, body])

    def parse_if(self) -> Node:
        self.expect("(")
        self.nesting += 1
        try:
            condition = self.parse_expression(0)
            self.expect(")")
        finally:
            self.nesting -= 1
        self.skip_newlines()
        consequent = self.parse_expression(KEYWORD_POWER)
        tok = self.peek(skip_newlines=True)
        if tok.type == "name" and tok.value == "else":
            self.advance(skip_newlines=True)
            self.skip_newlines()
            alternative = self.parse_expression(KEYWORD_POWER)
            return Call(Symbol("if"), [condition, consequent, alternative])
        return Call(Symbol("if"), [condition, consequent])


def _number(text: str) -> int | float:
    if text.endswith("L"):
        return int(float(text[:-1]))
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def _walrus_name(target: Node, pos: int) -> str | Unquote:
    if isinstance(target, Symbol):
        return target.name
    if isinstance(target, Constant) and isinstance(target.value, str):
        return target.value
    if isinstance(target, Unquote) and not target.splice:
        return target
    raise TidySyntaxError("The left-hand side of `:=` must be a name, a string or `!!`", pos)


def _describe(tok: Token) -> str:
    if tok.type == "eof":
        return "end of input"
    if tok.type == "newline":
        return "newline"
    return f"'{tok.value}'"


def parse_exprs(source: str) -> list[Node]:
    """Read every newline- or `;`-separated expression in `source`."""
    if not isinstance(source, str):
        raise TidyTypeError(f"Expected source text, not {type(source).__name__}")
    return TokenStream(source).parse_program()


def parse_expr(source: str) -> Node:
    """Read exactly one expression."""
    exprs = parse_exprs(source)
    if len(exprs) != 1:
        raise TidySyntaxError(f"Expected exactly one expression, found {len(exprs)}")
    return exprs[0]
