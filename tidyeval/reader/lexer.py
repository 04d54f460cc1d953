"""
  Lexer for the expression language.

- Regex driven, one named group per token class
- Newlines are emitted as tokens; the parser decides where they matter
- Whitespace and `#` comments are dropped
"""

from __future__ import annotations

import re
from typing import Iterator, NamedTuple

from tidyeval.errors import TidySyntaxError


TOKEN_RE = re.compile(
    r"(?P<newline>\n)"  # statement separator (outside brackets)
    r"|(?P<space>[ \t\r\f]+)"
    r"|(?P<comment>#[^\n]*)"  # single-line comment
    r"|(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?L?)"  # 1, 1.5, .5, 1e3, 2L
    r'|(?P<string>"(?:\\.|[^\\"])*"|\'(?:\\.|[^\\\'])*\')'  # "double" or 'single'
    r"|(?P<backtick>`(?:\\.|[^\\`])*`)"  # `non syntactic name`
    r"|(?P<name>(?:[A-Za-z]|\.(?!\d))[A-Za-z0-9._]*)"  # identifiers, `...`
    r"|(?P<special>%[^%\n]*%)"  # %any% operators
    r"|(?P<op>!!!|!!|<-|:=|<=|>=|==|!=|&&|\|\||\[\[|\]\]|[-+*/^<>!&|~=$:(){},;])",
    re.DOTALL,
)

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "`": "`",
}


class Token(NamedTuple):
    type: str
    value: str
    pos: int


def unescape(body: str) -> str:
    """Resolve backslash escapes in the body of a string or backtick name."""
    out: list[str] = []
    i = 0
    n = len(body)
    while i < n:
        c = body[i]
        if c == "\\" and i + 1 < n:
            nxt = body[i + 1]
            out.append(ESCAPES.get(nxt, nxt))
            i += 2
        else:
            out.append(c)
            i += 1
    return "".join(out)


def lex(source: str) -> Iterator[Token]:
    """Token generator: yields Token(type, value, pos) tuples."""
    pos = 0
    n = len(source)
    while pos < n:
        m = TOKEN_RE.match(source, pos)
        if not m:
            raise TidySyntaxError(f"Unexpected character {source[pos]!r}", pos)
        kind = m.lastgroup
        if kind not in ("space", "comment"):
            yield Token(kind, m.group(kind), pos)
        pos = m.end()
    yield Token("eof", "", n)
