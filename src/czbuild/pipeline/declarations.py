"""Declaration Extractor.

Finds the top-level function definitions of a transpiled unit so the Header
Synthesizer can export their prototypes.

The text is split into tokens (identifiers, literals, punctuation) with
comments and preprocessor lines dropped. At brace depth zero the tokens of
each item are collected until a ``;`` or ``{``. An item closed by ``{`` is
accepted as a function definition only if it has the shape

    <type tokens> <name> ( <params> ) {

where the type tokens are identifiers and ``*``. Because the recognizer works
on tokens rather than lines, a signature split over several lines is found
too. Definitions that cannot be exported are skipped:

    - ``static`` functions (internal linkage)
    - ``typedef``, ``struct``/``enum``/``union`` bodies and initializers
    - items longer than MAX_SIGNATURE_TOKENS
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set

from ..models import Declaration

logger = logging.getLogger(__name__)

MAX_SIGNATURE_TOKENS = 64

C_KEYWORDS = frozenset(
    {
        "auto", "break", "case", "char", "const", "continue", "default", "do",
        "double", "else", "enum", "extern", "float", "for", "goto", "if",
        "inline", "int", "long", "register", "restrict", "return", "short",
        "signed", "sizeof", "static", "struct", "switch", "typedef", "union",
        "unsigned", "void", "volatile", "while", "_Bool", "_Static_assert",
        "_Thread_local", "_Noreturn", "_Alignas", "_Alignof",
    }
)

# Storage classes and statements that disqualify an item from export.
_REJECTED_TYPE_WORDS = frozenset({"static", "typedef", "return", "if", "else", "while", "for", "do", "switch", "case", "goto", "sizeof"})

_TOKEN_RE = re.compile(
    r"""
      (?P<newline>\n)
    | (?P<space>[ \t\r\f\v]+|\\\n)
    | (?P<comment>//[^\n]*|/\*.*?\*/|/\*.*)
    | (?P<string>"(?:\\.|[^"\\\n])*"?)
    | (?P<char>'(?:\\.|[^'\\\n])*'?)
    | (?P<ident>[A-Za-z_]\w*)
    | (?P<number>\.?\d(?:[eEpP][+-]|[\w.])*)
    | (?P<punct>\.\.\.|->|\S)
    """,
    re.VERBOSE | re.DOTALL,
)

# Rest of a preprocessor line, following backslash continuations.
_PREPROCESSOR_RE = re.compile(r"(?:\\.|[^\\\n])*", re.DOTALL)

_WORDISH = ("ident", "number", "string", "char")


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int

    @property
    def wordish(self) -> bool:
        return self.kind in _WORDISH


def tokenize(text: str) -> Iterator[Token]:
    """Split C text into tokens, dropping whitespace, comments and preprocessor lines."""
    pos = 0
    line = 1
    at_line_start = True
    end = len(text)
    while pos < end:
        match = _TOKEN_RE.match(text, pos)
        if match is None:  # pragma: no cover - the punct group matches any non-space
            break
        kind = match.lastgroup
        value = match.group()
        pos = match.end()

        if kind == "punct" and value == "#" and at_line_start:
            rest = _PREPROCESSOR_RE.match(text, pos)
            if rest is not None:
                line += rest.group().count("\n")
                pos = rest.end()
            continue

        if kind == "newline":
            line += 1
            at_line_start = True
            continue
        if kind in ("space", "comment"):
            line += value.count("\n")
            continue

        at_line_start = False
        yield Token(kind, value, line)


def join_tokens(tokens: List[Token]) -> str:
    """Render tokens back to C with conventional spacing (``char *argv[]``)."""
    out: List[str] = []
    prev: Optional[Token] = None
    for tok in tokens:
        if prev is not None and _needs_space(prev, tok):
            out.append(" ")
        out.append(tok.text)
        prev = tok
    return "".join(out)


def _needs_space(prev: Token, tok: Token) -> bool:
    if prev.text == ",":
        return True
    if tok.wordish:
        return prev.wordish
    if tok.text == "*":
        return prev.wordish or prev.text == ")"
    if tok.text == "(":
        return prev.wordish
    if tok.text == "...":
        return prev.text != ","
    return False


def _matching_open_paren(tokens: List[Token]) -> Optional[int]:
    depth = 0
    for index in range(len(tokens) - 1, -1, -1):
        text = tokens[index].text
        if text == ")":
            depth += 1
        elif text == "(":
            depth -= 1
            if depth == 0:
                return index
    return None


def recognize(tokens: List[Token]) -> Optional[Declaration]:
    """Match one top-level item (the tokens before its ``{``) against the
    function-definition shape.

    Returns:
        The Declaration, or None if the item is not an exportable function
    """
    if len(tokens) < 4 or len(tokens) > MAX_SIGNATURE_TOKENS:
        return None
    if tokens[-1].text != ")":
        return None

    open_index = _matching_open_paren(tokens)
    if open_index is None or open_index < 2:
        return None

    head = tokens[:open_index]
    params = tokens[open_index + 1 : -1]
    name = head[-1]
    type_tokens = head[:-1]

    if name.kind != "ident" or name.text in C_KEYWORDS:
        return None
    if type_tokens[0].kind != "ident":
        return None
    for tok in type_tokens:
        if tok.text in _REJECTED_TYPE_WORDS:
            return None
        if tok.kind != "ident" and tok.text != "*":
            return None
    if any(tok.text in ("=", ";", "{", "}") for tok in params):
        return None

    return Declaration(
        name=name.text,
        return_type=join_tokens(type_tokens),
        params=join_tokens(params),
        line=type_tokens[0].line,
    )


def extract_declarations(text: str) -> List[Declaration]:
    """Extract exportable function definitions from one unit, in source order.

    A name defined twice is recorded once, at its first definition.
    """
    declarations: List[Declaration] = []
    seen: Set[str] = set()
    item: List[Token] = []
    depth = 0

    for tok in tokenize(text):
        if depth > 0:
            if tok.text == "{":
                depth += 1
            elif tok.text == "}":
                depth -= 1
            continue

        if tok.text == "{":
            decl = recognize(item)
            if decl is not None and decl.name not in seen:
                seen.add(decl.name)
                declarations.append(decl)
            item = []
            depth = 1
        elif tok.text in (";", "}"):
            item = []
        elif len(item) <= MAX_SIGNATURE_TOKENS:
            item.append(tok)

    logger.debug(f"Extracted {len(declarations)} declaration(s): {', '.join(d.name for d in declarations)}")
    return declarations
