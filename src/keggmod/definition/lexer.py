"""Tokenizer for pre-processed module definitions."""

from __future__ import annotations

import re

from keggmod.definition.depth import depth_profile
from keggmod.definition.types import DefinitionToken, StructuralError, TokenKind


_PUNCTUATION: dict[str, TokenKind] = {
    "(": "open",
    ")": "close",
    "+": "plus",
    ",": "comma",
    " ": "space",
}

# Output operators; a definition already using them cannot be canonicalized.
_RESERVED_RE = re.compile(r"[&|]")

_IDENTIFIER_RE = re.compile(r"[^ +,()]+")


def lex_definition(text: str) -> list[DefinitionToken]:
    """Split a pre-processed definition into tokens.

    Each token carries the enclosing nesting depth of its first character and,
    for brackets, the index of the matching bracket token.
    """

    if not text.strip():
        raise StructuralError("empty module definition", definition=text)
    reserved = _RESERVED_RE.search(text)
    if reserved is not None:
        raise StructuralError(
            f"reserved operator {reserved.group()!r} at position {reserved.start()}",
            definition=text,
            position=reserved.start(),
        )

    profile = depth_profile(text)

    spans: list[tuple[TokenKind, int, int]] = []
    pos = 0
    while pos < len(text):
        kind = _PUNCTUATION.get(text[pos])
        if kind is not None:
            spans.append((kind, pos, pos + 1))
            pos += 1
            continue
        m = _IDENTIFIER_RE.match(text, pos)
        assert m is not None
        spans.append(("identifier", pos, m.end()))
        pos = m.end()

    partners: dict[int, int] = {}
    stack: list[int] = []
    for idx, (kind, _, _) in enumerate(spans):
        if kind == "open":
            stack.append(idx)
        elif kind == "close":
            opener = stack.pop()
            partners[opener] = idx
            partners[idx] = opener

    return [
        DefinitionToken(
            index=idx,
            kind=kind,
            value=text[start:end],
            char_start=start,
            char_end=end,
            depth=profile[start],
            partner=partners.get(idx),
        )
        for idx, (kind, start, end) in enumerate(spans)
    ]
