"""Parenthesis nesting depth per character."""

from __future__ import annotations

from collections.abc import Sequence

from keggmod.definition.types import StructuralError


OPEN = "("
CLOSE = ")"


def depth_profile(chars: Sequence[str]) -> tuple[int, ...]:
    """Return the nesting depth at each position of ``chars``.

    ``chars`` is a string or any sequence of single characters. Depth 0 is
    top level. A ``(`` reads the depth before it opens and a ``)`` the depth
    after it closes, so both brackets of an outermost pair read 0.

    Raises StructuralError on a ``)`` without an opener or on ``(`` left
    open at the end.
    """

    profile: list[int] = []
    open_positions: list[int] = []
    for pos, ch in enumerate(chars):
        if ch == OPEN:
            profile.append(len(open_positions))
            open_positions.append(pos)
        elif ch == CLOSE:
            if not open_positions:
                raise StructuralError(
                    f"unbalanced ')' at position {pos}",
                    definition="".join(chars),
                    position=pos,
                )
            open_positions.pop()
            profile.append(len(open_positions))
        else:
            profile.append(len(open_positions))

    if open_positions:
        pos = open_positions[0]
        raise StructuralError(
            f"unclosed '(' at position {pos}",
            definition="".join(chars),
            position=pos,
        )
    return tuple(profile)
