"""Block splitting and wrapping-bracket removal."""

from __future__ import annotations

from collections.abc import Sequence

from keggmod.definition.types import DefinitionBlock, DefinitionToken


def _is_boundary(token: DefinitionToken) -> bool:
    return token.kind == "space" and token.depth == 0


def group_block_tokens(tokens: Sequence[DefinitionToken]) -> list[list[DefinitionToken]]:
    """Group tokens into blocks, consuming every depth-0 space.

    Always returns ``boundary_count + 1`` groups; a group may be empty when
    two boundaries are adjacent or a boundary sits at either end.
    """

    groups: list[list[DefinitionToken]] = [[]]
    for token in tokens:
        if _is_boundary(token):
            groups.append([])
        else:
            groups[-1].append(token)
    return groups


def wraps_whole_block(tokens: Sequence[DefinitionToken]) -> bool:
    """True when the first token is ``(`` and its partner is the last token."""
    if len(tokens) < 2:
        return False
    first, last = tokens[0], tokens[-1]
    return first.kind == "open" and last.kind == "close" and first.partner == last.index


def build_block(index: int, text: str, tokens: Sequence[DefinitionToken]) -> DefinitionBlock:
    """Cut one block out of ``text`` and apply complex joining and stripping."""
    if tokens:
        source = text[tokens[0].char_start:tokens[-1].char_end]
    else:
        source = ""
    complex_text = source.replace(" ", "+")
    stripped = wraps_whole_block(tokens)
    return DefinitionBlock(
        index=index,
        source_text=source,
        complex_text=complex_text,
        text=complex_text[1:-1] if stripped else complex_text,
        brackets_stripped=stripped,
    )


def split_blocks(text: str, tokens: Sequence[DefinitionToken]) -> list[DefinitionBlock]:
    """Split a pre-processed definition into its ordered top-level blocks."""
    return [
        build_block(idx, text, group)
        for idx, group in enumerate(group_block_tokens(tokens))
    ]
