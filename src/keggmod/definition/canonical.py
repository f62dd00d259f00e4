"""Canonical ``&``/``|`` form of KEGG module definitions.

A KEGG module DEFINITION uses a space both to separate top-level blocks and
to join the members of a molecular complex. The canonical form keeps the
space only between blocks, writes complex membership and every other AND as
``&`` and every OR as ``|``::

    >>> normalize_module_definition("(K00001,K00002) K00003+K00004")
    'K00001|K00002 K00003&K00004'
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from keggmod.definition.blocks import split_blocks
from keggmod.definition.lexer import lex_definition
from keggmod.definition.preprocess import preprocess_definition
from keggmod.definition.types import CanonicalDefinition, DefinitionBlock


BLOCK_SEPARATOR = " "
OPERATOR_MAP = str.maketrans({"+": "&", ",": "|"})


def canonicalize_blocks(blocks: Sequence[DefinitionBlock]) -> str:
    """Join blocks with a space and rewrite ``+``/``,`` as ``&``/``|``."""
    joined = BLOCK_SEPARATOR.join(block.text for block in blocks)
    return joined.translate(OPERATOR_MAP)


def normalize_module_definition_detailed(raw: str) -> CanonicalDefinition:
    """Normalize a definition and keep every intermediate stage.

    Raises StructuralError when the definition is empty, already contains
    ``&``/``|``, or has unbalanced brackets.
    """

    preprocessed = preprocess_definition(raw)
    tokens = lex_definition(preprocessed.text)
    blocks = tuple(split_blocks(preprocessed.text, tokens))
    return CanonicalDefinition(
        raw_text=preprocessed.raw_text,
        preprocessed=preprocessed,
        blocks=blocks,
        expression=canonicalize_blocks(blocks),
    )


def normalize_module_definition(raw: str) -> str:
    """Return the canonical logical expression for a raw definition."""
    return normalize_module_definition_detailed(raw).expression


def canonical_definition_to_dict(result: CanonicalDefinition) -> dict[str, Any]:
    """JSON-ready payload for a normalization trace."""
    return {
        "raw_text": result.raw_text,
        "preprocessed_text": result.preprocessed.text,
        "preprocess_flags": dict(sorted(result.preprocessed.flags.items())),
        "block_count": result.block_count,
        "blocks": [
            {
                "index": block.index,
                "source_text": block.source_text,
                "complex_text": block.complex_text,
                "text": block.text,
                "brackets_stripped": block.brackets_stripped,
            }
            for block in result.blocks
        ],
        "expression": result.expression,
    }
