"""Module definition normalization: preprocessing, lexing, blocks, canonical form."""

from keggmod.definition.blocks import (
    build_block,
    group_block_tokens,
    split_blocks,
    wraps_whole_block,
)
from keggmod.definition.canonical import (
    canonical_definition_to_dict,
    canonicalize_blocks,
    normalize_module_definition,
    normalize_module_definition_detailed,
)
from keggmod.definition.depth import depth_profile
from keggmod.definition.lexer import lex_definition
from keggmod.definition.preprocess import preprocess_definition
from keggmod.definition.types import (
    CanonicalDefinition,
    DefinitionBlock,
    DefinitionToken,
    PreprocessedDefinition,
    StructuralError,
    TokenKind,
)

__all__ = [
    "CanonicalDefinition",
    "DefinitionBlock",
    "DefinitionToken",
    "PreprocessedDefinition",
    "StructuralError",
    "TokenKind",
    "build_block",
    "canonical_definition_to_dict",
    "canonicalize_blocks",
    "depth_profile",
    "group_block_tokens",
    "lex_definition",
    "normalize_module_definition",
    "normalize_module_definition_detailed",
    "preprocess_definition",
    "split_blocks",
    "wraps_whole_block",
]
