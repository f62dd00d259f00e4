"""Core types for KEGG module definition normalization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias


TokenKind: TypeAlias = Literal["identifier", "open", "close", "plus", "comma", "space"]


class StructuralError(ValueError):
    """Raised when a module definition cannot be structured into blocks.

    ``position`` is the character offset of the offending character in the
    pre-processed definition, or ``None`` when the whole input is rejected.
    """

    def __init__(self, message: str, *, definition: str = "", position: int | None = None) -> None:
        super().__init__(message)
        self.definition = definition
        self.position = position


@dataclass(frozen=True, slots=True)
class PreprocessedDefinition:
    """Definition text after typo correction."""

    raw_text: str
    text: str
    flags: dict[str, bool]


@dataclass(frozen=True, slots=True)
class DefinitionToken:
    """One lexical token of a pre-processed definition."""

    index: int
    kind: TokenKind
    value: str
    char_start: int
    char_end: int
    depth: int
    partner: int | None = None

    def __post_init__(self) -> None:
        if self.char_start < 0:
            raise ValueError(f"char_start must be >= 0, got {self.char_start}")
        if self.char_end <= self.char_start:
            raise ValueError(
                f"char_end must be > char_start, got {self.char_end} <= {self.char_start}",
            )
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")
        if self.kind in ("open", "close") and self.partner is None:
            raise ValueError(f"{self.kind} token at {self.char_start} has no partner")


@dataclass(frozen=True, slots=True)
class DefinitionBlock:
    """A top-level AND clause of a definition.

    ``source_text`` is the slice cut at depth-0 spaces, ``complex_text`` has
    its inner spaces rewritten as ``+``, and ``text`` is ``complex_text`` with
    a wrapping bracket pair removed when ``brackets_stripped`` is set.
    """

    index: int
    source_text: str
    complex_text: str
    text: str
    brackets_stripped: bool


@dataclass(frozen=True, slots=True)
class CanonicalDefinition:
    """Full trace of one normalization call."""

    raw_text: str
    preprocessed: PreprocessedDefinition
    blocks: tuple[DefinitionBlock, ...]
    expression: str

    @property
    def block_count(self) -> int:
        return len(self.blocks)
