"""Typo correction applied to raw module definitions."""

from __future__ import annotations

import re

from keggmod.definition.types import PreprocessedDefinition


# Ordered; later rules assume earlier ones already normalized whitespace.
_RULES: tuple[tuple[str, re.Pattern[str], str], ...] = (
    ("loose_comma_removed", re.compile(r" ,"), ","),
    ("loose_comma_removed", re.compile(r", "), ","),
    ("space_run_collapsed", re.compile(r" {2,}"), " "),
    ("separator_removed", re.compile(r" -- "), " "),
    ("separator_removed", re.compile(r"^-- "), ""),
    ("separator_removed", re.compile(r" --$"), ""),
)


def _apply_rules(text: str, flags: dict[str, bool]) -> str:
    for flag, pattern, replacement in _RULES:
        text, count = pattern.subn(replacement, text)
        if count:
            flags[flag] = True
    return text


def preprocess_definition(text: str) -> PreprocessedDefinition:
    """Remove known transcription inconsistencies from a definition.

    The rule list is re-applied until the text is stable, so the result is
    a fixed point: preprocessing it again changes nothing.
    """

    raw = text or ""
    flags = {
        "loose_comma_removed": False,
        "space_run_collapsed": False,
        "separator_removed": False,
    }
    current = raw
    while True:
        updated = _apply_rules(current, flags)
        if updated == current:
            break
        current = updated

    return PreprocessedDefinition(raw_text=raw, text=current, flags=flags)
