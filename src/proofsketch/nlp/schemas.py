"""Schemas shared by the sentence classifier and the entity extractor."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SentenceCategory(str, Enum):
    """Proof-technique category assigned to a single sentence."""

    INDUCTION = "induction"
    CONTRADICTION = "contradiction"
    CASE = "case"
    DEFINITION = "definition"
    EXISTENTIAL = "existential"
    UNIVERSAL = "universal"
    IMPLICATION = "implication"
    ASSUMPTION = "assumption"
    STEP = "step"
    CONCLUSION = "conclusion"
    ARITHMETIC = "arithmetic"
    ALGEBRAIC = "algebraic"
    SET_THEORY = "set_theory"
    OTHER = "other"


class EntityKind(str, Enum):
    """Kinds of mathematical objects recognised in sentence text."""

    VARIABLE = "variable"
    TYPE = "type"
    FUNCTION = "function"
    CONSTANT = "constant"
    PROPERTY = "property"
    SET = "set"
    CONCEPT = "concept"


class ClassifiedSentence(BaseModel):
    """A sentence tagged with exactly one category."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Sentence text with whitespace collapsed")
    category: SentenceCategory = Field(description="First matching classification rule")


class Entity(BaseModel):
    """A named object found in the proof text, deduplicated by name."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: EntityKind
    examples: list[str] = Field(
        default_factory=list,
        max_length=3,
        description="Up to three distinct source snippets that mentioned the entity",
    )


def sentence_text(item: Any) -> str | None:
    """Return the text of a sentence-like item, or ``None`` when it has none.

    Accepts :class:`ClassifiedSentence` instances, mappings with a ``text`` key
    and bare strings. Anything else (including blank text) yields ``None``.
    """

    if isinstance(item, str):
        text = item
    elif isinstance(item, Mapping):
        text = item.get("text")
    else:
        text = getattr(item, "text", None)

    if not isinstance(text, str) or not text.strip():
        return None
    return text


def sentence_category(item: Any) -> SentenceCategory:
    """Return the category of a sentence-like item, defaulting to ``other``."""

    if isinstance(item, Mapping):
        raw = item.get("category", item.get("type"))
    else:
        raw = getattr(item, "category", None)

    if isinstance(raw, SentenceCategory):
        return raw
    try:
        return SentenceCategory(raw)
    except (TypeError, ValueError):
        return SentenceCategory.OTHER


__all__ = [
    "ClassifiedSentence",
    "Entity",
    "EntityKind",
    "SentenceCategory",
    "sentence_category",
    "sentence_text",
]
