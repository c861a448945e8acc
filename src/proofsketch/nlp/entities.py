"""Rule-based extraction of mathematical entities from sentence text."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .schemas import Entity, EntityKind, sentence_text

LOG = logging.getLogger(__name__)

MAX_EXAMPLES = 3
MAX_EXAMPLE_LENGTH = 80

# Single letters that are almost always ordinary English words.
STOP_LETTERS = frozenset({"a", "A", "I", "O"})

GREEK_NAMES = (
    "alpha",
    "beta",
    "gamma",
    "delta",
    "epsilon",
    "theta",
    "lambda",
    "mu",
    "sigma",
    "pi",
    "phi",
    "psi",
    "omega",
)

_SINGLE_LETTER = re.compile(r"(?<!['’])\b([a-zA-Z])\b", re.ASCII)
_SUBSCRIPTED = re.compile(r"\b([a-zA-Z])_?[{(]?(\d+)[})]?", re.ASCII)
_GREEK_NAME = re.compile(r"\b(" + "|".join(GREEK_NAMES) + r")\b", re.IGNORECASE)
_GREEK_SYMBOL = re.compile(r"[α-ωΑ-Ω]")

# (pattern, symbol, label); the bare-letter fallbacks are case-sensitive.
TYPE_PATTERNS: tuple[tuple[re.Pattern[str], str, str], ...] = (
    (re.compile(r"(?i:\b(?:integers?|int)\b)|ℤ|\bZ(?=\s|$)"), "ℤ", "Integer"),
    (re.compile(r"(?i:\bnaturals?\b)|ℕ|\bN(?=\s|$)"), "ℕ", "Natural"),
    (re.compile(r"(?i:\breals?\b)|ℝ|\bR(?=\s|$)"), "ℝ", "Real"),
    (re.compile(r"(?i:\brationals?\b)|ℚ|\bQ(?=\s|$)"), "ℚ", "Rational"),
    (re.compile(r"(?i:\bcomplex\b)|ℂ|\bC(?=\s|$)"), "ℂ", "Complex"),
    (re.compile(r"(?i:\b(?:bool(?:ean)?|propositions?)\b)|\bProp\b"), "Prop", "Proposition"),
)

KNOWN_FUNCTIONS = (
    "sin",
    "cos",
    "tan",
    "log",
    "ln",
    "exp",
    "sqrt",
    "abs",
    "floor",
    "ceil",
    "gcd",
    "lcm",
    "min",
    "max",
)
_KNOWN_FUNCTION = re.compile(r"\b(" + "|".join(KNOWN_FUNCTIONS) + r")\b", re.IGNORECASE)
_CUSTOM_FUNCTION = re.compile(r"\b([a-zA-Z])\(", re.ASCII)

CONSTANT_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"π|\bpi\b", re.IGNORECASE), "π"),
    # Euler's number, unless it is being assigned to.
    (re.compile(r"\be\b(?!\s*=)", re.ASCII), "e"),
    (re.compile(r"∞|\binfinity\b", re.IGNORECASE), "∞"),
    (re.compile(r"\b0\b"), "0"),
    (re.compile(r"\b1\b"), "1"),
)

PROPERTIES = (
    "even",
    "odd",
    "prime",
    "composite",
    "divisible",
    "factor",
    "multiple",
    "positive",
    "negative",
    "nonzero",
    "continuous",
    "differentiable",
    "integrable",
    "bounded",
    "unbounded",
    "convergent",
    "divergent",
    "injective",
    "surjective",
    "bijective",
    "associative",
    "commutative",
    "distributive",
)
_PROPERTY_PATTERNS = tuple(
    (name, re.compile(rf"\b{name}\b", re.IGNORECASE)) for name in PROPERTIES
)

_SET_DEFINITION = re.compile(r"\b([A-Z])\s*=\s*\{")
_SET_VOCABULARY = re.compile(r"\b(?:set|subset|superset|union|intersection)\b", re.IGNORECASE)

# Kinds allowed to replace an entity first recorded as a plain variable.
_UPGRADES_VARIABLE = frozenset({EntityKind.FUNCTION, EntityKind.SET, EntityKind.CONSTANT})


def extract_variables(text: str) -> list[str]:
    """Return variable-like tokens, each kind in order of first appearance.

    Covers bare single letters (minus :data:`STOP_LETTERS`), subscripted
    identifiers such as ``x_1``, ``x(2)`` or ``x{3}``, spelled-out Greek
    letter names (lower-cased) and literal Greek symbols.
    """

    if not isinstance(text, str) or not text:
        return []

    found: dict[str, None] = {}
    for match in _SINGLE_LETTER.finditer(text):
        if match.group(1) not in STOP_LETTERS:
            found.setdefault(match.group(1))
    for match in _SUBSCRIPTED.finditer(text):
        found.setdefault(match.group(0))
    for match in _GREEK_NAME.finditer(text):
        found.setdefault(match.group(1).lower())
    for match in _GREEK_SYMBOL.finditer(text):
        found.setdefault(match.group(0))
    return list(found)


@dataclass
class _EntityRecord:
    name: str
    kind: EntityKind
    examples: list[str] = field(default_factory=list)


class EntityExtractor:
    """Scan sentences for entities and merge the results by name."""

    def __init__(
        self,
        max_examples: int = MAX_EXAMPLES,
        max_example_length: int = MAX_EXAMPLE_LENGTH,
    ) -> None:
        self.max_examples = max_examples
        self.max_example_length = max_example_length

    def extract(self, sentences: Iterable[Any] | None) -> list[Entity]:
        """Extract entities from a sequence of sentences.

        Returns an empty list for ``None``, strings, non-iterables, or
        sequences that contain no usable text.
        """

        if sentences is None or isinstance(sentences, (str, bytes)):
            return []
        try:
            items = list(sentences)
        except TypeError:
            LOG.debug("Ignoring non-iterable sentence input of type %s", type(sentences))
            return []

        records: dict[str, _EntityRecord] = {}
        for item in items:
            text = sentence_text(item)
            if text is None:
                LOG.debug("Skipping sentence without text: %r", item)
                continue
            self._scan(text, records)

        return [
            Entity(name=record.name, kind=record.kind, examples=record.examples)
            for record in records.values()
        ]

    def _add(
        self,
        records: dict[str, _EntityRecord],
        name: str,
        kind: EntityKind,
        example: str,
    ) -> None:
        record = records.get(name)
        if record is None:
            record = records[name] = _EntityRecord(name=name, kind=kind)
        elif record.kind is EntityKind.VARIABLE and kind in _UPGRADES_VARIABLE:
            record.kind = kind

        snippet = example[: self.max_example_length]
        if len(record.examples) < self.max_examples and snippet not in record.examples:
            record.examples.append(snippet)

    def _scan(self, text: str, records: dict[str, _EntityRecord]) -> None:
        for name in extract_variables(text):
            self._add(records, name, EntityKind.VARIABLE, text)

        for pattern, symbol, label in TYPE_PATTERNS:
            if pattern.search(text):
                self._add(records, symbol, EntityKind.TYPE, f"{label} number/type")

        for match in _KNOWN_FUNCTION.finditer(text):
            self._add(records, match.group(1).lower(), EntityKind.FUNCTION, text)
        for match in _CUSTOM_FUNCTION.finditer(text):
            name = match.group(1)
            if name not in STOP_LETTERS:
                self._add(records, name, EntityKind.FUNCTION, text)

        for pattern, name in CONSTANT_PATTERNS:
            if pattern.search(text):
                self._add(records, name, EntityKind.CONSTANT, text)

        for name, pattern in _PROPERTY_PATTERNS:
            if pattern.search(text):
                self._add(records, name, EntityKind.PROPERTY, text)

        for match in _SET_DEFINITION.finditer(text):
            self._add(records, match.group(1), EntityKind.SET, text)
        if _SET_VOCABULARY.search(text):
            self._add(records, "Set", EntityKind.CONCEPT, text)


def extract_entities(sentences: Iterable[Any] | None) -> list[Entity]:
    """Extract entities with the default limits."""
    return EntityExtractor().extract(sentences)


def entities_of_kind(entities: Iterable[Entity], kind: EntityKind) -> list[Entity]:
    """Filter entities by kind."""
    return [entity for entity in entities if entity.kind is kind]


__all__ = [
    "GREEK_NAMES",
    "KNOWN_FUNCTIONS",
    "PROPERTIES",
    "STOP_LETTERS",
    "EntityExtractor",
    "entities_of_kind",
    "extract_entities",
    "extract_variables",
]
