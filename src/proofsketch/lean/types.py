"""Variable typing for generated skeletons."""

from __future__ import annotations

import re
from collections.abc import Iterable

from ..nlp.schemas import EntityKind
from ..tree.schemas import ProofTree

DEFAULT_TYPE = "ℕ"

# Greek letters that are Lean binders or notation, never valid variable names.
RESERVED_SYMBOLS = frozenset({"λ", "Π", "Σ"})

# Checked in order against the lower-cased examples of an entity.
_EXAMPLE_VOCABULARY: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bintegers?\b|ℤ"), "ℤ"),
    (re.compile(r"\bnaturals?\b|ℕ"), "ℕ"),
    (re.compile(r"\breals?\b|ℝ"), "ℝ"),
    (re.compile(r"\brationals?\b|ℚ"), "ℚ"),
    (re.compile(r"\b(?:even|odd|divisible)\b"), "ℤ"),
    (re.compile(r"\bprimes?\b"), "ℕ"),
)
_METADATA_PREFERENCE = ("ℤ", "ℕ", "ℝ")

_TYPE_NOUNS = {
    "integer": "ℤ",
    "natural": "ℕ",
    "real": "ℝ",
    "rational": "ℚ",
    "complex": "ℂ",
}
_DECLARED_TYPE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"\blet\s+([a-zA-Z])\s+be\s+(?:an?\s+)?(?:\w+\s+)?"
        r"(integer|natural|real|rational|complex)",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b([a-zA-Z])\s+is\s+(?:an?\s+)?(?:\w+\s+)?(integer|natural|real|rational|complex)",
        re.IGNORECASE,
    ),
)
_DECLARED_PRIME = re.compile(r"\b([a-zA-Z])\s+is\s+(?:an?\s+)?prime\b", re.IGNORECASE)
_DECLARED_MEMBERSHIP = re.compile(r"\b([a-zA-Z])\s*∈\s*([ℕℤℚℝℂ])")


def lean_identifier(name: str) -> str | None:
    """Map an extracted variable name onto a Lean identifier, or ``None``."""
    if not name or name in RESERVED_SYMBOLS:
        return None
    identifier = re.sub(r"[^\w']+", "_", name).strip("_")
    identifier = re.sub(r"_+", "_", identifier)
    if not identifier or not (identifier[0].isalpha() or identifier[0] == "_"):
        return None
    return identifier


def infer_variable_type(examples: Iterable[str], known_types: Iterable[str] = ()) -> str:
    """Pick a Lean type from an entity's examples, then from the tree's type entities."""
    corpus = " ".join(examples).lower()
    for pattern, lean_type in _EXAMPLE_VOCABULARY:
        if pattern.search(corpus):
            return lean_type

    known = set(known_types)
    for lean_type in _METADATA_PREFERENCE:
        if lean_type in known:
            return lean_type
    return DEFAULT_TYPE


def scan_declared_types(text: str) -> dict[str, str]:
    """Types stated outright in a sentence ("let x be an integer", "p is prime", "x ∈ ℝ")."""
    declared: dict[str, str] = {}
    for pattern in _DECLARED_TYPE_PATTERNS:
        for match in pattern.finditer(text):
            declared.setdefault(match.group(1), _TYPE_NOUNS[match.group(2).lower()])
    for match in _DECLARED_PRIME.finditer(text):
        declared.setdefault(match.group(1), "ℕ")
    for match in _DECLARED_MEMBERSHIP.finditer(text):
        declared.setdefault(match.group(1), match.group(2))
    return declared


def infer_variable_types(tree: ProofTree) -> dict[str, str]:
    """Lean identifier to type for every variable the skeleton should declare.

    Entity examples give a first guess, explicit statements in the
    assumptions refine it and declarations always win.
    """

    non_variables = {
        entity.name for entity in tree.entities if entity.kind is not EntityKind.VARIABLE
    }
    examples: dict[str, list[str]] = {}
    for entity in tree.entities:
        if entity.kind is EntityKind.VARIABLE:
            examples[entity.name] = list(entity.examples)
    for name in tree.metadata.variables:
        if name not in non_variables:
            examples.setdefault(name, [])

    types = {
        name: infer_variable_type(entity_examples, tree.metadata.types)
        for name, entity_examples in examples.items()
    }
    for assumption in tree.assumptions:
        for name, lean_type in scan_declared_types(assumption.text).items():
            if name in types:
                types[name] = lean_type
    for declaration in tree.declarations:
        types[declaration.name] = declaration.lean_type

    resolved: dict[str, str] = {}
    for name, lean_type in types.items():
        identifier = lean_identifier(name)
        if identifier is not None:
            resolved.setdefault(identifier, lean_type)
    return resolved


__all__ = [
    "DEFAULT_TYPE",
    "RESERVED_SYMBOLS",
    "infer_variable_type",
    "infer_variable_types",
    "lean_identifier",
    "scan_declared_types",
]
