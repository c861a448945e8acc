"""Sentence splitting and rule-based proof-technique classification."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from .schemas import ClassifiedSentence, SentenceCategory

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """A category together with the patterns that trigger it."""

    category: SentenceCategory
    patterns: tuple[re.Pattern[str], ...]

    def matches(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.patterns)


def _rule(category: SentenceCategory, *patterns: str) -> ClassificationRule:
    return ClassificationRule(
        category=category,
        patterns=tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns),
    )


# Evaluated top to bottom, first match wins.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    _rule(
        SentenceCategory.INDUCTION,
        r"\b(?:by|using|via)\s+induction\b",
        r"\bprove\s+by\s+induction",
        r"\binductive\s+(?:step|case|hypothesis)",
    ),
    _rule(
        SentenceCategory.CONTRADICTION,
        r"\b(?:suppose|assume)\s+(?:not\b|that.*\bnot\b)",
        r"\b(?:contradiction|contradicts|absurd)",
        r"\bleads?\s+to\s+a\s+contradiction",
    ),
    _rule(
        SentenceCategory.CASE,
        r"\b(?:consider|examine)\s+the\s+case",
        r"\bcase\s+\d+",
        r"\bin\s+the\s+case\s+(?:where|when)",
        r"\b(?:first|second|third|next|last|final)\s+case",
    ),
    _rule(
        SentenceCategory.DEFINITION,
        r"\bby\s+definition\b",
        r"\bdefinition\s+of\b",
        r"\bsimplif(?:y|ying|ies)",
        r"\bexpand(?:ing)?\s+(?:the|this)\b",
        r"\bsubstitut(?:e|ing)",
    ),
    _rule(
        SentenceCategory.EXISTENTIAL,
        r"\bthere\s+exists?\b",
        r"\bfor\s+some\b",
        r"\bwe\s+can\s+find\b",
        r"\bchoose",
        r"∃",
    ),
    _rule(
        SentenceCategory.UNIVERSAL,
        r"\bfor\s+(?:all|every|each|any)\b",
        r"\bevery\s+\w+\s+(?:is|has|satisfies)\b",
        r"∀",
    ),
    _rule(
        SentenceCategory.IMPLICATION,
        r"\bif\b.*\bthen\b",
        r"\bwhenever\b.*\b(?:then|we\s+have)\b",
        r"\bimplies?\b",
        r"→|⇒|⟹",
    ),
    _rule(
        SentenceCategory.ASSUMPTION,
        r"^(?:assume|suppose|let|given)\b",
        r"\bwe\s+(?:assume|suppose|let)\b",
    ),
    _rule(
        SentenceCategory.STEP,
        r"^(?:then|thus|so|hence)\b",
        r"\bwe\s+(?:have|get|obtain|derive|see|find|conclude)\b",
        r"\bthis\s+(?:gives|yields|shows|implies)\b",
        r"\bit\s+follows\s+that\b",
    ),
    _rule(
        SentenceCategory.CONCLUSION,
        r"^(?:therefore|hence|thus|consequently|so)\b",
        r"\bwe\s+conclude\s+that\b",
        r"\bthis\s+(?:proves|establishes|shows|demonstrates)\b",
        r"\bQ\.?E\.?D\.?",
        r"∎",
    ),
    _rule(
        SentenceCategory.ARITHMETIC,
        r"\b(?:divisible|divides|factor|multiple)\b",
        r"\b(?:even|odd|prime|composite)\b",
        r"\b(?:integer|rational|irrational|real|natural)\s+number",
        r"\d+\s*[-+*/]\s*\d+",
        r"\b(?:gcd|lcm|mod|remainder)\b",
    ),
    _rule(
        SentenceCategory.ALGEBRAIC,
        r"[a-z]\s*[=<>≤≥≠]\s*[a-z0-9]",
        r"\bequation\b",
        r"\bsolve\s+for\b",
    ),
    _rule(
        SentenceCategory.SET_THEORY,
        r"\b(?:subset|superset|element|belongs\s+to|contained\s+in)\b",
        r"\b(?:union|intersection|complement|empty\s+set)\b",
        r"[∈∉⊂⊃⊆⊇∪∩∅]",
    ),
)

ABBREVIATIONS = frozenset(
    {
        "e.g.",
        "i.e.",
        "cf.",
        "etc.",
        "resp.",
        "vs.",
        "viz.",
        "thm.",
        "lem.",
        "eq.",
        "def.",
        "prop.",
        "fig.",
        "sec.",
    }
)

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?∎])\s+|\n\s*\n")


def _ends_with_abbreviation(chunk: str) -> bool:
    words = chunk.split()
    return bool(words) and words[-1].lower() in ABBREVIATIONS


def split_sentences(text: str) -> list[str]:
    """Split free text into sentences with internal whitespace collapsed."""

    if not isinstance(text, str) or not text.strip():
        return []

    sentences: list[str] = []
    pending = ""
    for chunk in _SENTENCE_BOUNDARY.split(text.strip()):
        pending = f"{pending} {chunk}" if pending else chunk
        if _ends_with_abbreviation(pending):
            continue
        sentence = " ".join(pending.split())
        if sentence:
            sentences.append(sentence)
        pending = ""

    trailing = " ".join(pending.split())
    if trailing:
        sentences.append(trailing)
    return sentences


class SentenceClassifier:
    """Classify sentences by evaluating an ordered rule table."""

    def __init__(self, rules: Sequence[ClassificationRule] = CLASSIFICATION_RULES) -> None:
        self.rules = tuple(rules)

    def classify_sentence(self, sentence: str) -> SentenceCategory:
        """Return the category of the first rule matching ``sentence``."""
        if not isinstance(sentence, str):
            return SentenceCategory.OTHER

        text = sentence.strip()
        for rule in self.rules:
            if rule.matches(text):
                return rule.category
        return SentenceCategory.OTHER

    def classify(self, text: str) -> list[ClassifiedSentence]:
        """Split ``text`` into sentences and classify each one."""
        classified = []
        for sentence in split_sentences(text):
            category = self.classify_sentence(sentence)
            LOG.debug("Classified %r as %s", sentence, category.value)
            classified.append(ClassifiedSentence(text=sentence, category=category))
        return classified


_DEFAULT_CLASSIFIER = SentenceClassifier()


def classify_sentence(sentence: str) -> SentenceCategory:
    """Classify a single sentence with the default rule table."""
    return _DEFAULT_CLASSIFIER.classify_sentence(sentence)


def classify_text(text: str) -> list[ClassifiedSentence]:
    """Split and classify free text with the default rule table."""
    return _DEFAULT_CLASSIFIER.classify(text)


__all__ = [
    "ABBREVIATIONS",
    "CLASSIFICATION_RULES",
    "ClassificationRule",
    "SentenceClassifier",
    "classify_sentence",
    "classify_text",
    "split_sentences",
]
