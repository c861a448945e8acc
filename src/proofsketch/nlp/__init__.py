"""
Natural-language front end.

Splits informal proof text into sentences, tags each with a proof-technique
category and extracts the mathematical entities the later stages rely on.
"""

from .classifier import (
    CLASSIFICATION_RULES,
    ClassificationRule,
    SentenceClassifier,
    classify_sentence,
    classify_text,
    split_sentences,
)
from .entities import EntityExtractor, entities_of_kind, extract_entities, extract_variables
from .schemas import ClassifiedSentence, Entity, EntityKind, SentenceCategory

__all__ = [
    "CLASSIFICATION_RULES",
    "ClassificationRule",
    "ClassifiedSentence",
    "Entity",
    "EntityExtractor",
    "EntityKind",
    "SentenceCategory",
    "SentenceClassifier",
    "classify_sentence",
    "classify_text",
    "entities_of_kind",
    "extract_entities",
    "extract_variables",
    "split_sentences",
]
