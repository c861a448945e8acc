"""End-to-end translation: text to classified sentences, entities, tree and Lean skeleton."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from .config import get_extractor_settings, get_generator_settings
from .lean.generator import SkeletonOptions, explicit_options, generate_lean
from .nlp.classifier import classify_text
from .nlp.entities import EntityExtractor
from .nlp.schemas import ClassifiedSentence, Entity
from .tree.builder import build_proof_tree
from .tree.schemas import ProofTree

LOG = logging.getLogger(__name__)


class TranslationResult(BaseModel):
    """Every intermediate stage of one translation."""

    sentences: list[ClassifiedSentence] = Field(default_factory=list)
    entities: list[Entity] = Field(default_factory=list)
    tree: ProofTree = Field(default_factory=ProofTree)
    lean: str = ""

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def default_skeleton_options(overrides: Mapping[str, Any] | None = None) -> SkeletonOptions:
    """Skeleton options from the configured generator defaults."""
    settings = get_generator_settings(dict(overrides) if overrides else None)
    return SkeletonOptions.model_validate(settings.model_dump())


def translate(
    text: Any,
    options: SkeletonOptions | Mapping[str, Any] | None = None,
) -> TranslationResult:
    """Run classification, extraction, tree building and generation over ``text``.

    Non-string input is treated as empty text.
    """

    if not isinstance(text, str):
        LOG.debug("Treating non-string input of type %s as empty text", type(text).__name__)
        text = ""

    if options is None:
        options = default_skeleton_options()
    elif not isinstance(options, SkeletonOptions):
        options = default_skeleton_options(explicit_options(options))

    extractor_settings = get_extractor_settings()
    extractor = EntityExtractor(
        max_examples=extractor_settings.max_examples,
        max_example_length=extractor_settings.max_example_length,
    )

    sentences = classify_text(text)
    entities = extractor.extract(sentences)
    tree = build_proof_tree(sentences, entities)
    lean = generate_lean(tree, options)

    LOG.info(
        "Translated %d sentence(s) into %d assumption(s), %d step(s), goal=%s",
        len(sentences),
        len(tree.assumptions),
        len(tree.steps),
        tree.goal is not None,
    )
    return TranslationResult(sentences=sentences, entities=entities, tree=tree, lean=lean)


__all__ = ["TranslationResult", "default_skeleton_options", "translate"]
