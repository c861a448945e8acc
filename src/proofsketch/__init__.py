"""Rule-based translation of informal mathematical proofs into Lean 4 skeletons."""

from .lean.generator import SkeletonOptions
from .lean.generator import generate_lean as generate
from .nlp.classifier import classify_text as classify
from .nlp.entities import extract_entities as extract
from .nlp.schemas import ClassifiedSentence, Entity, EntityKind, SentenceCategory
from .pipeline import TranslationResult, translate
from .tree.builder import build_proof_tree as build
from .tree.schemas import Assumption, Declaration, Goal, ProofTree, Step, Technique
from .tree.validate import DependencyCycleWarning

__version__ = "0.1.0"

__all__ = [
    "Assumption",
    "ClassifiedSentence",
    "Declaration",
    "DependencyCycleWarning",
    "Entity",
    "EntityKind",
    "Goal",
    "ProofTree",
    "SentenceCategory",
    "SkeletonOptions",
    "Step",
    "Technique",
    "TranslationResult",
    "build",
    "classify",
    "extract",
    "generate",
    "translate",
]
