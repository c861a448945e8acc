"""Emit Lean 4 proof skeletons from proof trees."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..nlp.schemas import SentenceCategory
from ..tree.builder import extract_induction_variable
from ..tree.schemas import ProofTree, Step, Technique
from .formalize import Formalization, formalize_assumption, formalize_goal
from .types import infer_variable_types, lean_identifier

LOG = logging.getLogger(__name__)

DEFAULT_THEOREM_NAME = "user_proof"
HEADER_COMMENT = "Generated Lean 4 skeleton (rule-based)"
INVALID_TREE_MESSAGE = "-- Error: Invalid proof tree\n"

_CASE_TARGET_PATTERNS = (
    re.compile(r"\bconsider\s+the\s+case\s+(?:where|when|of)\s+([a-zA-Z_]\w*)", re.IGNORECASE),
    re.compile(r"\bby\s+cases\s+on\s+([a-zA-Z_]\w*)", re.IGNORECASE),
    re.compile(r"\bcases?\s+on\s+([a-zA-Z_]\w*)", re.IGNORECASE),
)
_WITNESS_PATTERNS = (
    re.compile(r"\bfor\s+some\s+([a-zA-Z](?:_?\d+)?)\b", re.IGNORECASE),
    re.compile(r"\bthere\s+exists?\s+(?:an?\s+\w+\s+)?([a-zA-Z](?:_?\d+)?)\b", re.IGNORECASE),
    re.compile(r"\b(?:choose|take|pick)\s+([a-zA-Z](?:_?\d+)?)\b", re.IGNORECASE),
    re.compile(r"\b([a-zA-Z](?:_?\d+)?)\s*="),
)
_BOUND_VARIABLE = re.compile(
    r"\bfor\s+(?:all|every|each|any)\s+([a-zA-Z](?:_?\d+)?)\b", re.IGNORECASE
)
_SIMPLIFY = re.compile(r"\bsimplif", re.IGNORECASE)
_UNFOLD = re.compile(r"\b(?:unfold|expand)", re.IGNORECASE)
_RING = re.compile(r"\bring\b|\balgebra", re.IGNORECASE)
_LINEAR = re.compile(r"\blinear|\badd|\bsubtract", re.IGNORECASE)


def escape_comment(text: Any) -> str:
    """Flatten ``text`` onto one line and neutralise comment delimiters."""
    flattened = " ".join(str(text).split())
    for token, replacement in (("-/", "- /"), ("/-", "/ -"), ("*/", "* /")):
        flattened = flattened.replace(token, replacement)
    return flattened


def sanitize_theorem_name(name: str) -> str:
    cleaned = re.sub(r"[^\w']", "_", name.strip())
    if not cleaned:
        return DEFAULT_THEOREM_NAME
    if cleaned[0].isdigit() or cleaned[0] == "'":
        cleaned = f"_{cleaned}"
    return cleaned


class SkeletonOptions(BaseModel):
    """Rendering switches for :class:`SkeletonGenerator`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    theorem_name: str = Field(
        default=DEFAULT_THEOREM_NAME,
        validation_alias=AliasChoices("theorem_name", "theoremName"),
    )
    include_comments: bool = Field(
        default=True, validation_alias=AliasChoices("include_comments", "includeComments")
    )
    use_admit: bool = Field(
        default=True, validation_alias=AliasChoices("use_admit", "useAdmit")
    )
    imports: list[str] = Field(default_factory=list)
    indent_width: int = Field(
        default=2, ge=1, le=8, validation_alias=AliasChoices("indent_width", "indentWidth")
    )

    @field_validator("theorem_name", mode="before")
    @classmethod
    def _clean_theorem_name(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_THEOREM_NAME
        return sanitize_theorem_name(str(value))


class _Writer:
    """Line buffer with an indentation level."""

    def __init__(self, indent_width: int) -> None:
        self.indent_width = indent_width
        self.level = 0
        self.lines: list[str] = []

    def line(self, text: str = "") -> None:
        if not text:
            self.lines.append("")
            return
        self.lines.append(" " * (self.indent_width * self.level) + text)

    def comment(self, text: Any) -> None:
        self.line(f"-- {escape_comment(text)}")

    @contextmanager
    def indented(self) -> Iterator[None]:
        self.level += 1
        try:
            yield
        finally:
            self.level -= 1

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"


def extract_case_target(text: str) -> str | None:
    for pattern in _CASE_TARGET_PATTERNS:
        match = pattern.search(text)
        if match:
            return lean_identifier(match.group(1))
    return None


def extract_witness(text: str) -> str:
    """Witness for an existential step, ``_`` when none is recognisable."""
    for pattern in _WITNESS_PATTERNS:
        match = pattern.search(text)
        if match:
            identifier = lean_identifier(match.group(1))
            if identifier is not None:
                return identifier
    return "_"


def extract_bound_variable(text: str) -> str:
    match = _BOUND_VARIABLE.search(text)
    if match:
        return lean_identifier(match.group(1)) or "x"
    return "x"


Emitter = Callable[[Step, _Writer], None]


class SkeletonGenerator:
    """Render a :class:`ProofTree` as a Lean 4 theorem with ``sorry`` holes.

    Steps are dispatched on their technique first; direct steps fall back to
    their sentence category.
    """

    def __init__(self, options: SkeletonOptions | None = None) -> None:
        self.options = options or SkeletonOptions()
        self._technique_emitters: dict[Technique, Emitter] = {
            Technique.INDUCTION: self._emit_induction,
            Technique.PROOF_BY_CONTRADICTION: self._emit_contradiction,
            Technique.CASE_ANALYSIS: self._emit_cases,
            Technique.EXISTENTIAL_INTRO: self._emit_existential,
            Technique.UNIVERSAL_INTRO: self._emit_universal,
        }
        self._category_emitters: dict[SentenceCategory, Emitter] = {
            SentenceCategory.IMPLICATION: self._emit_implication,
            SentenceCategory.DEFINITION: self._emit_definition,
            SentenceCategory.ARITHMETIC: self._emit_calculation,
            SentenceCategory.ALGEBRAIC: self._emit_calculation,
        }

    def generate(self, tree: ProofTree) -> str:
        writer = _Writer(self.options.indent_width)

        for module in self.options.imports:
            writer.line(f"import {module}")
        if self.options.imports:
            writer.line()

        writer.comment(HEADER_COMMENT)
        writer.line()

        variable_types = infer_variable_types(tree)
        if variable_types:
            writer.comment("Variable declarations")
            for name, lean_type in variable_types.items():
                writer.line(f"variable ({name} : {lean_type})")
            writer.line()

        name = self.options.theorem_name
        if tree.goal is None:
            writer.line(f"theorem {name} : True := by")
        else:
            goal = formalize_goal(tree.goal.text)
            self._note_unformalized(goal, writer)
            writer.line(f"theorem {name} : {goal.proposition} := by")

        with writer.indented():
            self._emit_body(tree, writer)

        return writer.render()

    def _note_unformalized(self, formalization: Formalization, writer: _Writer) -> None:
        if formalization.formalized:
            return
        LOG.warning("Could not formalize: %s", formalization.source)
        writer.comment(f"Could not formalize: {formalization.source}")

    def _sorry(self, writer: _Writer) -> None:
        if self.options.use_admit:
            writer.line("sorry")

    def _emit_body(self, tree: ProofTree, writer: _Writer) -> None:
        comments = self.options.include_comments

        if tree.assumptions:
            writer.comment("Assumptions")
            for index, assumption in enumerate(tree.assumptions, start=1):
                if comments:
                    writer.comment(f"Assumption {index}: {assumption.text}")
                formalization = formalize_assumption(assumption.text)
                self._note_unformalized(formalization, writer)
                writer.line(f"have h{index} : {formalization.proposition} := by")
                with writer.indented():
                    self._sorry(writer)
                writer.line()

        if tree.steps:
            writer.comment("Proof steps")
            for step in tree.steps:
                if comments:
                    writer.comment(f"Step {step.id} ({step.category.value}): {step.text}")
                self._emitter_for(step)(step, writer)
                writer.line()

        if tree.goal is not None:
            writer.comment(f"Goal: {tree.goal.text}")
        self._sorry(writer)

    def _emitter_for(self, step: Step) -> Emitter:
        emitter = self._technique_emitters.get(step.technique)
        if emitter is None:
            emitter = self._category_emitters.get(step.category, self._emit_generic)
        return emitter

    def _emit_induction(self, step: Step, writer: _Writer) -> None:
        variable = step.induction_variable or extract_induction_variable(step.text) or "n"
        variable = lean_identifier(variable) or "n"
        substeps = step.substeps

        writer.line(f"induction {variable} with")
        with writer.indented():
            writer.line("| zero =>")
            with writer.indented():
                writer.comment((substeps and substeps.base_case) or "Base case")
                self._sorry(writer)
            writer.line(f"| succ {variable}' ih =>")
            with writer.indented():
                writer.comment(
                    (substeps and substeps.inductive_step) or "Inductive step, ih is the hypothesis"
                )
                self._sorry(writer)

    def _emit_contradiction(self, step: Step, writer: _Writer) -> None:
        writer.line("by_contra h_contra")
        writer.comment("Assume the negation and derive a contradiction")
        self._sorry(writer)

    def _emit_cases(self, step: Step, writer: _Writer) -> None:
        target = extract_case_target(step.text)
        if target is None:
            writer.comment("Case analysis (specify target)")
            target = "_"
        writer.line(f"cases {target} with")
        with writer.indented():
            for branch in ("| inl h_left =>", "| inr h_right =>"):
                writer.line(branch)
                with writer.indented():
                    self._sorry(writer)

    def _emit_existential(self, step: Step, writer: _Writer) -> None:
        witness = extract_witness(step.text)
        writer.line(f"use {witness}")
        writer.comment(f"Prove the property holds for {witness}")
        self._sorry(writer)

    def _emit_universal(self, step: Step, writer: _Writer) -> None:
        variable = extract_bound_variable(step.text)
        writer.line(f"intro {variable}")
        writer.comment(f"Show the property for arbitrary {variable}")
        self._sorry(writer)

    def _emit_implication(self, step: Step, writer: _Writer) -> None:
        writer.line("intro h_premise")
        writer.comment("Assume the premise and prove the conclusion")
        self._sorry(writer)

    def _emit_definition(self, step: Step, writer: _Writer) -> None:
        if _SIMPLIFY.search(step.text):
            writer.line("simp [*]")
        elif _UNFOLD.search(step.text):
            writer.line("unfold _ -- specify definition to unfold")
        else:
            writer.line("rw [_] -- specify rewrite rule")

    def _emit_calculation(self, step: Step, writer: _Writer) -> None:
        writer.line(f"have h_calc_{step.id} : _ := by")
        with writer.indented():
            if _RING.search(step.text):
                writer.line("ring")
            elif _LINEAR.search(step.text):
                writer.line("linarith")
            else:
                writer.comment("Calculation step")
                self._sorry(writer)

    def _emit_generic(self, step: Step, writer: _Writer) -> None:
        writer.line(f"have h_{step.id} : _ := by")
        with writer.indented():
            self._sorry(writer)


def _coerce_tree(tree: Any) -> ProofTree | None:
    if isinstance(tree, ProofTree):
        return tree
    if isinstance(tree, Mapping):
        try:
            return ProofTree.model_validate(tree)
        except ValidationError as exc:
            LOG.warning("Rejecting malformed proof tree: %s", exc.errors()[0]["msg"])
    return None


def explicit_options(options: Any) -> dict[str, Any]:
    """Return the valid, explicitly given options keyed by field name.

    Entries that fail validation are dropped with a warning, and anything
    that is not a mapping contributes nothing.
    """
    if options is None:
        return {}
    if isinstance(options, SkeletonOptions):
        return options.model_dump(exclude_unset=True)
    if not isinstance(options, Mapping):
        LOG.warning("Ignoring skeleton options of type %s", type(options).__name__)
        return {}

    accepted: dict[str, Any] = {}
    for key, value in options.items():
        try:
            SkeletonOptions.model_validate({key: value})
        except ValidationError:
            LOG.warning("Ignoring invalid skeleton option %s=%r", key, value)
            continue
        accepted[key] = value
    return SkeletonOptions.model_validate(accepted).model_dump(exclude_unset=True)


def _coerce_options(options: Any) -> SkeletonOptions:
    if isinstance(options, SkeletonOptions):
        return options
    return SkeletonOptions.model_validate(explicit_options(options))


def generate_lean(
    tree: ProofTree | Mapping[str, Any] | None,
    options: SkeletonOptions | Mapping[str, Any] | None = None,
) -> str:
    """Generate a Lean 4 skeleton.

    Anything that is not a proof tree (or a mapping that validates as one)
    yields :data:`INVALID_TREE_MESSAGE` instead of raising. Invalid options
    are ignored.
    """
    proof_tree = _coerce_tree(tree)
    if proof_tree is None:
        LOG.warning("generate_lean called without a valid proof tree (%s)", type(tree).__name__)
        return INVALID_TREE_MESSAGE
    return SkeletonGenerator(_coerce_options(options)).generate(proof_tree)


__all__ = [
    "DEFAULT_THEOREM_NAME",
    "INVALID_TREE_MESSAGE",
    "SkeletonGenerator",
    "SkeletonOptions",
    "escape_comment",
    "explicit_options",
    "extract_case_target",
    "extract_witness",
    "generate_lean",
    "sanitize_theorem_name",
]
