"""Build a dependency-linked proof tree from classified sentences."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..nlp.entities import STOP_LETTERS, extract_variables
from ..nlp.schemas import (
    Entity,
    EntityKind,
    SentenceCategory,
    sentence_category,
    sentence_text,
)
from .schemas import (
    Assumption,
    Declaration,
    Goal,
    ProofTree,
    Step,
    Substeps,
    Technique,
    TreeMetadata,
)
from .validate import validate_tree

LOG = logging.getLogger(__name__)

CONTRADICTION_LOOKBACK = 3

TYPE_WORDS = {
    "integer": "ℤ",
    "natural number": "ℕ",
    "natural": "ℕ",
    "real number": "ℝ",
    "real": "ℝ",
    "rational number": "ℚ",
    "rational": "ℚ",
    "complex number": "ℂ",
    "complex": "ℂ",
}

_VARIABLE_LIST = r"([a-zA-Z](?:_?\d+)?(?:\s*(?:,|and|,\s*and)\s*[a-zA-Z](?:_?\d+)?)*)"
_DECLARATION_PATTERNS = (
    re.compile(
        r"^(?:let|given)\s+"
        + _VARIABLE_LIST
        + r"\s+(?:be|denote)\s+(?:an?\s+)?(?:arbitrary\s+|fixed\s+|some\s+)?"
        r"(integer|natural number|natural|real number|real|rational number|rational"
        r"|complex number|complex)s?\s*\.?$",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(?:let|given)\s+" + _VARIABLE_LIST + r"\s*∈\s*([ℕℤℚℝℂ])\s*\.?$", re.IGNORECASE
    ),
)

_PROOF_END_ONLY = re.compile(r"^\s*(?:Q\.?E\.?D\.?|∎|□)\s*$", re.IGNORECASE)

_REFERENCE_PATTERNS = (
    re.compile(r"\b(?:by|from|using)\s+(?:step|assumption|equation)\s+\d+", re.IGNORECASE),
    re.compile(r"\b(?:above|previous|earlier)\s+(?:step|statement|equation)", re.IGNORECASE),
)

_INDUCTION_VARIABLE_PATTERNS = (
    re.compile(r"\binduction\s+on\s+([a-zA-Z])\b", re.IGNORECASE),
    re.compile(r"\bprove\s+by\s+induction\s+(?:that\s+)?.*\b([a-zA-Z])\b", re.IGNORECASE),
    re.compile(
        r"\bfor\s+all\s+([a-zA-Z])\s+(?:in|∈)\s*(?:ℕ|\bN\b|the\s+natural\s+numbers)",
        re.IGNORECASE,
    ),
)


def parse_declaration(text: str) -> list[Declaration]:
    """Return declarations when ``text`` only introduces typed variables."""

    stripped = text.strip()
    for pattern in _DECLARATION_PATTERNS:
        match = pattern.match(stripped)
        if not match:
            continue
        names = re.findall(r"[a-zA-Z](?:_?\d+)?", re.sub(r"\band\b", " ", match.group(1)))
        type_word = match.group(2)
        lean_type = TYPE_WORDS.get(" ".join(type_word.lower().split()), type_word)
        return [
            Declaration(name=name, lean_type=lean_type, text=stripped)
            for name in dict.fromkeys(names)
        ]
    return []


def extract_induction_variable(text: str) -> str | None:
    """Find the variable an induction ranges over, falling back to the first bare letter."""
    for pattern in _INDUCTION_VARIABLE_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1) not in STOP_LETTERS:
            return match.group(1)

    for token in extract_variables(text):
        if len(token) == 1 and token.isascii():
            return token
    return None


def _coerce_substeps(item: Any) -> Substeps | None:
    raw = item.get("substeps") if isinstance(item, Mapping) else getattr(item, "substeps", None)
    if isinstance(raw, Substeps):
        return raw
    if not isinstance(raw, Mapping):
        return None
    base = raw.get("base_case", raw.get("baseCase"))
    inductive = raw.get("inductive_step", raw.get("inductiveStep"))
    if base is None and inductive is None:
        return None
    return Substeps(
        base_case=str(base) if base is not None else None,
        inductive_step=str(inductive) if inductive is not None else None,
    )


@dataclass
class _BuildContext:
    """Accumulators that live for exactly one build."""

    entities: list[Entity]
    assumptions: list[Assumption] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)
    goal: Goal | None = None
    variable_scope: dict[str, list[str]] = field(default_factory=dict)
    case_stack: list[str] = field(default_factory=list)
    step_counter: int = 0

    def next_step_id(self) -> str:
        self.step_counter += 1
        return f"s{self.step_counter}"

    @property
    def last_step_id(self) -> str | None:
        return self.steps[-1].id if self.steps else None

    def previous_step_ids(self) -> list[str]:
        last = self.last_step_id
        return [last] if last else []


Handler = Callable[[_BuildContext, str, Any], None]


class ProofTreeBuilder:
    """Dispatch classified sentences to per-category handlers, in order."""

    def __init__(self) -> None:
        self._handlers: dict[SentenceCategory, Handler] = {
            SentenceCategory.ASSUMPTION: self._handle_assumption,
            SentenceCategory.CONCLUSION: self._handle_conclusion,
            SentenceCategory.INDUCTION: self._handle_induction,
            SentenceCategory.CONTRADICTION: self._handle_contradiction,
            SentenceCategory.CASE: self._handle_case,
            SentenceCategory.EXISTENTIAL: self._handle_existential,
            SentenceCategory.UNIVERSAL: self._handle_universal,
        }

    def build(
        self,
        sentences: Iterable[Any] | None,
        entities: Iterable[Entity] | None = None,
    ) -> ProofTree:
        """Build, validate and summarise a proof tree.

        Malformed input (``None``, strings, non-iterables, items without text)
        yields an empty tree rather than an error.
        """

        ctx = _BuildContext(entities=_coerce_entities(entities))
        for item in _coerce_sentences(sentences):
            text = sentence_text(item)
            if text is None:
                LOG.debug("Skipping sentence without text: %r", item)
                continue
            category = sentence_category(item)
            handler = self._handlers.get(category, self._handle_step)
            LOG.debug("Dispatching %s sentence: %r", category.value, text)
            handler(ctx, text, item)

        tree = ProofTree(
            assumptions=ctx.assumptions,
            steps=ctx.steps,
            goal=ctx.goal,
            entities=ctx.entities,
            declarations=ctx.declarations,
        )
        tree = validate_tree(tree)
        return tree.model_copy(update={"metadata": summarize_tree(tree)})

    def _handle_assumption(self, ctx: _BuildContext, text: str, item: Any) -> None:
        declarations = parse_declaration(text)
        if declarations:
            ctx.declarations.extend(declarations)
            return

        assumption = Assumption(
            id=f"a{len(ctx.assumptions) + 1}",
            text=text,
            variables=extract_variables(text),
        )
        for name in assumption.variables:
            ctx.variable_scope.setdefault(name, []).append(assumption.id)
        ctx.assumptions.append(assumption)

    def _handle_conclusion(self, ctx: _BuildContext, text: str, item: Any) -> None:
        if ctx.goal is not None and _PROOF_END_ONLY.match(text):
            LOG.debug("Keeping existing goal; %r only marks the end of the proof", text)
            return

        if ctx.steps:
            depends_on = [step.id for step in ctx.steps]
        else:
            depends_on = [assumption.id for assumption in ctx.assumptions]
        ctx.goal = Goal(
            text=text,
            depends_on=list(dict.fromkeys(depends_on)),
            variables=extract_variables(text),
        )

    def _handle_induction(self, ctx: _BuildContext, text: str, item: Any) -> None:
        variable = extract_induction_variable(text)
        depends_on = list(ctx.variable_scope.get(variable, [])) if variable else []
        depends_on.extend(ctx.previous_step_ids())
        ctx.steps.append(
            Step(
                id=ctx.next_step_id(),
                text=text,
                category=SentenceCategory.INDUCTION,
                technique=Technique.INDUCTION,
                depends_on=list(dict.fromkeys(depends_on)),
                substeps=_coerce_substeps(item),
                induction_variable=variable,
            )
        )

    def _handle_contradiction(self, ctx: _BuildContext, text: str, item: Any) -> None:
        window = ctx.steps[-CONTRADICTION_LOOKBACK:]
        ctx.steps.append(
            Step(
                id=ctx.next_step_id(),
                text=text,
                category=SentenceCategory.CONTRADICTION,
                technique=Technique.PROOF_BY_CONTRADICTION,
                depends_on=[step.id for step in window],
            )
        )

    def _handle_case(self, ctx: _BuildContext, text: str, item: Any) -> None:
        step = Step(
            id=ctx.next_step_id(),
            text=text,
            category=SentenceCategory.CASE,
            technique=Technique.CASE_ANALYSIS,
            depends_on=ctx.previous_step_ids(),
            case_number=len(ctx.case_stack) + 1,
        )
        ctx.case_stack.append(step.id)
        ctx.steps.append(step)

    def _handle_existential(self, ctx: _BuildContext, text: str, item: Any) -> None:
        step = Step(
            id=ctx.next_step_id(),
            text=text,
            category=SentenceCategory.EXISTENTIAL,
            technique=Technique.EXISTENTIAL_INTRO,
            depends_on=ctx.previous_step_ids(),
            variables=extract_variables(text),
        )
        # Existing witnesses keep their original introduction point.
        for name in step.variables or []:
            ctx.variable_scope.setdefault(name, [step.id])
        ctx.steps.append(step)

    def _handle_universal(self, ctx: _BuildContext, text: str, item: Any) -> None:
        ctx.steps.append(
            Step(
                id=ctx.next_step_id(),
                text=text,
                category=SentenceCategory.UNIVERSAL,
                technique=Technique.UNIVERSAL_INTRO,
                depends_on=ctx.previous_step_ids(),
            )
        )

    def _handle_step(self, ctx: _BuildContext, text: str, item: Any) -> None:
        variables = extract_variables(text)
        ctx.steps.append(
            Step(
                id=ctx.next_step_id(),
                text=text,
                category=sentence_category(item),
                technique=Technique.DIRECT,
                depends_on=infer_dependencies(ctx, text, variables),
                variables=variables,
            )
        )


def infer_dependencies(ctx: _BuildContext, text: str, variables: list[str]) -> list[str]:
    """Collect dependency candidates for a generic step.

    Candidates come from explicit back-references, the variable scope and
    assumptions sharing a variable entity. Without any of those the most
    recent step is used, then overlapping assumptions, then the first one.
    """

    candidates: dict[str, None] = {}

    if ctx.steps and any(pattern.search(text) for pattern in _REFERENCE_PATTERNS):
        candidates.setdefault(ctx.steps[-1].id)

    for name in variables:
        for source in ctx.variable_scope.get(name, []):
            candidates.setdefault(source)

    variable_entities = {
        entity.name for entity in ctx.entities if entity.kind is EntityKind.VARIABLE
    }
    for name in variables:
        if name not in variable_entities:
            continue
        for assumption in ctx.assumptions:
            if name in assumption.variables:
                candidates.setdefault(assumption.id)

    if not candidates and ctx.steps:
        candidates.setdefault(ctx.steps[-1].id)

    if not candidates and ctx.assumptions:
        overlapping = [
            assumption.id
            for assumption in ctx.assumptions
            if set(assumption.variables) & set(variables)
        ]
        for assumption_id in overlapping or [ctx.assumptions[0].id]:
            candidates.setdefault(assumption_id)

    return list(candidates)


def summarize_tree(tree: ProofTree) -> TreeMetadata:
    """Aggregate techniques, variables and types over a finished tree."""

    techniques: dict[str, None] = {}
    variables: dict[str, None] = {}
    types: dict[str, None] = {}

    for declaration in tree.declarations:
        techniques.setdefault(SentenceCategory.ASSUMPTION.value)
        variables.setdefault(declaration.name)
        types.setdefault(declaration.lean_type)
    for assumption in tree.assumptions:
        techniques.setdefault(SentenceCategory.ASSUMPTION.value)
        for name in assumption.variables:
            variables.setdefault(name)
    for step in tree.steps:
        techniques.setdefault(step.category.value)
        if step.technique is Technique.EXISTENTIAL_INTRO:
            for name in step.variables or []:
                variables.setdefault(name)
    if tree.goal is not None:
        techniques.setdefault(SentenceCategory.CONCLUSION.value)
    for entity in tree.entities:
        if entity.kind is EntityKind.TYPE:
            types.setdefault(entity.name)

    return TreeMetadata(
        techniques=list(techniques), variables=list(variables), types=list(types)
    )


def _coerce_sentences(sentences: Iterable[Any] | None) -> list[Any]:
    if sentences is None or isinstance(sentences, (str, bytes, Mapping)):
        return []
    try:
        return list(sentences)
    except TypeError:
        LOG.debug("Ignoring non-iterable sentence input of type %s", type(sentences))
        return []


def _coerce_entities(entities: Iterable[Any] | None) -> list[Entity]:
    if entities is None or isinstance(entities, (str, bytes, Mapping)):
        return []
    try:
        items = list(entities)
    except TypeError:
        return []

    coerced = []
    for item in items:
        if isinstance(item, Entity):
            coerced.append(item)
        elif isinstance(item, Mapping):
            try:
                coerced.append(Entity.model_validate(_entity_payload(item)))
            except ValueError:
                LOG.debug("Skipping malformed entity: %r", item)
    return coerced


def _entity_payload(item: Mapping[str, Any]) -> dict[str, Any]:
    payload = dict(item)
    if "kind" not in payload and "type" in payload:
        payload["kind"] = payload.pop("type")
    if isinstance(payload.get("examples"), list):
        payload["examples"] = payload["examples"][:3]
    return payload


def build_proof_tree(
    sentences: Iterable[Any] | None, entities: Iterable[Entity] | None = None
) -> ProofTree:
    """Build a proof tree with a fresh :class:`ProofTreeBuilder`."""
    return ProofTreeBuilder().build(sentences, entities)


__all__ = [
    "CONTRADICTION_LOOKBACK",
    "ProofTreeBuilder",
    "build_proof_tree",
    "extract_induction_variable",
    "infer_dependencies",
    "parse_declaration",
    "summarize_tree",
]
