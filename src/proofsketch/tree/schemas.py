"""Proof tree schemas."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field

from ..nlp.schemas import Entity, SentenceCategory


class Technique(str, Enum):
    """Proof strategy attached to a step; drives tactic emission."""

    INDUCTION = "induction"
    PROOF_BY_CONTRADICTION = "proof_by_contradiction"
    CASE_ANALYSIS = "case_analysis"
    EXISTENTIAL_INTRO = "existential_intro"
    UNIVERSAL_INTRO = "universal_intro"
    DIRECT = "direct"


class IssueKind(str, Enum):
    """Problems found (and repaired) while validating dependencies."""

    CYCLE = "cycle"
    GOAL_CYCLE = "goal_cycle"
    DANGLING = "dangling"


class Declaration(BaseModel):
    """A variable introduced with a type only, e.g. "Let n be an integer"."""

    name: str
    lean_type: str = Field(description="Lean type symbol such as ℤ or ℝ")
    text: str


class Assumption(BaseModel):
    """A hypothesis stated by the proof author."""

    id: str = Field(pattern=r"^a\d+$")
    text: str
    variables: list[str] = Field(default_factory=list)


class Substeps(BaseModel):
    """Optional annotations for the two branches of an induction."""

    base_case: str | None = None
    inductive_step: str | None = None


class Step(BaseModel):
    """An intermediate proof step."""

    id: str = Field(pattern=r"^s\d+$")
    text: str
    category: SentenceCategory
    technique: Technique = Technique.DIRECT
    depends_on: list[str] = Field(default_factory=list)
    variables: list[str] | None = None
    substeps: Substeps | None = None
    case_number: int | None = None
    induction_variable: str | None = None


class Goal(BaseModel):
    """The statement the proof establishes."""

    id: Literal["goal"] = "goal"
    text: str
    depends_on: list[str] = Field(default_factory=list)
    variables: list[str] = Field(default_factory=list)


class TreeMetadata(BaseModel):
    """Ordered summaries aggregated once the tree is complete."""

    techniques: list[str] = Field(default_factory=list)
    variables: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)


class TreeIssue(BaseModel):
    """A dependency problem detected during validation."""

    node_id: str
    kind: IssueKind
    detail: str


ProofNode = Union[Assumption, Step, Goal]


class ProofTree(BaseModel):
    """Assumptions, technique-typed steps and an optional goal, linked by dependencies."""

    assumptions: list[Assumption] = Field(default_factory=list)
    steps: list[Step] = Field(default_factory=list)
    goal: Goal | None = None
    entities: list[Entity] = Field(default_factory=list)
    declarations: list[Declaration] = Field(default_factory=list)
    metadata: TreeMetadata = Field(default_factory=TreeMetadata)
    issues: list[TreeIssue] = Field(default_factory=list)

    def proof_path(self) -> list[ProofNode]:
        """Assumptions, then steps, then the goal (when present)."""
        path: list[ProofNode] = [*self.assumptions, *self.steps]
        if self.goal is not None:
            path.append(self.goal)
        return path

    def dependency_graph(self) -> dict[str, list[str]]:
        """Map every node id to the ids it depends on."""
        graph: dict[str, list[str]] = {}
        for node in self.proof_path():
            graph[node.id] = list(getattr(node, "depends_on", []))
        return graph

    def node_ids(self) -> set[str]:
        return {node.id for node in self.proof_path()}

    def get_node(self, node_id: str) -> ProofNode | None:
        for node in self.proof_path():
            if node.id == node_id:
                return node
        return None

    @property
    def is_empty(self) -> bool:
        return not (self.assumptions or self.steps or self.goal or self.declarations)


__all__ = [
    "Assumption",
    "Declaration",
    "Goal",
    "IssueKind",
    "ProofNode",
    "ProofTree",
    "Step",
    "Substeps",
    "Technique",
    "TreeIssue",
    "TreeMetadata",
]
