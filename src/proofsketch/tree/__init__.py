"""
Proof tree construction.

Turns classified sentences and extracted entities into assumptions,
technique-typed steps and a goal, infers the dependencies between them and
keeps the resulting graph acyclic.
"""

from .builder import ProofTreeBuilder, build_proof_tree, summarize_tree
from .schemas import (
    Assumption,
    Declaration,
    Goal,
    IssueKind,
    ProofNode,
    ProofTree,
    Step,
    Substeps,
    Technique,
    TreeIssue,
    TreeMetadata,
)
from .validate import (
    DependencyCycleWarning,
    dependency_graph,
    has_cycle,
    nodes_on_cycles,
    proof_path,
    validate_tree,
)

__all__ = [
    "Assumption",
    "Declaration",
    "DependencyCycleWarning",
    "Goal",
    "IssueKind",
    "ProofNode",
    "ProofTree",
    "ProofTreeBuilder",
    "Step",
    "Substeps",
    "Technique",
    "TreeIssue",
    "TreeMetadata",
    "build_proof_tree",
    "dependency_graph",
    "has_cycle",
    "nodes_on_cycles",
    "proof_path",
    "summarize_tree",
    "validate_tree",
]
