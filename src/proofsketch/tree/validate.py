"""Dependency validation for proof trees: dangling references and cycles."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable, Mapping

from .schemas import Goal, IssueKind, ProofNode, ProofTree, Step, TreeIssue

LOG = logging.getLogger(__name__)

_WHITE, _GRAY, _BLACK = 0, 1, 2


class DependencyCycleWarning(UserWarning):
    """Emitted when a dependency cycle is found in a proof tree."""


def proof_path(tree: ProofTree) -> list[ProofNode]:
    """Linear view of the tree: assumptions, steps, then the goal."""
    return tree.proof_path()


def dependency_graph(tree: ProofTree) -> dict[str, list[str]]:
    """Adjacency map from node id to the ids it depends on."""
    return tree.dependency_graph()


def has_cycle(graph: Mapping[str, Iterable[str]]) -> bool:
    """Three-colour depth-first search for a cycle.

    Ids that appear only as dependencies are treated as leaves.
    """

    adjacency = {node: list(deps) for node, deps in graph.items()}
    color = dict.fromkeys(adjacency, _WHITE)

    for root in adjacency:
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        stack = [(root, iter(adjacency[root]))]
        while stack:
            node, children = stack[-1]
            for child in children:
                state = color.get(child, _BLACK)
                if state == _GRAY:
                    return True
                if state == _WHITE:
                    color[child] = _GRAY
                    stack.append((child, iter(adjacency[child])))
                    break
            else:
                color[node] = _BLACK
                stack.pop()
    return False


def _reaches(graph: Mapping[str, list[str]], sources: Iterable[str], target: str) -> bool:
    seen: set[str] = set()
    pending = list(sources)
    while pending:
        node = pending.pop()
        if node == target:
            return True
        if node in seen or node not in graph:
            continue
        seen.add(node)
        pending.extend(graph[node])
    return False


def nodes_on_cycles(graph: Mapping[str, Iterable[str]]) -> list[str]:
    """Return the ids (in graph order) that can reach themselves."""
    adjacency = {node: list(deps) for node, deps in graph.items()}
    return [node for node, deps in adjacency.items() if _reaches(adjacency, deps, node)]


def _prune_dangling(
    node: Step | Goal, known: set[str], issues: list[TreeIssue]
) -> list[str]:
    kept: list[str] = []
    for dep in dict.fromkeys(node.depends_on):
        if dep in known:
            kept.append(dep)
            continue
        LOG.warning("Dropping unknown dependency %s from %s", dep, node.id)
        issues.append(
            TreeIssue(
                node_id=node.id,
                kind=IssueKind.DANGLING,
                detail=f"{node.id} referenced unknown node {dep}",
            )
        )
    return kept


def validate_tree(tree: ProofTree) -> ProofTree:
    """Return a copy of ``tree`` whose step dependencies form a DAG.

    Unknown dependency ids are dropped. Every step that lies on a cycle has
    its ``depends_on`` cleared and a :class:`DependencyCycleWarning` is
    emitted. A goal left on a cycle is reported but its edges are kept.
    """

    known = tree.node_ids()
    issues = list(tree.issues)

    steps = [
        step.model_copy(update={"depends_on": _prune_dangling(step, known, issues)})
        for step in tree.steps
    ]
    goal = tree.goal
    if goal is not None:
        goal = goal.model_copy(update={"depends_on": _prune_dangling(goal, known, issues)})

    graph: dict[str, list[str]] = {step.id: step.depends_on for step in steps}
    if goal is not None:
        graph[goal.id] = goal.depends_on

    cyclic = set(nodes_on_cycles(graph)) if has_cycle(graph) else set()
    repaired: list[Step] = []
    for step in steps:
        if step.id not in cyclic:
            repaired.append(step)
            continue
        detail = f"Cycle detected in proof tree at step {step.id}; dependencies cleared"
        LOG.warning(detail)
        warnings.warn(detail, DependencyCycleWarning, stacklevel=2)
        issues.append(TreeIssue(node_id=step.id, kind=IssueKind.CYCLE, detail=detail))
        repaired.append(step.model_copy(update={"depends_on": []}))

    if goal is not None:
        graph = {step.id: step.depends_on for step in repaired}
        graph[goal.id] = goal.depends_on
        if _reaches(graph, goal.depends_on, goal.id):
            detail = "Cycle detected in goal dependencies"
            LOG.warning(detail)
            warnings.warn(detail, DependencyCycleWarning, stacklevel=2)
            issues.append(TreeIssue(node_id=goal.id, kind=IssueKind.GOAL_CYCLE, detail=detail))

    return tree.model_copy(update={"steps": repaired, "goal": goal, "issues": issues})


__all__ = [
    "DependencyCycleWarning",
    "dependency_graph",
    "has_cycle",
    "nodes_on_cycles",
    "proof_path",
    "validate_tree",
]
