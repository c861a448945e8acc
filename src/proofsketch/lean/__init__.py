"""Lean 4 skeleton generation: formalization templates, type inference and emission."""

from .formalize import (
    Formalization,
    clean_assumption_text,
    clean_goal_text,
    formalize_assumption,
    formalize_goal,
    normalize_expression,
)
from .generator import (
    INVALID_TREE_MESSAGE,
    SkeletonGenerator,
    SkeletonOptions,
    escape_comment,
    generate_lean,
)
from .types import infer_variable_type, infer_variable_types, lean_identifier, scan_declared_types

__all__ = [
    "INVALID_TREE_MESSAGE",
    "Formalization",
    "SkeletonGenerator",
    "SkeletonOptions",
    "clean_assumption_text",
    "clean_goal_text",
    "escape_comment",
    "formalize_assumption",
    "formalize_goal",
    "generate_lean",
    "infer_variable_type",
    "infer_variable_types",
    "lean_identifier",
    "normalize_expression",
    "scan_declared_types",
]
