"""
Executor package: compile generated skeletons with the Lean toolchain.

Provides a subprocess wrapper around ``lean`` and a parser that turns its
output into classified diagnostics.
"""

from .errors import (
    ErrorCategory,
    ErrorSeverity,
    LeanDiagnostic,
    classify_message,
    parse_diagnostics,
    primary_error,
)
from .lean import CompileResult, FailureKind, LeanInfo, compile_lean_snippet, lean_info, run_proof

__all__ = [
    "CompileResult",
    "ErrorCategory",
    "ErrorSeverity",
    "FailureKind",
    "LeanDiagnostic",
    "LeanInfo",
    "classify_message",
    "compile_lean_snippet",
    "lean_info",
    "parse_diagnostics",
    "primary_error",
    "run_proof",
]
