"""Parsing and classification of Lean compiler diagnostics."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories of Lean compiler messages."""

    UNKNOWN_IDENTIFIER = "unknown_identifier"
    TYPE_MISMATCH = "type_mismatch"
    TACTIC_FAILED = "tactic_failed"
    MISSING_PREMISE = "missing_premise"
    SYNTAX_ERROR = "syntax_error"
    OTHER = "other"


class ErrorSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class LeanDiagnostic:
    """One ``file:line:col: severity: message`` entry from compiler output."""

    line: int
    column: int
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    category: ErrorCategory = ErrorCategory.OTHER
    context: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["severity"] = self.severity.value
        payload["category"] = self.category.value
        return payload


# Message matchers, checked in order
ERROR_PATTERNS = [
    (ErrorCategory.UNKNOWN_IDENTIFIER, re.compile(r"unknown (?:identifier|constant) '([^']+)'")),
    (ErrorCategory.UNKNOWN_IDENTIFIER, re.compile(r"failed to resolve '([^']+)'")),
    (ErrorCategory.UNKNOWN_IDENTIFIER, re.compile(r"'([^']+)' has not been declared")),
    (ErrorCategory.TYPE_MISMATCH, re.compile(r"type mismatch")),
    (ErrorCategory.TYPE_MISMATCH, re.compile(r"has type .+ but is expected to have type")),
    (ErrorCategory.TYPE_MISMATCH, re.compile(r"application type mismatch")),
    (ErrorCategory.TACTIC_FAILED, re.compile(r"tactic(?: '?[\w.]+'?)? failed")),
    (ErrorCategory.TACTIC_FAILED, re.compile(r"unsolved goals")),
    (ErrorCategory.TACTIC_FAILED, re.compile(r"linarith failed")),
    (ErrorCategory.MISSING_PREMISE, re.compile(r"failed to synthesize")),
    (ErrorCategory.MISSING_PREMISE, re.compile(r"could not synthesize")),
    (ErrorCategory.MISSING_PREMISE, re.compile(r"failed to prove")),
    (ErrorCategory.SYNTAX_ERROR, re.compile(r"unexpected token")),
    (ErrorCategory.SYNTAX_ERROR, re.compile(r"expected '[)\]}]'")),
    (ErrorCategory.SYNTAX_ERROR, re.compile(r"unexpected end of input")),
    (ErrorCategory.SYNTAX_ERROR, re.compile(r"invalid expression")),
]

# Most fundamental first: syntax problems hide everything after them.
CATEGORY_PRIORITY = [
    ErrorCategory.SYNTAX_ERROR,
    ErrorCategory.UNKNOWN_IDENTIFIER,
    ErrorCategory.TYPE_MISMATCH,
    ErrorCategory.TACTIC_FAILED,
    ErrorCategory.MISSING_PREMISE,
    ErrorCategory.OTHER,
]

DIAGNOSTIC_PATTERN = re.compile(
    r"^(?P<file>.*?):(?P<line>\d+):(?P<column>\d+):\s*"
    r"(?P<severity>error|warning|info):\s*(?P<message>.*)$",
    re.IGNORECASE,
)
INCOMPLETE_PROOF_PATTERN = re.compile(r"\b(?:sorry|admit)\b", re.IGNORECASE)


def classify_message(message: str) -> ErrorCategory:
    """Map a compiler message onto an :class:`ErrorCategory`."""
    for category, pattern in ERROR_PATTERNS:
        if pattern.search(message):
            return category
    return ErrorCategory.OTHER


def parse_diagnostics(output: str) -> list[LeanDiagnostic]:
    """Parse compiler output into diagnostics.

    Lines that follow a diagnostic header (goal states, expected/actual
    types) are attached to it as context until the next header.
    """

    if not output or not output.strip():
        return []

    diagnostics: list[LeanDiagnostic] = []
    current: LeanDiagnostic | None = None
    for raw in output.splitlines():
        match = DIAGNOSTIC_PATTERN.match(raw.strip())
        if match:
            current = LeanDiagnostic(
                line=int(match.group("line")),
                column=int(match.group("column")),
                message=match.group("message").strip(),
                severity=ErrorSeverity(match.group("severity").lower()),
            )
            diagnostics.append(current)
        elif current is not None and raw.strip():
            current.context.append(raw.strip())

    for diagnostic in diagnostics:
        full_message = " ".join([diagnostic.message, *diagnostic.context])
        diagnostic.category = classify_message(full_message)
    return diagnostics


def primary_error(diagnostics: list[LeanDiagnostic]) -> LeanDiagnostic | None:
    """The error worth fixing first, by :data:`CATEGORY_PRIORITY`."""
    errors = [item for item in diagnostics if item.severity is ErrorSeverity.ERROR]
    if not errors:
        return None
    for category in CATEGORY_PRIORITY:
        for error in errors:
            if error.category is category:
                return error
    return errors[0]


def mentions_incomplete_proof(output: str) -> bool:
    return bool(INCOMPLETE_PROOF_PATTERN.search(output or ""))


__all__ = [
    "CATEGORY_PRIORITY",
    "ERROR_PATTERNS",
    "ErrorCategory",
    "ErrorSeverity",
    "LeanDiagnostic",
    "classify_message",
    "mentions_incomplete_proof",
    "parse_diagnostics",
    "primary_error",
]
