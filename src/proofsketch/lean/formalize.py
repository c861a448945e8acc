"""Template-based translation of goal and assumption clauses into Lean propositions."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

LOG = logging.getLogger(__name__)

PLACEHOLDER_PROPOSITION = "True"

_VAR = r"([a-zA-Z](?:_?\d+)?)"

_GOAL_MARKERS = re.compile(
    r"^(?:therefore|hence|thus|so|consequently|finally|we\s+conclude\s+that"
    r"|this\s+(?:proves|shows|establishes|demonstrates)\s+that|it\s+follows\s+that)[,\s]+",
    re.IGNORECASE,
)
_ASSUMPTION_MARKERS = re.compile(
    r"^(?:we\s+)?(?:assume|suppose|let|given)(?:\s+that)?[,\s]+", re.IGNORECASE
)
_UNSAFE = re.compile(r"--|/-|-/|[\r\n]")

_COMPARISON_OPERATORS = {
    ">": ">",
    "<": "<",
    "=": "=",
    ">=": "≥",
    "<=": "≤",
    "!=": "≠",
    "≥": "≥",
    "≤": "≤",
    "≠": "≠",
}


@dataclass(frozen=True, slots=True)
class Formalization:
    """Outcome of formalizing one clause."""

    proposition: str
    source: str
    formalized: bool


Render = Callable[[re.Match[str]], str]


def normalize_expression(expression: str) -> str:
    """Tidy an informal expression: explicit products, no trailing period."""
    expression = expression.strip().rstrip(".").strip()
    expression = expression.replace("×", "*").replace("·", "*")
    expression = re.sub(r"(\d)([a-zA-Z(])", r"\1 * \2", expression)
    return " ".join(expression.split())


def _render_parity(match: re.Match[str]) -> str:
    return f"{match.group(2).capitalize()} {match.group(1)}"


def _render_divisibility(match: re.Match[str]) -> str:
    return f"{match.group(2)} ∣ {match.group(1)}"


def _render_exists_for_some(match: re.Match[str]) -> str:
    return f"∃ {match.group(3)}, {match.group(1)} = {normalize_expression(match.group(2))}"


def _render_there_exists(match: re.Match[str]) -> str:
    return f"∃ {match.group(1)}, {_formalize_body(match.group(2))}"


def _render_forall(match: re.Match[str]) -> str:
    return f"∀ {match.group(1)}, {_formalize_body(match.group(2))}"


def _render_prime(match: re.Match[str]) -> str:
    return f"Nat.Prime {match.group(1)}"


def _render_comparison(match: re.Match[str]) -> str:
    operator = _COMPARISON_OPERATORS[match.group(2)]
    return f"{match.group(1)} {operator} {match.group(3)}"


GOAL_TEMPLATES: tuple[tuple[re.Pattern[str], Render], ...] = (
    (
        re.compile(rf"\b{_VAR}\s+(?:is|be)\s+(?:an?\s+)?(even|odd)\b", re.IGNORECASE),
        _render_parity,
    ),
    (
        re.compile(
            rf"\b{_VAR}\s+is\s+divisible\s+by\s+([a-zA-Z](?:_?\d+)?|\d+)\b", re.IGNORECASE
        ),
        _render_divisibility,
    ),
    (
        re.compile(rf"\b{_VAR}\s*=\s*(.+?)\s+for\s+some\s+{_VAR}\b", re.IGNORECASE),
        _render_exists_for_some,
    ),
    (
        re.compile(
            rf"\bthere\s+exists?\s+(?:an?\s+\w+\s+)?{_VAR}\s+(?:such\s+that|with)\s+(.+)$",
            re.IGNORECASE,
        ),
        _render_there_exists,
    ),
    (
        re.compile(rf"\bfor\s+(?:all|every|each|any)\s+{_VAR}\s*,\s*(.+)$", re.IGNORECASE),
        _render_forall,
    ),
)

ASSUMPTION_TEMPLATES: tuple[tuple[re.Pattern[str], Render], ...] = (
    *GOAL_TEMPLATES,
    (
        re.compile(rf"\b{_VAR}\s+(?:is|be)\s+(?:an?\s+)?prime\b", re.IGNORECASE),
        _render_prime,
    ),
    (
        re.compile(rf"\b{_VAR}\s*(>=|<=|!=|[>≥<≤=≠])\s*(-?\d+)\b(?!\.?\d)"),
        _render_comparison,
    ),
)


def _match_templates(
    text: str, templates: Sequence[tuple[re.Pattern[str], Render]]
) -> str | None:
    for pattern, render in templates:
        match = pattern.search(text)
        if match:
            proposition = render(match)
            if not _UNSAFE.search(proposition):
                return proposition
    return None


def _formalize_body(body: str) -> str:
    """Formalize the body of a quantifier, keeping it as an expression otherwise."""
    nested = _match_templates(body, GOAL_TEMPLATES[:2])
    return nested if nested is not None else normalize_expression(body)


def clean_goal_text(text: str) -> str:
    """Strip leading discourse markers ("therefore", "hence", ...) from a goal."""
    return _GOAL_MARKERS.sub("", text.strip(), count=1).strip()


def clean_assumption_text(text: str) -> str:
    """Strip leading hypothesis markers ("assume", "let", ...) from an assumption."""
    return _ASSUMPTION_MARKERS.sub("", text.strip(), count=1).strip()


def _formalize(
    text: str, cleaned: str, templates: Sequence[tuple[re.Pattern[str], Render]]
) -> Formalization:
    source = " ".join(str(text).split())
    proposition = _match_templates(cleaned, templates)
    if proposition is None:
        LOG.debug("Could not formalize %r", source)
        return Formalization(proposition=PLACEHOLDER_PROPOSITION, source=source, formalized=False)
    return Formalization(proposition=proposition, source=source, formalized=True)


def formalize_goal(text: str) -> Formalization:
    """Formalize the conclusion of a proof."""
    return _formalize(text, clean_goal_text(text), GOAL_TEMPLATES)


def formalize_assumption(text: str) -> Formalization:
    """Formalize a hypothesis; also recognises primality and numeric comparisons."""
    return _formalize(text, clean_assumption_text(text), ASSUMPTION_TEMPLATES)


__all__ = [
    "ASSUMPTION_TEMPLATES",
    "GOAL_TEMPLATES",
    "PLACEHOLDER_PROPOSITION",
    "Formalization",
    "clean_assumption_text",
    "clean_goal_text",
    "formalize_assumption",
    "formalize_goal",
    "normalize_expression",
]
