"""Tests for goal and assumption formalization."""

from __future__ import annotations

import pytest

from proofsketch.lean.formalize import (
    PLACEHOLDER_PROPOSITION,
    clean_assumption_text,
    clean_goal_text,
    formalize_assumption,
    formalize_goal,
    normalize_expression,
)


class TestCleaning:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Therefore n is even.", "n is even."),
            ("Hence, x > 0", "x > 0"),
            ("We conclude that x = 1", "x = 1"),
            ("This proves that 3 divides n.", "3 divides n."),
            ("It follows that y is odd", "y is odd"),
            ("n is even", "n is even"),
        ],
    )
    def test_goal_markers(self, text, expected):
        assert clean_goal_text(text) == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Assume x > 0.", "x > 0."),
            ("We assume that x > 0.", "x > 0."),
            ("Suppose, p is prime", "p is prime"),
            ("Given that n is odd", "n is odd"),
        ],
    )
    def test_assumption_markers(self, text, expected):
        assert clean_assumption_text(text) == expected

    def test_only_leading_marker_is_removed(self):
        assert clean_goal_text("Thus so be it") == "so be it"


class TestNormalizeExpression:
    def test_implicit_products(self):
        assert normalize_expression("2k + 3(n + 1).") == "2 * k + 3 * (n + 1)"

    def test_product_symbols(self):
        assert normalize_expression("a × b · c") == "a * b * c"

    def test_whitespace(self):
        assert normalize_expression("  x   +  y ") == "x + y"


class TestFormalizeGoal:
    @pytest.mark.parametrize(
        ("text", "proposition"),
        [
            ("Therefore n is even.", "Even n"),
            ("Hence m is an odd number.", "Odd m"),
            ("Thus n is divisible by 3.", "3 ∣ n"),
            ("So a is divisible by b.", "b ∣ a"),
            ("Then n = 2k for some k.", "∃ k, n = 2 * k"),
            ("There exists k such that n = 2k.", "∃ k, n = 2 * k"),
            ("There exists an integer m with m > n.", "∃ m, m > n"),
            ("Therefore for all n, n + 0 = n.", "∀ n, n + 0 = n"),
            ("For every x, x * 1 = x.", "∀ x, x * 1 = x"),
        ],
    )
    def test_templates(self, text, proposition):
        result = formalize_goal(text)
        assert result.formalized
        assert result.proposition == proposition
        assert result.source == text

    def test_unmatched_goal_keeps_source(self):
        result = formalize_goal("Therefore the  claim\nholds.")
        assert not result.formalized
        assert result.proposition == PLACEHOLDER_PROPOSITION
        assert result.source == "Therefore the claim holds."

    def test_comment_tokens_are_rejected(self):
        """A proposition that would break the generated file is not used."""
        result = formalize_goal("For all x, x -- y")
        assert not result.formalized

    def test_goal_ignores_assumption_only_templates(self):
        assert not formalize_goal("Therefore p is prime.").formalized
        assert not formalize_goal("Therefore x > 0.").formalized


class TestFormalizeAssumption:
    @pytest.mark.parametrize(
        ("text", "proposition"),
        [
            ("Assume n is even.", "Even n"),
            ("Suppose p is prime.", "Nat.Prime p"),
            ("Let q be a prime.", "Nat.Prime q"),
            ("Assume x > 0.", "x > 0"),
            ("Assume x >= 5.", "x ≥ 5"),
            ("Assume y <= -2.", "y ≤ -2"),
            ("Assume z != 1.", "z ≠ 1"),
            ("Suppose n ≥ 1.", "n ≥ 1"),
        ],
    )
    def test_templates(self, text, proposition):
        result = formalize_assumption(text)
        assert result.formalized
        assert result.proposition == proposition

    def test_decimal_comparison_is_not_formalized(self):
        assert not formalize_assumption("Assume x = 3.5.").formalized

    def test_typing_sentence_is_placeholder(self):
        result = formalize_assumption("Let x be an integer.")
        assert result.proposition == PLACEHOLDER_PROPOSITION
        assert result.source == "Let x be an integer."
