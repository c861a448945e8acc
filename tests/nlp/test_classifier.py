"""Tests for sentence splitting and rule-based classification."""

from __future__ import annotations

import pytest

from proofsketch.nlp.classifier import (
    CLASSIFICATION_RULES,
    SentenceClassifier,
    classify_sentence,
    classify_text,
    split_sentences,
)
from proofsketch.nlp.schemas import ClassifiedSentence, SentenceCategory


class TestSplitSentences:
    """Sentence boundary detection."""

    def test_splits_on_terminal_punctuation(self):
        """Periods, question and exclamation marks end sentences."""
        assert split_sentences("Assume x > 0. Is it true? Yes!") == [
            "Assume x > 0.",
            "Is it true?",
            "Yes!",
        ]

    def test_abbreviations_do_not_end_a_sentence(self):
        """Common abbreviations are merged into the following chunk."""
        sentences = split_sentences("This holds, e.g. for n = 2. Done.")
        assert sentences == ["This holds, e.g. for n = 2.", "Done."]

    def test_decimals_are_not_split(self):
        """A period inside a number is not a boundary."""
        assert split_sentences("Then x = 3.5 here. Next.") == ["Then x = 3.5 here.", "Next."]

    def test_blank_lines_split_paragraphs(self):
        """Paragraph breaks separate sentences even without punctuation."""
        assert split_sentences("Assume x > 0\n\nThen x + 1 > 0") == [
            "Assume x > 0",
            "Then x + 1 > 0",
        ]

    def test_internal_whitespace_is_collapsed(self):
        """Line breaks and runs of spaces inside a sentence collapse to one space."""
        assert split_sentences("Assume   x\n  is even.") == ["Assume x is even."]

    @pytest.mark.parametrize("text", ["", "   ", "\n\n", None, 42])
    def test_empty_or_invalid_input(self, text):
        """Blank and non-string input yields no sentences."""
        assert split_sentences(text) == []


class TestClassifySentence:
    """Category assignment for individual sentences."""

    @pytest.mark.parametrize(
        ("sentence", "category"),
        [
            ("We prove this by induction on n.", SentenceCategory.INDUCTION),
            ("By the inductive hypothesis, the claim holds for k.", SentenceCategory.INDUCTION),
            ("Suppose not.", SentenceCategory.CONTRADICTION),
            ("This leads to a contradiction.", SentenceCategory.CONTRADICTION),
            ("Consider the case where n is even.", SentenceCategory.CASE),
            ("Case 2: n is odd.", SentenceCategory.CASE),
            ("By definition, the sum is finite.", SentenceCategory.DEFINITION),
            ("Simplifying gives the bound.", SentenceCategory.DEFINITION),
            ("There exists a number m with m > n.", SentenceCategory.EXISTENTIAL),
            ("Then n = 2k for some k.", SentenceCategory.EXISTENTIAL),
            ("For all x, x + 0 = x.", SentenceCategory.UNIVERSAL),
            ("If x > 2 then x > 1.", SentenceCategory.IMPLICATION),
            ("Assume n is even.", SentenceCategory.ASSUMPTION),
            ("Let n be an integer.", SentenceCategory.ASSUMPTION),
            ("Then we get the result.", SentenceCategory.STEP),
            ("Therefore n is even.", SentenceCategory.CONCLUSION),
            ("QED", SentenceCategory.CONCLUSION),
            ("The number 6 is divisible by 3.", SentenceCategory.ARITHMETIC),
            ("x = y", SentenceCategory.ALGEBRAIC),
            ("The union of the two sets is nonempty.", SentenceCategory.SET_THEORY),
            ("Nothing to see here.", SentenceCategory.OTHER),
        ],
    )
    def test_categories(self, sentence, category):
        """Each rule fires on a representative sentence."""
        assert classify_sentence(sentence) is category

    def test_induction_wins_over_step(self):
        """A sentence matching induction and step triggers is classified induction."""
        sentence = "Then by induction we have the result."
        assert classify_sentence(sentence) is SentenceCategory.INDUCTION

    def test_matching_is_case_insensitive(self):
        assert classify_sentence("ASSUME X IS EVEN.") is SentenceCategory.ASSUMPTION

    def test_non_string_is_other(self):
        assert classify_sentence(None) is SentenceCategory.OTHER
        assert classify_sentence(3.14) is SentenceCategory.OTHER

    def test_rule_table_order(self):
        """The rule table is evaluated in a fixed, inspectable order."""
        order = [rule.category for rule in CLASSIFICATION_RULES]
        assert order[:3] == [
            SentenceCategory.INDUCTION,
            SentenceCategory.CONTRADICTION,
            SentenceCategory.CASE,
        ]
        assert order.index(SentenceCategory.ASSUMPTION) < order.index(SentenceCategory.STEP)
        assert order.index(SentenceCategory.STEP) < order.index(SentenceCategory.CONCLUSION)
        assert SentenceCategory.OTHER not in order

    def test_custom_rule_table(self):
        """A classifier can be built from a reordered table."""
        reversed_rules = tuple(reversed(CLASSIFICATION_RULES))
        classifier = SentenceClassifier(reversed_rules)
        # Algebraic is now checked before induction.
        assert classifier.classify_sentence("By induction, a = b.") is SentenceCategory.ALGEBRAIC


class TestClassifyText:
    """End-to-end splitting plus classification."""

    def test_scenario_sentences(self):
        """Typing sentence, hypothesis, witness and conclusion are told apart."""
        result = classify_text(
            "Let n be an integer. Assume n is even. Then n = 2k for some k. Therefore n is even."
        )

        assert [item.category for item in result] == [
            SentenceCategory.ASSUMPTION,
            SentenceCategory.ASSUMPTION,
            SentenceCategory.EXISTENTIAL,
            SentenceCategory.CONCLUSION,
        ]
        assert all(isinstance(item, ClassifiedSentence) for item in result)
        assert result[2].text == "Then n = 2k for some k."

    def test_empty_text(self):
        assert classify_text("") == []

    def test_categories_compare_equal_to_strings(self):
        (sentence,) = classify_text("Assume x > 0.")
        assert sentence.category == "assumption"
