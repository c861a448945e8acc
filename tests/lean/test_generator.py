"""Tests for Lean 4 skeleton generation."""

from __future__ import annotations

import pytest

from proofsketch.lean.generator import (
    INVALID_TREE_MESSAGE,
    SkeletonGenerator,
    SkeletonOptions,
    escape_comment,
    explicit_options,
    extract_case_target,
    extract_witness,
    generate_lean,
    sanitize_theorem_name,
)
from proofsketch.nlp.classifier import classify_text
from proofsketch.nlp.entities import extract_entities
from proofsketch.tree.builder import build_proof_tree
from proofsketch.tree.schemas import Goal, ProofTree, Step, Substeps, Technique

HEADER = "-- Generated Lean 4 skeleton (rule-based)\n\n"
EMPTY_SKELETON = HEADER + "theorem user_proof : True := by\n  sorry\n"


def _tree(text: str) -> ProofTree:
    sentences = classify_text(text)
    return build_proof_tree(sentences, extract_entities(sentences))


def _lines(tree, options=None) -> list[str]:
    return generate_lean(tree, options).splitlines()


def _step(text: str, category: str, technique: Technique = Technique.DIRECT, **extra) -> Step:
    return Step(id="s1", text=text, category=category, technique=technique, **extra)


class TestScenarios:
    def test_even_witness_proof(self):
        code = generate_lean(
            _tree(
                "Let n be an integer. Assume n is even. "
                "Then n = 2k for some k. Therefore n is even."
            )
        )
        lines = code.splitlines()

        assert lines[0] == "-- Generated Lean 4 skeleton (rule-based)"
        assert "variable (n : ℤ)" in lines
        assert "variable (k : ℤ)" in lines
        assert "theorem user_proof : Even n := by" in lines
        assert "  have h1 : Even n := by" in lines
        assert lines[lines.index("  have h1 : Even n := by") + 1] == "    sorry"
        assert "  use k" in lines
        assert "  -- Goal: Therefore n is even." in lines
        assert code.endswith("  sorry\n")
        assert all(line == line.rstrip() for line in lines)

    def test_contradiction_proof(self):
        lines = _lines(
            _tree(
                "Suppose x is prime. By contradiction, assume x is not prime. "
                "This leads to a contradiction."
            )
        )

        assert "variable (x : ℕ)" in lines
        assert "theorem user_proof : True := by" in lines
        assert "  have h1 : Nat.Prime x := by" in lines
        assert lines.count("  by_contra h_contra") == 2

    def test_empty_tree(self):
        assert generate_lean(ProofTree()) == EMPTY_SKELETON
        assert generate_lean(_tree("")) == EMPTY_SKELETON

    def test_mapping_tree_matches_model(self):
        tree = _tree("Assume x > 0. Then x + 1 > 1. Therefore x + 1 > 0.")
        assert generate_lean(tree.model_dump(mode="json")) == generate_lean(tree)

    def test_generation_is_deterministic(self):
        tree = _tree("Assume n is even. We proceed by induction on n. Therefore n is even.")
        assert generate_lean(tree) == generate_lean(tree)


class TestInvalidInput:
    @pytest.mark.parametrize("tree", [None, "tree", 42, [], {"steps": "bad"}])
    def test_invalid_tree(self, tree):
        assert generate_lean(tree) == INVALID_TREE_MESSAGE

    def test_empty_mapping_is_an_empty_tree(self):
        assert generate_lean({}) == EMPTY_SKELETON

    @pytest.mark.parametrize(
        "options",
        [{"indentWidth": 100}, {"useAdmit": "maybe"}, {"indent_width": 0}, "bogus", 5, ["x"]],
    )
    def test_invalid_options_fall_back_to_defaults(self, options):
        assert generate_lean(ProofTree(), options) == EMPTY_SKELETON

    def test_only_invalid_options_are_dropped(self):
        lines = _lines(ProofTree(), {"theoremName": "kept", "indentWidth": 100, "imports": 3})
        assert lines[-2:] == ["theorem kept : True := by", "  sorry"]
        assert not any(line.startswith("import") for line in lines)

    def test_explicit_options(self):
        assert explicit_options({"useAdmit": False, "indent_width": "x", "extra": 1}) == {
            "use_admit": False
        }
        assert explicit_options(None) == {}
        assert explicit_options(SkeletonOptions(indent_width=4)) == {"indent_width": 4}


class TestOptions:
    def test_theorem_name_aliases(self):
        assert "theorem foo : True := by" in _lines(ProofTree(), {"theoremName": "foo"})
        assert "theorem bar : True := by" in _lines(ProofTree(), {"theorem_name": "bar"})

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("2fast", "_2fast"),
            ("my proof", "my_proof"),
            ("ok_name", "ok_name"),
            ("  ", "user_proof"),
        ],
    )
    def test_sanitize_theorem_name(self, name, expected):
        assert sanitize_theorem_name(name) == expected
        assert SkeletonOptions(theorem_name=name).theorem_name == expected

    def test_none_theorem_name_uses_default(self):
        assert SkeletonOptions(theorem_name=None).theorem_name == "user_proof"

    def test_without_admit(self):
        code = generate_lean(ProofTree(), {"useAdmit": False})
        assert code == HEADER + "theorem user_proof : True := by\n"
        tree = _tree("Assume x > 0. Then x = 1.")
        assert "sorry" not in generate_lean(tree, {"use_admit": False})

    def test_without_comments(self):
        tree = _tree("Assume n is even. Then n = 2k for some k.")
        lines = _lines(tree, {"includeComments": False})
        assert "  -- Assumptions" in lines
        assert not any(line.lstrip().startswith("-- Assumption 1") for line in lines)
        assert not any(line.lstrip().startswith("-- Step") for line in lines)

    def test_imports(self):
        imports = ["Mathlib.Tactic", "Mathlib.Data.Nat.Prime"]
        code = generate_lean(ProofTree(), {"imports": imports})
        assert code.startswith(
            "import Mathlib.Tactic\nimport Mathlib.Data.Nat.Prime\n\n-- Generated Lean 4 skeleton"
        )

    def test_indent_width(self):
        assert generate_lean(ProofTree(), {"indent_width": 4}).endswith("\n    sorry\n")

    def test_generator_accepts_options_model(self):
        generator = SkeletonGenerator(SkeletonOptions(theorem_name="t"))
        assert "theorem t : True := by" in generator.generate(ProofTree()).splitlines()


class TestGoalSignature:
    def test_unformalized_goal_is_kept_as_comment(self):
        lines = _lines(ProofTree(goal=Goal(text="Therefore the claim holds.")))
        index = lines.index("theorem user_proof : True := by")
        assert lines[index - 1] == "-- Could not formalize: Therefore the claim holds."

    def test_unformalized_assumption_is_kept_as_comment(self):
        lines = _lines(_tree("Assume the graph is connected."))
        index = lines.index("  have h1 : True := by")
        assert lines[index - 1] == "  -- Could not formalize: Assume the graph is connected."

    def test_formalized_goal(self):
        tree = ProofTree(goal=Goal(text="Hence n is divisible by 3."))
        assert "theorem user_proof : 3 ∣ n := by" in _lines(tree)


class TestEmitters:
    """Tactic blocks per technique and category."""

    def _body(self, step: Step, **options) -> list[str]:
        lines = _lines(ProofTree(steps=[step]), {"include_comments": False, **options})
        start = lines.index("  -- Proof steps") + 1
        end = len(lines) - 2
        return lines[start:end]

    def test_induction(self):
        step = _step(
            "We proceed by induction on m.",
            "induction",
            Technique.INDUCTION,
            induction_variable="m",
            substeps=Substeps(base_case="m = 0 is immediate"),
        )
        assert self._body(step) == [
            "  induction m with",
            "    | zero =>",
            "      -- m = 0 is immediate",
            "      sorry",
            "    | succ m' ih =>",
            "      -- Inductive step, ih is the hypothesis",
            "      sorry",
        ]

    def test_induction_variable_from_text(self):
        step = _step("By induction on k, the sum is even.", "induction", Technique.INDUCTION)
        assert self._body(step)[0] == "  induction k with"

    def test_contradiction(self):
        step = _step("Suppose not.", "contradiction", Technique.PROOF_BY_CONTRADICTION)
        assert self._body(step) == [
            "  by_contra h_contra",
            "  -- Assume the negation and derive a contradiction",
            "  sorry",
        ]

    def test_cases_with_target(self):
        step = _step("Consider the case where n is even.", "case", Technique.CASE_ANALYSIS)
        assert self._body(step) == [
            "  cases n with",
            "    | inl h_left =>",
            "      sorry",
            "    | inr h_right =>",
            "      sorry",
        ]

    def test_cases_without_target(self):
        step = _step("Case 1: the number is small.", "case", Technique.CASE_ANALYSIS)
        body = self._body(step)
        assert body[:2] == ["  -- Case analysis (specify target)", "  cases _ with"]

    def test_existential(self):
        step = _step("Choose m large.", "existential", Technique.EXISTENTIAL_INTRO)
        assert self._body(step) == ["  use m", "  -- Prove the property holds for m", "  sorry"]

    def test_universal(self):
        step = _step("For all y, y + 0 = y.", "universal", Technique.UNIVERSAL_INTRO)
        assert self._body(step) == [
            "  intro y",
            "  -- Show the property for arbitrary y",
            "  sorry",
        ]

    def test_implication(self):
        step = _step("If x > 2 then x > 1.", "implication")
        assert self._body(step) == [
            "  intro h_premise",
            "  -- Assume the premise and prove the conclusion",
            "  sorry",
        ]

    @pytest.mark.parametrize(
        ("text", "tactic"),
        [
            ("By definition, simplifying gives the bound.", "  simp [*]"),
            ("Unfold the definition of even.", "  unfold _ -- specify definition to unfold"),
            ("By definition of f.", "  rw [_] -- specify rewrite rule"),
        ],
    )
    def test_definition(self, text, tactic):
        assert self._body(_step(text, "definition")) == [tactic]

    @pytest.mark.parametrize(
        ("text", "category", "inner"),
        [
            ("Rearranging with algebra, x = y.", "algebraic", ["    ring"]),
            ("Adding 1 to both sides gives 3 > 2.", "arithmetic", ["    linarith"]),
            ("So 3 + 4 = 7.", "arithmetic", ["    -- Calculation step", "    sorry"]),
        ],
    )
    def test_calculation(self, text, category, inner):
        assert self._body(_step(text, category)) == ["  have h_calc_s1 : _ := by", *inner]

    def test_generic(self):
        assert self._body(_step("The claim is clear.", "step")) == [
            "  have h_s1 : _ := by",
            "    sorry",
        ]

    def test_step_comment(self):
        lines = _lines(ProofTree(steps=[_step("Then x = 1.", "step")]))
        assert "  -- Step s1 (step): Then x = 1." in lines


class TestHelpers:
    def test_escape_comment(self):
        assert escape_comment("a -/ b /- c */ d") == "a - / b / - c * / d"
        assert escape_comment("line one\n  line two") == "line one line two"

    def test_escaped_step_text_stays_in_comment(self):
        lines = _lines(ProofTree(steps=[_step("Odd -/ text\nhere", "step")]))
        assert "  -- Step s1 (step): Odd - / text here" in lines

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Consider the case when k is odd.", "k"),
            ("We argue by cases on p.", "p"),
            ("Case on x being zero.", "x"),
            ("Case 2: the rest.", None),
        ],
    )
    def test_extract_case_target(self, text, expected):
        assert extract_case_target(text) == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Then n = 2k for some k.", "k"),
            ("There exists an integer m with m > 0.", "m"),
            ("Take x_1 to be zero.", "x_1"),
            ("Then y = 3.", "y"),
            ("There is such a number.", "_"),
        ],
    )
    def test_extract_witness(self, text, expected):
        assert extract_witness(text) == expected
