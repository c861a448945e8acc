#!/usr/bin/env python3
"""
Demo script for the proofsketch pipeline.

Runs a few sample proofs through every stage and prints what each one
produces. Compilation is attempted only when Lean is on PATH.
"""

from proofsketch import translate
from proofsketch.executor import compile_lean_snippet, lean_info
from proofsketch.executor.errors import classify_message

SAMPLE_PROOFS = {
    "Even witness": (
        "Let n be an integer. Assume n is even. Then n = 2k for some k. Therefore n is even."
    ),
    "Contradiction": (
        "Suppose x is prime. By contradiction, assume x is not prime. "
        "This leads to a contradiction."
    ),
    "Induction": (
        "We prove the claim by induction on n. The base case is trivial. "
        "By the inductive hypothesis, the claim holds for n + 1. Therefore for all n, n + 0 = n."
    ),
}


def demo_translation():
    """Show sentence categories, the tree summary and the skeleton for each sample."""
    for title, text in SAMPLE_PROOFS.items():
        print(f"\n{title}")
        print("=" * 50)

        result = translate(text)
        for sentence in result.sentences:
            print(f"  [{sentence.category.value:>13}] {sentence.text}")

        tree = result.tree
        print(
            f"\n  assumptions={len(tree.assumptions)} steps={len(tree.steps)}"
            f" goal={'yes' if tree.goal else 'no'}"
        )
        print(f"  techniques: {', '.join(tree.metadata.techniques)}")
        print()
        print(result.lean)


def demo_diagnostics():
    """Show how compiler messages are categorised."""
    print("\nDiagnostic classification")
    print("=" * 50)
    for message in (
        "unknown identifier 'Nat.add_comm'",
        "type mismatch",
        "unsolved goals",
        "failed to synthesize instance",
        "unexpected token ')'",
    ):
        print(f"  {classify_message(message).value:<20} {message}")


def demo_compilation():
    details = lean_info()
    if not details.available:
        print("\nLean not installed; skipping compilation.")
        return

    print(f"\nCompiling with {details.lean}")
    print("=" * 50)
    for title, text in SAMPLE_PROOFS.items():
        result = compile_lean_snippet(translate(text).lean)
        print(f"  {title}: {result.message}")


def main():
    """Run all demos."""
    demo_translation()
    demo_diagnostics()
    demo_compilation()


if __name__ == "__main__":
    main()
