"""Command line entrypoints for proofsketch."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from .config import get_checker_settings
from .executor import CompileResult, FailureKind, compile_lean_snippet, lean_info
from .pipeline import translate as translate_text

app = typer.Typer(help="Turn informal mathematical proofs into Lean 4 proof skeletons.")

FileArgument = Annotated[
    Path | None,
    typer.Argument(help="Text file containing the informal proof.", show_default=False),
]
TextOption = Annotated[
    str | None,
    typer.Option("--text", "-t", help="Proof text given inline instead of a file."),
]
OutputOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Write the result to this path instead of stdout."),
]
TimeoutOption = Annotated[
    float | None,
    typer.Option("--timeout", help="Lean compilation timeout in seconds.", min=0.1),
]


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log pipeline details to stderr.")
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _read_source(file: Path | None, text: str | None) -> str:
    if (file is None) == (text is None):
        _fail("Provide exactly one of FILE or --text.")
    if text is not None:
        return text
    if not file.exists():
        _fail(f"Input file not found: {file}")
    try:
        return file.read_text(encoding="utf-8")
    except OSError as exc:
        typer.secho(f"Failed to read {file}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


def _write_output(content: str, output: Path | None) -> None:
    if output is None:
        typer.echo(content, nl=not content.endswith("\n"))
        return
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
    except OSError as exc:
        typer.secho(f"Failed to write output file: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.secho(f"Saved to: {output}", fg=typer.colors.GREEN, err=True)


def _compile(code: str, timeout: float | None) -> CompileResult:
    settings = get_checker_settings({"timeout": timeout})
    return compile_lean_snippet(
        code,
        timeout=settings.timeout,
        max_output_bytes=settings.max_output_bytes,
        keep_artifact=settings.keep_artifact,
        lean_command=settings.lean_command,
    )


def _report(result: CompileResult) -> None:
    """Print a compile result; exits non-zero unless Lean accepted the file."""

    if result.ok:
        typer.secho("Lean compilation succeeded", fg=typer.colors.GREEN)
        return

    if result.failure is FailureKind.PROOF_INCOMPLETE:
        typer.secho(f"Lean compilation succeeded: {result.message}", fg=typer.colors.YELLOW)
        return

    typer.secho(f"Lean compilation failed: {result.message}", fg=typer.colors.RED, err=True)
    for error in result.errors[:5]:
        typer.echo(
            f"  - line {error.line}:{error.column} [{error.category.value}] {error.message}",
            err=True,
        )
    if len(result.errors) > 5:
        typer.echo(f"  ... and {len(result.errors) - 5} more errors", err=True)
    if not result.errors and result.stderr:
        typer.echo(result.stderr, err=True)
    raise typer.Exit(code=1)


@app.command()
def translate(
    file: FileArgument = None,
    text: TextOption = None,
    theorem_name: Annotated[
        str | None,
        typer.Option("--theorem-name", "-n", help="Name of the generated theorem."),
    ] = None,
    comments: Annotated[
        bool | None,
        typer.Option("--comments/--no-comments", help="Annotate assumptions and steps."),
    ] = None,
    admit: Annotated[
        bool | None,
        typer.Option("--admit/--no-admit", help="Emit sorry for every open obligation."),
    ] = None,
    imports: Annotated[
        list[str] | None,
        typer.Option("--import", "-i", help="Module to import, e.g. Mathlib. Repeatable."),
    ] = None,
    output: OutputOption = None,
    check: Annotated[
        bool | None,
        typer.Option("--check/--no-check", help="Compile the skeleton with Lean afterwards."),
    ] = None,
    timeout: TimeoutOption = None,
) -> None:
    """Translate an informal proof into a Lean 4 skeleton."""

    source = _read_source(file, text)
    overrides: dict[str, Any] = {
        "theorem_name": theorem_name,
        "include_comments": comments,
        "use_admit": admit,
        "imports": imports or None,
    }
    options = {key: value for key, value in overrides.items() if value is not None}
    result = translate_text(source, options)
    _write_output(result.lean, output)

    if check is None:
        check = get_checker_settings().check_by_default
    if check:
        _report(_compile(result.lean, timeout))


@app.command()
def classify(file: FileArgument = None, text: TextOption = None) -> None:
    """Print one line per sentence: category, a tab, then the sentence."""

    source = _read_source(file, text)
    for sentence in translate_text(source).sentences:
        typer.echo(f"{sentence.category.value}\t{sentence.text}")


@app.command()
def tree(file: FileArgument = None, text: TextOption = None, output: OutputOption = None) -> None:
    """Dump the proof tree built from the input as JSON."""

    source = _read_source(file, text)
    proof_tree = translate_text(source).tree
    payload = json.dumps(proof_tree.model_dump(mode="json"), indent=2, ensure_ascii=False)
    _write_output(payload + "\n", output)


@app.command()
def check(file: Path, timeout: TimeoutOption = None) -> None:
    """Compile a Lean file and report success or the compiler diagnostics."""

    if not file.exists():
        _fail(f"Lean file not found: {file}")
    lean_code = file.read_text(encoding="utf-8")
    _report(_compile(lean_code, timeout))


@app.command()
def info() -> None:
    """Show which Lean toolchain is available."""

    details = lean_info()
    if not details.available:
        _fail("Lean not installed or not in PATH")
    typer.echo(f"lean: {details.lean}")
    typer.echo(f"lake: {details.lake or 'not installed'}")


if __name__ == "__main__":
    app()
