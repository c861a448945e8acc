"""Run the Lean compiler on generated source and report a structured result."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import (
    ErrorSeverity,
    LeanDiagnostic,
    mentions_incomplete_proof,
    parse_diagnostics,
    primary_error,
)

LOG = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_OUTPUT_BYTES = 5 * 1024 * 1024
DEFAULT_LEAN_COMMAND = ("lean",)
TRUNCATION_MARKER = "\n... [output truncated]"


class FailureKind(str, Enum):
    TOOL_NOT_FOUND = "tool_not_found"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"
    COMPILE_ERROR = "compile_error"
    PROOF_INCOMPLETE = "proof_incomplete"


@dataclass
class CompileResult:
    """Outcome of one compiler invocation."""

    stdout: str = ""
    stderr: str = ""
    errors: list[LeanDiagnostic] = field(default_factory=list)
    warnings: list[LeanDiagnostic] = field(default_factory=list)
    failure: FailureKind | None = None
    message: str = ""
    returncode: int | None = None
    artifact_path: Path | None = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "failure": self.failure.value if self.failure else None,
            "message": self.message,
            "returncode": self.returncode,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "errors": [item.to_dict() for item in self.errors],
            "warnings": [item.to_dict() for item in self.warnings],
            "artifact_path": str(self.artifact_path) if self.artifact_path else None,
            "elapsed": self.elapsed,
        }


def _truncate(text: str | bytes | None, limit: int) -> str:
    if text is None:
        return ""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    return encoded[:limit].decode("utf-8", errors="ignore") + TRUNCATION_MARKER


def _resolve_command(lean_command: str | Sequence[str]) -> list[str] | None:
    command = [lean_command] if isinstance(lean_command, str) else list(lean_command)
    if not command:
        return None
    executable = shutil.which(command[0])
    if executable is None:
        return None
    return [executable, *command[1:]]


def _with_imports(code: str, imports: Sequence[str] | None) -> str:
    header = [f"import {module}" for module in imports or () if f"import {module}" not in code]
    if not header:
        return code
    return "\n".join(header) + "\n\n" + code


def compile_lean_snippet(
    code: Any,
    *,
    imports: Sequence[str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    keep_artifact: bool = False,
    lean_command: str | Sequence[str] = DEFAULT_LEAN_COMMAND,
    work_dir: str | Path | None = None,
) -> CompileResult:
    """Write ``code`` to a temporary ``.lean`` file and compile it.

    Never raises for expected failures: a missing compiler, bad input, a
    timeout, compiler errors and leftover ``sorry`` holes are all reported
    through :attr:`CompileResult.failure`.
    """

    if not isinstance(code, str) or not code.strip():
        return CompileResult(
            failure=FailureKind.INVALID_INPUT,
            message="Invalid Lean code: must be a non-empty string",
        )

    command = _resolve_command(lean_command)
    if command is None:
        LOG.warning("Lean executable %r not found on PATH", lean_command)
        return CompileResult(
            failure=FailureKind.TOOL_NOT_FOUND,
            message=(
                "Lean not found. Install Lean 4 (https://leanprover.github.io/)"
                " and put `lean` on PATH."
            ),
        )

    source = _with_imports(code, imports)
    directory = Path(work_dir) if work_dir is not None else None
    handle, raw_path = tempfile.mkstemp(prefix="proofsketch_", suffix=".lean", dir=directory)
    path = Path(raw_path)
    with os.fdopen(handle, "w", encoding="utf-8") as stream:
        stream.write(source)

    started = time.perf_counter()
    try:
        result = _run(command, path, timeout, max_output_bytes)
    finally:
        if keep_artifact:
            LOG.debug("Keeping Lean artifact at %s", path)
        else:
            path.unlink(missing_ok=True)

    result.elapsed = time.perf_counter() - started
    if keep_artifact:
        result.artifact_path = path
    LOG.info(
        "Lean compile finished in %.2fs: %s",
        result.elapsed,
        result.failure.value if result.failure else "ok",
    )
    return result


def _run(command: list[str], path: Path, timeout: float, max_output_bytes: int) -> CompileResult:
    try:
        completed = subprocess.run(
            [*command, str(path)],
            cwd=str(path.parent),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        return CompileResult(
            stdout=_truncate(exc.stdout, max_output_bytes),
            stderr=_truncate(exc.stderr, max_output_bytes),
            failure=FailureKind.TIMEOUT,
            message=f"Compilation timed out after {timeout}s",
        )
    except FileNotFoundError:
        return CompileResult(
            failure=FailureKind.TOOL_NOT_FOUND,
            message=f"Could not execute {command[0]}",
        )
    except OSError as exc:
        return CompileResult(failure=FailureKind.COMPILE_ERROR, message=f"Validation failed: {exc}")

    stdout = _truncate(completed.stdout, max_output_bytes)
    stderr = _truncate(completed.stderr, max_output_bytes)
    diagnostics = parse_diagnostics(f"{stdout}\n{stderr}")
    errors = [item for item in diagnostics if item.severity is ErrorSeverity.ERROR]
    warnings = [item for item in diagnostics if item.severity is not ErrorSeverity.ERROR]
    result = CompileResult(
        stdout=stdout,
        stderr=stderr,
        errors=errors,
        warnings=warnings,
        returncode=completed.returncode,
    )

    if errors or completed.returncode != 0:
        first = primary_error(errors)
        result.failure = FailureKind.COMPILE_ERROR
        if first is not None:
            result.message = (
                f"{len(errors)} error(s) found. First error: line {first.line}: {first.message}"
            )
        else:
            result.message = f"Lean exited with status {completed.returncode}"
    elif mentions_incomplete_proof(f"{stdout}\n{stderr}"):
        result.failure = FailureKind.PROOF_INCOMPLETE
        result.message = "Proof contains sorry/admit statements - proof is incomplete"
    else:
        result.message = "Lean validation successful - all proofs complete"
    return result


def run_proof(code: str, timeout: float = DEFAULT_TIMEOUT) -> tuple[bool, str]:
    """Compile ``code`` and return ``(ok, stderr)``; stderr carries the failure message."""
    result = compile_lean_snippet(code, timeout=timeout)
    if result.ok:
        return True, result.stderr
    return False, result.stderr or result.message


@dataclass
class LeanInfo:
    available: bool
    lean: str | None = None
    lake: str | None = None


def _version(executable: str) -> str | None:
    path = shutil.which(executable)
    if path is None:
        return None
    try:
        completed = subprocess.run(
            [path, "--version"], capture_output=True, text=True, timeout=5
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        LOG.debug("%s --version failed: %s", executable, exc)
        return None
    return completed.stdout.strip() or None


def lean_info() -> LeanInfo:
    """Report the installed Lean (and Lake) versions, if any."""
    lean = _version("lean")
    return LeanInfo(available=lean is not None, lean=lean, lake=_version("lake"))


__all__ = [
    "DEFAULT_MAX_OUTPUT_BYTES",
    "DEFAULT_TIMEOUT",
    "CompileResult",
    "FailureKind",
    "LeanInfo",
    "compile_lean_snippet",
    "lean_info",
    "run_proof",
]
