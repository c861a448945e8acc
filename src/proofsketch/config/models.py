"""Pydantic models for application configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ExtractorSettings(BaseModel):
    """Configuration section for entity extraction."""

    max_examples: int = Field(gt=0, le=3)
    max_example_length: int = Field(gt=0)


class GeneratorSettings(BaseModel):
    """Configuration section for skeleton rendering defaults."""

    theorem_name: str = Field(min_length=1)
    include_comments: bool
    use_admit: bool
    imports: list[str] = Field(default_factory=list)
    indent_width: int = Field(ge=1, le=8)


class CheckerSettings(BaseModel):
    """Configuration section for the Lean compiler invocation."""

    lean_command: list[str]
    timeout: float = Field(gt=0)
    max_output_bytes: int = Field(gt=0)
    keep_artifact: bool
    check_by_default: bool

    @field_validator("lean_command")
    @classmethod
    def validate_command(cls, value: list[str]) -> list[str]:
        if not value or not value[0].strip():
            raise ValueError("lean_command must name an executable")
        return value


class AppSettings(BaseModel):
    """Root configuration object for the proofsketch package."""

    extractor: ExtractorSettings
    generator: GeneratorSettings
    checker: CheckerSettings
