"""Pydantic schemas for diagram sources, validation and render results."""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


PARTICIPANT_THRESHOLD = 15
MESSAGE_THRESHOLD = 50


class Theme(str, Enum):
    SIMPLE = "simple"
    HAND_DRAWN = "hand-drawn"


class ErrorKind(str, Enum):
    SYNTAX = "syntax"
    LIBRARY = "library"
    EMPTY = "empty"


class RenderStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    EMPTY = "empty"
    CANCELLED = "cancelled"


class DiagramSource(BaseModel):
    content: str
    block_id: str
    line_count: int = 0

    @classmethod
    def from_text(cls, content: str, block_id: str) -> "DiagramSource":
        return cls(content=content, block_id=block_id, line_count=len(content.split("\n")))


class RenderError(BaseModel):
    """A diagnostic returned as data, never raised."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    line_number: Optional[int] = None
    suggestion: Optional[str] = None


class DiagramMetrics(BaseModel):
    participant_count: int = Field(default=0, ge=0)
    message_count: int = Field(default=0, ge=0)
    exceeds_threshold: bool = False

    @classmethod
    def from_counts(cls, participant_count: int, message_count: int) -> "DiagramMetrics":
        return cls(
            participant_count=participant_count,
            message_count=message_count,
            exceeds_threshold=participant_count > PARTICIPANT_THRESHOLD or message_count > MESSAGE_THRESHOLD,
        )


class TitleValidation(BaseModel):
    is_valid: bool = False
    title: Optional[str] = None
    error: Optional[RenderError] = None


class ParticipantValidation(BaseModel):
    is_valid: bool
    short_name: Optional[str] = None
    display_name: Optional[str] = None
    has_alias: bool = False
    declaration_order: int = Field(default=0, ge=0)
    error: Optional[RenderError] = None


class ValidationResult(BaseModel):
    is_valid: bool
    title: TitleValidation = Field(default_factory=TitleValidation)
    participants: List[ParticipantValidation] = Field(default_factory=list)
    participant_map: Dict[str, str] = Field(default_factory=dict)
    errors: List[RenderError] = Field(default_factory=list)


class ParseIssue(BaseModel):
    message: str
    line_number: Optional[int] = None
    suggestion: str = ""


class ParseWarning(BaseModel):
    message: str
    line_number: Optional[int] = None


class ParseResult(BaseModel):
    """Outcome of the line-by-line arrow syntax pass."""

    is_valid: bool
    is_empty: bool = False
    errors: List[ParseIssue] = Field(default_factory=list)
    warnings: List[ParseWarning] = Field(default_factory=list)


class DiagramCheck(BaseModel):
    """Both validation passes over one source text; the validation cache value."""

    declarations: ValidationResult
    syntax: ParseResult

    @property
    def is_valid(self) -> bool:
        return self.declarations.is_valid and self.syntax.is_valid

    @property
    def errors(self) -> List[RenderError]:
        errors = list(self.declarations.errors)
        reported = {e.line_number for e in errors if e.line_number is not None}
        for issue in self.syntax.errors:
            if issue.line_number is not None and issue.line_number in reported:
                continue
            errors.append(
                RenderError(
                    kind=ErrorKind.SYNTAX,
                    message=issue.message,
                    line_number=issue.line_number,
                    suggestion=issue.suggestion or None,
                )
            )
        # stable: declaration errors win ties, unnumbered errors go last
        return sorted(errors, key=lambda e: (e.line_number is None, e.line_number or 0))


class RenderResult(BaseModel):
    status: RenderStatus
    svg: Optional[str] = None
    error: Optional[RenderError] = None
    errors: List[RenderError] = Field(default_factory=list)
    warnings: List[ParseWarning] = Field(default_factory=list)
    metrics: Optional[DiagramMetrics] = None
    title: Optional[str] = None
    participant_map: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "RenderResult":
        return cls(status=RenderStatus.EMPTY)

    @classmethod
    def cancelled(cls) -> "RenderResult":
        return cls(status=RenderStatus.CANCELLED)

    @classmethod
    def failure(
        cls,
        errors: List[RenderError],
        metrics: Optional[DiagramMetrics] = None,
        warnings: Optional[List[ParseWarning]] = None,
    ) -> "RenderResult":
        return cls(
            status=RenderStatus.ERROR,
            error=errors[0] if errors else None,
            errors=list(errors),
            warnings=list(warnings or []),
            metrics=metrics,
        )

    @classmethod
    def success(
        cls,
        svg: str,
        metrics: DiagramMetrics,
        check: Optional[DiagramCheck] = None,
    ) -> "RenderResult":
        result = cls(status=RenderStatus.SUCCESS, svg=svg, metrics=metrics)
        if check is not None:
            result.warnings = list(check.syntax.warnings)
            result.title = check.declarations.title.title
            result.participant_map = dict(check.declarations.participant_map)
        return result
