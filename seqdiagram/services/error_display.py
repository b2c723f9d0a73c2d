"""Plain-text diagnostics for the host to show next to a diagram block."""
from __future__ import annotations

from typing import List

from seqdiagram.schemas import (
    DiagramMetrics,
    ErrorKind,
    ParseWarning,
    RenderError,
    RenderResult,
    RenderStatus,
)

EMPTY_BLOCK_MESSAGE = "Empty sequence diagram block. Add diagram content to render."

_HEADINGS = {
    ErrorKind.SYNTAX: "Syntax Error",
    ErrorKind.LIBRARY: "Rendering Error",
    ErrorKind.EMPTY: "Empty Diagram",
}


def format_render_error(error: RenderError) -> str:
    heading = f"⚠ {_HEADINGS[error.kind]}"
    if error.line_number is not None:
        heading += f" [Line {error.line_number}]"
    lines = [heading, error.message]
    if error.suggestion:
        lines.append(f"Suggestion: {error.suggestion}")
    return "\n".join(lines)


def format_parse_warning(warning: ParseWarning) -> str:
    if warning.line_number is None:
        return f"Warning: {warning.message}"
    return f"Warning (line {warning.line_number}): {warning.message}"


def performance_warning(metrics: DiagramMetrics) -> str:
    return (
        f"Large diagram: {metrics.participant_count} participants and "
        f"{metrics.message_count} messages. Rendering may be slow."
    )


def empty_warning() -> str:
    return EMPTY_BLOCK_MESSAGE


def notices_for(result: RenderResult) -> List[str]:
    """Everything the host should display besides the artifact itself."""
    if result.status is RenderStatus.EMPTY:
        return [empty_warning()]
    if result.status is RenderStatus.CANCELLED:
        return []

    notices: List[str] = []
    if result.status is RenderStatus.ERROR:
        notices.extend(format_render_error(e) for e in result.errors or ([result.error] if result.error else []))
    elif result.metrics is not None and result.metrics.exceeds_threshold:
        notices.append(performance_warning(result.metrics))
    notices.extend(format_parse_warning(w) for w in result.warnings)
    return notices
