"""Render orchestration: validate, analyze, render and cache one diagram block."""
from __future__ import annotations

import logging
import re
from typing import Optional

from seqdiagram.renderers.cancellation import CancellationToken, RenderCancelled
from seqdiagram.renderers.engine import EngineError, RenderEngine, SvgSequenceEngine
from seqdiagram.schemas import (
    DiagramCheck,
    DiagramMetrics,
    DiagramSource,
    ErrorKind,
    RenderError,
    RenderResult,
    Theme,
)
from seqdiagram.tools.complexity_analyzer import ComplexityAnalyzer
from seqdiagram.tools.diagram_parser import DiagramParser
from seqdiagram.tools.syntax_validator import SyntaxValidator
from seqdiagram.utils.config import settings
from seqdiagram.utils.hash_cache import HashCache, render_cache_key, validation_cache_key

logger = logging.getLogger(__name__)

_LINE_NUMBER = re.compile(r"line\s+(\d+)", re.IGNORECASE)


def _is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled


def extract_line_number(exc: BaseException) -> Optional[int]:
    line_number = getattr(exc, "line_number", None)
    if isinstance(line_number, int):
        return line_number
    match = _LINE_NUMBER.search(str(exc))
    return int(match.group(1)) if match else None


def suggestion_for(exc: BaseException) -> str:
    message = str(exc).lower()
    if "parse" in message or "syntax" in message:
        return "Check for missing arrows (->) or colons (:)"
    if "unexpected" in message:
        return "Verify all messages follow the format: Participant->Other: Message"
    if "abort" in message:
        return "Render was cancelled"
    return "Check your sequence diagram syntax"


class DiagramRenderer:
    """Turns a diagram block into a tagged :class:`RenderResult`.

    Usage:
        renderer = DiagramRenderer()
        result = await renderer.render(DiagramSource.from_text(text, "block-1"), Theme.SIMPLE)
        if result.status is RenderStatus.SUCCESS:
            show(result.svg)

    A cancelled token never touches either cache: it is checked before the
    validation lookup, both caches are only written after a cancellation check,
    and a render whose token was cancelled while the engine was busy never
    writes its artifact.
    """

    def __init__(
        self,
        engine: Optional[RenderEngine] = None,
        validation_cache: Optional[HashCache[DiagramCheck]] = None,
        render_cache: Optional[HashCache[str]] = None,
        default_theme: Optional[Theme] = None,
    ):
        self.engine = engine if engine is not None else SvgSequenceEngine()
        self.validation_cache = validation_cache if validation_cache is not None else HashCache(
            max_size=settings.validation_cache_size,
            ttl_seconds=settings.validation_cache_ttl_seconds,
        )
        self.render_cache = render_cache if render_cache is not None else HashCache(
            max_size=settings.render_cache_size,
            ttl_seconds=settings.render_cache_ttl_seconds,
        )
        self.default_theme = Theme(default_theme or settings.default_theme)
        self.analyzer = ComplexityAnalyzer()
        self.parser = DiagramParser()
        self.validator = SyntaxValidator()

    async def render(
        self,
        source: DiagramSource,
        theme: Optional[Theme | str] = None,
        token: Optional[CancellationToken] = None,
    ) -> RenderResult:
        if not source.content.strip():
            return RenderResult.empty()

        theme = Theme(theme or self.default_theme)
        metrics = self.analyzer.analyze(source)
        if _is_cancelled(token):
            return RenderResult.cancelled()

        check = self.validate(source.content, token)
        if _is_cancelled(token):
            return RenderResult.cancelled()
        if not check.is_valid:
            errors = check.errors
            logger.info(
                "Diagram failed validation",
                extra={"block_id": source.block_id, "error_count": len(errors)},
            )
            return RenderResult.failure(errors, metrics=metrics, warnings=check.syntax.warnings)

        if metrics.exceeds_threshold:
            logger.warning(
                "Diagram exceeds complexity thresholds",
                extra={
                    "block_id": source.block_id,
                    "participants": metrics.participant_count,
                    "messages": metrics.message_count,
                },
            )

        key = render_cache_key(source.content, theme)
        cached = self.render_cache.get(key)
        if cached is not None:
            logger.debug("Render cache hit", extra={"block_id": source.block_id, "theme": theme.value})
            return RenderResult.success(cached, metrics, check)

        return await self._render_artifact(source, theme, token, key, metrics, check)

    async def _render_artifact(
        self,
        source: DiagramSource,
        theme: Theme,
        token: Optional[CancellationToken],
        key: str,
        metrics: DiagramMetrics,
        check: DiagramCheck,
    ) -> RenderResult:
        if _is_cancelled(token):
            return RenderResult.cancelled()
        try:
            svg = await self.engine.render(source.content, theme, token)
        except RenderCancelled:
            return RenderResult.cancelled()
        except Exception as exc:
            logger.warning(
                "Rendering engine rejected diagram: %s",
                exc,
                extra={"block_id": source.block_id, "theme": theme.value},
            )
            error = RenderError(
                kind=ErrorKind.LIBRARY,
                message=str(exc) or exc.__class__.__name__,
                line_number=extract_line_number(exc),
                suggestion=suggestion_for(exc),
            )
            return RenderResult.failure([error], metrics=metrics, warnings=check.syntax.warnings)

        if _is_cancelled(token):
            # superseded while the engine was busy; the artifact is discarded
            return RenderResult.cancelled()
        self.render_cache.set(key, svg)
        logger.info(
            "Rendered diagram",
            extra={"block_id": source.block_id, "theme": theme.value, "participants": metrics.participant_count},
        )
        return RenderResult.success(svg, metrics, check)

    def validate(self, content: str, token: Optional[CancellationToken] = None) -> DiagramCheck:
        """Run both validation passes, served from the validation cache when possible."""
        key = validation_cache_key(content)
        cached = self.validation_cache.get(key)
        if cached is not None:
            logger.debug("Validation cache hit")
            return cached
        check = DiagramCheck(
            declarations=self.validator.validate_diagram(content),
            syntax=self.parser.validate(content),
        )
        if not _is_cancelled(token):
            self.validation_cache.set(key, check)
        return check

    def clear_cache(self) -> None:
        self.render_cache.clear()

    def cleanup(self) -> int:
        """Evict expired entries from both caches."""
        return self.validation_cache.cleanup() + self.render_cache.cleanup()
