"""Entry point the host calls once per diagram code block."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from seqdiagram.renderers.cancellation import RenderOperationManager
from seqdiagram.renderers.diagram_renderer import DiagramRenderer
from seqdiagram.renderers.theme_manager import ThemeManager
from seqdiagram.schemas import DiagramSource, RenderResult, RenderStatus, Theme
from seqdiagram.services.error_display import notices_for
from seqdiagram.utils.hash_cache import content_fingerprint

logger = logging.getLogger(__name__)


def block_identity(document: str, line_start: int) -> str:
    """Stable id for one block position, unchanged when the block text is edited."""
    return f"sqjs-{content_fingerprint(document)[:12]}-{line_start}"


@dataclass
class BlockRender:
    block_id: str
    result: RenderResult
    notices: List[str] = field(default_factory=list)

    @property
    def svg(self) -> Optional[str]:
        return self.result.svg


class CodeBlockProcessor:
    def __init__(
        self,
        renderer: Optional[DiagramRenderer] = None,
        theme_manager: Optional[ThemeManager] = None,
        operations: Optional[RenderOperationManager] = None,
    ):
        self.renderer = renderer if renderer is not None else DiagramRenderer()
        self.theme_manager = theme_manager if theme_manager is not None else ThemeManager(
            self.renderer.default_theme, on_change=self.renderer.clear_cache
        )
        self.operations = operations if operations is not None else RenderOperationManager()

    async def process(self, content: str, document: str = "", line_start: int = 0) -> BlockRender:
        block_id = block_identity(document, line_start)
        source = DiagramSource.from_text(content, block_id)
        token = self.operations.start(block_id)
        try:
            result = await self.renderer.render(source, self.theme_manager.current_theme, token)
        finally:
            self.operations.complete(block_id, token)

        if result.status is RenderStatus.SUCCESS and result.svg is not None:
            result.svg = self.theme_manager.apply_theme(result.svg)
        elif result.status is RenderStatus.CANCELLED:
            logger.debug("Discarded superseded render", extra={"block_id": block_id})
        return BlockRender(block_id=block_id, result=result, notices=notices_for(result))

    def cancel_all_renders(self) -> None:
        self.operations.cancel_all()

    def set_theme(self, theme: Theme | str) -> None:
        self.theme_manager.set_theme(theme)
