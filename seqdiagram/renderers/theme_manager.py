"""Active theme selection and SVG theme tagging."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Callable, Optional

from seqdiagram.renderers.engine import SVG_NS
from seqdiagram.schemas import Theme

logger = logging.getLogger(__name__)

ET.register_namespace("", SVG_NS)


class ThemeManager:
    def __init__(self, theme: Theme | str = Theme.SIMPLE, on_change: Optional[Callable[[], None]] = None):
        self._theme = Theme(theme)
        self._on_change = on_change

    @property
    def current_theme(self) -> Theme:
        return self._theme

    @staticmethod
    def is_valid_theme(value: object) -> bool:
        if isinstance(value, Theme):
            return True
        return isinstance(value, str) and value in {t.value for t in Theme}

    def set_theme(self, theme: Theme | str) -> None:
        """Switch themes; ``on_change`` runs only when the theme actually changes."""
        if not self.is_valid_theme(theme):
            raise ValueError(f'Invalid theme: "{theme}". Must be one of: {", ".join(t.value for t in Theme)}')
        theme = Theme(theme)
        if theme is self._theme:
            return
        logger.info("Theme changed from %s to %s", self._theme.value, theme.value)
        self._theme = theme
        if self._on_change is not None:
            self._on_change()

    def apply_theme(self, svg_text: str) -> str:
        """Tag the root <svg> with the active theme for host styling."""
        root = ET.fromstring(svg_text)
        classes = [c for c in root.attrib.get("class", "").split() if not c.startswith("sqjs-theme-")]
        classes.append(f"sqjs-theme-{self._theme.value}")
        root.set("class", " ".join(classes))
        root.set("data-theme", self._theme.value)
        return ET.tostring(root, encoding="unicode")
