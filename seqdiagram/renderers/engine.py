"""Rendering engine boundary and the bundled SVG sequence-diagram engine.

The pipeline treats engines as opaque: anything with an awaitable
``render(text, theme, token)`` returning SVG text can be plugged in. Engines
raise on input they cannot draw.
"""
from __future__ import annotations

import asyncio
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from seqdiagram.renderers.cancellation import CancellationToken
from seqdiagram.schemas import Theme
from seqdiagram.tools.diagram_parser import ARROW_PATTERN
from seqdiagram.tools.syntax_validator import SyntaxValidator, TITLE_PATTERN, is_participant_line

SVG_NS = "http://www.w3.org/2000/svg"

_NOTE_PATTERN = re.compile(r"^Note\s+(left of|right of|over)\s+([^:]+):\s*(.*)$")


class EngineError(RuntimeError):
    """The engine rejected input it cannot draw."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line_number = line_number


class RenderEngine(Protocol):
    async def render(self, text: str, theme: Theme, token: Optional[CancellationToken] = None) -> str:
        ...


@dataclass
class _Message:
    sender: str
    receiver: str
    label: str
    dashed: bool


@dataclass
class _Note:
    position: str
    targets: List[str]
    text: str


@dataclass
class _Diagram:
    title: Optional[str] = None
    names: Dict[str, str] = field(default_factory=dict)
    events: List[object] = field(default_factory=list)

    def ensure(self, name: str) -> None:
        if name not in self.names:
            self.names[name] = name


@dataclass(frozen=True)
class _Style:
    font_family: str
    stroke_width: str
    corner_radius: str
    jitter: float


_STYLES = {
    Theme.SIMPLE: _Style(font_family="Arial, sans-serif", stroke_width="1.5", corner_radius="2", jitter=0.0),
    Theme.HAND_DRAWN: _Style(
        font_family="'Patrick Hand', 'Comic Sans MS', cursive",
        stroke_width="2",
        corner_radius="10",
        jitter=1.5,
    ),
}


class SvgSequenceEngine:
    """Draws neutral SVG sequence diagrams with :mod:`xml.etree.ElementTree`."""

    width_per_participant = 140
    margin = 40
    header_height = 60
    event_spacing = 40

    def __init__(self) -> None:
        self._declarations = SyntaxValidator()

    async def render(self, text: str, theme: Theme, token: Optional[CancellationToken] = None) -> str:
        diagram = self.parse(text, token)
        # let other blocks run before drawing
        await asyncio.sleep(0)
        if token is not None:
            token.raise_if_cancelled()
        return self.draw(diagram, Theme(theme))

    def parse(self, text: str, token: Optional[CancellationToken] = None) -> _Diagram:
        diagram = _Diagram()
        for index, raw in enumerate(text.split("\n")):
            if token is not None:
                token.raise_if_cancelled()
            line = raw.strip()
            if not line:
                continue
            line_number = index + 1

            title = TITLE_PATTERN.match(line)
            if title:
                if diagram.title is None and title.group(1).strip():
                    diagram.title = title.group(1).strip()
                continue

            if is_participant_line(line):
                participant = self._declarations.validate_participant(line, len(diagram.names))
                if not participant.is_valid:
                    raise EngineError(f"Parse error on line {line_number}: bad participant", line_number)
                diagram.names.setdefault(participant.short_name, participant.display_name)
                continue

            note = _NOTE_PATTERN.match(line)
            if note:
                targets = [t.strip() for t in note.group(2).split(",") if t.strip()]
                for target in targets:
                    diagram.ensure(target)
                diagram.events.append(_Note(position=note.group(1), targets=targets, text=note.group(3)))
                continue

            message = ARROW_PATTERN.match(line)
            if message and message.group(1).strip() and message.group(3).strip():
                sender, arrow, receiver, label = (g.strip() for g in message.groups())
                diagram.ensure(sender)
                diagram.ensure(receiver)
                diagram.events.append(_Message(sender, receiver, label, dashed=arrow == "-->"))
                continue

            raise EngineError(f"Parse error on line {line_number}: unexpected '{line[:40]}'", line_number)
        return diagram

    def draw(self, diagram: _Diagram, theme: Theme) -> str:
        style = _STYLES[theme]
        count = max(1, len(diagram.names))
        width = 2 * self.margin + count * self.width_per_participant
        top = self.header_height if diagram.title else 20
        lifeline_height = (len(diagram.events) + 1) * self.event_spacing
        height = top + 40 + lifeline_height + 20

        svg = ET.Element(
            "svg",
            xmlns=SVG_NS,
            version="1.1",
            width=str(width),
            height=str(height),
            viewBox=f"0 0 {width} {height}",
            **{"font-family": style.font_family},
        )
        defs = ET.SubElement(svg, "defs")
        marker = ET.SubElement(
            defs, "marker", id="arrowhead", markerWidth="10", markerHeight="7", refX="10", refY="3.5", orient="auto"
        )
        ET.SubElement(marker, "path", d="M0,0 L10,3.5 L0,7 z")

        if diagram.title:
            title = ET.SubElement(svg, "text", x=str(width // 2), y="30", **{"class": "title", "text-anchor": "middle"})
            title.text = diagram.title

        xs: Dict[str, float] = {}
        lifeline_top = top + 30
        for i, (short_name, display_name) in enumerate(diagram.names.items()):
            x = self.margin + i * self.width_per_participant + self.width_per_participant / 2
            xs[short_name] = x
            group = ET.SubElement(svg, "g", id=f"participant-{i}", **{"class": "actor", "data-name": short_name})
            ET.SubElement(
                group,
                "rect",
                x=str(x - 55),
                y=str(top),
                width="110",
                height="30",
                rx=style.corner_radius,
                **{"stroke-width": style.stroke_width},
            )
            label = ET.SubElement(group, "text", x=str(x), y=str(top + 20), **{"text-anchor": "middle"})
            label.text = display_name
            ET.SubElement(
                group,
                "line",
                x1=str(x),
                y1=str(lifeline_top),
                x2=str(x),
                y2=str(lifeline_top + lifeline_height),
                **{"class": "lifeline", "stroke-dasharray": "4 4"},
            )

        y = lifeline_top + self.event_spacing
        for i, event in enumerate(diagram.events):
            offset = ((i * 7) % 5 - 2) * style.jitter
            if isinstance(event, _Message):
                self._draw_message(svg, event, xs, y, offset, style)
            else:
                self._draw_note(svg, event, xs, y, style)
            y += self.event_spacing

        return ET.tostring(svg, encoding="unicode")

    @staticmethod
    def _draw_message(svg: ET.Element, message: _Message, xs: Dict[str, float], y: float, offset: float, style: _Style) -> None:
        sx, tx = xs[message.sender], xs[message.receiver]
        attrs = {"class": "signal", "stroke-width": style.stroke_width, "marker-end": "url(#arrowhead)"}
        if message.dashed:
            attrs["stroke-dasharray"] = "6 3"
        if sx == tx:
            ET.SubElement(svg, "path", d=f"M{sx},{y} h40 v15 h-40", **attrs)
        else:
            ET.SubElement(svg, "line", x1=str(sx), y1=str(y + offset), x2=str(tx), y2=str(y - offset), **attrs)
        if message.label:
            text = ET.SubElement(svg, "text", x=str((sx + tx) / 2), y=str(y - 6), **{"text-anchor": "middle"})
            text.text = message.label

    @staticmethod
    def _draw_note(svg: ET.Element, note: _Note, xs: Dict[str, float], y: float, style: _Style) -> None:
        positions = [xs[t] for t in note.targets]
        if note.position == "left of":
            x0, x1 = positions[0] - 120, positions[0] - 10
        elif note.position == "right of":
            x0, x1 = positions[0] + 10, positions[0] + 120
        else:
            x0, x1 = min(positions) - 50, max(positions) + 50
        group = ET.SubElement(svg, "g", **{"class": "note"})
        ET.SubElement(
            group,
            "rect",
            x=str(x0),
            y=str(y - 18),
            width=str(x1 - x0),
            height="26",
            rx=style.corner_radius,
            **{"stroke-width": style.stroke_width},
        )
        text = ET.SubElement(group, "text", x=str((x0 + x1) / 2), y=str(y), **{"text-anchor": "middle"})
        text.text = note.text
