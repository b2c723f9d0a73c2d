import asyncio
import xml.etree.ElementTree as ET

import pytest

from seqdiagram.renderers.cancellation import CancellationToken, RenderCancelled
from seqdiagram.renderers.engine import SVG_NS, EngineError, SvgSequenceEngine
from seqdiagram.schemas import Theme


ORDERED = """Title: Ordering
participant Charlie
participant Database as DB
participant Alice
Alice->DB: query
DB-->Charlie: rows
Note over Alice,Charlie: done"""


def _render(text: str, theme: Theme = Theme.SIMPLE, token=None) -> str:
    return asyncio.run(SvgSequenceEngine().render(text, theme, token))


def _actor_names(svg: str):
    root = ET.fromstring(svg)
    return [g.get("data-name") for g in root.iter(f"{{{SVG_NS}}}g") if g.get("class") == "actor"]


def test_participants_follow_declaration_order():
    assert _actor_names(_render(ORDERED)) == ["Charlie", "DB", "Alice"]


def test_undeclared_participants_follow_first_use():
    assert _actor_names(_render("participant Zed\nBob->Amy: hi\nAmy->Zed: yo")) == ["Zed", "Bob", "Amy"]


def test_alias_display_name_and_title_are_drawn():
    svg = _render(ORDERED)
    assert "Database" in svg
    assert "Ordering" in svg
    assert 'class="note"' in svg


def test_dashed_arrow_for_double_hyphen():
    root = ET.fromstring(_render("A->B: one\nB-->A: two"))
    signals = [el for el in root.iter() if el.get("class") == "signal"]
    assert [s.get("stroke-dasharray") for s in signals] == [None, "6 3"]


def test_hand_drawn_theme_changes_font():
    assert "cursive" in _render("A->B: hi", Theme.HAND_DRAWN)
    assert "cursive" not in _render("A->B: hi", Theme.SIMPLE)


def test_output_is_deterministic():
    assert _render(ORDERED, Theme.HAND_DRAWN) == _render(ORDERED, Theme.HAND_DRAWN)


def test_undrawable_line_raises_with_line_number():
    with pytest.raises(EngineError) as excinfo:
        _render("A->B: hi\nwhat is this")
    assert excinfo.value.line_number == 2
    assert "line 2" in str(excinfo.value)


def test_cancelled_token_stops_engine():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(RenderCancelled):
        _render("A->B: hi", token=token)
