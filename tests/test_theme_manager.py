import pytest

from seqdiagram.renderers.theme_manager import ThemeManager
from seqdiagram.schemas import Theme


def test_defaults_to_simple():
    assert ThemeManager().current_theme is Theme.SIMPLE


def test_set_theme_invokes_callback_only_on_change():
    calls = []
    manager = ThemeManager(on_change=lambda: calls.append(1))
    manager.set_theme("simple")
    assert calls == []
    manager.set_theme("hand-drawn")
    assert manager.current_theme is Theme.HAND_DRAWN
    assert calls == [1]


def test_invalid_theme_is_rejected():
    manager = ThemeManager()
    with pytest.raises(ValueError):
        manager.set_theme("neon")
    assert manager.current_theme is Theme.SIMPLE


@pytest.mark.parametrize("value, expected", [("simple", True), (Theme.HAND_DRAWN, True), ("dark", False), (None, False)])
def test_is_valid_theme(value, expected):
    assert ThemeManager.is_valid_theme(value) is expected


def test_apply_theme_tags_svg_root():
    manager = ThemeManager(Theme.HAND_DRAWN)
    svg = manager.apply_theme('<svg xmlns="http://www.w3.org/2000/svg" class="diagram sqjs-theme-simple"/>')
    assert 'data-theme="hand-drawn"' in svg
    assert 'class="diagram sqjs-theme-hand-drawn"' in svg
