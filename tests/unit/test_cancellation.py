import pytest

from seqdiagram.renderers.cancellation import (
    CancellationToken,
    RenderCancelled,
    RenderOperationManager,
)


def test_start_returns_live_token():
    manager = RenderOperationManager()
    token = manager.start("block-1")
    assert token.cancelled is False
    assert manager.pending_count() == 1


def test_start_cancels_previous_operation_for_same_block():
    manager = RenderOperationManager()
    first = manager.start("block-1")
    second = manager.start("block-1")
    assert first.cancelled is True
    assert second.cancelled is False
    assert manager.pending_count() == 1


def test_other_blocks_are_untouched():
    manager = RenderOperationManager()
    a = manager.start("a")
    b = manager.start("b")
    manager.start("a")
    assert a.cancelled is True
    assert b.cancelled is False
    assert manager.pending_count() == 2


def test_cancel_removes_and_cancels():
    manager = RenderOperationManager()
    token = manager.start("a")
    manager.cancel("a")
    manager.cancel("missing")
    assert token.cancelled
    assert manager.pending_count() == 0


def test_cancel_all():
    manager = RenderOperationManager()
    tokens = [manager.start(name) for name in ("a", "b", "c")]
    manager.cancel_all()
    assert all(t.cancelled for t in tokens)
    assert manager.pending_count() == 0


def test_complete_stops_tracking_without_cancelling():
    manager = RenderOperationManager()
    token = manager.start("a")
    manager.complete("a")
    assert manager.pending_count() == 0
    assert token.cancelled is False


def test_late_completion_of_superseded_operation_keeps_successor():
    manager = RenderOperationManager()
    old = manager.start("a")
    new = manager.start("a")
    manager.complete("a", old)
    assert manager.is_pending("a")
    manager.complete("a", new)
    assert not manager.is_pending("a")


def test_raise_if_cancelled():
    token = CancellationToken()
    token.raise_if_cancelled()
    token.cancel()
    with pytest.raises(RenderCancelled):
        token.raise_if_cancelled()
