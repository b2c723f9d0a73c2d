from seqdiagram.schemas import DiagramSource
from seqdiagram.tools.complexity_analyzer import ComplexityAnalyzer


def _analyze(text: str):
    return ComplexityAnalyzer().analyze(DiagramSource.from_text(text, "block"))


def _chain(participants: int, messages: int) -> str:
    names = [f"P{i}" for i in range(participants)]
    lines = [f"{names[i]}->{names[i + 1]}: m{i}" for i in range(participants - 1)]
    while len(lines) < messages:
        lines.append(f"{names[0]}->{names[1]}: again")
    return "\n".join(lines[:max(messages, participants - 1)])


def test_empty_content_gives_zero_metrics():
    metrics = _analyze("  \n\n ")
    assert metrics.participant_count == 0
    assert metrics.message_count == 0
    assert metrics.exceeds_threshold is False


def test_counts_distinct_participants_and_messages():
    metrics = _analyze("Alice->Bob: Hello\nBob-->Alice: Hi\nAlice->Carol: Hey")
    assert metrics.participant_count == 3
    assert metrics.message_count == 3


def test_title_and_note_lines_are_not_messages():
    text = "TITLE: Flow -> stuff: x\nNote left of Alice: thinking\nAlice->Bob: Hello"
    metrics = _analyze(text)
    assert metrics.message_count == 1
    assert metrics.participant_count == 2


def test_malformed_lines_are_silently_excluded():
    metrics = _analyze("Alice->Bob\nnonsense\n->Bob: x\nAlice->Bob: ok")
    assert metrics.message_count == 1


def test_fifteen_participants_is_not_over_threshold():
    metrics = _analyze(_chain(15, 14))
    assert metrics.participant_count == 15
    assert metrics.exceeds_threshold is False


def test_sixteen_participants_is_over_threshold():
    metrics = _analyze(_chain(16, 15))
    assert metrics.participant_count == 16
    assert metrics.exceeds_threshold is True


def test_message_threshold_is_strictly_greater_than_fifty():
    assert _analyze(_chain(2, 50)).exceeds_threshold is False
    assert _analyze(_chain(2, 51)).exceeds_threshold is True
