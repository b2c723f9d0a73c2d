"""Participant/message counting for performance warnings.

Best-effort only: lines that do not look like messages are skipped, never
reported.
"""
from __future__ import annotations

import re
from typing import List, Set

from seqdiagram.schemas import DiagramMetrics, DiagramSource

_TITLE_LINE = re.compile(r"^title\s*:", re.IGNORECASE)
_NOTE_PREFIXES = ("Note left of", "Note right of", "Note over")
_MESSAGE_PATTERN = re.compile(r"^([^-]+)-{1,2}>([^:]+):")


def is_non_message_line(line: str) -> bool:
    return bool(_TITLE_LINE.match(line)) or line.startswith(_NOTE_PREFIXES)


class ComplexityAnalyzer:
    def analyze(self, source: DiagramSource) -> DiagramMetrics:
        content = source.content.strip()
        if not content:
            return DiagramMetrics()

        participants: Set[str] = set()
        message_count = 0
        for line in _candidate_lines(content):
            match = _MESSAGE_PATTERN.match(line)
            if not match:
                continue
            left, right = match.group(1).strip(), match.group(2).strip()
            if left:
                participants.add(left)
            if right:
                participants.add(right)
            message_count += 1

        return DiagramMetrics.from_counts(len(participants), message_count)


def _candidate_lines(content: str) -> List[str]:
    lines = []
    for raw in content.split("\n"):
        line = raw.strip()
        if not line or is_non_message_line(line):
            continue
        lines.append(line)
    return lines
