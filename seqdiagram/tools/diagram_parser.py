"""Arrow/message syntax checks for sequence diagram text.

Title and participant declarations are only classified here; their contents
are checked by :mod:`seqdiagram.tools.syntax_validator`.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from seqdiagram.schemas import ParseIssue, ParseResult, ParseWarning

logger = logging.getLogger(__name__)

ARROW_PATTERN = re.compile(r"^([^-]+)(-{1,2}>)([^:]+):?\s*(.*)$")

_TITLE_KEYWORD = re.compile(r"^title\s*:", re.IGNORECASE)
_EMPTY_TITLE = re.compile(r"^title\s*:\s*$", re.IGNORECASE)
_PARTICIPANT_KEYWORD = re.compile(r"^participant\s", re.IGNORECASE)
_ARROW_THEN_COLON = re.compile(r"-{1,2}>\s*:")
NOTE_KEYWORDS = ("Note left of", "Note right of", "Note over")

MESSAGE_FORMAT_HINT = "Format should be: Participant->Other: Message"


class DiagramParser:
    """Validates message lines before rendering.

    Usage:
        result = DiagramParser().validate(text)
        for issue in result.errors:
            print(issue.line_number, issue.message)
    """

    def validate(self, content: str) -> ParseResult:
        try:
            if not content or not content.strip():
                return ParseResult(is_valid=True, is_empty=True)

            errors: List[ParseIssue] = []
            warnings: List[ParseWarning] = []
            for index, raw in enumerate(content.split("\n")):
                line_number = index + 1
                line = raw.strip()
                if not line:
                    continue
                if self.is_keyword_line(line):
                    warnings.extend(self._keyword_warnings(line, line_number))
                    continue
                issue = self._check_arrow(line, line_number)
                if issue is not None:
                    errors.append(issue)

            return ParseResult(is_valid=not errors, errors=errors, warnings=warnings)
        except Exception:
            logger.exception("Unexpected error during diagram syntax validation")
            return ParseResult(
                is_valid=False,
                errors=[
                    ParseIssue(
                        message="Unexpected error during validation",
                        line_number=None,
                        suggestion="Please check your diagram syntax",
                    )
                ],
            )

    @staticmethod
    def is_keyword_line(line: str) -> bool:
        if _TITLE_KEYWORD.match(line) or _PARTICIPANT_KEYWORD.match(line):
            return True
        return line.startswith(NOTE_KEYWORDS)

    @staticmethod
    def _keyword_warnings(line: str, line_number: int) -> List[ParseWarning]:
        warnings: List[ParseWarning] = []
        if _EMPTY_TITLE.match(line):
            warnings.append(ParseWarning(message="Title has no text", line_number=line_number))
        if line.startswith(NOTE_KEYWORDS) and ":" not in line:
            warnings.append(
                ParseWarning(
                    message='Note syntax incomplete - should be "Note [position]: text"',
                    line_number=line_number,
                )
            )
        return warnings

    def _check_arrow(self, line: str, line_number: int) -> Optional[ParseIssue]:
        match = ARROW_PATTERN.match(line)
        if not match:
            return self._common_error(line, line_number)

        sender, _arrow, receiver, _message = match.groups()
        if not sender.strip():
            return ParseIssue(
                message="Missing sender participant before arrow",
                line_number=line_number,
                suggestion=MESSAGE_FORMAT_HINT,
            )
        if not receiver.strip():
            return ParseIssue(
                message="Missing receiver participant after arrow",
                line_number=line_number,
                suggestion=MESSAGE_FORMAT_HINT,
            )
        return None

    @staticmethod
    def _common_error(line: str, line_number: int) -> ParseIssue:
        if "->" not in line:
            return ParseIssue(
                message="Invalid syntax - missing arrow",
                line_number=line_number,
                suggestion="Check for missing arrows (->) or colons (:)",
            )
        if line.endswith("->"):
            return ParseIssue(
                message="Incomplete arrow - missing receiver",
                line_number=line_number,
                suggestion="Add a participant after the arrow: Participant->Other",
            )
        if line.startswith("->") or line.startswith("-->"):
            return ParseIssue(
                message="Missing sender participant",
                line_number=line_number,
                suggestion="Add a participant before the arrow: Sender->Receiver",
            )
        if _ARROW_THEN_COLON.search(line):
            return ParseIssue(
                message="Missing receiver participant after arrow",
                line_number=line_number,
                suggestion=MESSAGE_FORMAT_HINT,
            )
        return ParseIssue(
            message="Invalid syntax",
            line_number=line_number,
            suggestion="Verify all messages follow the format: Participant->Other: Message",
        )
