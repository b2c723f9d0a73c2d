"""Title and participant declaration validation.

Accepted declarations::

    Title: Checkout flow
    participant Alice
    participant Payment Service (v2) as SVC

Participants are placed left to right in the order they are declared; the
short name (alias) is what message lines refer to.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional

from seqdiagram.schemas import (
    ErrorKind,
    ParticipantValidation,
    RenderError,
    TitleValidation,
    ValidationResult,
)

TITLE_PATTERN = re.compile(r"^title\s*:\s*(.*)$", re.IGNORECASE)
# "Title Login" and bare "Title": a title attempt without any colon on the line
_TITLE_ATTEMPT = re.compile(r"^title(?:\s+[^:]*)?$", re.IGNORECASE)

_PARTICIPANT_LINE = re.compile(r"^participant(?:\s|$)", re.IGNORECASE)
_ALIASED_PARTICIPANT = re.compile(
    r"^participant\s+(?:(?P<display>.*?)\s+)?as\s+(?P<alias>\S+)\s*$",
    re.IGNORECASE,
)
_BARE_PARTICIPANT = re.compile(r"^participant\s+(?P<name>\S+)\s*$", re.IGNORECASE)
IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _syntax_error(message: str, suggestion: str) -> RenderError:
    return RenderError(kind=ErrorKind.SYNTAX, message=message, suggestion=suggestion)


def _identifier_error(identifier: str) -> Optional[RenderError]:
    if IDENTIFIER.match(identifier):
        return None
    if identifier[:1].isdigit():
        return _syntax_error(
            f"Invalid participant identifier '{identifier}'. Cannot start with a number",
            "Participant names must start with a letter or underscore",
        )
    return _syntax_error(
        f"Invalid participant identifier '{identifier}'. Must be alphanumeric or underscore only",
        "Use only letters, numbers, and underscores in participant names",
    )


def _rejected(declaration_order: int, error: RenderError) -> ParticipantValidation:
    return ParticipantValidation(is_valid=False, declaration_order=declaration_order, error=error)


def is_title_line(line: str) -> bool:
    return bool(TITLE_PATTERN.match(line) or _TITLE_ATTEMPT.match(line))


def is_participant_line(line: str) -> bool:
    return bool(_PARTICIPANT_LINE.match(line))


class SyntaxValidator:
    def validate_title(self, line: str) -> TitleValidation:
        """Check a single line as a title declaration.

        Also used as a line classifier: lines that are not titles come back
        invalid without an error. A blank title is "no title", not a failure.
        """
        line = line.strip()
        match = TITLE_PATTERN.match(line)
        if match:
            title = match.group(1).strip()
            if not title:
                return TitleValidation(is_valid=False)
            return TitleValidation(is_valid=True, title=title)

        if _TITLE_ATTEMPT.match(line):
            return TitleValidation(
                is_valid=False,
                error=_syntax_error(
                    'Invalid Title syntax. Missing colon after "Title" keyword',
                    'Add the missing colon after the keyword, e.g. "Title: Login flow"',
                ),
            )
        return TitleValidation(is_valid=False)

    def validate_alias(self, display_name: Optional[str]) -> Optional[RenderError]:
        if display_name is None or not display_name.strip():
            return _syntax_error(
                "Invalid participant declaration: empty participant alias not allowed",
                "Provide a non-empty display name or remove the alias declaration",
            )
        return None

    def validate_participant(self, line: str, declaration_order: int) -> ParticipantValidation:
        line = line.strip()

        aliased = _ALIASED_PARTICIPANT.match(line)
        if aliased:
            display_name = (aliased.group("display") or "").strip()
            short_name = aliased.group("alias")
            error = self.validate_alias(display_name) or _identifier_error(short_name)
            if error is not None:
                return _rejected(declaration_order, error)
            return ParticipantValidation(
                is_valid=True,
                short_name=short_name,
                display_name=display_name,
                has_alias=True,
                declaration_order=declaration_order,
            )

        bare = _BARE_PARTICIPANT.match(line)
        if bare:
            short_name = bare.group("name")
            error = _identifier_error(short_name)
            if error is not None:
                return _rejected(declaration_order, error)
            return ParticipantValidation(
                is_valid=True,
                short_name=short_name,
                display_name=short_name,
                has_alias=False,
                declaration_order=declaration_order,
            )

        return _rejected(
            declaration_order,
            _syntax_error(
                "Invalid participant syntax. Expected: participant [Name] or participant [Display Name] as [Alias]",
                "Check participant declaration format (no quotes needed)",
            ),
        )

    def validate_diagram(self, content: str) -> ValidationResult:
        title: Optional[TitleValidation] = None
        participants: List[ParticipantValidation] = []
        errors: List[RenderError] = []

        for index, raw in enumerate(content.split("\n")):
            line = raw.strip()
            if not line:
                continue
            line_number = index + 1

            if is_title_line(line):
                candidate = self.validate_title(line)
                if candidate.error is not None:
                    errors.append(candidate.error.model_copy(update={"line_number": line_number}))
                elif candidate.is_valid and title is None:
                    title = candidate
                continue

            if is_participant_line(line):
                participant = self.validate_participant(line, len(participants))
                if participant.error is not None:
                    located = participant.error.model_copy(update={"line_number": line_number})
                    participant = participant.model_copy(update={"error": located})
                    errors.append(located)
                participants.append(participant)

        participant_map: Dict[str, str] = {}
        for p in participants:
            if p.is_valid and p.short_name and p.display_name:
                participant_map[p.short_name] = p.display_name

        title = title or TitleValidation()
        is_valid = (
            (title.title is None or title.is_valid)
            and all(p.is_valid for p in participants)
            and not errors
        )
        return ValidationResult(
            is_valid=is_valid,
            title=title,
            participants=participants,
            participant_map=participant_map,
            errors=errors,
        )
