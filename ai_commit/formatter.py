"""Normalizes a generated subject/body pair into commit-ready text."""

import re
from dataclasses import dataclass
from typing import List

SUBJECT_MAX_LENGTH = 50
BODY_LINE_MAX_LENGTH = 72
ELLIPSIS = "..."

_TRAILING_TERMINATOR = re.compile(r"[.!;:]$")


@dataclass(frozen=True)
class FormattedMessage:
    subject: str
    body: str


def format_subject(subject: str) -> str:
    formatted = subject.strip()

    # Leaves casing alone for well-formed input; never upper-cases.
    if formatted and not formatted[0].isupper():
        formatted = formatted[0].lower() + formatted[1:]

    formatted = _TRAILING_TERMINATOR.sub("", formatted)

    if len(formatted) > SUBJECT_MAX_LENGTH:
        keep = SUBJECT_MAX_LENGTH - len(ELLIPSIS)
        formatted = formatted[:keep] + ELLIPSIS
    return formatted


def _wrap_line(line: str, width: int) -> List[str]:
    wrapped: List[str] = []
    current = ""
    for word in line.split():
        # A single word wider than the limit is cut into width-sized pieces.
        while len(word) > width:
            if current:
                wrapped.append(current)
                current = ""
            wrapped.append(word[:width])
            word = word[width:]
        if not word:
            continue
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= width:
            current = candidate
        else:
            wrapped.append(current)
            current = word
    if current:
        wrapped.append(current)
    return wrapped


def format_body(body: str) -> str:
    formatted = body.strip()
    if not formatted:
        return ""

    lines: List[str] = []
    for line in formatted.split("\n"):
        if len(line) <= BODY_LINE_MAX_LENGTH:
            lines.append(line)
        else:
            lines.extend(_wrap_line(line, BODY_LINE_MAX_LENGTH))
    return "\n".join(lines)


def format_commit_message(subject: str, body: str = "") -> FormattedMessage:
    return FormattedMessage(subject=format_subject(subject), body=format_body(body))
