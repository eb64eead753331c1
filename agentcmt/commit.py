"""Conventional commit model and validation for agentcmt."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .exceptions import ValidationError

MAX_SUBJECT_LENGTH = 100

_HEADER_RE = re.compile(
    r"^(?P<type>[a-z]+)(?:\((?P<scope>[^()\s][^()]*)\))?(?P<bang>!)?: (?P<subject>\S.*)$"
)


@dataclass(frozen=True)
class CommitType:
    """One allowed commit type as offered to the model."""

    value: str
    name: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"value": self.value, "name": self.name, "description": self.description}


COMMIT_TYPES: tuple[CommitType, ...] = (
    CommitType("feat", "Features", "A new feature"),
    CommitType("fix", "Bug Fixes", "A bug fix"),
    CommitType("docs", "Documentation", "Documentation only changes"),
    CommitType(
        "style",
        "Styles",
        "Changes that do not affect the meaning of the code (formatting, whitespace)",
    ),
    CommitType(
        "refactor",
        "Code Refactoring",
        "A code change that neither fixes a bug nor adds a feature",
    ),
    CommitType("perf", "Performance Improvements", "A code change that improves performance"),
    CommitType("test", "Tests", "Adding missing tests or correcting existing tests"),
    CommitType(
        "build",
        "Builds",
        "Changes that affect the build system or external dependencies",
    ),
    CommitType("ci", "Continuous Integration", "Changes to CI configuration files and scripts"),
    CommitType("chore", "Chores", "Other changes that don't modify src or test files"),
    CommitType("revert", "Reverts", "Reverts a previous commit"),
)


def commit_type_values(types: Iterable[CommitType]) -> list[str]:
    return [t.value for t in types]


@dataclass
class CommitMessage:
    """Structured conventional commit message."""

    type: str
    subject: str
    scope: Optional[str] = None
    body: Optional[str] = None
    breaking: bool = False
    breaking_description: Optional[str] = None

    @property
    def header(self) -> str:
        scope = f"({self.scope})" if self.scope else ""
        bang = "!" if self.breaking else ""
        return f"{self.type}{scope}{bang}: {self.subject}"

    def format(self) -> str:
        """Render header, optional body and optional BREAKING CHANGE footer."""
        parts = [self.header]
        if self.body and self.body.strip():
            parts.append(self.body.strip())
        if self.breaking and self.breaking_description:
            parts.append(f"BREAKING CHANGE: {self.breaking_description.strip()}")
        return "\n\n".join(parts)


@dataclass
class GeneratedCommit(CommitMessage):
    """Commit message as returned by a model, with its self-reported confidence."""

    confidence: Optional[int] = None
    reasoning: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.type,
            "scope": self.scope,
            "subject": self.subject,
            "body": self.body,
            "breaking": self.breaking,
            "breakingDescription": self.breaking_description,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


def parse_header(header: str) -> dict[str, Optional[str]]:
    """Split a ``type(scope)!: subject`` header into its parts.

    Raises ValidationError when the header is not a conventional commit header.
    """
    match = _HEADER_RE.match(header.strip())
    if not match:
        raise ValidationError(f"Not a conventional commit header: {header!r}")
    return {
        "type": match.group("type"),
        "scope": match.group("scope"),
        "subject": match.group("subject"),
        "breaking": "!" if match.group("bang") else None,
    }


def validate_commit_message(
    message: str, allowed_types: Optional[Iterable[str]] = None
) -> bool:
    """Return True if ``message`` starts with a valid conventional header."""
    if not message or not message.strip():
        return False
    header = message.strip().splitlines()[0]
    try:
        parts = parse_header(header)
    except ValidationError:
        return False
    subject = parts["subject"] or ""
    if len(subject) > MAX_SUBJECT_LENGTH:
        return False
    if allowed_types is not None and parts["type"] not in set(allowed_types):
        return False
    return True
