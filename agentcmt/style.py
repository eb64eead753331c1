"""Project conventions taken from the repository itself.

Two sources feed the commit prompt: a hand-written guidelines file checked
into the repository, and a :class:`ProjectStyle` summary of how past
commits were written.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from .commit import parse_header
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

# Searched in order; the first non-empty file wins.
GUIDELINE_FILES = (
    ".agentcmt/commit-guidelines.md",
    "COMMIT_GUIDELINES.md",
    ".github/COMMIT_GUIDELINES.md",
)

STYLE_HISTORY_DEPTH = 100
DEFAULT_PREFERRED_TYPES = ("feat", "fix", "chore")
DEFAULT_SUBJECT_LENGTH = 50


def load_project_guidelines(root: Path) -> Optional[str]:
    """Return the stripped text of the first non-empty guidelines file."""
    for relative in GUIDELINE_FILES:
        path = Path(root) / relative
        try:
            content = path.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            continue
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable guidelines file %s: %s", path, e)
            continue
        if content.strip():
            logger.debug("Using commit guidelines from %s", path)
            return content.strip()
    return None


@dataclass(frozen=True)
class ProjectStyle:
    """How the project's recent commits are written."""

    preferred_types: list[str] = field(
        default_factory=lambda: list(DEFAULT_PREFERRED_TYPES)
    )
    avg_subject_length: int = DEFAULT_SUBJECT_LENGTH
    common_scopes: list[str] = field(default_factory=list)
    detail_level: str = "concise"
    templates: list[str] = field(default_factory=list)
    # Percentage of commits with a conventional header.
    convention_compliance: int = 0


@dataclass(frozen=True)
class _ParsedCommit:
    type: str
    scope: Optional[str]
    subject: str
    body: Optional[str]
    conventional: bool


def _parse_commit(message: str) -> _ParsedCommit:
    lines = message.strip().splitlines()
    header = lines[0].strip() if lines else ""
    rest = "\n".join(lines[1:]).split("BREAKING CHANGE:")[0].strip()
    try:
        parts = parse_header(header)
    except ValidationError:
        # Anything else counts as a chore with the whole first line as subject.
        return _ParsedCommit("chore", None, header or "commit", None, False)
    return _ParsedCommit(
        type=parts["type"] or "chore",
        scope=parts["scope"],
        subject=parts["subject"] or "",
        body=rest or None,
        conventional=True,
    )


def _template(subject: str) -> Optional[str]:
    tokens = subject.split(" ")
    if len(tokens) < 2:
        return None
    return f"{tokens[0]} X" if len(tokens) > 2 else f"{tokens[0]} {tokens[1]}"


def analyze_project_style(messages: Sequence[str]) -> ProjectStyle:
    """Summarise full commit ``messages`` (newest first) into a ProjectStyle."""
    commits = [_parse_commit(m) for m in messages if m and m.strip()]
    if not commits:
        return ProjectStyle()

    types = Counter(c.type for c in commits)
    scopes = Counter(c.scope for c in commits if c.scope)
    templates = Counter(
        t for t in (_template(c.subject) for c in commits if c.conventional) if t
    )
    with_body = sum(1 for c in commits if c.body)
    conventional = sum(1 for c in commits if c.conventional)

    return ProjectStyle(
        preferred_types=[t for t, _ in types.most_common(3)],
        avg_subject_length=round(sum(len(c.subject) for c in commits) / len(commits)),
        common_scopes=[s for s, _ in scopes.most_common(5)],
        detail_level="detailed" if with_body / len(commits) > 0.5 else "concise",
        templates=[t for t, _ in templates.most_common(5)],
        convention_compliance=round(conventional / len(commits) * 100),
    )
