"""Size-bounded diff truncation that keeps whole files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n... [diff truncated] ..."

_FILE_BOUNDARY_RE = re.compile(r"^diff --git ", re.MULTILINE)
_HEADER_PATH_RE = re.compile(r"^diff --git a/(.+?) b/(.+)$", re.MULTILINE)


@dataclass(frozen=True)
class DiffChunk:
    path: str
    text: str

    @property
    def size(self) -> int:
        return len(self.text)


@dataclass
class TruncationReport:
    text: str
    included: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    truncated: bool = False
    banner: str = ""


def split_diff_by_file(diff_text: str) -> list[DiffChunk]:
    """Split at ``diff --git`` boundaries; text before the first one is dropped."""
    starts = [m.start() for m in _FILE_BOUNDARY_RE.finditer(diff_text)]
    chunks: list[DiffChunk] = []
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(diff_text)
        text = diff_text[start:end].rstrip("\n")
        header = _HEADER_PATH_RE.match(text)
        path = header.group(2) if header else text.splitlines()[0][len("diff --git "):]
        chunks.append(DiffChunk(path=path, text=text))
    return chunks


def _banner(excluded: list[str], included: list[str]) -> str:
    lines = [
        f"# NOTE: diff truncated; {len(excluded)} file(s) omitted to fit the size limit.",
        "# Omitted files:",
    ]
    lines += [f"#   - {path}" for path in excluded]
    lines.append("# Included files:")
    lines += [f"#   - {path}" for path in included]
    return "\n".join(lines) + "\n\n"


def truncate_with_report(diff_text: str, max_chars: int) -> TruncationReport:
    if len(diff_text) <= max_chars:
        return TruncationReport(text=diff_text)

    chunks = split_diff_by_file(diff_text)
    if not chunks:
        logger.debug("No per-file structure, cutting diff at %d chars", max_chars)
        return TruncationReport(
            text=diff_text[:max_chars] + TRUNCATION_MARKER,
            truncated=True,
            banner=TRUNCATION_MARKER,
        )

    kept: list[DiffChunk] = []
    excluded: list[str] = []
    total = 0
    for chunk in sorted(chunks, key=lambda c: c.size):
        cost = chunk.size + 1
        if total + cost <= max_chars:
            kept.append(chunk)
            total += cost
        else:
            excluded.append(chunk.path)

    if not kept:
        # No file fits whole; report every path and send no partial body.
        banner = _banner(excluded, [])
        logger.debug("Truncated diff: no file fits in %d chars", max_chars)
        return TruncationReport(
            text=banner,
            excluded=excluded,
            truncated=True,
            banner=banner,
        )

    # Emit kept files in their original diff order.
    order = {id(c): i for i, c in enumerate(chunks)}
    kept.sort(key=lambda c: order[id(c)])
    included = [c.path for c in kept]
    banner = _banner(excluded, included)
    body = "\n".join(c.text for c in kept) + "\n"
    logger.debug("Truncated diff: kept %d file(s), dropped %d", len(kept), len(excluded))
    return TruncationReport(
        text=banner + body,
        included=included,
        excluded=excluded,
        truncated=True,
        banner=banner,
    )


def truncate_diff(diff_text: str, max_chars: int) -> str:
    """Return ``diff_text`` bounded to roughly ``max_chars``.

    Whole files are kept smallest first; a banner naming omitted and kept
    files is prepended. A file is never cut in the middle: when none fits,
    only the banner is returned. Text without ``diff --git`` headers is cut
    at ``max_chars`` instead. The result never exceeds ``max_chars`` plus the
    banner (or truncation marker).
    """
    return truncate_with_report(diff_text, max_chars).text
