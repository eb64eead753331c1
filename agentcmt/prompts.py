"""Prompt construction for every model call the pipeline makes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .analysis import DiffSummary
from .commit import COMMIT_TYPES, CommitType, GeneratedCommit, commit_type_values
from .samples import CommitExample
from .style import ProjectStyle

MAX_RECENT_COMMITS = 5
MAX_PROMPT_SYMBOLS = 10
MAX_PROMPT_RELATIONSHIPS = 10
VERIFIER_DIFF_CHARS = 8000
REFLECTION_CRITERIA = ("semantic_accuracy", "specificity", "completeness", "format")


@dataclass
class ReasoningAnalysis:
    architectural_context: str = ""
    change_intention: str = ""
    change_nature: str = ""
    key_symbols: list[str] = field(default_factory=list)
    suggested_type: Optional[str] = None


@dataclass
class GenerationContext:
    """Everything a provider needs to write one commit message."""

    diff: str
    files: list[str]
    branch: str
    summary: DiffSummary
    recent_commits: list[str] = field(default_factory=list)
    available_types: Sequence[CommitType] = COMMIT_TYPES
    available_scopes: list[str] = field(default_factory=list)
    examples: list[CommitExample] = field(default_factory=list)
    reasoning: Optional[ReasoningAnalysis] = None
    semantic_summary: Optional[str] = None
    refinement: Optional[str] = None
    project_guidelines: Optional[str] = None
    project_style: Optional[ProjectStyle] = None

    @property
    def type_values(self) -> list[str]:
        return commit_type_values(self.available_types)


def escape_diff(diff: str) -> str:
    """Neutralise closing tags so diff content cannot end the ``<diff>`` block."""
    return diff.replace("</diff>", "<\\/diff>")


def _section(tag: str, body: str) -> str:
    return f"<{tag}>\n{body}\n</{tag}>"


def _format_summary(summary: DiffSummary) -> str:
    lines = [
        f"files_changed: {summary.files_changed}",
        f"lines_added: {summary.lines_added}",
        f"lines_removed: {summary.lines_removed}",
        f"complexity: {summary.complexity.value}",
    ]
    if summary.change_patterns:
        lines.append("patterns:")
        for pattern in summary.change_patterns:
            lines.append(
                f"  - {pattern.type.value} ({pattern.confidence:.2f}): {pattern.description}"
            )
    if summary.modified_symbols:
        lines.append("symbols:")
        for symbol in summary.modified_symbols[:MAX_PROMPT_SYMBOLS]:
            lines.append(f"  - {symbol.name} ({symbol.kind.value}) in {symbol.file}")
        extra = len(summary.modified_symbols) - MAX_PROMPT_SYMBOLS
        if extra > 0:
            lines.append(f"  ... and {extra} more")
    if summary.file_relationships:
        lines.append("imports:")
        for rel in summary.file_relationships[:MAX_PROMPT_RELATIONSHIPS]:
            lines.append(f"  - {rel.source} -> {rel.target}")
    return "\n".join(lines)


def _format_style(style: ProjectStyle) -> str:
    lines = [
        f"preferred_types: {', '.join(style.preferred_types)}",
        f"avg_subject_length: {style.avg_subject_length}",
        f"detail_level: {style.detail_level}",
        f"convention_compliance: {style.convention_compliance}%",
    ]
    if style.common_scopes:
        lines.append(f"common_scopes: {', '.join(style.common_scopes)}")
    if style.templates:
        lines.append(f"subject_templates: {', '.join(style.templates)}")
    return "\n".join(lines)


def _format_examples(examples: Sequence[CommitExample]) -> str:
    blocks = []
    for index, example in enumerate(examples, 1):
        text = [f"Example {index} ({example.analysis.change_pattern.value}):"]
        text.append(f"Changes: {example.diff_summary}")
        text.append(f"Message: {example.message.header}")
        if example.message.body:
            text.append(f"Body: {example.message.body}")
        blocks.append("\n".join(text))
    return "\n\n".join(blocks)


def build_system_prompt(types: Sequence[CommitType] = COMMIT_TYPES) -> str:
    values = ", ".join(t.value for t in types)
    described = "\n".join(f"- {t.value}: {t.description}" for t in types)
    return (
        "You are an expert in Git and the Conventional Commits specification.\n"
        "Analyse the staged changes and write one commit message.\n\n"
        "Format: <type>(<scope>): <subject>\n\n"
        f"Allowed types (use exactly one of these values): {values}\n{described}\n\n"
        "Rules:\n"
        "1. type must be one of the allowed values verbatim, never a long form "
        "such as 'feature', 'bugfix' or 'refactoring'.\n"
        "2. scope is optional; use the affected module or component.\n"
        "3. subject is imperative, starts lowercase, has no trailing period and "
        "stays under 72 characters.\n"
        "4. body is optional and explains why the change was made.\n"
        "5. Set breaking to true only for incompatible changes and describe them "
        "in breakingDescription.\n"
        "6. Describe what actually appears in the diff; never invent components.\n\n"
        "Respond with a single JSON object and nothing else:\n"
        "{\n"
        '  "type": string,\n'
        '  "scope": string | null,\n'
        '  "subject": string,\n'
        '  "body": string | null,\n'
        '  "breaking": boolean,\n'
        '  "breakingDescription": string | null,\n'
        '  "confidence": integer 0-100,\n'
        '  "reasoning": string\n'
        "}"
    )


def build_user_prompt(context: GenerationContext) -> str:
    parts = [
        _section("branch", context.branch or "unknown"),
        _section("files", "\n".join(context.files)),
    ]
    if context.available_scopes:
        parts.append(_section("suggested_scopes", ", ".join(context.available_scopes)))
    if context.recent_commits:
        recent = context.recent_commits[:MAX_RECENT_COMMITS]
        parts.append(
            _section("recent_commits", "\n".join(f"{i}. {c}" for i, c in enumerate(recent, 1)))
        )
    if context.project_guidelines:
        parts.append(_section("project_guidelines", context.project_guidelines))
    if context.project_style is not None:
        parts.append(_section("project_style", _format_style(context.project_style)))
    parts.append(_section("analysis", _format_summary(context.summary)))
    if context.examples:
        parts.append(_section("examples", _format_examples(context.examples)))
    if context.reasoning is not None:
        r = context.reasoning
        reasoning_lines = [
            f"architectural_context: {r.architectural_context}",
            f"change_intention: {r.change_intention}",
            f"change_nature: {r.change_nature}",
            f"key_symbols: {', '.join(r.key_symbols)}",
        ]
        if r.suggested_type:
            reasoning_lines.append(f"suggested_type: {r.suggested_type}")
        parts.append(_section("reasoning", "\n".join(reasoning_lines)))
    if context.semantic_summary:
        parts.append(_section("semantic_summary", context.semantic_summary))
    if context.refinement:
        parts.append(_section("refinement", context.refinement))
    parts.append(_section("diff", escape_diff(context.diff)))
    parts.append("Write the commit message for the diff above as JSON.")
    return "\n\n".join(parts)


def build_reasoning_prompts(context: GenerationContext) -> tuple[str, str]:
    system = (
        "You are a senior engineer reviewing a change before it is committed.\n"
        "Reason about the change step by step and answer with one JSON object:\n"
        "{\n"
        '  "architecturalContext": string,\n'
        '  "changeIntention": string,\n'
        '  "changeNature": string,\n'
        '  "keySymbols": [string],\n'
        f'  "suggestedType": one of {", ".join(context.type_values)}\n'
        "}"
    )
    user = "\n\n".join(
        [
            _section("files", "\n".join(context.files)),
            _section("analysis", _format_summary(context.summary)),
            _section("diff", escape_diff(context.diff)),
        ]
    )
    return system, user


def build_summary_prompts(diff: str, summary: DiffSummary, max_chars: int) -> tuple[str, str]:
    system = (
        "You summarise code changes at the architectural level.\n"
        "Cover what components changed, why, how they were transformed and the "
        "impact on the rest of the system. Answer in 3 to 5 short bullet points "
        "of plain text."
    )
    limit = int(max_chars * 0.8)
    excerpt = diff[:limit]
    if len(diff) > limit:
        excerpt += "\n[... diff truncated ...]"
    symbols = ", ".join(s.name for s in summary.modified_symbols) or "none"
    dominant = summary.change_patterns[0].description if summary.change_patterns else "n/a"
    user = "\n\n".join(
        [
            _section(
                "analysis",
                f"symbols: {symbols}\ndominant_pattern: {dominant}\n"
                f"complexity: {summary.complexity.value}\nfiles_changed: {summary.files_changed}",
            ),
            _section("diff", escape_diff(excerpt)),
        ]
    )
    return system, user


def build_reflection_prompts(
    commit: GeneratedCommit, summary: DiffSummary
) -> tuple[str, str]:
    criteria = ", ".join(REFLECTION_CRITERIA)
    system = (
        "You critique conventional commit messages.\n"
        f"Score the message from 0 to 100 on each criterion ({criteria}) and "
        "overall, then decide whether to accept it or ask for a refinement.\n"
        "Answer with one JSON object:\n"
        "{\n"
        '  "decision": "accept" | "refine",\n'
        '  "qualityScore": integer 0-100,\n'
        '  "criteriaScores": {"semantic_accuracy": int, "specificity": int, '
        '"completeness": int, "format": int},\n'
        '  "issues": [string],\n'
        '  "improvements": [string],\n'
        '  "reasoning": string\n'
        "}"
    )
    user = "\n\n".join(
        [
            _section("commit", commit.format()),
            _section("analysis", _format_summary(summary)),
        ]
    )
    return system, user


def build_verification_prompts(
    commit: GeneratedCommit, diff: str, summary: DiffSummary
) -> tuple[str, str]:
    system = (
        "You verify commit messages against the diff they describe.\n"
        "Flag symbols the message mentions that do not appear in the diff "
        "(hallucinations) and central symbols it leaves out (omissions). "
        "Tolerate reasonable generalisations; only clear fabrications are critical.\n"
        "Answer with one JSON object:\n"
        "{\n"
        '  "factualAccuracy": integer 0-100,\n'
        '  "hasCriticalIssues": boolean,\n'
        '  "issues": [{"type": string, "severity": string, "description": string}],\n'
        '  "verifiedSymbols": [string],\n'
        '  "missingSymbols": [string],\n'
        '  "hallucinatedSymbols": [string],\n'
        '  "recommendations": [string]\n'
        "}"
    )
    excerpt = diff
    if len(excerpt) > VERIFIER_DIFF_CHARS:
        excerpt = excerpt[:VERIFIER_DIFF_CHARS] + "\n[... diff truncated ...]"
    user = "\n\n".join(
        [
            _section("commit", commit.format()),
            _section("analysis", _format_summary(summary)),
            _section("diff", escape_diff(excerpt)),
        ]
    )
    return system, user


def build_refinement_instructions(
    previous: GeneratedCommit,
    issues: Sequence[str],
    improvements: Sequence[str],
    hallucinated: Sequence[str] = (),
    missing: Sequence[str] = (),
) -> str:
    lines = [f"Previous attempt: {previous.header}"]
    if issues:
        lines.append("Issues:")
        lines += [f"- {issue}" for issue in issues]
    if improvements:
        lines.append("Improvements to make:")
        lines += [f"- {item}" for item in improvements]
    if hallucinated:
        lines.append(
            "Do not mention these, they are not in the diff: " + ", ".join(hallucinated)
        )
    if missing:
        lines.append("Consider mentioning: " + ", ".join(missing))
    lines.append("Write an improved message in the same JSON format.")
    return "\n".join(lines)


def dump_json(data: object) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)
