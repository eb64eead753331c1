"""Reflective commit generation pipeline.

One run analyses the staged diff, optionally asks the model for a semantic
summary and a reasoning pass, generates a commit message and then loops:
the model critiques its own message (reflection), the message is checked
against the diff (verification) and, unless the critique is good enough, a
refined message is generated. Only the initial generation is mandatory;
every other stage degrades to a recorded :class:`Skipped` entry.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Callable, Optional, Sequence, TypeVar, Union

from .analysis import Complexity, DiffAnalyzer, DiffSummary, detect_scope_from_files
from .commit import GeneratedCommit, validate_commit_message
from .config import Config, get_active_config
from .exceptions import (
    AgentCmtError,
    GenerationError,
    GitError,
    InputError,
    ProviderUnavailableError,
    ResponseParseError,
)
from .git import ChangeSource
from .prompts import (
    MAX_RECENT_COMMITS,
    REFLECTION_CRITERIA,
    GenerationContext,
    ReasoningAnalysis,
    build_reasoning_prompts,
    build_refinement_instructions,
    build_reflection_prompts,
    build_summary_prompts,
    build_verification_prompts,
)
from .providers.base import (
    BaseProvider,
    GenerationOptions,
    extract_json_object,
    parse_bool,
)
from .samples import COMMIT_EXAMPLES, CommitExample, select_examples
from .style import ProjectStyle
from .truncate import truncate_with_report

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXAMPLE_COUNT = 5
SEMANTIC_SUMMARY_TOKENS = 500
REASONING_OPTIONS = GenerationOptions(temperature=0.2, max_tokens=1000, format="json")
SUMMARY_OPTIONS = GenerationOptions(
    temperature=0.6, max_tokens=SEMANTIC_SUMMARY_TOKENS, format="text"
)
REFLECTION_OPTIONS = GenerationOptions(temperature=0.3, max_tokens=2000, format="json")
VERIFICATION_OPTIONS = GenerationOptions(temperature=0.1, max_tokens=1500, format="json")

BASE_THRESHOLDS = {
    Complexity.SIMPLE: 75,
    Complexity.MODERATE: 80,
    Complexity.COMPLEX: 85,
}
MIN_THRESHOLD = 70
MIN_CRITERION_SCORE = 60
FALLBACK_REFLECTION_SCORE = 70
FALLBACK_VERIFICATION_ACCURACY = 70


class Decision(str, Enum):
    ACCEPT = "accept"
    REFINE = "refine"


@dataclass(frozen=True)
class Skipped:
    """An optional stage that did not produce a result."""

    stage: str
    reason: str


StageResult = Union[T, Skipped]


@dataclass
class GenerationRequest:
    provider: BaseProvider
    include_scope: bool = True
    max_reflection_iterations: int = 2


@dataclass
class ReflectionRecord:
    decision: Decision
    quality_score: int
    criteria_scores: dict[str, int] = field(default_factory=dict)
    issues: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    reasoning: str = ""


@dataclass
class VerificationRecord:
    factual_accuracy: int = 100
    hallucinated_symbols: list[str] = field(default_factory=list)
    missing_symbols: list[str] = field(default_factory=list)
    verified_symbols: list[str] = field(default_factory=list)
    has_critical_issues: bool = False
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class PerformanceMetrics:
    """Stage timings in seconds."""

    generation_time: float = 0.0
    reflection_time: float = 0.0
    verification_time: float = 0.0
    refinement_time: float = 0.0
    total_latency: float = 0.0


@dataclass
class GenerationResult:
    commit: GeneratedCommit
    message: str
    provider: str
    confidence: Optional[int]
    iterations: int
    summary: DiffSummary
    reflections: list[ReflectionRecord] = field(default_factory=list)
    verifications: list[VerificationRecord] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    reasoning: Optional[ReasoningAnalysis] = None
    semantic_summary: Optional[str] = None
    skipped: list[Skipped] = field(default_factory=list)

    @property
    def final_quality_score(self) -> Optional[int]:
        return self.reflections[-1].quality_score if self.reflections else None

    @property
    def final_factual_accuracy(self) -> Optional[int]:
        return self.verifications[-1].factual_accuracy if self.verifications else None

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["final_quality_score"] = self.final_quality_score
        data["final_factual_accuracy"] = self.final_factual_accuracy
        return data


@dataclass
class GenerationFailure:
    reason: str
    provider: str
    kind: str = "generation"
    total_latency: float = 0.0
    iterations: int = 0


Outcome = Union[GenerationResult, GenerationFailure]


class _Cancelled(Exception):
    pass


# ---------------------------------------------------------------------------
# Acceptance rules
# ---------------------------------------------------------------------------


def acceptance_threshold(complexity: Complexity, cycle: int) -> int:
    """Minimum reflection score to accept; relaxed from the second cycle on."""
    base = BASE_THRESHOLDS.get(complexity, BASE_THRESHOLDS[Complexity.MODERATE])
    if cycle >= 2:
        return max(MIN_THRESHOLD, base - 10)
    return base


def is_quality_acceptable(reflection: ReflectionRecord, complexity: Complexity, cycle: int) -> bool:
    if reflection.quality_score < acceptance_threshold(complexity, cycle):
        return False
    return all(score >= MIN_CRITERION_SCORE for score in reflection.criteria_scores.values())


def is_factually_accurate(verification: VerificationRecord) -> bool:
    accuracy = verification.factual_accuracy
    return (not verification.has_critical_issues and accuracy >= 60) or accuracy >= 80


# ---------------------------------------------------------------------------
# Response parsing helpers
# ---------------------------------------------------------------------------


def _as_int(value: object, default: int) -> int:
    try:
        number = int(round(float(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return default
    return max(0, min(100, number))


def _as_str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
        elif isinstance(item, dict) and item.get("description"):
            out.append(str(item["description"]).strip())
    return out


def parse_reflection(text: str) -> ReflectionRecord:
    """Raises ResponseParseError when no JSON object is present."""
    data = extract_json_object(text)
    raw_criteria = data.get("criteriaScores") or data.get("criteria_scores") or {}
    criteria: dict[str, int] = {}
    if isinstance(raw_criteria, dict):
        for name in REFLECTION_CRITERIA:
            camel = re.sub(r"_(\w)", lambda m: m.group(1).upper(), name)
            value = raw_criteria.get(name, raw_criteria.get(camel))
            if value is not None:
                criteria[name] = _as_int(value, FALLBACK_REFLECTION_SCORE)
    decision_raw = str(data.get("decision", "")).strip().lower()
    return ReflectionRecord(
        decision=Decision.ACCEPT if decision_raw == Decision.ACCEPT.value else Decision.REFINE,
        quality_score=_as_int(
            data.get("qualityScore", data.get("quality_score")), FALLBACK_REFLECTION_SCORE
        ),
        criteria_scores=criteria,
        issues=_as_str_list(data.get("issues")),
        improvements=_as_str_list(data.get("improvements") or data.get("suggestions")),
        reasoning=str(data.get("reasoning") or ""),
    )


def parse_verification(text: str) -> VerificationRecord:
    """Raises ResponseParseError when no JSON object is present."""
    data = extract_json_object(text)
    return VerificationRecord(
        factual_accuracy=_as_int(
            data.get("factualAccuracy", data.get("factual_accuracy")),
            FALLBACK_VERIFICATION_ACCURACY,
        ),
        hallucinated_symbols=_as_str_list(data.get("hallucinatedSymbols")),
        missing_symbols=_as_str_list(data.get("missingSymbols")),
        verified_symbols=_as_str_list(data.get("verifiedSymbols")),
        has_critical_issues=parse_bool(data.get("hasCriticalIssues")),
        issues=_as_str_list(data.get("issues")),
        recommendations=_as_str_list(data.get("recommendations")),
    )


def parse_reasoning(text: str, allowed_types: Sequence[str]) -> ReasoningAnalysis:
    data = extract_json_object(text)
    suggested = data.get("suggestedType")
    if not isinstance(suggested, str) or suggested.strip().lower() not in allowed_types:
        suggested = None
    else:
        suggested = suggested.strip().lower()
    return ReasoningAnalysis(
        architectural_context=str(data.get("architecturalContext") or ""),
        change_intention=str(data.get("changeIntention") or ""),
        change_nature=str(data.get("changeNature") or ""),
        key_symbols=_as_str_list(data.get("keySymbols")),
        suggested_type=suggested,
    )


# Identifiers that look like code: camelCase, PascalCase with an inner
# capital, snake_case, or anything written as a call.
_CODE_TOKEN_RE = re.compile(
    r"\b([A-Za-z_][A-Za-z0-9_]*[a-z0-9][A-Z][A-Za-z0-9_]*|[A-Za-z][A-Za-z0-9]*_[A-Za-z0-9_]+)\b"
    r"|\b([A-Za-z_][A-Za-z0-9_]{2,})\(\)"
)
_WELL_KNOWN_NAMES = {
    "GitHub",
    "GitLab",
    "GraphQL",
    "JavaScript",
    "MongoDB",
    "MySQL",
    "OAuth",
    "OpenAI",
    "PostgreSQL",
    "TypeScript",
}


def cross_check_symbols(
    commit: GeneratedCommit, summary: DiffSummary, diff: str
) -> VerificationRecord:
    """Deterministic check of code identifiers in ``commit`` against ``diff``."""
    text = "\n".join(filter(None, [commit.subject, commit.body]))
    mentioned: list[str] = []
    for match in _CODE_TOKEN_RE.finditer(text):
        token = match.group(1) or match.group(2)
        if token and token not in mentioned and token not in _WELL_KNOWN_NAMES:
            mentioned.append(token)
    verified = [t for t in mentioned if t in diff]
    hallucinated = [t for t in mentioned if t not in diff]
    lowered = text.lower()
    missing = [
        s.name
        for s in summary.modified_symbols[:10]
        if s.name.lower() not in lowered
    ][:5]
    accuracy = max(0, 100 - 25 * len(hallucinated))
    return VerificationRecord(
        factual_accuracy=accuracy,
        hallucinated_symbols=hallucinated,
        missing_symbols=missing,
        verified_symbols=verified,
        has_critical_issues=bool(hallucinated),
        issues=[f"'{name}' does not appear in the diff" for name in hallucinated],
    )


def merge_verifications(model: VerificationRecord, local: VerificationRecord) -> VerificationRecord:
    def union(a: list[str], b: list[str]) -> list[str]:
        return list(dict.fromkeys([*a, *b]))

    return VerificationRecord(
        factual_accuracy=min(model.factual_accuracy, local.factual_accuracy),
        hallucinated_symbols=union(model.hallucinated_symbols, local.hallucinated_symbols),
        missing_symbols=union(model.missing_symbols, local.missing_symbols),
        verified_symbols=union(model.verified_symbols, local.verified_symbols),
        has_critical_issues=model.has_critical_issues or local.has_critical_issues,
        issues=union(model.issues, local.issues),
        recommendations=list(model.recommendations),
    )


# ---------------------------------------------------------------------------
# Run handle
# ---------------------------------------------------------------------------


class GenerationHandle:
    """Caller-owned run state: one run at a time, cooperative cancellation.

    A cancelled run stops issuing model calls at the next stage boundary and
    its outcome is never delivered to ``outcome`` or ``on_complete``.
    """

    def __init__(self, on_complete: Optional[Callable[[Outcome], None]] = None) -> None:
        self._lock = threading.Lock()
        self._running = False
        self._cancelled = False
        self.outcome: Optional[Outcome] = None
        self.on_complete = on_complete

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def try_begin(self) -> bool:
        with self._lock:
            if self._running:
                return False
            self._running = True
            self._cancelled = False
            return True

    def cancel(self) -> None:
        with self._lock:
            if self._running:
                self._cancelled = True

    def finish(self, outcome: Optional[Outcome]) -> Optional[Outcome]:
        with self._lock:
            self._running = False
            if self._cancelled or outcome is None:
                return None
            self.outcome = outcome
        if self.on_complete is not None:
            self.on_complete(outcome)
        return outcome


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ReflectionPipeline:
    """Generate a commit message for the staged changes of ``source``."""

    def __init__(
        self,
        source: ChangeSource,
        config: Optional[Config] = None,
        analyzer: Optional[DiffAnalyzer] = None,
        corpus: Sequence[CommitExample] = COMMIT_EXAMPLES,
        debug: bool = False,
    ) -> None:
        self.source = source
        self.config = config or get_active_config()
        self.analyzer = analyzer or DiffAnalyzer()
        self.corpus = corpus
        self.debug = debug
        self._should_stop: Callable[[], bool] = lambda: False
        self._generations = 0

    def _debug(self, message: str) -> None:
        if self.debug:
            print(f"DEBUG(Pipeline): {message}")

    def _checkpoint(self) -> None:
        if self._should_stop():
            raise _Cancelled()

    def run(self, request: GenerationRequest, handle: GenerationHandle) -> Optional[Outcome]:
        """Execute under ``handle``; None when already running or cancelled."""
        if not handle.try_begin():
            logger.debug("Generation already in progress; ignoring request")
            return None
        outcome: Optional[Outcome] = None
        try:
            outcome = self.execute(request, should_stop=lambda: handle.cancelled)
        finally:
            delivered = handle.finish(outcome)
        return delivered

    def execute(
        self,
        request: GenerationRequest,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> Outcome:
        started = time.perf_counter()
        provider = request.provider
        self._should_stop = should_stop or (lambda: False)
        self._generations = 0

        def fail(reason: str, kind: str) -> GenerationFailure:
            return GenerationFailure(
                reason=reason,
                provider=provider.name,
                kind=kind,
                total_latency=time.perf_counter() - started,
                iterations=self._generations,
            )

        try:
            return self._execute(request, started)
        except _Cancelled:
            logger.info("Generation cancelled")
            return fail("cancelled", "cancelled")
        except InputError as e:
            return fail(str(e), "input")
        except GitError as e:
            return fail(str(e), "git")
        except ProviderUnavailableError as e:
            return fail(str(e), "unavailable")
        except AgentCmtError as e:
            logger.error("Commit generation failed: %s", e)
            return fail(str(e), "generation")
        except Exception as e:
            logger.exception("Unexpected error during commit generation")
            return fail(str(e) or type(e).__name__, "generation")
        finally:
            self._should_stop = lambda: False

    def _execute(self, request: GenerationRequest, started: float) -> GenerationResult:
        provider = request.provider
        cfg = self.config
        perf = PerformanceMetrics()
        skipped: list[Skipped] = []

        if not self.source.is_repository():
            raise InputError("Not inside a Git repository")
        changes = self.source.get_staged_changes_context()
        if not changes.diff or not changes.diff.strip():
            raise InputError("No staged changes; stage files with 'git add' first")
        if not provider.is_available():
            raise ProviderUnavailableError(
                provider.name,
                f"backend not reachable or model {cfg.model!r} not available",
            )
        self._checkpoint()

        report = truncate_with_report(changes.diff, cfg.max_diff_length)
        if report.truncated:
            logger.warning(
                "Diff exceeds %d chars; omitted %d file(s)",
                cfg.max_diff_length,
                len(report.excluded),
            )
        diff = report.text
        summary = self.analyzer.analyze(changes.diff, changes.files)
        examples = select_examples(summary, self.corpus, EXAMPLE_COUNT)
        self._debug(
            f"files={summary.files_changed} complexity={summary.complexity.value} "
            f"dominant={summary.dominant_pattern.value if summary.dominant_pattern else None}"
        )

        scopes = self._record(self._load_scopes(request), skipped)
        guidelines = self._record(self._project_guidelines(), skipped)
        style = self._record(self._project_style(), skipped)
        context = GenerationContext(
            diff=diff,
            files=list(changes.files),
            branch=changes.branch,
            summary=summary,
            recent_commits=list(changes.recent_commits[:MAX_RECENT_COMMITS]),
            available_types=list(cfg.commit_types),
            available_scopes=scopes or [],
            examples=examples,
            project_guidelines=guidelines,
            project_style=style,
        )

        self._checkpoint()
        context.semantic_summary = self._record(
            self._semantic_summary(provider, diff, summary), skipped
        )
        self._checkpoint()
        context.reasoning = self._record(self._reasoning(provider, context), skipped)
        self._checkpoint()

        t0 = time.perf_counter()
        current = provider.generate_commit_message(context)
        perf.generation_time = time.perf_counter() - t0
        self._generations = 1

        reflections: list[ReflectionRecord] = []
        verifications: list[VerificationRecord] = []
        for cycle in range(1, max(0, request.max_reflection_iterations) + 1):
            self._checkpoint()
            t0 = time.perf_counter()
            reflection = self._record(self._reflect(provider, current, summary), skipped)
            perf.reflection_time += time.perf_counter() - t0
            if reflection is None:
                # An unusable critique ends the loop with the current message.
                reflections.append(
                    ReflectionRecord(
                        decision=Decision.ACCEPT,
                        quality_score=FALLBACK_REFLECTION_SCORE,
                        reasoning="reflection unavailable",
                    )
                )
                break
            model_accepts = reflection.decision is Decision.ACCEPT
            if not (model_accepts and is_quality_acceptable(reflection, summary.complexity, cycle)):
                reflection = replace(reflection, decision=Decision.REFINE)
            reflections.append(reflection)
            self._debug(
                f"cycle={cycle} decision={reflection.decision.value} "
                f"score={reflection.quality_score} "
                f"threshold={acceptance_threshold(summary.complexity, cycle)}"
            )
            if reflection.decision is Decision.ACCEPT:
                break

            self._checkpoint()
            t0 = time.perf_counter()
            verification = self._record(
                self._verify(provider, current, diff, changes.diff, summary), skipped
            )
            perf.verification_time += time.perf_counter() - t0
            if verification is not None:
                verifications.append(verification)

            self._checkpoint()
            context.refinement = self._refinement_instructions(current, reflection, verification)
            t0 = time.perf_counter()
            try:
                refined = provider.generate_commit_message(context)
            except Exception as e:
                perf.refinement_time += time.perf_counter() - t0
                logger.warning("Refinement failed, keeping current message: %s", e)
                skipped.append(Skipped("refinement", str(e)))
                break
            perf.refinement_time += time.perf_counter() - t0
            self._generations += 1
            current = refined

        self._checkpoint()
        current = self._apply_scope(current, request, changes.files)
        message = current.format()
        if not validate_commit_message(message, context.type_values):
            raise GenerationError(
                provider.name, f"final message has an invalid header: {current.header!r}"
            )
        perf.total_latency = time.perf_counter() - started
        return GenerationResult(
            commit=current,
            message=message,
            provider=provider.name,
            confidence=current.confidence,
            iterations=self._generations,
            summary=summary,
            reflections=reflections,
            verifications=verifications,
            performance=perf,
            reasoning=context.reasoning,
            semantic_summary=context.semantic_summary,
            skipped=skipped,
        )

    # -- optional stages ----------------------------------------------------

    @staticmethod
    def _record(result: StageResult[T], skipped: list[Skipped]) -> Optional[T]:
        if isinstance(result, Skipped):
            if result.reason != "disabled":
                skipped.append(result)
                logger.warning("Stage %s skipped: %s", result.stage, result.reason)
            return None
        return result

    def _load_scopes(self, request: GenerationRequest) -> StageResult[list[str]]:
        scopes = list(self.config.scopes)
        if not request.include_scope:
            return scopes
        try:
            existing = self.source.get_existing_scopes()
        except Exception as e:
            return Skipped("scopes", str(e))
        return list(dict.fromkeys([*scopes, *existing]))

    def _project_guidelines(self) -> StageResult[Optional[str]]:
        try:
            return self.source.get_project_guidelines()
        except Exception as e:
            return Skipped("project_guidelines", str(e))

    def _project_style(self) -> StageResult[ProjectStyle]:
        try:
            return self.source.get_project_style()
        except Exception as e:
            return Skipped("project_style", str(e))

    def _semantic_summary(
        self, provider: BaseProvider, diff: str, summary: DiffSummary
    ) -> StageResult[Optional[str]]:
        cfg = self.config
        if not cfg.enable_semantic_summary:
            return Skipped("semantic_summary", "disabled")
        if len(diff) <= cfg.max_diff_length * cfg.semantic_summary_threshold:
            return None
        system, user = build_summary_prompts(diff, summary, cfg.max_diff_length)
        try:
            text = provider.generate_text(system, user, SUMMARY_OPTIONS)
        except Exception as e:
            return Skipped("semantic_summary", str(e))
        return text.strip() or None

    def _reasoning(
        self, provider: BaseProvider, context: GenerationContext
    ) -> StageResult[ReasoningAnalysis]:
        if not self.config.enable_reasoning:
            return Skipped("reasoning", "disabled")
        system, user = build_reasoning_prompts(context)
        try:
            text = provider.generate_text(system, user, REASONING_OPTIONS)
            return parse_reasoning(text, context.type_values)
        except Exception as e:
            return Skipped("reasoning", str(e))

    def _reflect(
        self, provider: BaseProvider, commit: GeneratedCommit, summary: DiffSummary
    ) -> StageResult[ReflectionRecord]:
        system, user = build_reflection_prompts(commit, summary)
        try:
            text = provider.generate_text(system, user, REFLECTION_OPTIONS)
            return parse_reflection(text)
        except Exception as e:
            return Skipped("reflection", str(e))

    def _verify(
        self,
        provider: BaseProvider,
        commit: GeneratedCommit,
        diff: str,
        full_diff: str,
        summary: DiffSummary,
    ) -> StageResult[VerificationRecord]:
        if not self.config.enable_verification:
            return Skipped("verification", "disabled")
        local = cross_check_symbols(commit, summary, full_diff)
        system, user = build_verification_prompts(commit, diff, summary)
        try:
            text = provider.generate_text(system, user, VERIFICATION_OPTIONS)
        except Exception as e:
            return Skipped("verification", str(e))
        try:
            model = parse_verification(text)
        except ResponseParseError as e:
            logger.debug("Verifier reply unparseable (%s); using fallback accuracy", e)
            model = VerificationRecord(factual_accuracy=FALLBACK_VERIFICATION_ACCURACY)
        return merge_verifications(model, local)

    @staticmethod
    def _refinement_instructions(
        commit: GeneratedCommit,
        reflection: ReflectionRecord,
        verification: Optional[VerificationRecord],
    ) -> str:
        issues = list(reflection.issues)
        hallucinated: list[str] = []
        missing: list[str] = []
        if verification is not None:
            hallucinated = verification.hallucinated_symbols
            missing = verification.missing_symbols
            if not is_factually_accurate(verification):
                issues.insert(0, "The message describes things that are not in the diff.")
        return build_refinement_instructions(
            commit, issues, reflection.improvements, hallucinated, missing
        )

    def _apply_scope(
        self, commit: GeneratedCommit, request: GenerationRequest, files: Sequence[str]
    ) -> GeneratedCommit:
        if not request.include_scope:
            return replace(commit, scope=None)
        if not commit.scope:
            detected = detect_scope_from_files(files)
            if detected:
                return replace(commit, scope=detected)
        return commit
