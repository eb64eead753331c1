"""Curated few-shot commit examples and relevance-based selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .analysis import Complexity, DiffSummary, PatternType


@dataclass(frozen=True)
class ExampleMessage:
    type: str
    subject: str
    scope: Optional[str] = None
    body: Optional[str] = None
    breaking: bool = False

    @property
    def header(self) -> str:
        scope = f"({self.scope})" if self.scope else ""
        return f"{self.type}{scope}: {self.subject}"


@dataclass(frozen=True)
class ExampleAnalysis:
    change_pattern: PatternType
    complexity: Complexity
    files_changed: int
    has_body: bool


@dataclass(frozen=True)
class CommitExample:
    diff_summary: str
    message: ExampleMessage
    quality_score: int
    analysis: ExampleAnalysis
    reasoning: str = ""


COMMIT_EXAMPLES: tuple[CommitExample, ...] = (
    CommitExample(
        diff_summary=(
            "Added new UserValidator class with email and password validation "
            "methods. Created validation rules and error handling."
        ),
        message=ExampleMessage(
            type="feat",
            scope="auth",
            subject="add user validation with email and password rules",
            body=(
                "Introduce UserValidator to centralize validation for user registration.\n\n"
                "- Email format validation\n"
                "- Password strength requirements\n"
                "- Custom validation error messages"
            ),
        ),
        quality_score=5,
        analysis=ExampleAnalysis(PatternType.FEATURE_ADDITION, Complexity.MODERATE, 3, True),
        reasoning="Names the capability rather than the class and explains the why in the body.",
    ),
    CommitExample(
        diff_summary=(
            "Fixed timeout issue in API requests. Added retry logic and increased "
            "timeout duration for large payloads."
        ),
        message=ExampleMessage(
            type="fix",
            scope="api",
            subject="resolve timeout errors on large request payloads",
            body=(
                "Requests with payloads above 10MB timed out. Add exponential backoff "
                "(3 attempts) and a configurable per-endpoint timeout."
            ),
        ),
        quality_score=5,
        analysis=ExampleAnalysis(PatternType.BUG_FIX, Complexity.MODERATE, 2, True),
        reasoning="Describes the problem solved and what was implemented to solve it.",
    ),
    CommitExample(
        diff_summary=(
            "Refactored UserService to extract UserRepository. Moved database "
            "queries to repository pattern."
        ),
        message=ExampleMessage(
            type="refactor",
            scope="domain",
            subject="extract UserRepository from UserService",
            body=(
                "Separate data access from business logic. UserService now delegates "
                "all database operations to UserRepository."
            ),
        ),
        quality_score=5,
        analysis=ExampleAnalysis(PatternType.REFACTORING, Complexity.MODERATE, 4, True),
        reasoning="Clear transformation naming both components involved.",
    ),
    CommitExample(
        diff_summary=(
            "Added unit tests for authentication error handling. Tests cover invalid "
            "credentials, expired tokens, and network errors."
        ),
        message=ExampleMessage(
            type="test",
            scope="auth",
            subject="add tests for authentication error scenarios",
            body="Cover invalid credentials, expired tokens and network failures.",
        ),
        quality_score=4,
        analysis=ExampleAnalysis(PatternType.TEST_ADDITION, Complexity.SIMPLE, 2, True),
        reasoning="States which scenarios are covered.",
    ),
    CommitExample(
        diff_summary="Updated README with installation instructions and API usage examples.",
        message=ExampleMessage(
            type="docs",
            subject="add installation guide and API examples to README",
        ),
        quality_score=4,
        analysis=ExampleAnalysis(PatternType.DOCUMENTATION, Complexity.SIMPLE, 1, False),
        reasoning="Small docs change; the subject says everything, no body needed.",
    ),
    CommitExample(
        diff_summary=(
            "Optimized database query in UserRepository.findByEmail. Added index and "
            "changed query to use prepared statements."
        ),
        message=ExampleMessage(
            type="perf",
            scope="database",
            subject="optimize user email lookup query performance",
            body=(
                "Add an index on users.email and use prepared statements. "
                "Lookup time drops from 150ms to 15ms."
            ),
        ),
        quality_score=5,
        analysis=ExampleAnalysis(PatternType.PERFORMANCE, Complexity.MODERATE, 2, True),
        reasoning="Names the component and quantifies the improvement.",
    ),
    CommitExample(
        diff_summary=(
            "Added error handling middleware. Catches unhandled exceptions and "
            "returns formatted error responses."
        ),
        message=ExampleMessage(
            type="feat",
            scope="api",
            subject="add global error handling middleware",
            body=(
                "Catch unhandled exceptions and return consistent JSON error "
                "responses with status codes."
            ),
        ),
        quality_score=5,
        analysis=ExampleAnalysis(PatternType.ERROR_HANDLING, Complexity.MODERATE, 3, True),
        reasoning="Describes the feature rather than the implementation.",
    ),
    CommitExample(
        diff_summary="Renamed validateUser function to validateUserCredentials for clarity.",
        message=ExampleMessage(
            type="refactor",
            scope="auth",
            subject="rename validateUser to validateUserCredentials",
        ),
        quality_score=3,
        analysis=ExampleAnalysis(PatternType.REFACTORING, Complexity.SIMPLE, 1, False),
        reasoning="Plain rename; no body needed.",
    ),
    CommitExample(
        diff_summary=(
            "Added TypeScript types for API responses. Created interfaces for User, "
            "Product, and Order responses."
        ),
        message=ExampleMessage(
            type="feat",
            scope="types",
            subject="add TypeScript interfaces for API response types",
            body="Add UserResponse, ProductResponse and OrderResponse for type safety.",
        ),
        quality_score=5,
        analysis=ExampleAnalysis(PatternType.TYPE_DEFINITION, Complexity.SIMPLE, 1, True),
        reasoning="Lists the types created and why they matter.",
    ),
    CommitExample(
        diff_summary=(
            "Fixed bug where user profile updates were not persisted. Added missing "
            "save() call."
        ),
        message=ExampleMessage(
            type="fix",
            scope="user",
            subject="persist user profile updates correctly",
            body=(
                "Profile updates were lost on page refresh. Call save() after "
                "updating so changes reach the database."
            ),
        ),
        quality_score=4,
        analysis=ExampleAnalysis(PatternType.BUG_FIX, Complexity.SIMPLE, 1, True),
        reasoning="Describes the fix from the user's point of view.",
    ),
)


def score_example(example: CommitExample, summary: DiffSummary) -> int:
    """Relevance of ``example`` to ``summary``; higher is better."""
    score = 0
    dominant = summary.dominant_pattern
    if dominant is not None and example.analysis.change_pattern == dominant:
        score += 10
    if example.analysis.complexity == summary.complexity:
        score += 5
    file_diff = abs(example.analysis.files_changed - summary.files_changed)
    if file_diff == 0:
        score += 3
    elif file_diff <= 2:
        score += 1
    return score + example.quality_score


def select_examples(
    summary: DiffSummary,
    corpus: Sequence[CommitExample] = COMMIT_EXAMPLES,
    k: int = 5,
) -> list[CommitExample]:
    """Return the ``k`` most relevant examples, best first.

    Ties keep corpus order.
    """
    if k <= 0:
        return []
    ranked = sorted(corpus, key=lambda ex: -score_example(ex, summary))
    return ranked[:k]
