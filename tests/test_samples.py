from agentcmt.analysis import Complexity, DiffSummary, Pattern, PatternType
from agentcmt.samples import COMMIT_EXAMPLES, score_example, select_examples


def _summary(pattern=None, complexity=Complexity.SIMPLE, files=1):
    patterns = (Pattern(pattern, "test", 1, 0.9),) if pattern else ()
    return DiffSummary(
        files_changed=files,
        lines_added=10,
        lines_removed=0,
        change_patterns=patterns,
        complexity=complexity,
    )


def test_corpus_has_ten_examples_with_valid_scores():
    assert len(COMMIT_EXAMPLES) == 10
    assert all(1 <= ex.quality_score <= 5 for ex in COMMIT_EXAMPLES)
    assert all(ex.analysis.has_body == bool(ex.message.body) for ex in COMMIT_EXAMPLES)


def test_score_components():
    # Given the first example: feature_addition / moderate / 3 files / quality 5
    example = COMMIT_EXAMPLES[0]

    # Then pattern, complexity and exact file count all add up
    assert score_example(example, _summary(PatternType.FEATURE_ADDITION, Complexity.MODERATE, 3)) == 23
    # And a near file count earns one point
    assert score_example(example, _summary(PatternType.FEATURE_ADDITION, Complexity.MODERATE, 5)) == 21
    # And nothing matching leaves only the quality score
    assert score_example(example, _summary(PatternType.DOCUMENTATION, Complexity.COMPLEX, 20)) == 5


def test_select_returns_k_ordered_by_score():
    summary = _summary(PatternType.BUG_FIX, Complexity.SIMPLE, 1)
    selected = select_examples(summary, k=5)
    scores = [score_example(ex, summary) for ex in selected]

    assert len(selected) == 5
    assert all(ex in COMMIT_EXAMPLES for ex in selected)
    assert scores == sorted(scores, reverse=True)
    assert selected[0].message.subject == "persist user profile updates correctly"


def test_select_same_pattern_and_complexity_same_top():
    a = _summary(PatternType.REFACTORING, Complexity.MODERATE, 4)
    b = _summary(PatternType.REFACTORING, Complexity.MODERATE, 4)

    assert select_examples(a)[0] is select_examples(b)[0]
    assert select_examples(a)[0].message.subject == "extract UserRepository from UserService"


def test_ties_keep_corpus_order():
    # No dominant pattern: only complexity, file count and quality matter
    summary = _summary(None, Complexity.MODERATE, 2)
    selected = select_examples(summary, k=len(COMMIT_EXAMPLES))
    top_scores = [score_example(ex, summary) for ex in selected]

    for left, right, s_left, s_right in zip(selected, selected[1:], top_scores, top_scores[1:]):
        if s_left == s_right:
            assert COMMIT_EXAMPLES.index(left) < COMMIT_EXAMPLES.index(right)


def test_k_bounds():
    summary = _summary(PatternType.DOCUMENTATION)

    assert select_examples(summary, k=0) == []
    assert select_examples(summary, k=-1) == []
    assert len(select_examples(summary, k=50)) == len(COMMIT_EXAMPLES)
    assert select_examples(summary, corpus=()) == []
