from agentcmt.truncate import (
    TRUNCATION_MARKER,
    split_diff_by_file,
    truncate_diff,
    truncate_with_report,
)


def _chunk(path, lines):
    body = "\n".join(f"+line {i} of {path}" for i in range(lines))
    return f"diff --git a/{path} b/{path}\n--- a/{path}\n+++ b/{path}\n@@ -0,0 +1,{lines} @@\n{body}\n"


def test_short_diff_unchanged():
    diff = _chunk("a.py", 2)
    assert truncate_diff(diff, len(diff)) == diff


def test_split_diff_by_file():
    diff = _chunk("a.py", 1) + _chunk("b/c.py", 2)
    chunks = split_diff_by_file(diff)

    assert [c.path for c in chunks] == ["a.py", "b/c.py"]
    assert chunks[0].text.startswith("diff --git a/a.py")


def test_keeps_smallest_whole_files_and_lists_exclusions():
    # Given one large and two small files
    small_a = _chunk("small_a.py", 2)
    large = _chunk("large.py", 200)
    small_b = _chunk("small_b.py", 3)
    diff = small_a + large + small_b
    limit = len(small_a) + len(small_b) + 10

    # When truncated
    report = truncate_with_report(diff, limit)

    # Then small files survive intact and the large one is named in the banner
    assert report.truncated
    assert report.excluded == ["large.py"]
    assert report.included == ["small_a.py", "small_b.py"]
    assert small_a.rstrip("\n") in report.text
    assert small_b.rstrip("\n") in report.text
    assert "large.py" in report.banner
    assert "line 0 of large.py" not in report.text
    assert len(report.text) <= limit + len(report.banner)


def test_bound_holds_for_many_files():
    diff = "".join(_chunk(f"f{i}.py", i + 1) for i in range(20))
    for limit in (50, 300, 1000, 2500):
        report = truncate_with_report(diff, limit)
        assert len(report.text) <= limit + len(report.banner)


def test_unstructured_diff_uses_prefix_cut():
    text = "x" * 100

    result = truncate_diff(text, 40)

    assert result == "x" * 40 + TRUNCATION_MARKER


def test_single_oversized_file_is_omitted_not_cut():
    diff = _chunk("huge.py", 100)

    report = truncate_with_report(diff, 120)

    # Then only the banner remains and it names the file
    assert report.truncated
    assert report.included == []
    assert report.excluded == ["huge.py"]
    assert report.text == report.banner
    assert "#   - huge.py" in report.text
    assert "line 0 of huge.py" not in report.text
    assert TRUNCATION_MARKER not in report.text


def test_no_partial_file_when_nothing_fits():
    # Given two files that are each larger than the limit
    a = _chunk("a.py", 40)
    b = _chunk("b.py", 50)

    report = truncate_with_report(a + b, 200)

    assert report.included == []
    assert sorted(report.excluded) == ["a.py", "b.py"]
    assert "diff --git a/a.py" not in report.text
    assert "+line 0 of a.py" not in report.text
    assert "+line 0 of b.py" not in report.text


def test_included_files_appear_verbatim():
    chunks = [_chunk(f"f{i}.py", (i * 7) % 23 + 1) for i in range(15)]
    diff = "".join(chunks)
    for limit in (100, 250, 600, 1200, 3000):
        report = truncate_with_report(diff, limit)
        by_path = {c.path: c.text for c in split_diff_by_file(diff)}
        if not report.truncated:
            assert report.text == diff
            continue

        for path in report.included:
            assert by_path[path] in report.text
        # Every file is either fully included or listed as omitted
        assert sorted(report.included + report.excluded) == sorted(by_path)
        for path in report.excluded:
            assert f"+line 0 of {path}\n" not in report.text
