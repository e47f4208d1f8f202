"""Tests for the task line grammar."""

from __future__ import annotations

import pytest

from pew.lines import (
    MARKER,
    add_marker,
    context_headers,
    display_lines,
    find_first_unchecked,
    find_markers,
    find_next_unchecked,
    has_marker,
    header_level,
    is_checked_task,
    is_header,
    is_task,
    is_unchecked_task,
    mark_complete,
    output_range,
    parse_header,
    remove_marker,
    stats_from_lines,
    uncheck_all,
    without_marker,
)
from pew.schema import TaskStats

ASSORTED_LINES = [
    "",
    "   ",
    "plain text",
    "- a list item",
    "* [ ] star bullet",
    "- [ ] open",
    "- [x] done",
    "- [X] done upper",
    "-[ ] tight",
    "  - [ ] indented",
    "- [  ] wide open",
    "- [ x ] spaced done",
    "- []",
    "- [xx] doubled",
    "- [.] dotted",
    "👉 - [ ] current",
    "👉 - [x] current done",
    "👉- [ ] no space after marker",
    "# Title",
    "###### Six",
    "####### Seven",
    "#NoSpace",
    "👉 # marked header",
]


@pytest.mark.unit
class TestClassification:
    """Task, header and marker recognition."""

    @pytest.mark.parametrize("line", [
        "- [ ] task",
        "- [x] task",
        "- [X] task",
        "  - [ ] indented",
        "-[ ] tight",
        "- [  ] wide",
        "- [ x ] spaced",
        "👉 - [ ] current",
        "👉   - [x] current, extra spaces",
    ])
    def test_task_lines(self, line):
        assert is_task(line)

    @pytest.mark.parametrize("line", [
        "plain",
        "# Header",
        "- list item without checkbox",
        "* [ ] other bullet",
        "- [xx] not a checkbox",
        "- [.] dotted",
        "👉- [ ] marker without space",
    ])
    def test_non_task_lines(self, line):
        assert not is_task(line)

    def test_unchecked_and_checked(self):
        assert is_unchecked_task("- [ ] a")
        assert is_unchecked_task("- [] a")
        assert is_unchecked_task("👉 - [ ] a")
        assert not is_unchecked_task("- [x] a")

        assert is_checked_task("- [x] a")
        assert is_checked_task("  - [X] a")
        assert is_checked_task("👉 - [ x ] a")
        assert not is_checked_task("- [ ] a")

    def test_headers(self):
        assert is_header("# One")
        assert is_header("###### Six")
        assert not is_header("####### Seven")
        assert not is_header("#NoSpace")
        assert not is_header("- [ ] # not a header")

        assert parse_header("##   Backend  ") == (2, "Backend")
        assert parse_header("text") is None
        assert header_level("### Three") == 3
        assert header_level("text") == 0

    @pytest.mark.parametrize("line", ASSORTED_LINES)
    def test_every_line_has_exactly_one_role(self, line):
        roles = [is_header(line), is_task(line), not is_header(line) and not is_task(line)]
        assert roles.count(True) == 1
        if is_task(line):
            assert is_checked_task(line) != is_unchecked_task(line)
        else:
            assert not is_checked_task(line) and not is_unchecked_task(line)

    def test_marker_detection(self):
        assert has_marker("👉 - [ ] a")
        assert has_marker("👉\t- [ ] a")
        assert not has_marker("👉- [ ] a")
        assert not has_marker("👉")
        assert not has_marker("- [ ] 👉 a")

        assert without_marker("👉 - [ ] a") == "- [ ] a"
        assert without_marker("👉   - [ ] a") == "  - [ ] a"
        assert without_marker("- [ ] a") == "- [ ] a"


@pytest.mark.unit
class TestSearch:

    def test_first_and_next_unchecked(self):
        lines = ["# h", "- [x] a", "- [ ] b", "text", "- [ ] c"]
        assert find_first_unchecked(lines) == 2
        assert find_next_unchecked(lines, 2) == 4
        assert find_next_unchecked(lines, 4) == -1
        assert find_first_unchecked(["- [x] a"]) == -1

    def test_find_markers(self):
        lines = ["- [ ] a", "👉 - [ ] b", "text", "👉 - [x] c"]
        assert find_markers(lines) == [1, 3]
        assert find_markers([]) == []


@pytest.mark.unit
class TestMutators:

    def test_add_marker_is_idempotent(self):
        lines = ["- [ ] a", "- [ ] b"]
        once = add_marker(lines, 1)
        assert once == ["- [ ] a", MARKER + "- [ ] b"]
        assert add_marker(once, 1) == once
        assert lines == ["- [ ] a", "- [ ] b"]

    def test_remove_marker_is_idempotent(self):
        lines = ["👉 - [ ] a"]
        once = remove_marker(lines, 0)
        assert once == ["- [ ] a"]
        assert remove_marker(once, 0) == once

    def test_marker_round_trip_keeps_indentation(self):
        lines = ["- [ ] parent", "  - [ ] sub", "\t- [ ] tabbed"]
        for index in range(len(lines)):
            assert remove_marker(add_marker(lines, index), index) == lines
        assert add_marker(lines, 1)[1] == "👉   - [ ] sub"

    def test_out_of_range_index_leaves_lines_alone(self):
        lines = ["- [ ] a"]
        assert add_marker(lines, 5) == lines
        assert remove_marker(lines, -1) == lines

    @pytest.mark.parametrize("line, expected", [
        ("- [ ] a", "- [x] a"),
        ("  - [ ] indented [ ] text", "  - [x] indented [ ] text"),
        ("👉 - [ ] current", "👉 - [x] current"),
        ("👉   - [ ] nested", "👉   - [x] nested"),
        ("👉\t- [ ] tabbed", "👉\t- [x] tabbed"),
        ("- []", "- [x]"),
        ("- [   ] wide", "- [x] wide"),
        ("- [x] already", "- [x] already"),
        ("plain", "plain"),
        ("# - [ ] header", "# - [ ] header"),
    ])
    def test_mark_complete(self, line, expected):
        assert mark_complete(line) == expected

    def test_uncheck_all_counts_changed_lines(self):
        lines = ["# h", "- [x] a", "  - [X] b", "👉 - [ x ] c", "- [ ] d", "x marks [x] the spot"]
        new_lines, count = uncheck_all(lines)
        assert count == 3
        assert new_lines == ["# h", "- [ ] a", "  - [ ] b", "👉 - [ ] c", "- [ ] d", "x marks [x] the spot"]

    def test_uncheck_all_without_checked_tasks(self):
        lines = ["- [ ] a", "text"]
        assert uncheck_all(lines) == (lines, 0)


@pytest.mark.unit
class TestContext:

    def test_context_headers_two_nearest_in_document_order(self):
        lines = ["# Project", "## Backend", "### API", "- [ ] task"]
        assert context_headers(lines, 3) == "Backend - API"

    def test_context_headers_single_and_none(self):
        assert context_headers(["# Only", "- [ ] t"], 1) == "Only"
        assert context_headers(["- [ ] t"], 0) == ""
        assert context_headers(["- [ ] t"], 9) == ""

    def test_output_range_without_header_stops_at_next_task(self):
        lines = ["- [ ] a", "  detail", "- [ ] b"]
        assert output_range(lines, 0) == (0, 2)

    def test_output_range_includes_deeper_headers(self):
        lines = ["## Section", "- [ ] task", "### Sub", "detail", "## Next", "- [ ] other"]
        assert output_range(lines, 1) == (0, 4)

    def test_output_range_stops_at_higher_header(self):
        lines = ["intro", "### Deep", "- [ ] task", "notes", "# Top"]
        assert output_range(lines, 2) == (1, 4)

    def test_output_range_invalid_index(self):
        assert output_range(["- [ ] a"], 3) == (0, 0)

    def test_display_lines_trims_trailing_blanks(self):
        lines = ["# Sprint", "- [ ] task", "  notes", "", "  ", "# Later"]
        assert display_lines(lines, 1) == ["# Sprint", "- [ ] task", "  notes"]


@pytest.mark.unit
class TestStats:

    def test_counts_only_task_lines(self):
        stats = stats_from_lines(["# h", "- [ ] a", "- [x] b", "- [X] c", "text", "👉 - [ ] d"])
        assert stats == TaskStats(total=4, completed=2, remaining=2)

    def test_summary_format(self):
        stats = stats_from_lines(["- [ ] a", "- [x] b", "- [x] c"])
        assert stats.summary() == "Total: 3 task(s) | Completed: 2 (66.7%) | Remaining: 1"

    def test_summary_with_no_tasks(self):
        assert TaskStats().summary() == "Total: 0 task(s) | Completed: 0 (0.0%) | Remaining: 0"

    @pytest.mark.parametrize("completed, total, pct", [
        (1, 16, "6.3"),
        (5, 16, "31.3"),
        (1, 8, "12.5"),
        (1, 3, "33.3"),
        (2, 3, "66.7"),
        (16, 16, "100.0"),
    ])
    def test_summary_rounds_half_up(self, completed, total, pct):
        stats = TaskStats(total=total, completed=completed, remaining=total - completed)
        assert f"Completed: {completed} ({pct}%)" in stats.summary()
