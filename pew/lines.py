"""
PEW - Task Line Grammar
=======================
Pure functions over the lines of a Markdown task file: classification,
cursor marker handling, completion, display ranges and statistics.

A task line is a checkbox list item, optionally carrying the cursor marker:

    👉 - [ ] current task
    - [x] done task
      - [ ] indented task

Nothing here touches the file system. Functions that change lines return a
new list and leave their input untouched.
"""

import re
from typing import List, Optional, Sequence, Tuple

from .schema import TaskStats

MARKER_SYMBOL = "👉"
MARKER = MARKER_SYMBOL + " "

TASK_PATTERN = re.compile(r"^(?:👉\s+)?\s*-\s*\[\s*(?:[xX]\s*)?\]")
UNCHECKED_PATTERN = re.compile(r"^(?:👉\s+)?\s*-\s*\[\s*\]")
CHECKED_PATTERN = re.compile(r"^(?:👉\s+)?\s*-\s*\[\s*[xX]\s*\]")
HEADER_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")

_OPEN_BOX = re.compile(r"(-\s*\[)\s*(\])")
_CHECKED_BOX = re.compile(r"^((?:👉\s+)?\s*-\s*\[)\s*[xX]\s*(\])")


# ============================================================
# CLASSIFICATION
# ============================================================

def is_task(line: str) -> bool:
    return TASK_PATTERN.match(line) is not None


def is_unchecked_task(line: str) -> bool:
    return UNCHECKED_PATTERN.match(line) is not None


def is_checked_task(line: str) -> bool:
    return CHECKED_PATTERN.match(line) is not None


def is_header(line: str) -> bool:
    return HEADER_PATTERN.match(line) is not None


def parse_header(line: str) -> Optional[Tuple[int, str]]:
    """Return (level, trimmed text) for a header line, or None"""
    m = HEADER_PATTERN.match(line)
    if not m:
        return None
    return len(m.group(1)), m.group(2).strip()


def header_level(line: str) -> int:
    """Header level 1-6, or 0 when the line is not a header"""
    parsed = parse_header(line)
    return parsed[0] if parsed else 0


def has_marker(line: str) -> bool:
    """True if the line starts with the cursor marker and at least one space"""
    if not line.startswith(MARKER_SYMBOL):
        return False
    return line[len(MARKER_SYMBOL):len(MARKER_SYMBOL) + 1].isspace()


def without_marker(line: str) -> str:
    """Drop the marker symbol and the one whitespace character after it"""
    if not has_marker(line):
        return line
    return line[len(MARKER_SYMBOL) + 1:]


# ============================================================
# SEARCH
# ============================================================

def find_first_unchecked(lines: Sequence[str], start: int = 0) -> int:
    """Index of the first unchecked task at or after `start`, or -1"""
    for i in range(max(start, 0), len(lines)):
        if is_unchecked_task(lines[i]):
            return i
    return -1


def find_next_unchecked(lines: Sequence[str], after: int) -> int:
    """Index of the first unchecked task strictly after `after`, or -1"""
    return find_first_unchecked(lines, after + 1)


def find_markers(lines: Sequence[str]) -> List[int]:
    """All indices carrying the cursor marker, in document order"""
    return [i for i, line in enumerate(lines) if has_marker(line)]


# ============================================================
# MUTATORS
# ============================================================

def add_marker(lines: Sequence[str], index: int) -> List[str]:
    new_lines = list(lines)
    if 0 <= index < len(new_lines) and not has_marker(new_lines[index]):
        new_lines[index] = MARKER + new_lines[index]
    return new_lines


def remove_marker(lines: Sequence[str], index: int) -> List[str]:
    new_lines = list(lines)
    if 0 <= index < len(new_lines):
        new_lines[index] = without_marker(new_lines[index])
    return new_lines


def mark_complete(line: str) -> str:
    """
    Check an unchecked task line, keeping indentation, trailing text and
    the cursor marker if present. Any other line is returned unchanged.
    """
    if not is_unchecked_task(line):
        return line

    prefix = line[:len(MARKER_SYMBOL) + 1] if has_marker(line) else ""
    body = _OPEN_BOX.sub(r"\1x\2", line[len(prefix):], count=1)
    return prefix + body


def uncheck_all(lines: Sequence[str]) -> Tuple[List[str], int]:
    """Uncheck every checked task; returns (new lines, number of lines changed)"""
    reset_count = 0
    new_lines = []
    for line in lines:
        replaced = _CHECKED_BOX.sub(r"\1 \2", line, count=1)
        if replaced != line:
            reset_count += 1
        new_lines.append(replaced)
    return new_lines, reset_count


# ============================================================
# CONTEXT & DISPLAY RANGE
# ============================================================

def context_headers(lines: Sequence[str], task_index: int) -> str:
    """
    Breadcrumb of the two nearest headers above a task, in document order,
    e.g. "Project - Backend". Empty when there are none.
    """
    if task_index < 0 or task_index >= len(lines):
        return ""

    headers: List[str] = []
    for i in range(task_index - 1, -1, -1):
        parsed = parse_header(lines[i])
        if parsed:
            headers.insert(0, parsed[1])
            if len(headers) == 2:
                break

    return " - ".join(headers)


def output_range(lines: Sequence[str], task_index: int) -> Tuple[int, int]:
    """
    Half-open [start, end) range of lines to show for a task.

    Starts at the nearest header above the task (or line 0) and stops at the
    next task, or the next header at the same or a higher level than that
    header.
    """
    if task_index < 0 or task_index >= len(lines):
        return 0, 0

    start = 0
    governing_level = 0
    for i in range(task_index - 1, -1, -1):
        level = header_level(lines[i])
        if level:
            start = i
            governing_level = level
            break

    end = len(lines)
    for i in range(task_index + 1, len(lines)):
        level = header_level(lines[i])
        if is_task(lines[i]) or (level and level <= governing_level):
            end = i
            break

    return start, end


def trim_trailing_blank(lines: Sequence[str]) -> List[str]:
    trimmed = list(lines)
    while trimmed and not trimmed[-1].strip():
        trimmed.pop()
    return trimmed


def display_lines(lines: Sequence[str], task_index: int) -> List[str]:
    """The task's display range with trailing blank lines dropped"""
    start, end = output_range(lines, task_index)
    return trim_trailing_blank(lines[start:end])


# ============================================================
# STATISTICS
# ============================================================

def stats_from_lines(lines: Sequence[str]) -> TaskStats:
    completed = 0
    remaining = 0
    for line in lines:
        if is_checked_task(line):
            completed += 1
        elif is_unchecked_task(line):
            remaining += 1
    return TaskStats(total=completed + remaining, completed=completed, remaining=remaining)

