"""
PEW - Task Manager
==================
Moves the 👉 cursor through Markdown task files, completes tasks and resets
files. The cursor lives in the task files themselves, so every run derives
its decisions from what is on disk and a crash between two writes leaves a
state the next run can pick up from.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .lines import (
    add_marker,
    context_headers,
    display_lines,
    find_first_unchecked,
    find_markers,
    find_next_unchecked,
    mark_complete,
    remove_marker,
    stats_from_lines,
    uncheck_all,
)
from .schema import (
    AdvanceError,
    AllComplete,
    NextTaskFound,
    NextTaskResult,
    NoTasks,
    PasteMode,
    TaskFileSummary,
    TaskStats,
)
from .storage import TaskFileStore

logger = logging.getLogger("pew.manager")

Location = Tuple[str, int]

TASK_COMPLETED_MESSAGE = "Task marked as complete"
READ_ERRORS_MESSAGE = "Could not determine next task due to file read errors."


class TaskManager:
    """
    Task cursor engine over an ordered list of task files.

    Storage is injected so the engine can run against an in-memory store.
    Read failures are reported back as warnings; write failures propagate,
    since a lost write would leave the cursor somewhere the caller never saw.
    """

    def __init__(
        self,
        store: Optional[TaskFileStore] = None,
        cwd: Optional[Union[str, Path]] = None
    ):
        self.store = store or TaskFileStore()
        self.cwd = Path(cwd) if cwd else None

    # ========================================
    # ADVANCE
    # ========================================

    def advance(self, file_paths: Sequence[Union[str, Path]]) -> NextTaskResult:
        """
        Run one step of the cursor: place it, move it, or complete the task
        it sits on and move it to the next unchecked task.
        """
        files: Dict[str, List[str]] = {}   # readable files, configured order
        warnings: List[str] = []
        total_tasks = 0
        first_unchecked: Optional[Location] = None
        markers: List[Location] = []

        # 1. Scan every file
        for raw_path in file_paths:
            path = str(raw_path)
            if path in files:
                continue
            try:
                lines = self.store.read_lines(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"⚠️ Could not read task file {path}: {e}")
                warnings.append(f"Could not read task file {path}: {e}")
                continue

            files[path] = lines
            total_tasks += stats_from_lines(lines).total

            if first_unchecked is None:
                index = find_first_unchecked(lines)
                if index != -1:
                    first_unchecked = (path, index)

            markers.extend((path, index) for index in find_markers(lines))

        logger.debug(
            f"🔎 Scanned {len(files)} file(s): {total_tasks} task(s), "
            f"first unchecked={first_unchecked}, markers={markers}"
        )

        if warnings and first_unchecked is None:
            return AdvanceError(message=READ_ERRORS_MESSAGE)

        cursor = markers[0] if markers else None
        if len(markers) > 1:
            self._clear_stray_markers(files, markers[1:])

        # 2. Terminal states
        if total_tasks == 0:
            return NoTasks(summary=TaskStats().summary())

        if first_unchecked is None:
            return self._all_complete(files, cursor, warnings)

        # 3. Reconcile the cursor with the first unchecked task
        message = None
        if cursor is None:
            display = first_unchecked
            self._place_marker(files, display)
        elif cursor != first_unchecked:
            logger.info(f"↪️ Moving cursor from {cursor[0]}:{cursor[1] + 1} to "
                        f"{first_unchecked[0]}:{first_unchecked[1] + 1}")
            self._lift_marker(files, cursor)
            display = first_unchecked
            self._place_marker(files, display)
        else:
            path, index = cursor
            lines = remove_marker(files[path], index)
            lines[index] = mark_complete(lines[index])
            self._save(files, path, lines)
            message = TASK_COMPLETED_MESSAGE
            logger.info(f"✅ Completed {path}:{index + 1}")

            display = self._find_next(files, cursor)
            if display is None:
                return AllComplete(
                    summary=stats_from_lines(lines).summary(),
                    display_file_path=path,
                    message=message,
                    warnings=warnings
                )
            self._place_marker(files, display)

        # 4. Assemble what to show
        path, index = display
        lines = files[path]
        return NextTaskFound(
            display_file_path=path,
            display_task_lines=display_lines(lines, index),
            display_context_headers=context_headers(lines, index),
            summary=stats_from_lines(lines).summary(),
            message=message,
            warnings=warnings
        )

    def _all_complete(
        self,
        files: Dict[str, List[str]],
        cursor: Optional[Location],
        warnings: List[str]
    ) -> AllComplete:
        """Nothing left to do; drop a leftover cursor and report"""
        display_path = None
        if cursor:
            self._lift_marker(files, cursor)
            display_path = cursor[0]
        elif files:
            display_path = list(files)[-1]

        final_lines = files.get(display_path, []) if display_path else []
        return AllComplete(
            summary=stats_from_lines(final_lines).summary(),
            display_file_path=display_path,
            warnings=warnings
        )

    def _find_next(self, files: Dict[str, List[str]], completed: Location) -> Optional[Location]:
        """
        Next unchecked task after a completed one: later in the same file,
        then the following files in order, wrapping around to earlier ones.
        """
        path, index = completed
        same_file = find_next_unchecked(files[path], index)
        if same_file != -1:
            return path, same_file

        order = list(files)
        position = order.index(path)
        for offset in range(1, len(order)):
            candidate = order[(position + offset) % len(order)]
            found = find_first_unchecked(files[candidate])
            if found != -1:
                return candidate, found
        return None

    def _clear_stray_markers(self, files: Dict[str, List[str]], strays: List[Location]) -> None:
        """Keep only the first marker; strip the others file by file"""
        by_file: Dict[str, List[int]] = {}
        for path, index in strays:
            by_file.setdefault(path, []).append(index)

        for path, indexes in by_file.items():
            logger.warning(
                f"⚠️ Removing {len(indexes)} extra cursor marker(s) from {path}"
            )
            lines = files[path]
            for index in indexes:
                lines = remove_marker(lines, index)
            self._save(files, path, lines)

    def _place_marker(self, files: Dict[str, List[str]], location: Location) -> None:
        path, index = location
        self._save(files, path, add_marker(files[path], index))
        logger.info(f"👉 Cursor on {path}:{index + 1}")

    def _lift_marker(self, files: Dict[str, List[str]], location: Location) -> None:
        path, index = location
        self._save(files, path, remove_marker(files[path], index))

    def _save(self, files: Dict[str, List[str]], path: str, lines: List[str]) -> None:
        """Write a file immediately and keep the in-memory copy in step"""
        self.store.write_lines(path, lines)
        files[path] = lines

    # ========================================
    # RESET
    # ========================================

    def reset_file(self, path: Union[str, Path]) -> int:
        """Uncheck every completed task in a file; returns how many changed"""
        lines = self.store.read_lines(path)
        new_lines, reset_count = uncheck_all(lines)

        if reset_count > 0:
            self.store.write_lines(path, new_lines)
            logger.info(f"🔄 Reset {reset_count} task(s) in {path}")
        else:
            logger.debug(f"Nothing to reset in {path}")

        return reset_count

    # ========================================
    # REPORTING
    # ========================================

    def file_summaries(self, file_paths: Sequence[Union[str, Path]]) -> List[TaskFileSummary]:
        """Task counts per file, without modifying anything"""
        summaries = []

        for raw_path in file_paths:
            path = str(raw_path)
            summary = TaskFileSummary(file_path=path, relative_path=self.relative_path(path))

            if not self.store.exists(path):
                summary.error = "File not found"
                summary.disabled = True
                summaries.append(summary)
                continue

            summary.exists = True
            try:
                content = self.store.read_text(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"⚠️ Could not read {summary.relative_path} to summarize: {e}")
                summary.summary = "(Error reading file)"
                summary.error = str(e)
                summary.disabled = True
                summaries.append(summary)
                continue

            if not content:
                summary.summary = "(Empty file)"
            else:
                summary.summary = stats_from_lines(content.split("\n")).summary()
            summaries.append(summary)

        return summaries

    def relative_path(self, path: Union[str, Path]) -> str:
        base = self.cwd or Path.cwd()
        try:
            return os.path.relpath(str(path), str(base))
        except ValueError:
            return str(path)

    # ========================================
    # PASTE
    # ========================================

    def write_tasks_content(
        self,
        path: Union[str, Path],
        content: str,
        mode: PasteMode
    ) -> None:
        """
        Put content into a task file.

        overwrite replaces the file, append adds after the existing text and
        insert adds before it. Missing or empty files just get the content.
        """
        mode = PasteMode(mode)
        existing = ""
        if mode != PasteMode.OVERWRITE and self.store.exists(path):
            existing = self.store.read_text(path)

        if not existing:
            final_content = content
        elif mode == PasteMode.APPEND:
            final_content = f"{existing}\n{content}"
        else:
            final_content = f"{content}\n{existing}"

        self.store.write_text(path, final_content)
        logger.info(f"📋 Pasted {len(content)} character(s) into {path} ({mode.value})")
