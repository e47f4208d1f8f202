"""
PEW - Markdown Task Cursor
==========================
Work through Markdown checkbox lists one task at a time.
The current task carries a 👉 marker inside the task file itself, so
progress survives restarts and crashes without any side database.

Usage:
    from pew import TaskManager

    manager = TaskManager()
    result = manager.advance(["tasks.md", "docs/backlog.md"])
    if result.status == NextTaskStatus.NEXT_TASK_FOUND:
        print("\\n".join(result.display_task_lines))

    # Start the list over
    manager.reset_file("tasks.md")
"""

__version__ = "0.3.5"

from .schema import (
    NextTaskStatus,
    NextTaskResult,
    NextTaskFound,
    AllComplete,
    NoTasks,
    AdvanceError,
    PasteMode,
    TaskStats,
    TaskFileSummary,
    PewConfig,
    TasksConfig,
)
from .storage import TaskFileStore, TaskFileError
from .config import ConfigManager, ConfigError
from .manager import TaskManager

__all__ = [
    "TaskManager",
    "TaskFileStore",
    "TaskFileError",
    "ConfigManager",
    "ConfigError",
    "NextTaskStatus",
    "NextTaskResult",
    "NextTaskFound",
    "AllComplete",
    "NoTasks",
    "AdvanceError",
    "PasteMode",
    "TaskStats",
    "TaskFileSummary",
    "PewConfig",
    "TasksConfig",
]
