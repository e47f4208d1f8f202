"""
PEW - Task Cursor Schema Definition
===================================
Result and configuration models for Markdown task files.
The task files themselves are the source of truth; nothing here is persisted
except the configuration models, which map onto pew.yaml.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class NextTaskStatus(str, Enum):
    """Outcome of one `advance` run"""
    NEXT_TASK_FOUND = "NEXT_TASK_FOUND"   # Cursor placed on a task to display
    ALL_COMPLETE = "ALL_COMPLETE"         # Every task in every file is checked
    NO_TASKS = "NO_TASKS"                 # No task lines anywhere
    ERROR = "ERROR"                       # Next task could not be determined


class PasteMode(str, Enum):
    """How pasted content is combined with an existing task file"""
    OVERWRITE = "overwrite"
    APPEND = "append"
    INSERT = "insert"


class TaskStats(BaseModel):
    """Task counts over a set of lines"""
    total: int = 0
    completed: int = 0
    remaining: int = 0

    @property
    def progress_pct(self) -> float:
        if not self.total:
            return 0.0
        return self.completed / self.total * 100

    def summary(self) -> str:
        # Ties round up: 1 of 16 is 6.3%
        pct = Decimal(str(self.progress_pct)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        return (
            f"Total: {self.total} task(s) | "
            f"Completed: {self.completed} ({pct}%) | "
            f"Remaining: {self.remaining}"
        )


# ============================================================
# ADVANCE RESULTS
# ============================================================

class NextTaskFound(BaseModel):
    """A task carries the cursor and should be displayed"""
    status: Literal[NextTaskStatus.NEXT_TASK_FOUND] = NextTaskStatus.NEXT_TASK_FOUND
    display_file_path: str
    display_task_lines: List[str] = Field(default_factory=list)
    display_context_headers: str = ""
    summary: str
    message: Optional[str] = None           # e.g. "Task marked as complete"
    warnings: List[str] = Field(default_factory=list)


class AllComplete(BaseModel):
    status: Literal[NextTaskStatus.ALL_COMPLETE] = NextTaskStatus.ALL_COMPLETE
    summary: str
    display_file_path: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class NoTasks(BaseModel):
    status: Literal[NextTaskStatus.NO_TASKS] = NextTaskStatus.NO_TASKS
    summary: str
    message: Optional[str] = None


class AdvanceError(BaseModel):
    status: Literal[NextTaskStatus.ERROR] = NextTaskStatus.ERROR
    message: str


NextTaskResult = Annotated[
    Union[NextTaskFound, AllComplete, NoTasks, AdvanceError],
    Field(discriminator="status"),
]

class TaskFileSummary(BaseModel):
    """Read-only overview of one task file, used when choosing files to reset"""
    file_path: str
    relative_path: str
    summary: str = "(File not found or empty)"
    exists: bool = False
    error: Optional[str] = None
    disabled: bool = False


# ============================================================
# CONFIGURATION (pew.yaml)
# ============================================================

DEFAULT_TASKS_FILE = "tasks.md"


class TasksConfig(BaseModel):
    """The `tasks` section of pew.yaml"""
    all: List[str] = Field(default_factory=lambda: [DEFAULT_TASKS_FILE])
    primary: str = DEFAULT_TASKS_FILE
    paste: str = DEFAULT_TASKS_FILE


class PewConfig(BaseModel):
    """Complete pew.yaml document"""
    tasks: TasksConfig = Field(default_factory=TasksConfig)
