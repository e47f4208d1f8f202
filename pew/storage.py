"""
PEW - Task File Storage
=======================
Plain file I/O for task files. Files are UTF-8 and "\\n"-joined; a file is
read whole, edited in memory and written back whole.
"""

import logging
from pathlib import Path
from typing import List, Sequence, Union

logger = logging.getLogger("pew.storage")

PathLike = Union[str, Path]


class TaskFileError(OSError):
    """A task file is missing or is not a regular file"""


class TaskFileStore:
    """Reads and writes task files on the local file system"""

    encoding = "utf-8"

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def read_text(self, path: PathLike) -> str:
        file_path = Path(path)
        if not file_path.is_file():
            raise TaskFileError(f"Task file not found: {file_path}")
        with open(file_path, "r", encoding=self.encoding, newline="") as f:
            return f.read()

    def read_lines(self, path: PathLike) -> List[str]:
        return self.read_text(path).split("\n")

    def write_text(self, path: PathLike, content: str) -> None:
        """Write content, creating parent directories first"""
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding=self.encoding, newline="") as f:
            f.write(content)
        logger.debug(f"💾 Wrote {file_path}")

    def write_lines(self, path: PathLike, lines: Sequence[str]) -> None:
        self.write_text(path, "\n".join(lines))
