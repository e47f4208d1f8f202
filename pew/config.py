"""
PEW - Configuration
===================
Locates, loads and saves pew.yaml.

Local config:  first pew.yaml found walking up from the working directory
Global config: ~/.pew/pew.yaml

The local file wins when present. Relative task paths resolve against the
directory holding the local pew.yaml, or the home directory otherwise.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import yaml
from pydantic import ValidationError

from .schema import DEFAULT_TASKS_FILE, PewConfig, TasksConfig

logger = logging.getLogger("pew.config")

CONFIG_FILE_NAME = "pew.yaml"
GLOBAL_CONFIG_DIR = ".pew"
MAX_SEARCH_DEPTH = 10


class ConfigError(ValueError):
    """Configuration could not be updated or saved"""


def parse_config(raw: Any) -> PewConfig:
    """
    Build a config from loaded YAML, field by field. A field with the wrong
    type keeps its default; unknown keys are ignored.
    """
    config = PewConfig()
    if not isinstance(raw, dict):
        return config

    tasks_raw = raw.get("tasks")
    if not isinstance(tasks_raw, dict):
        return config

    for field in TasksConfig.model_fields:
        if field not in tasks_raw:
            continue
        value = tasks_raw[field]
        try:
            candidate = TasksConfig.model_validate({field: value}, strict=True)
        except ValidationError:
            logger.warning(f"⚠️ Ignoring invalid value for tasks.{field}: {value!r}")
            continue
        setattr(config.tasks, field, getattr(candidate, field))

    return config


class ConfigManager:
    """Effective pew.yaml configuration for one working directory"""

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        home: Optional[Union[str, Path]] = None
    ):
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.home = Path(home) if home else Path.home()
        self.global_path = self.home / GLOBAL_CONFIG_DIR / CONFIG_FILE_NAME

        self.project_root: Optional[Path] = None
        self.local_path: Optional[Path] = None
        self.local_config: Optional[PewConfig] = None
        self.global_config: Optional[PewConfig] = None
        self.effective = PewConfig()
        self._loaded = False

    # ========================================
    # LOADING
    # ========================================

    def load(self) -> PewConfig:
        """Discover and read both config files (once)"""
        if self._loaded:
            return self.effective

        self.project_root = self.find_project_root(self.cwd)
        if self.project_root:
            self.local_path = self.project_root / CONFIG_FILE_NAME
            self.local_config = self._read(self.local_path)

        self.global_config = self._read(self.global_path)
        self.effective = self.local_config or self.global_config or PewConfig()
        self._loaded = True

        logger.debug(f"Config loaded (local={self.local_path}, global={self.global_path})")
        return self.effective

    @staticmethod
    def find_project_root(start: Path) -> Optional[Path]:
        """Nearest directory at or above `start` that holds a pew.yaml"""
        current = Path(start).resolve()
        for _ in range(MAX_SEARCH_DEPTH + 1):
            if (current / CONFIG_FILE_NAME).is_file():
                return current
            if current.parent == current:
                break
            current = current.parent
        return None

    def _read(self, path: Path) -> Optional[PewConfig]:
        if not path.is_file():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"⚠️ Failed to load {path}, using defaults: {e}")
            return PewConfig()
        return parse_config(raw)

    # ========================================
    # PATHS
    # ========================================

    def base_dir(self, global_: bool = False) -> Path:
        if global_ or not self.project_root:
            return self.home
        return self.project_root

    def tasks_paths(self, global_: bool = False) -> List[Path]:
        """Absolute task file paths, in configured order"""
        self.load()
        config = (self.global_config or PewConfig()) if global_ else self.effective
        raw_paths = config.tasks.all or [DEFAULT_TASKS_FILE]
        base = self.base_dir(global_)
        return [(base / p).resolve() for p in raw_paths]

    def paste_path(self) -> Path:
        """Target of `pew paste tasks`: paste, then primary, then tasks.md"""
        self.load()
        tasks = self.effective.tasks
        for candidate in (tasks.paste, tasks.primary):
            if candidate and candidate.strip():
                return (self.base_dir() / candidate.strip()).resolve()
        return (self.base_dir() / DEFAULT_TASKS_FILE).resolve()

    # ========================================
    # SAVING
    # ========================================

    def set_tasks_paths(
        self,
        paths: Sequence[str],
        global_: bool = False,
        paste_path: Optional[str] = None
    ) -> Path:
        """Record task paths in the local or global pew.yaml; returns that file"""
        self.load()
        if not paths:
            raise ConfigError("Cannot set task paths: no paths given")

        if global_:
            target = self.global_path
            config = (self.global_config or PewConfig()).model_copy(deep=True)
        else:
            if not self.local_path:
                self.project_root = self.cwd
                self.local_path = self.cwd / CONFIG_FILE_NAME
            target = self.local_path
            config = (self.local_config or PewConfig()).model_copy(deep=True)

        config.tasks.all = list(paths)
        config.tasks.primary = paths[0]
        config.tasks.paste = paste_path.strip() if paste_path and paste_path.strip() else paths[0]

        self.save(target, config)

        if global_:
            self.global_config = config
        else:
            self.local_config = config
        if not global_ or not self.local_config:
            self.effective = config

        logger.info(f"✅ Updated task paths in {target}")
        return target

    def save(self, path: Path, config: PewConfig) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    config.model_dump(mode="json"),
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                )
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e
        logger.debug(f"💾 Saved configuration to {path}")
