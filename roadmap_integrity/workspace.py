"""Workspace storage for roadmap snapshots.

A workspace keeps the roadmap configuration and the task collection as JSON
files inside a storage directory under the project root. It only loads and
saves snapshots; all integrity logic lives in the engine modules.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Tuple

from .models import RoadmapConfig, Task
from .roadmap_logging import (
    log_error_with_context,
    log_operation,
    observability_hooks,
)

logger = logging.getLogger("roadmap.workspace")


class Workspace:
    """Load and save roadmap snapshots within a project directory."""

    STORAGE_DIR_ENV = "ROADMAP_STORAGE_DIR"
    DEFAULT_STORAGE_DIR = ".roadmap"

    def __init__(self, root: Path | str):
        """Initialize workspace with given root directory."""
        self.root = Path(root).resolve()
        storage_name = os.getenv(self.STORAGE_DIR_ENV) or self.DEFAULT_STORAGE_DIR
        self.base_dir = self.root / storage_name

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create workspace directory: {e}")
            log_error_with_context(e, {"operation": "workspace_init", "root": str(root)})
            raise RuntimeError(f"Could not initialize workspace at {self.root}: {e}") from e

        logger.info(f"Workspace initialized at {self.root}")
        observability_hooks.log_integrity_event("workspace_initialized", root=str(self.root))

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def config_path(self) -> Path:
        return self.base_dir / "config.json"

    @property
    def tasks_path(self) -> Path:
        return self.base_dir / "tasks.json"

    def has_config(self) -> bool:
        return self.config_path.exists()

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def _read_json(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON in {path}: {e}") from e

    def _write_json(self, path: Path, data: Any) -> Path:
        with log_operation("write_snapshot", path=str(path)):
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        return path

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def load_config(self) -> RoadmapConfig:
        """Load the configuration, or the stock one when none is stored."""
        if not self.config_path.exists():
            logger.info("No stored configuration, using defaults")
            return RoadmapConfig.default()

        data = self._read_json(self.config_path)
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {self.config_path} must be a JSON object")
        # Exported bundles wrap the configuration under a "config" key.
        if isinstance(data.get("config"), dict):
            data = data["config"]
        return RoadmapConfig.from_dict(data)

    def save_config(self, config: RoadmapConfig) -> Path:
        path = self._write_json(self.config_path, config.to_dict())
        logger.info(f"Configuration saved to {path}")
        return path

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def load_tasks(self) -> List[Task]:
        """Load the stored task collection (empty when nothing is stored)."""
        if not self.tasks_path.exists():
            return []

        data = self._read_json(self.tasks_path)
        if not isinstance(data, list):
            raise ValueError(f"Tasks in {self.tasks_path} must be a JSON array")
        return [Task.from_dict(item) for item in data]

    def save_tasks(self, tasks: List[Task]) -> Path:
        path = self._write_json(self.tasks_path, [task.to_dict() for task in tasks])
        logger.info(f"Saved {len(tasks)} tasks to {path}")
        return path

    def snapshot(self) -> Tuple[RoadmapConfig, List[Task]]:
        """Return the stored configuration and tasks together."""
        return self.load_config(), self.load_tasks()
