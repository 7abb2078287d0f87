"""Roadmap integrity - validation and deduplication of roadmap planning data."""

from .dedup import (
    add_tasks,
    deduplicate_members,
    deduplicate_tasks,
    find_duplicate_members,
    find_duplicate_tasks,
)
from .integrity import repair_data, validate_all_data, validate_config
from .models import (
    FALLBACK_VALUES,
    AddTasksResult,
    CategoryItem,
    ConfigDefaults,
    DuplicateTasks,
    IntegrityReport,
    RoadmapConfig,
    Task,
    TeamMember,
    WeekAssignment,
    merge_reports,
)
from .validator import validate_all_tasks, validate_task

__all__ = [
    "FALLBACK_VALUES",
    "AddTasksResult",
    "CategoryItem",
    "ConfigDefaults",
    "DuplicateTasks",
    "IntegrityReport",
    "RoadmapConfig",
    "Task",
    "TeamMember",
    "WeekAssignment",
    "merge_reports",
    "validate_task",
    "validate_all_tasks",
    "find_duplicate_members",
    "find_duplicate_tasks",
    "deduplicate_members",
    "deduplicate_tasks",
    "add_tasks",
    "validate_all_data",
    "validate_config",
    "repair_data",
]
