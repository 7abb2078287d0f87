"""Reference validation of roadmap tasks against the configuration.

Every categorical field of a task and every assignee must reference an entry
that exists in the current :class:`RoadmapConfig`. Invalid references are never
raised as exceptions: they are reported as warnings and repaired, and the
repair is recorded as a fixed-entry.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .identity import normalize_member_name
from .models import (
    CATEGORY_FIELDS,
    FALLBACK_VALUES,
    IntegrityReport,
    RoadmapConfig,
    Task,
    WeekAssignment,
    merge_reports,
)

logger = logging.getLogger("roadmap.integrity")


def resolve_replacement(
    field_name: str,
    config: RoadmapConfig,
    fallbacks: Optional[Mapping[str, str]] = None,
) -> str:
    """Pick the value an invalid ``field_name`` is replaced with.

    Preference order: the configured default, the fallback constant, then the
    first configured entry, each only if it exists in the category. The bare
    fallback constant is returned only when the category is empty.
    """
    table = FALLBACK_VALUES if fallbacks is None else {**FALLBACK_VALUES, **fallbacks}
    fallback = table[field_name]
    values = config.category_values(field_name)

    default = config.defaults.get(field_name)
    if default and default in values:
        return default
    if fallback in values:
        return fallback
    if values:
        return values[0]
    return fallback


def _filter_assignees(
    task: Task,
    valid_members: set[str],
    report: IntegrityReport,
) -> List[WeekAssignment]:
    cleaned: List[WeekAssignment] = []
    for assignment in task.assignments:
        kept: List[str] = []
        for assignee in assignment.assignees:
            if normalize_member_name(assignee) in valid_members:
                kept.append(assignee)
                continue
            report.warnings.append(f'Task "{task.name}": Orphaned assignee "{assignee}"')
            report.fixed.append(f'Task "{task.name}": Removed assignee "{assignee}"')
        cleaned.append(replace(assignment, assignees=kept))
    return cleaned


def validate_task(
    task: Task,
    config: RoadmapConfig,
    fallbacks: Optional[Mapping[str, str]] = None,
) -> Tuple[Task, IntegrityReport]:
    """Validate one task and return a corrected copy plus its report.

    The input task is left untouched. Running the function again on the
    corrected copy produces no further findings as long as no category is
    empty.
    """
    report = IntegrityReport()
    changes: Dict[str, object] = {}

    def check(field_name: str) -> None:
        value = getattr(task, field_name)
        if value in config.valid_values(field_name):
            return
        new_value = resolve_replacement(field_name, config, fallbacks)
        report.warnings.append(f'Task "{task.name}": Invalid {field_name} "{value}"')
        report.fixed.append(f'Task "{task.name}": Changed {field_name} to "{new_value}"')
        changes[field_name] = new_value

    check("track")

    valid_members = {normalize_member_name(member.name) for member in config.team_members}
    changes["assignments"] = _filter_assignees(task, valid_members, report)

    for field_name in CATEGORY_FIELDS:
        if field_name != "track":
            check(field_name)

    report.is_valid = not report.errors
    return replace(task, **changes), report


def validate_all_tasks(
    tasks: Sequence[Task],
    config: RoadmapConfig,
    fallbacks: Optional[Mapping[str, str]] = None,
) -> Tuple[List[Task], IntegrityReport]:
    """Validate every task in order and aggregate the findings."""
    cleaned: List[Task] = []
    reports: List[IntegrityReport] = []
    for task in tasks:
        cleaned_task, report = validate_task(task, config, fallbacks)
        cleaned.append(cleaned_task)
        reports.append(report)

    aggregated = merge_reports(*reports)

    if aggregated.warnings:
        logger.warning(f"Data integrity check found {len(aggregated.warnings)} warnings")
    if aggregated.fixed:
        logger.info(f"Fixed {len(aggregated.fixed)} integrity issues")

    return cleaned, aggregated
