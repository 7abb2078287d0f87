"""Dataset-wide integrity reports.

:func:`validate_all_data` is a read-only audit combining duplicate detection
with reference validation. :func:`repair_data` is its mutating counterpart and
returns cleaned copies of the configuration and tasks. :func:`validate_config`
audits the configuration on its own.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from .dedup import (
    deduplicate_members,
    find_duplicate_members,
    find_duplicate_tasks,
    split_duplicate_tasks,
)
from .identity import normalize_member_name
from .models import (
    CATEGORY_FIELDS,
    IntegrityReport,
    RoadmapConfig,
    Task,
    merge_reports,
)
from .roadmap_logging import log_performance
from .validator import validate_all_tasks

logger = logging.getLogger("roadmap.integrity")

_CATEGORY_LABELS = {
    "track": "tracks",
    "priority": "priorities",
    "status": "statuses",
    "type": "types",
    "size": "sizes",
}


def _duplicate_section(
    report: IntegrityReport,
    values: List[str],
    summary: str,
    prefix: str,
    key: Optional[Callable[[str], str]] = None,
) -> None:
    if not values:
        return
    report.warnings.append(f"Found {len(values)} {summary}")
    # One detail line per identity, spelled as first seen.
    distinct: dict[str, str] = {}
    for value in values:
        distinct.setdefault(key(value) if key else value, value)
    for value in distinct.values():
        report.warnings.append(f"  - {prefix}{value}")


@log_performance("validate_all_data")
def validate_all_data(tasks: Sequence[Task], config: RoadmapConfig) -> IntegrityReport:
    """Audit configuration and tasks without modifying either.

    The result is only valid when the dataset produced no errors and no
    warnings at all, which is stricter than the per-task reports.
    """
    duplicates_report = IntegrityReport()

    _duplicate_section(
        duplicates_report,
        find_duplicate_members(config.team_members),
        "duplicate team members",
        "Duplicate: ",
        key=normalize_member_name,
    )

    duplicate_tasks = find_duplicate_tasks(tasks)
    _duplicate_section(duplicates_report, duplicate_tasks.by_id, "duplicate task IDs", "Duplicate ID: ")
    _duplicate_section(
        duplicates_report,
        duplicate_tasks.by_jira_key,
        "duplicate Jira keys",
        "Duplicate Jira key: ",
    )

    _, task_report = validate_all_tasks(tasks, config)
    return merge_reports(duplicates_report, task_report, strict=True)


def validate_config(config: RoadmapConfig) -> IntegrityReport:
    """Check the configuration for duplicates, empty categories and dangling defaults."""
    report = IntegrityReport()

    for field_name in CATEGORY_FIELDS:
        label = _CATEGORY_LABELS[field_name]
        names = config.category_values(field_name)

        if not names:
            report.warnings.append(f"No {label} configured")

        seen: set[str] = set()
        for name in names:
            if name in seen:
                report.warnings.append(f'Duplicate {label} entry "{name}"')
            seen.add(name)

        default = config.defaults.get(field_name)
        if default and default not in seen:
            report.warnings.append(f'Default {field_name} "{default}" does not exist')

    for member in config.team_members:
        if not member.color:
            report.warnings.append(f'Team member "{member.name}" has no color')

    report.is_valid = not report.errors
    return report


@log_performance("repair_data")
def repair_data(
    tasks: Sequence[Task],
    config: RoadmapConfig,
    fallbacks: Optional[Mapping[str, str]] = None,
) -> Tuple[RoadmapConfig, List[Task], IntegrityReport]:
    """Deduplicate members and tasks, then repair references.

    Returns the cleaned configuration, the cleaned tasks and a report listing
    every removal and repair. Inputs are not modified.
    """
    dedup_report = IntegrityReport()

    for name in find_duplicate_members(config.team_members):
        dedup_report.warnings.append(f'Duplicate team member "{name}"')
        dedup_report.fixed.append(f'Removed duplicate team member "{name}"')
    members = deduplicate_members(config.team_members)
    cleaned_config = replace(config, team_members=members)

    unique, dropped = split_duplicate_tasks(tasks)
    for task, reason in dropped:
        dedup_report.warnings.append(f'Task "{task.name}": {reason}')
        dedup_report.fixed.append(f'Removed duplicate task "{task.name}" ({reason})')

    cleaned_tasks, task_report = validate_all_tasks(unique, cleaned_config, fallbacks)
    report = merge_reports(dedup_report, task_report)

    logger.info(
        f"Repair removed {len(config.team_members) - len(members)} members and "
        f"{len(dropped)} tasks, applied {len(task_report.fixed)} reference fixes"
    )
    return cleaned_config, cleaned_tasks, report
