"""Duplicate detection and removal for team members and tasks.

All operations keep the first occurrence of an entity and preserve the
relative order of the survivors. The ``find_*`` functions only report; the
``deduplicate_*`` functions return new, filtered lists.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .identity import jira_key, normalize_member_name
from .models import AddTasksResult, DuplicateTasks, Task, TeamMember

logger = logging.getLogger("roadmap.integrity")


def find_duplicate_members(members: Sequence[TeamMember]) -> List[str]:
    """Return the name of every member occurrence beyond the first."""
    seen: set[str] = set()
    duplicates: List[str] = []
    for member in members:
        key = normalize_member_name(member.name)
        if key in seen:
            duplicates.append(member.name)
        else:
            seen.add(key)
    return duplicates


def find_duplicate_tasks(tasks: Sequence[Task]) -> DuplicateTasks:
    """Return every repeated task id and Jira key, in encounter order.

    The two keys are scanned independently of each other.
    """
    seen_ids: set[str] = set()
    seen_keys: set[str] = set()
    duplicates = DuplicateTasks()
    for task in tasks:
        if task.id in seen_ids:
            duplicates.by_id.append(task.id)
        else:
            seen_ids.add(task.id)

        key = jira_key(task)
        if key is None:
            continue
        if key in seen_keys:
            duplicates.by_jira_key.append(key)
        else:
            seen_keys.add(key)
    return duplicates


def deduplicate_members(members: Sequence[TeamMember]) -> List[TeamMember]:
    """Remove duplicate team members, keeping the first occurrence."""
    seen: set[str] = set()
    unique: List[TeamMember] = []
    for member in members:
        key = normalize_member_name(member.name)
        if key not in seen:
            seen.add(key)
            unique.append(member)

    removed = len(members) - len(unique)
    if removed > 0:
        logger.info(f"Removed {removed} duplicate team members")
    return unique


def _duplicate_reason(task: Task, seen_ids: set[str], seen_keys: set[str]) -> str | None:
    if task.id in seen_ids:
        return f"Duplicate ID: {task.id}"
    key = jira_key(task)
    if key is not None and key in seen_keys:
        return f"Duplicate Jira key: {key}"
    return None


def _remember(task: Task, seen_ids: set[str], seen_keys: set[str]) -> None:
    seen_ids.add(task.id)
    key = jira_key(task)
    if key is not None:
        seen_keys.add(key)


def split_duplicate_tasks(tasks: Sequence[Task]) -> Tuple[List[Task], List[Tuple[Task, str]]]:
    """Split tasks into survivors and ``(task, reason)`` pairs for the dropped ones."""
    seen_ids: set[str] = set()
    seen_keys: set[str] = set()
    unique: List[Task] = []
    dropped: List[Tuple[Task, str]] = []
    for task in tasks:
        reason = _duplicate_reason(task, seen_ids, seen_keys)
        if reason:
            dropped.append((task, reason))
            continue
        _remember(task, seen_ids, seen_keys)
        unique.append(task)
    return unique, dropped


def deduplicate_tasks(tasks: Sequence[Task]) -> List[Task]:
    """Remove tasks whose id or Jira key was already seen on a kept task."""
    unique, dropped = split_duplicate_tasks(tasks)
    for _, reason in dropped:
        logger.warning(f"Removing duplicate task ({reason})")

    removed = len(tasks) - len(unique)
    if removed > 0:
        logger.info(f"Removed {removed} duplicate tasks")
    return unique


def add_tasks(existing: Sequence[Task], incoming: Sequence[Task]) -> Tuple[List[Task], AddTasksResult]:
    """Merge imported tasks into an existing collection, skipping duplicates.

    An incoming task is skipped when its id or Jira key matches an existing
    task or an incoming task accepted earlier in the same call.
    """
    result = AddTasksResult()
    seen_ids: set[str] = set()
    seen_keys: set[str] = set()
    for task in existing:
        _remember(task, seen_ids, seen_keys)

    accepted: List[Task] = []
    for task in incoming:
        reason = _duplicate_reason(task, seen_ids, seen_keys)
        if reason:
            logger.warning(f"Skipping duplicate task ({reason})")
            result.errors.append(reason)
            result.skipped += 1
            continue
        _remember(task, seen_ids, seen_keys)
        accepted.append(task)

    result.added = len(accepted)
    if result.skipped > 0:
        logger.warning(f"Skipped {result.skipped} duplicate tasks")
    if result.added > 0:
        logger.info(f"Adding {result.added} tasks")

    return [*existing, *accepted], result
