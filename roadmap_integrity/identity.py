"""Identity rules deciding when two roadmap records are the same entity."""

from __future__ import annotations

from typing import Optional

from .models import Task


def normalize_member_name(name: str) -> str:
    """Return the identity key of a member name (trimmed, lower-cased)."""
    return name.strip().lower()


def jira_key(task: Task) -> Optional[str]:
    """Return the task's external key, or None when it has none."""
    return task.jira_epic_key or None
