"""Data models for roadmap integrity checks.

This module contains the core data structures used throughout the integrity
engine: the roadmap configuration, planned tasks, and the reports produced by
validation and deduplication passes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


NEUTRAL_COLOR = "#9ca3af"

# Values used when a task field is invalid and the configuration has no default.
FALLBACK_VALUES: Dict[str, str] = {
    "track": "Guardians",
    "priority": "3",
    "status": "TODO",
    "type": "POROTO",
    "size": "M",
}

CATEGORY_FIELDS = ("track", "priority", "status", "type", "size")


@dataclass(slots=True)
class CategoryItem:
    """A named, coloured entry of a configuration category."""

    name: str
    color: str = NEUTRAL_COLOR

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryItem":
        return cls(name=data["name"], color=data.get("color", NEUTRAL_COLOR))


@dataclass(slots=True)
class TeamMember:
    """A team member that tasks may be assigned to."""

    name: str
    color: str = NEUTRAL_COLOR
    nationality: Optional[str] = None
    seniority: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data: Dict[str, Any] = {"name": self.name, "color": self.color}
        if self.nationality:
            data["nationality"] = self.nationality
        if self.seniority:
            data["seniority"] = self.seniority
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "TeamMember":
        """Create from dictionary representation.

        Older configurations stored members as bare names; those are upgraded
        to a member with a neutral colour.
        """
        if isinstance(data, str):
            return cls(name=data)
        return cls(
            name=data["name"],
            color=data.get("color", ""),
            nationality=data.get("nationality"),
            seniority=data.get("seniority"),
        )


@dataclass(slots=True)
class ConfigDefaults:
    """Default selection per category."""

    track: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    size: Optional[str] = None

    def get(self, field_name: str) -> Optional[str]:
        return getattr(self, field_name)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in CATEGORY_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigDefaults":
        return cls(**{name: data.get(name) for name in CATEGORY_FIELDS})


DEFAULT_TRACKS = [CategoryItem("Guardians", "#8b5cf6")]

DEFAULT_PRIORITIES = [
    CategoryItem("Milestone", "#2d6a3e"),
    CategoryItem("1", "#4ade80"),
    CategoryItem("2", "#86efac"),
    CategoryItem("3", "#bbf7d0"),
]

DEFAULT_STATUSES = [
    CategoryItem("TODO", "#9ca3af"),
    CategoryItem("PREWORK", "#3b82f6"),
    CategoryItem("WIP", "#f97316"),
    CategoryItem("TESTING", "#06b6d4"),
    CategoryItem("LAST LAP", "#a855f7"),
    CategoryItem("DONE", "#10b981"),
    CategoryItem("ROLLOUT", "#8b5cf6"),
    CategoryItem("DISMISSED", "#374151"),
    CategoryItem("ON HOLD", "#eab308"),
    CategoryItem("BLOCKED", "#ef4444"),
]

DEFAULT_TYPES = [
    CategoryItem("DEUDA TECNICA", "#ec4899"),
    CategoryItem("CARRY OVER", "#dc2626"),
    CategoryItem("EXTRA MILE", "#f59e0b"),
    CategoryItem("OVNI", "#1f2937"),
    CategoryItem("POROTO", "#22c55e"),
]

DEFAULT_SIZES = ["XS", "S", "M", "L", "XL"]

DEFAULT_DEFAULTS = ConfigDefaults(
    track="Guardians",
    priority="Milestone",
    status="TODO",
    type="POROTO",
    size="S",
)


@dataclass(slots=True)
class RoadmapConfig:
    """Authoritative schema of categorical values and default selections."""

    tracks: List[CategoryItem] = field(default_factory=list)
    priorities: List[CategoryItem] = field(default_factory=list)
    statuses: List[CategoryItem] = field(default_factory=list)
    types: List[CategoryItem] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)
    team_members: List[TeamMember] = field(default_factory=list)
    defaults: ConfigDefaults = field(default_factory=ConfigDefaults)
    extra: Dict[str, Any] = field(default_factory=dict)

    def category_values(self, field_name: str) -> List[str]:
        """Return the values configured for ``field_name``, in configured order."""
        if field_name == "size":
            return list(self.sizes)
        items = {
            "track": self.tracks,
            "priority": self.priorities,
            "status": self.statuses,
            "type": self.types,
        }[field_name]
        return [item.name for item in items]

    def valid_values(self, field_name: str) -> set[str]:
        """Return the set of values a task may use for ``field_name``."""
        return set(self.category_values(field_name))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored (camelCase) representation."""
        data = dict(self.extra)
        data.update({
            "tracks": [item.to_dict() for item in self.tracks],
            "priorities": [item.to_dict() for item in self.priorities],
            "statuses": [item.to_dict() for item in self.statuses],
            "types": [item.to_dict() for item in self.types],
            "sizes": list(self.sizes),
            "teamMembers": [member.to_dict() for member in self.team_members],
            "defaults": self.defaults.to_dict(),
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoadmapConfig":
        """Create from the stored representation, backfilling absent fields."""
        known = {"tracks", "priorities", "statuses", "types", "sizes", "teamMembers", "defaults"}

        def items(key: str, stock: List[CategoryItem]) -> List[CategoryItem]:
            if key not in data or data[key] is None:
                return [replace(item) for item in stock]
            return [CategoryItem.from_dict(item) for item in data[key]]

        defaults = data.get("defaults")
        return cls(
            tracks=items("tracks", DEFAULT_TRACKS),
            priorities=items("priorities", DEFAULT_PRIORITIES),
            statuses=items("statuses", DEFAULT_STATUSES),
            types=items("types", DEFAULT_TYPES),
            sizes=list(data["sizes"]) if data.get("sizes") is not None else list(DEFAULT_SIZES),
            team_members=[TeamMember.from_dict(member) for member in data.get("teamMembers") or []],
            defaults=ConfigDefaults.from_dict(defaults) if defaults else replace(DEFAULT_DEFAULTS),
            extra={key: value for key, value in data.items() if key not in known},
        )

    @classmethod
    def default(cls) -> "RoadmapConfig":
        """Build the stock configuration shipped with the planner."""
        return cls(
            tracks=[replace(item) for item in DEFAULT_TRACKS],
            priorities=[replace(item) for item in DEFAULT_PRIORITIES],
            statuses=[replace(item) for item in DEFAULT_STATUSES],
            types=[replace(item) for item in DEFAULT_TYPES],
            sizes=list(DEFAULT_SIZES),
            defaults=replace(DEFAULT_DEFAULTS),
        )


@dataclass(slots=True)
class WeekAssignment:
    """Members assigned to a task for one week."""

    week_id: str
    assignees: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"weekId": self.week_id, "assignees": list(self.assignees)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeekAssignment":
        return cls(week_id=data.get("weekId", ""), assignees=list(data.get("assignees") or []))


@dataclass(slots=True)
class Task:
    """A unit of planned work (epic or story) on the roadmap."""

    id: str
    name: str
    priority: str
    track: str
    status: str
    type: str
    size: str
    assignments: List[WeekAssignment] = field(default_factory=list)
    jira_epic_key: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)  # weeks, order, comments, Jira metadata

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored (camelCase) representation."""
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "name": self.name,
            "priority": self.priority,
            "track": self.track,
            "status": self.status,
            "type": self.type,
            "size": self.size,
            "assignments": [assignment.to_dict() for assignment in self.assignments],
        })
        if self.jira_epic_key:
            data["jiraEpicKey"] = self.jira_epic_key
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Create from the stored representation."""
        known = {"id", "name", "priority", "track", "status", "type", "size", "assignments", "jiraEpicKey"}
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            priority=data.get("priority", ""),
            track=data.get("track", ""),
            status=data.get("status", ""),
            type=data.get("type", ""),
            size=data.get("size", ""),
            assignments=[WeekAssignment.from_dict(item) for item in data.get("assignments") or []],
            jira_epic_key=data.get("jiraEpicKey") or None,
            extra={key: value for key, value in data.items() if key not in known},
        )


@dataclass(slots=True)
class IntegrityReport:
    """Findings and repairs of a single integrity pass."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    fixed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "fixed": list(self.fixed),
        }

    def has_findings(self) -> bool:
        return bool(self.errors or self.warnings)


def merge_reports(*reports: IntegrityReport, strict: bool = False) -> IntegrityReport:
    """Concatenate reports in order and recompute ``is_valid``.

    With ``strict`` the merged report is only valid when it carries neither
    errors nor warnings; otherwise only errors invalidate it.
    """
    merged = IntegrityReport()
    for report in reports:
        merged.errors.extend(report.errors)
        merged.warnings.extend(report.warnings)
        merged.fixed.extend(report.fixed)
    merged.is_valid = not merged.errors and not (strict and merged.warnings)
    return merged


@dataclass(slots=True)
class DuplicateTasks:
    """Repeated task identifiers found by a detection scan."""

    by_id: List[str] = field(default_factory=list)
    by_jira_key: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"by_id": list(self.by_id), "by_jira_key": list(self.by_jira_key)}


@dataclass(slots=True)
class AddTasksResult:
    """Outcome of merging imported tasks into an existing collection."""

    added: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"added": self.added, "skipped": self.skipped, "errors": list(self.errors)}
