"""Integrity workflow orchestration.

This module ties the workspace snapshots to the integrity engine: auditing
stored data, repairing it, deduplicating team members and importing tasks
from the remote tracker. Every operation returns a plain dictionary so that
it can be surfaced directly by the MCP server.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .dedup import add_tasks, deduplicate_members
from .integrity import repair_data, validate_all_data, validate_config
from .models import CategoryItem, ConfigDefaults, RoadmapConfig, Task, TeamMember
from .roadmap_logging import (
    log_audit,
    log_error_with_context,
    log_import,
    log_operation,
    log_performance,
    log_repair,
)
from .validator import validate_all_tasks
from .workspace import Workspace

logger = logging.getLogger("roadmap.workflow")


def _error(operation: str, error: Exception, suggestion: str) -> Dict[str, Any]:
    logger.error(f"Failed to {operation.replace('_', ' ')}: {error}")
    log_error_with_context(error, {"operation": operation})
    return {
        "error": f"Failed to {operation.replace('_', ' ')}: {error}",
        "suggestion": suggestion,
        "message": f"Error: {error}",
    }


class IntegrityManager:
    """Run integrity audits and repairs over a workspace's stored roadmap."""

    def __init__(self, root: Path | str, fallbacks: Optional[Mapping[str, str]] = None):
        """Initialize the manager with the workspace root and fallback overrides."""
        self.workspace = Workspace(root)
        self.fallbacks = dict(fallbacks) if fallbacks else None

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    @log_performance("audit")
    def audit(self) -> Dict[str, Any]:
        """Audit stored configuration and tasks without changing them."""
        try:
            config, tasks = self.workspace.snapshot()
        except (OSError, ValueError) as e:
            return _error("audit_data", e, "Check that config.json and tasks.json contain valid JSON")

        report = validate_all_data(tasks, config).to_dict()
        config_report = validate_config(config).to_dict()
        log_audit(report, task_count=len(tasks))

        needs_repair = bool(report["warnings"])
        return {
            "report": report,
            "config_report": config_report,
            "task_count": len(tasks),
            "member_count": len(config.team_members),
            "next_suggested_step": "repair_data" if needs_repair else None,
            "workflow_tip": (
                "Run repair_data to remove duplicates and fix invalid references"
                if needs_repair else "No integrity issues found"
            ),
            "message": f"Audit found {len(report['warnings'])} warnings across {len(tasks)} tasks.",
        }

    def check_config(self) -> Dict[str, Any]:
        """Audit the stored configuration only."""
        try:
            config = self.workspace.load_config()
        except (OSError, ValueError) as e:
            return _error("validate_config", e, "Check that config.json contains valid JSON")

        report = validate_config(config).to_dict()
        return {
            "report": report,
            "message": f"Configuration check found {len(report['warnings'])} warnings.",
        }

    def get_config(self) -> Dict[str, Any]:
        try:
            config = self.workspace.load_config()
        except (OSError, ValueError) as e:
            return _error("get_config", e, "Check that config.json contains valid JSON")
        return {"config_path": str(self.workspace.config_path), "config": config.to_dict()}

    # ------------------------------------------------------------------
    # Repair
    # ------------------------------------------------------------------

    @log_performance("repair")
    def repair(self, save: bool = True) -> Dict[str, Any]:
        """Deduplicate and repair stored data, persisting the result when ``save``."""
        try:
            config, tasks = self.workspace.snapshot()
            with log_operation("repair_data", task_count=len(tasks), save=save):
                cleaned_config, cleaned_tasks, report = repair_data(tasks, config, self.fallbacks)
                if save and report.fixed:
                    self.workspace.save_config(cleaned_config)
                    self.workspace.save_tasks(cleaned_tasks)
        except (OSError, ValueError) as e:
            return _error("repair_data", e, "Check that the storage directory is writable and holds valid JSON")

        report_dict = report.to_dict()
        log_repair(report_dict, saved=save)
        return {
            "report": report_dict,
            "task_count": len(cleaned_tasks),
            "removed_tasks": len(tasks) - len(cleaned_tasks),
            "removed_members": len(config.team_members) - len(cleaned_config.team_members),
            "saved": save and bool(report.fixed),
            "next_suggested_step": "audit_data",
            "workflow_tip": "Run audit_data to confirm the dataset is now clean",
            "message": f"Applied {len(report.fixed)} fixes.",
        }

    def deduplicate_members(self, save: bool = True) -> Dict[str, Any]:
        """Remove duplicate team members from the stored configuration."""
        try:
            config = self.workspace.load_config()
            members = deduplicate_members(config.team_members)
            removed = len(config.team_members) - len(members)
            if save and removed:
                self.workspace.save_config(replace(config, team_members=members))
        except (OSError, ValueError) as e:
            return _error("deduplicate_members", e, "Check that config.json is valid and writable")

        return {
            "team_members": [member.to_dict() for member in members],
            "removed": removed,
            "saved": save and bool(removed),
            "message": f"Removed {removed} duplicate team members.",
        }

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    @log_performance("import_tasks")
    def import_tasks(
        self,
        tasks: List[Dict[str, Any]],
        validate: bool = True,
        save: bool = True,
    ) -> Dict[str, Any]:
        """Merge tasks mapped from the remote tracker into the stored collection.

        Duplicates (by id or Jira key) are skipped. With ``validate`` the
        accepted tasks are repaired against the current configuration first.
        """
        try:
            incoming = [Task.from_dict(item) for item in tasks]
        except (KeyError, TypeError) as e:
            return _error("import_tasks", e, "Every imported task needs at least an 'id'")

        try:
            config, existing = self.workspace.snapshot()
            merged, result = add_tasks(existing, incoming)
            validation = None
            if validate:
                accepted, validation = validate_all_tasks(merged[len(existing):], config, self.fallbacks)
                merged = [*existing, *accepted]
            if save and result.added:
                self.workspace.save_tasks(merged)
        except (OSError, ValueError) as e:
            return _error("import_tasks", e, "Check that the storage directory is writable and holds valid JSON")

        log_import(result.added, result.skipped)
        return {
            "result": result.to_dict(),
            "validation": validation.to_dict() if validation else None,
            "task_count": len(merged),
            "saved": save and bool(result.added),
            "next_suggested_step": "audit_data",
            "message": f"Imported {result.added} tasks, skipped {result.skipped} duplicates.",
        }

    # ------------------------------------------------------------------
    # Configuration updates
    # ------------------------------------------------------------------

    def update_config(
        self,
        tracks: Optional[List[Dict[str, Any]]] = None,
        priorities: Optional[List[Dict[str, Any]]] = None,
        statuses: Optional[List[Dict[str, Any]]] = None,
        types: Optional[List[Dict[str, Any]]] = None,
        sizes: Optional[List[str]] = None,
        team_members: Optional[List[Any]] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Replace configuration sections and report what the change breaks.

        Stored tasks are not modified; the returned audit lists the tasks
        that now reference missing entries.
        """
        try:
            config = self.workspace.load_config()
            changes: Dict[str, Any] = {}
            for key, value in (("tracks", tracks), ("priorities", priorities),
                               ("statuses", statuses), ("types", types)):
                if value is not None:
                    changes[key] = [CategoryItem.from_dict(item) for item in value]
            if sizes is not None:
                changes["sizes"] = list(sizes)
            if team_members is not None:
                changes["team_members"] = [TeamMember.from_dict(member) for member in team_members]
            if defaults is not None:
                changes["defaults"] = ConfigDefaults.from_dict(defaults)

            updated: RoadmapConfig = replace(config, **changes)
            self.workspace.save_config(updated)
        except (OSError, ValueError, KeyError) as e:
            return _error("update_config", e, "Check the submitted configuration sections")

        audit = self.audit()
        return {
            "updated_sections": sorted(changes),
            "audit": audit,
            "message": f"Updated {len(changes)} configuration sections.",
        }
