"""MCP server exposing roadmap integrity tools."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from roadmap_integrity.roadmap_logging import setup_logging
from roadmap_integrity.workflow import IntegrityManager
from roadmap_integrity.workspace import Workspace

mcp = FastMCP("roadmap-integrity")


SERVER_ROOT = Path(__file__).resolve().parent


def _candidate_bases() -> List[Path]:
    cwd = Path.cwd().resolve()
    bases: List[Path] = [cwd, *cwd.parents]
    for base in (SERVER_ROOT, *SERVER_ROOT.parents):
        if base not in bases:
            bases.append(base)
    return bases


def _storage_marker() -> str:
    return os.getenv(Workspace.STORAGE_DIR_ENV) or Workspace.DEFAULT_STORAGE_DIR


def _locate_workspace_root() -> Optional[Path]:
    marker = _storage_marker()
    for base in _candidate_bases():
        if (base / marker).exists():
            return base
    return None


def _resolve_root(root: Optional[str]) -> Path:
    if root:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise ValueError(f"Provided root '{root}' does not exist.")
        return resolved

    env_root = os.getenv("ROADMAP_PROJECT_ROOT")
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.exists():
            raise ValueError(
                f"Environment variable ROADMAP_PROJECT_ROOT points to '{env_root}', which does not exist."
            )
        return env_path

    detected_root = _locate_workspace_root()
    if detected_root:
        return detected_root

    raise ValueError(
        "Unable to determine project root automatically. Provide the 'root' argument when calling the tool "
        "or set the ROADMAP_PROJECT_ROOT environment variable."
    )


def _manager(root: Optional[str]) -> IntegrityManager:
    return IntegrityManager(_resolve_root(root))


@mcp.tool()
def audit_data(root: Optional[str] = None) -> Dict[str, Any]:
    """Audit the stored roadmap for duplicate members, duplicate tasks and invalid references.
    Read-only: nothing is changed. Call repair_data afterwards to apply fixes."""

    return _manager(root).audit()


@mcp.tool()
def repair_data(root: Optional[str] = None, save: bool = True) -> Dict[str, Any]:
    """Remove duplicate members and tasks, then replace invalid categories with defaults
    and drop orphaned assignees. Persists the cleaned roadmap unless save is false."""

    return _manager(root).repair(save=save)


@mcp.tool()
def deduplicate_members(root: Optional[str] = None, save: bool = True) -> Dict[str, Any]:
    """Remove team members whose names repeat (ignoring case and surrounding spaces)."""

    return _manager(root).deduplicate_members(save=save)


@mcp.tool()
def import_tasks(
    tasks: List[Dict[str, Any]],
    root: Optional[str] = None,
    validate: bool = True,
    save: bool = True,
) -> Dict[str, Any]:
    """Merge epics/stories mapped from the issue tracker into the roadmap.
    Tasks whose id or jiraEpicKey already exists are skipped."""

    return _manager(root).import_tasks(tasks, validate=validate, save=save)


@mcp.tool()
def validate_config(root: Optional[str] = None) -> Dict[str, Any]:
    """Check the configuration for duplicate entries, empty categories and dangling defaults."""

    return _manager(root).check_config()


@mcp.tool()
def get_config(root: Optional[str] = None) -> Dict[str, Any]:
    """Return the stored roadmap configuration."""

    return _manager(root).get_config()


@mcp.resource("roadmap://integrity")
def resource_integrity():
    """Resource view summarising the integrity of the detected roadmap."""

    root = _locate_workspace_root()
    if not root:
        return "No roadmap storage detected. Launch tools with a 'root' argument or set ROADMAP_PROJECT_ROOT."

    result = IntegrityManager(root).audit()
    if "error" in result:
        return result["error"]

    report = result["report"]
    lines = ["Roadmap Integrity", "", result["message"]]
    for warning in report["warnings"]:
        lines.append(f"- {warning}")
    return "\n".join(lines)


if __name__ == "__main__":
    setup_logging(os.getenv("ROADMAP_LOG_LEVEL", "INFO").upper())
    mcp.run(transport="stdio")
