"""Unit tests for dataset-wide integrity reports and repairs."""

from roadmap_integrity.integrity import repair_data, validate_all_data, validate_config
from roadmap_integrity.models import (
    CategoryItem,
    ConfigDefaults,
    RoadmapConfig,
    Task,
    TeamMember,
    WeekAssignment,
)


def make_config(members=None):
    return RoadmapConfig(
        tracks=[CategoryItem("Guardians")],
        priorities=[CategoryItem("1"), CategoryItem("3")],
        statuses=[CategoryItem("TODO"), CategoryItem("DONE")],
        types=[CategoryItem("POROTO")],
        sizes=["S", "M"],
        team_members=members if members is not None else [TeamMember("Alice"), TeamMember("Bob")],
        defaults=ConfigDefaults(track="Guardians", priority="3", status="TODO", type="POROTO", size="M"),
    )


def make_task(id, name=None, jira_epic_key=None, assignees=("Alice",), **fields):
    data = dict(priority="1", track="Guardians", status="TODO", type="POROTO", size="S")
    data.update(fields)
    return Task(
        id=id,
        name=name or f"Task {id}",
        assignments=[WeekAssignment("W1", list(assignees))],
        jira_epic_key=jira_epic_key,
        **data,
    )


class TestValidateAllData:
    """Test cases for the read-only audit."""

    def test_clean_dataset_is_valid(self):
        """Test that a consistent dataset passes the audit."""
        report = validate_all_data([make_task("1"), make_task("2")], make_config())

        assert report.is_valid is True
        assert report.warnings == []
        assert report.fixed == []

    def test_single_orphan_invalidates(self):
        """Test that one orphaned assignee makes the audit invalid."""
        tasks = [make_task("1", assignees=["Ghost"])]

        report = validate_all_data(tasks, make_config())

        assert report.is_valid is False
        assert report.errors == []
        assert report.warnings == ['Task "Task 1": Orphaned assignee "Ghost"']
        assert report.fixed == ['Task "Task 1": Removed assignee "Ghost"']

    def test_report_order(self):
        """Test that member, id, Jira key and reference findings come in that order."""
        config = make_config([TeamMember("Alice"), TeamMember("alice"), TeamMember("Bob")])
        tasks = [
            make_task("1", jira_epic_key="ROAD-1"),
            make_task("1", name="Copy"),
            make_task("2", jira_epic_key="ROAD-1", status="STALE"),
        ]

        report = validate_all_data(tasks, config)

        assert report.warnings == [
            "Found 1 duplicate team members",
            "  - Duplicate: alice",
            "Found 1 duplicate task IDs",
            "  - Duplicate ID: 1",
            "Found 1 duplicate Jira keys",
            "  - Duplicate Jira key: ROAD-1",
            'Task "Task 2": Invalid status "STALE"',
        ]
        assert report.fixed == ['Task "Task 2": Changed status to "TODO"']
        assert report.is_valid is False

    def test_repeated_duplicate_is_listed_once(self):
        """Test that a value repeated several times gets one detail line."""
        tasks = [make_task("1"), make_task("1"), make_task("1")]

        report = validate_all_data(tasks, make_config())

        assert report.warnings == ["Found 2 duplicate task IDs", "  - Duplicate ID: 1"]

    def test_member_spellings_are_listed_once(self):
        """Test that spellings of one member differing in case give one detail line."""
        config = make_config([TeamMember("Ana"), TeamMember("ana"), TeamMember("ANA")])

        report = validate_all_data([], config)

        assert report.warnings == ["Found 2 duplicate team members", "  - Duplicate: ana"]

    def test_inputs_are_not_modified(self):
        """Test that the audit leaves configuration and tasks alone."""
        config = make_config([TeamMember("Alice"), TeamMember("ALICE")])
        tasks = [make_task("1", assignees=["Ghost"]), make_task("1")]

        validate_all_data(tasks, config)

        assert len(config.team_members) == 2
        assert len(tasks) == 2
        assert tasks[0].assignments[0].assignees == ["Ghost"]


class TestValidateConfig:
    """Test cases for the configuration audit."""

    def test_default_config_is_clean(self):
        """Test that the stock configuration has no findings."""
        report = validate_config(RoadmapConfig.default())

        assert report.warnings == []
        assert report.is_valid is True

    def test_duplicate_entries(self):
        """Test reporting repeated category entries."""
        config = make_config()
        config.tracks.append(CategoryItem("Guardians"))
        config.sizes.append("S")

        report = validate_config(config)

        assert report.warnings == [
            'Duplicate tracks entry "Guardians"',
            'Duplicate sizes entry "S"',
        ]

    def test_dangling_default_and_empty_category(self):
        """Test reporting defaults that name no entry and empty categories."""
        config = make_config()
        config.types = []
        config.defaults.priority = "Milestone"

        report = validate_config(config)

        assert 'Default priority "Milestone" does not exist' in report.warnings
        assert "No types configured" in report.warnings
        assert 'Default type "POROTO" does not exist' in report.warnings

    def test_member_without_color(self):
        """Test reporting team members without a colour."""
        config = make_config([TeamMember("Alice", color="")])

        report = validate_config(config)

        assert report.warnings == ['Team member "Alice" has no color']


class TestRepairData:
    """Test cases for the mutating repair pass."""

    def test_repair_removes_duplicates_then_fixes_references(self):
        """Test that removals are reported before reference fixes."""
        config = make_config([TeamMember("Alice"), TeamMember(" alice"), TeamMember("Bob")])
        tasks = [
            make_task("1", jira_epic_key="ROAD-1", assignees=["Alice", "Ghost"]),
            make_task("1", name="Copy"),
            make_task("2", name="Imported", jira_epic_key="ROAD-1"),
            make_task("3", size="XXL"),
        ]

        cleaned_config, cleaned_tasks, report = repair_data(tasks, config)

        assert [m.name for m in cleaned_config.team_members] == ["Alice", "Bob"]
        assert [t.id for t in cleaned_tasks] == ["1", "3"]
        assert cleaned_tasks[0].assignments[0].assignees == ["Alice"]
        assert cleaned_tasks[1].size == "M"
        assert report.fixed == [
            'Removed duplicate team member " alice"',
            'Removed duplicate task "Copy" (Duplicate ID: 1)',
            'Removed duplicate task "Imported" (Duplicate Jira key: ROAD-1)',
            'Task "Task 1": Removed assignee "Ghost"',
            'Task "Task 3": Changed size to "M"',
        ]
        assert report.is_valid is True

    def test_every_removed_member_is_reported(self):
        """Test one warning and one fix per repeated member occurrence."""
        config = make_config([TeamMember("Ana"), TeamMember("ana"), TeamMember("ANA")])

        cleaned_config, _, report = repair_data([], config)

        assert [m.name for m in cleaned_config.team_members] == ["Ana"]
        assert report.warnings == [
            'Duplicate team member "ana"',
            'Duplicate team member "ANA"',
        ]
        assert report.fixed == [
            'Removed duplicate team member "ana"',
            'Removed duplicate team member "ANA"',
        ]

    def test_repaired_data_passes_audit(self):
        """Test that the audit is clean after a repair."""
        config = make_config([TeamMember("Alice"), TeamMember("ALICE")])
        tasks = [make_task("1", track="Old", assignees=["Ghost"]), make_task("1")]

        cleaned_config, cleaned_tasks, _ = repair_data(tasks, config)

        assert validate_all_data(cleaned_tasks, cleaned_config).is_valid is True

    def test_repaired_data_passes_audit_with_dangling_default(self):
        """Test that a default naming a removed track does not keep the audit failing."""
        config = make_config()
        config.tracks = [CategoryItem("Frontend")]
        tasks = [make_task("1"), make_task("2", track="Old")]

        cleaned_config, cleaned_tasks, report = repair_data(tasks, config)

        assert [t.track for t in cleaned_tasks] == ["Frontend", "Frontend"]
        assert len(report.fixed) == 2
        assert validate_all_data(cleaned_tasks, cleaned_config).is_valid is True

    def test_repair_leaves_inputs_untouched(self):
        """Test that repair returns copies."""
        config = make_config([TeamMember("Alice"), TeamMember("ALICE")])
        tasks = [make_task("1", track="Old")]

        repair_data(tasks, config)

        assert len(config.team_members) == 2
        assert tasks[0].track == "Old"

    def test_repair_with_injected_fallbacks(self):
        """Test that per-call fallbacks reach the reference repair."""
        config = make_config()
        config.defaults = ConfigDefaults()

        _, cleaned_tasks, _ = repair_data([make_task("1", size="XXL")], config, fallbacks={"size": "S"})

        assert cleaned_tasks[0].size == "S"
