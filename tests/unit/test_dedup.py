"""Unit tests for duplicate detection, removal and import merging."""

from roadmap_integrity.dedup import (
    add_tasks,
    deduplicate_members,
    deduplicate_tasks,
    find_duplicate_members,
    find_duplicate_tasks,
    split_duplicate_tasks,
)
from roadmap_integrity.models import Task, TeamMember


def task(id, jira_epic_key=None, name=None):
    return Task(
        id=id,
        name=name or f"Task {id}",
        priority="1",
        track="Guardians",
        status="TODO",
        type="POROTO",
        size="M",
        jira_epic_key=jira_epic_key,
    )


class TestMemberDuplicates:
    """Test cases for team member deduplication."""

    def test_deduplicate_is_case_insensitive_first_wins(self):
        """Test that the first spelling of a member wins regardless of case."""
        members = [TeamMember("Ana"), TeamMember("ana"), TeamMember("Bob")]

        assert deduplicate_members(members) == [TeamMember("Ana"), TeamMember("Bob")]

    def test_deduplicate_ignores_surrounding_whitespace(self):
        """Test that surrounding whitespace does not create a new member."""
        members = [TeamMember("Bob", "#1"), TeamMember(" bob ", "#2")]

        result = deduplicate_members(members)

        assert len(result) == 1
        assert result[0].color == "#1"

    def test_deduplicate_keeps_input(self):
        """Test that deduplication returns a new list."""
        members = [TeamMember("Ana"), TeamMember("ANA")]
        deduplicate_members(members)
        assert len(members) == 2

    def test_find_lists_every_repeat(self):
        """Test that every occurrence beyond the first is listed as spelled."""
        members = [TeamMember("Ana"), TeamMember("ana"), TeamMember("Bob"), TeamMember("ANA")]

        assert find_duplicate_members(members) == ["ana", "ANA"]

    def test_find_without_duplicates(self):
        """Test detection on distinct members."""
        assert find_duplicate_members([TeamMember("Ana"), TeamMember("Bob")]) == []


class TestTaskDuplicates:
    """Test cases for task deduplication."""

    def test_deduplicate_by_either_key(self):
        """Test that a shared id or Jira key drops the later task."""
        a = task("1", "X")
        b = task("2", "X")
        c = task("1", "Y")

        assert deduplicate_tasks([a, b, c]) == [a]

    def test_dropped_task_does_not_claim_its_keys(self):
        """Test that only kept tasks reserve their keys."""
        a = task("1", "X")
        b = task("1", "Y")  # dropped by id; "Y" stays free
        c = task("2", "Y")

        assert deduplicate_tasks([a, b, c]) == [a, c]

    def test_tasks_without_jira_key_only_compare_ids(self):
        """Test that empty Jira keys never collide."""
        tasks = [task("1"), task("2"), task("3", "")]
        assert deduplicate_tasks(tasks) == tasks

    def test_split_reports_reasons(self):
        """Test that dropped tasks carry the reason they were dropped."""
        a = task("1", "X")
        unique, dropped = split_duplicate_tasks([a, task("1"), task("2", "X")])

        assert unique == [a]
        assert [reason for _, reason in dropped] == ["Duplicate ID: 1", "Duplicate Jira key: X"]

    def test_find_scans_keys_independently(self):
        """Test that id and Jira key repeats are detected separately."""
        tasks = [task("1", "X"), task("1", "X"), task("2", "Y"), task("3", "X")]

        duplicates = find_duplicate_tasks(tasks)

        assert duplicates.by_id == ["1"]
        assert duplicates.by_jira_key == ["X", "X"]

    def test_find_ignores_missing_jira_keys(self):
        """Test detection when tasks have no Jira key."""
        duplicates = find_duplicate_tasks([task("1"), task("2"), task("3", "")])

        assert duplicates.by_id == []
        assert duplicates.by_jira_key == []


class TestAddTasks:
    """Test cases for merging imported tasks."""

    def test_skips_existing_ids_and_keys(self):
        """Test skipping imported tasks that collide with existing ones."""
        existing = [task("1", "ROAD-1")]
        incoming = [task("1"), task("2", "ROAD-1"), task("3", "ROAD-3")]

        merged, result = add_tasks(existing, incoming)

        assert [t.id for t in merged] == ["1", "3"]
        assert result.added == 1
        assert result.skipped == 2
        assert result.errors == ["Duplicate ID: 1", "Duplicate Jira key: ROAD-1"]

    def test_skips_duplicates_within_incoming(self):
        """Test skipping collisions inside the imported batch."""
        merged, result = add_tasks([], [task("1", "A"), task("2", "A"), task("1", "B")])

        assert [t.id for t in merged] == ["1"]
        assert result.skipped == 2

    def test_existing_tasks_come_first(self):
        """Test that accepted tasks are appended after existing ones."""
        existing = [task("9")]
        merged, result = add_tasks(existing, [task("1"), task("2")])

        assert [t.id for t in merged] == ["9", "1", "2"]
        assert result.added == 2
        assert result.errors == []
        assert existing == [task("9")]
