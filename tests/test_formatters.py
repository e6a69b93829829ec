"""Tests for formatters and the orphan report"""
from datetime import datetime, timedelta, timezone
from io import StringIO

from rich.console import Console

from git_housekeeper.formatters import (
    format_commit_date,
    format_deletion_confirmation_items,
    format_deletion_summary,
    format_divergence,
    format_merge_prompt,
    format_orphan_label,
    format_pr_label,
    format_tracking_state,
)
from git_housekeeper.models.branch import BranchRef, OrphanSet, TrackingState
from git_housekeeper.models.pull_request import PRRef
from git_housekeeper.services.display_service import DisplayService

UTC = timezone.utc
COMMIT_TIME = datetime(2024, 3, 7, 14, 5, tzinfo=UTC)


def orphans():
    return OrphanSet([
        BranchRef("feat-b", TrackingState.GONE, COMMIT_TIME, 1, 0),
        BranchRef("feat-a", TrackingState.UNTRACKED, None, None, None),
    ])


class TestDateFormatting:
    def test_afternoon(self):
        assert format_commit_date(COMMIT_TIME, UTC) == "3/7/24 2:05 PM"

    def test_midnight_and_noon(self):
        assert format_commit_date(datetime(2024, 1, 2, 0, 30, tzinfo=UTC), UTC) == "1/2/24 12:30 AM"
        assert format_commit_date(datetime(2024, 1, 2, 12, 0, tzinfo=UTC), UTC) == "1/2/24 12:00 PM"

    def test_rendered_in_requested_zone(self):
        zone = timezone(timedelta(hours=-5))
        assert format_commit_date(COMMIT_TIME, zone) == "3/7/24 9:05 AM"

    def test_unknown(self):
        assert format_commit_date(None) == "N/A"


class TestBranchFormatting:
    def test_tracking_state(self):
        assert format_tracking_state(TrackingState.GONE) == "✗ gone"
        assert format_tracking_state(TrackingState.UNTRACKED) == "○ local"

    def test_divergence(self):
        assert format_divergence(BranchRef("x", TrackingState.GONE, None, 2, 5)) == "↑2 ↓5"

    def test_divergence_unknown(self):
        assert format_divergence(BranchRef("x", TrackingState.GONE)) == "↑N/A ↓N/A"

    def test_orphan_label(self):
        label = format_orphan_label(BranchRef("feat-a", TrackingState.UNTRACKED, None, 3, 0))

        assert label.plain == "feat-a (last commit: N/A | diff: ↑3 ↓0)"


class TestPullRequestFormatting:
    def test_pr_label(self):
        assert format_pr_label(PRRef(12, "Bump requests (deps)", "dependabot/pip/requests")) == (
            "#12 - Bump requests (deps)"
        )

    def test_merge_prompt(self):
        prompt = format_merge_prompt(PRRef(3, "chore(deps): bump c", "dependabot/npm/c"), "staging")

        assert prompt.startswith("Merge PR #3 (dependabot/npm/c) into staging?")
        assert prompt.endswith("chore(deps): bump c")


class TestStatusFormatting:
    def test_confirmation_items_keep_selection_order(self):
        text = format_deletion_confirmation_items(["feat-b", "feat-a"], orphans())

        assert text == "  • feat-b (✗ gone)\n  • feat-a (○ local)"

    def test_summary(self):
        lines = format_deletion_summary(["feat-a"], [("feat-b", "not found")])

        assert lines == ["✓ Deleted feat-a", "✗ feat-b: not found"]


class TestDisplayService:
    def _render(self, orphan_set, **kwargs):
        buffer = StringIO()
        service = DisplayService(output=Console(file=buffer, width=120, color_system=None))
        service.display_orphan_table(orphan_set, **kwargs)
        return buffer.getvalue()

    def test_empty_report(self):
        assert "No local branches found" in self._render(OrphanSet())

    def test_table_sorted_by_name(self):
        output = self._render(orphans(), default_branch="main")

        assert "diff vs main" in output
        assert output.index("feat-a") < output.index("feat-b")
        assert "✗ gone" in output
        assert "↑N/A ↓N/A" in output
        assert "Summary" not in output

    def test_summary_counts(self):
        output = self._render(orphans(), show_summary=True)

        assert "Orphaned branches: 2" in output
        assert "Upstream gone: 1" in output
        assert "Local only: 1" in output
