"""Tests for the command-line desk against the in-process incidents API."""

from io import StringIO

import httpx
import pytest
from rich.console import Console

from parks_incidents import cli
from parks_incidents.application.dtos import SortField
from parks_incidents.infrastructure.api.client import IncidentApiClient
from parks_incidents.presentation.notifications import Notification, NotificationLevel


@pytest.fixture
def output(monkeypatch, app, settings) -> StringIO:
    """Route the CLI to the in-process API and capture what it prints."""
    buffer = StringIO()
    monkeypatch.setattr(cli, "console", Console(file=buffer, width=200))
    monkeypatch.setattr(cli, "configure_logging", lambda: None)
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(
        cli,
        "IncidentApiClient",
        lambda settings, base_url=None: IncidentApiClient(settings=settings, transport=httpx.ASGITransport(app=app)),
    )
    return buffer


def report_swing() -> None:
    assert cli.main(["report", "Broken swing", "Swing chain snapped", "--park", "3", "--severity", "high"]) == 0


class TestListOptions:
    def test_page_size_falls_back_to_setting(self):
        args = cli.build_parser().parse_args(["list", "--sort", "severity", "--desc"])

        query = cli.build_list_query(args, default_page_size=25)

        assert query.page_size == 25
        assert query.sort.field is SortField.SEVERITY
        assert query.sort.descending is True

    def test_assignee_and_unassigned_are_exclusive(self, capsys):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["list", "--assignee", "7", "--unassigned"])

        assert "not allowed with argument" in capsys.readouterr().err


class TestConsoleNotifier:
    def test_prints_title_field_and_message(self):
        buffer = StringIO()
        notifier = cli.ConsoleNotifier(Console(file=buffer, width=200))

        notifier.notify(Notification(NotificationLevel.WARNING, "Could not report", "Park 999 not found", field="parkId"))

        assert buffer.getvalue().strip() == "Could not report (parkId): Park 999 not found"

    def test_message_brackets_are_not_markup(self):
        buffer = StringIO()
        notifier = cli.ConsoleNotifier(Console(file=buffer, width=200))

        notifier.notify(Notification(NotificationLevel.SUCCESS, "Comment added", "[bold]seen[/bold]"))

        assert "[bold]seen[/bold]" in buffer.getvalue()


class TestCommands:
    def test_report_then_list(self, output):
        report_swing()

        assert cli.main(["list"]) == 0

        printed = output.getvalue()
        assert "Incident reported: #1 Broken swing is pending" in printed
        assert "1 total" in printed

    def test_unknown_incident_exits_with_failure(self, output):
        assert cli.main(["resolve", "99", "Replaced chain"]) == 1

        assert output.getvalue().startswith("Could not resolve:")

    def test_invalid_page_size_exits_with_usage_code(self, output):
        assert cli.main(["list", "--page-size", "0"]) == 2

        assert "Invalid list options" in output.getvalue()

    def test_unknown_park_names_the_field(self, output):
        assert cli.main(["report", "Broken swing", "Swing chain snapped", "--park", "999"]) == 1

        assert "(parkId)" in output.getvalue()

    def test_assignments_show_up_in_detail(self, output):
        report_swing()

        assert cli.main(["assign-work", "1", "7", "--department", "Mantenimiento", "--due", "2025-03-12"]) == 0
        assert cli.main(["update-assignment", "1", "1", "in_progress", "--notes", "Ordering a chain"]) == 0
        assert cli.main(["show", "1"]) == 0

        printed = output.getvalue()
        assert "Assignment created: Assignment #1 for user 7 is pending" in printed
        assert "Mantenimiento" in printed
        assert "2025-03-12" in printed
        assert "Ordering a chain" in printed

    def test_closed_assignment_cannot_be_updated(self, output):
        report_swing()
        cli.main(["assign-work", "1", "7"])
        assert cli.main(["update-assignment", "1", "1", "cancelled"]) == 0

        assert cli.main(["update-assignment", "1", "1", "pending"]) == 1

        assert "Could not update assignment" in output.getvalue()
