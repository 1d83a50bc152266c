"""
Command-line incident desk.

Usage:
    parks-incidents serve --port 8080
    parks-incidents list --park 3 --status pending --sort severity --desc
    parks-incidents report "Broken swing" "Swing chain snapped" --park 3 --severity high
    parks-incidents resolve 12 "Replaced chain"
    parks-incidents assign-work 12 7 --department Mantenimiento
    parks-incidents update-assignment 12 3 completed --notes "Chain replaced"
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .application.dtos.incident_dtos import IncidentListQuery, IncidentPage, IncidentStats, SortField, SortOrder
from .application.use_cases.incident_lifecycle import IncidentLifecycleService
from .config import configure_logging, get_settings
from .core.exceptions import IncidentDeskError
from .domain.entities.incident import Incident
from .domain.enums import AssignmentStatus, IncidentCategory, IncidentSeverity, IncidentStatus
from .domain.services.incident_workflow_service import DEFAULT_DEPARTMENT
from .infrastructure.api.client import IncidentApiClient
from .presentation.desk import ActionResult, IncidentDesk, IncidentDetail
from .presentation.notifications import Notification, NotificationLevel, Notifier, notification_for_error

console = Console()

LEVEL_STYLES = {
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.INFO: "cyan",
    NotificationLevel.WARNING: "yellow",
    NotificationLevel.ERROR: "bold red",
}

STATUS_STYLES = {
    IncidentStatus.PENDING: "yellow",
    IncidentStatus.IN_PROGRESS: "cyan",
    IncidentStatus.RESOLVED: "green",
    IncidentStatus.REJECTED: "dim",
}


class ConsoleNotifier(Notifier):
    """Prints notifications as one coloured line."""

    def __init__(self, output: Console):
        self.output = output

    def notify(self, notification: Notification) -> None:
        style = LEVEL_STYLES[notification.level]
        title = notification.title + (f" ({notification.field})" if notification.field else "")
        self.output.print(f"[{style}]{escape(title)}[/{style}]: {escape(notification.message)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="parks-incidents", description="Report and track park incidents")
    parser.add_argument("--base-url", help="Incidents API base URL (default: API_BASE_URL setting)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the reference incidents API")
    serve.add_argument("--host", help="Host to bind to")
    serve.add_argument("--port", type=int, help="Port to bind to")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload for development")

    listing = sub.add_parser("list", help="List incidents")
    listing.add_argument("--park", type=int, help="Only incidents of this park id")
    listing.add_argument("--status", choices=[s.value for s in IncidentStatus])
    listing.add_argument("--category", choices=[c.value for c in IncidentCategory])
    listing.add_argument("--severity", choices=[s.value for s in IncidentSeverity])
    assignee = listing.add_mutually_exclusive_group()
    assignee.add_argument("--assignee", type=int, help="Only incidents assigned to this user id")
    assignee.add_argument("--unassigned", action="store_true", help="Only unassigned incidents")
    listing.add_argument("--search", default="", help="Text to look for in title, description or reporter")
    listing.add_argument("--sort", choices=[f.value for f in SortField], default=SortField.CREATED_AT.value)
    listing.add_argument("--desc", action="store_true", help="Sort descending")
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--page-size", type=int, help="Incidents per page (default: DEFAULT_PAGE_SIZE setting)")

    show = sub.add_parser("show", help="Show an incident with its comments, assignments and history")
    show.add_argument("incident_id", type=int)

    report = sub.add_parser("report", help="Report a new incident")
    report.add_argument("title")
    report.add_argument("description")
    report.add_argument("--park", type=int, required=True, help="Park id")
    report.add_argument("--asset", type=int, help="Asset id")
    report.add_argument("--severity", choices=[s.value for s in IncidentSeverity], default=IncidentSeverity.MEDIUM.value)
    report.add_argument("--category", choices=[c.value for c in IncidentCategory], default=IncidentCategory.OTHER.value)
    report.add_argument("--reporter", help="Reporter name (default: REPORTER_NAME setting)")
    report.add_argument("--email", help="Reporter email")
    report.add_argument("--location", help="Where in the park")

    for name, help_text in (("start", "Start work on an incident"), ("reject", "Reject an incident")):
        action = sub.add_parser(name, help=help_text)
        action.add_argument("incident_id", type=int)

    assign = sub.add_parser("assign", help="Assign an incident to a user")
    assign.add_argument("incident_id", type=int)
    assign.add_argument("user_id", type=int)

    resolve = sub.add_parser("resolve", help="Resolve an incident")
    resolve.add_argument("incident_id", type=int)
    resolve.add_argument("notes")

    assign_work = sub.add_parser("assign-work", help="Hand an incident to a user and department")
    assign_work.add_argument("incident_id", type=int)
    assign_work.add_argument("user_id", type=int)
    assign_work.add_argument("--department", default=DEFAULT_DEPARTMENT)
    assign_work.add_argument("--due", type=datetime.fromisoformat, help="Due date (ISO 8601)")
    assign_work.add_argument("--notes")

    update_assignment = sub.add_parser("update-assignment", help="Move an assignment to another status")
    update_assignment.add_argument("incident_id", type=int)
    update_assignment.add_argument("assignment_id", type=int)
    update_assignment.add_argument("status", choices=[s.value for s in AssignmentStatus])
    update_assignment.add_argument("--notes")

    comment = sub.add_parser("comment", help="Comment on an incident")
    comment.add_argument("incident_id", type=int)
    comment.add_argument("text")

    stats = sub.add_parser("stats", help="Incident dashboard counters")
    stats.add_argument("--park", type=int, help="Only incidents of this park id")

    sub.add_parser("health", help="Check that the incidents API is up")

    return parser


def render_incidents(page: IncidentPage) -> Table:
    table = Table(title=f"Incidents (page {page.page}/{page.total_pages}, {page.total} total)")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Park")
    table.add_column("Severity")
    table.add_column("Status")
    table.add_column("Assignee", justify="right")
    table.add_column("Reported")

    for incident in page.items:
        style = STATUS_STYLES[incident.status]
        table.add_row(
            str(incident.id),
            incident.title,
            incident.park_name or str(incident.park_id),
            incident.severity.value,
            f"[{style}]{incident.status.value}[/{style}]",
            str(incident.assigned_to_id) if incident.assigned_to_id is not None else "-",
            incident.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table


def render_incident(incident: Incident) -> Table:
    table = Table(title=f"Incident #{incident.id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    rows = [
        ("Title", incident.title),
        ("Description", incident.description),
        ("Status", incident.status.value),
        ("Severity", incident.severity.value),
        ("Category", incident.category.value),
        ("Park", incident.park_name or str(incident.park_id)),
        ("Asset", incident.asset_name or (str(incident.asset_id) if incident.asset_id else "-")),
        ("Location", incident.location or "-"),
        ("Reporter", incident.reporter_name + (f" <{incident.reporter_email}>" if incident.reporter_email else "")),
        ("Assigned to", str(incident.assigned_to_id) if incident.assigned_to_id is not None else "-"),
        ("Reported", incident.created_at.isoformat()),
        ("Updated", incident.updated_at.isoformat()),
    ]
    if incident.resolution_notes:
        rows.append(("Resolution", incident.resolution_notes))
        rows.append(("Resolved", incident.resolution_date.isoformat() if incident.resolution_date else "-"))
    for label, value in rows:
        table.add_row(label, value)
    return table


def render_detail(detail: IncidentDetail) -> None:
    console.print(render_incident(detail.incident))

    actions = ", ".join(action.value for action in detail.actions) or "none (closed)"
    console.print(f"Available actions: {actions}")

    comments = Table(title="Comments")
    comments.add_column("When")
    comments.add_column("User", justify="right")
    comments.add_column("Comment")
    for comment in detail.comments:
        comments.add_row(comment.created_at.strftime("%Y-%m-%d %H:%M"), str(comment.user_id or "-"), comment.content)
    console.print(comments)

    assignments = Table(title="Assignments")
    assignments.add_column("ID", justify="right")
    assignments.add_column("User", justify="right")
    assignments.add_column("Department")
    assignments.add_column("Status")
    assignments.add_column("Due")
    assignments.add_column("Notes")
    for assignment in detail.assignments:
        assignments.add_row(
            str(assignment.id),
            str(assignment.assigned_to_id),
            assignment.department,
            assignment.status.value,
            assignment.due_date.strftime("%Y-%m-%d") if assignment.due_date else "-",
            assignment.notes or "",
        )
    console.print(assignments)

    history = Table(title="History")
    history.add_column("When")
    history.add_column("Action")
    history.add_column("User", justify="right")
    history.add_column("Details")
    for entry in detail.history:
        history.add_row(entry.created_at.strftime("%Y-%m-%d %H:%M"), entry.action.value, str(entry.user_id or "-"), entry.details)
    console.print(history)


def render_stats(stats: IncidentStats) -> Table:
    table = Table(title="Incident statistics", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(stats.total))
    table.add_row("Open", str(stats.open_count))
    for status in IncidentStatus:
        table.add_row(f"  {status.value}", str(stats.by_status.get(status, 0)))
    for severity in IncidentSeverity:
        table.add_row(f"  {severity.value} severity", str(stats.by_severity.get(severity, 0)))
    table.add_row("Resolution rate", f"{stats.resolution_rate:.0%}")
    average = stats.average_resolution_days
    table.add_row("Average resolution (days)", f"{average:.2f}" if average is not None else "-")
    return table


def build_list_query(args: argparse.Namespace, default_page_size: int) -> IncidentListQuery:
    return IncidentListQuery(
        search=args.search,
        park_id=args.park,
        status=args.status,
        category=args.category,
        severity=args.severity,
        assigned_to_id=args.assignee,
        unassigned_only=args.unassigned,
        sort=SortOrder(field=SortField(args.sort), descending=args.desc),
        page=args.page,
        page_size=args.page_size or default_page_size,
    )


async def run_client_command(args: argparse.Namespace) -> int:
    """Run one desk command against the incidents API; returns the exit code."""
    settings = get_settings()

    async with IncidentApiClient(settings=settings, base_url=args.base_url) as client:
        desk = IncidentDesk(IncidentLifecycleService(client, settings=settings), notifier=ConsoleNotifier(console))
        result: ActionResult

        match args.command:
            case "list":
                try:
                    query = build_list_query(args, settings.default_page_size)
                except PydanticValidationError as e:
                    console.print(f"[yellow]Invalid list options[/yellow]: {e.errors()[0]['msg']}")
                    return 2
                result = await desk.list_incidents(query)
                if result.ok:
                    console.print(render_incidents(result.value))
            case "show":
                result = await desk.open_incident(args.incident_id)
                if result.ok:
                    render_detail(result.value)
            case "report":
                result = await desk.report(
                    args.title,
                    args.description,
                    args.severity,
                    args.park,
                    args.asset,
                    category=args.category,
                    reporter_name=args.reporter,
                    reporter_email=args.email,
                    location=args.location,
                )
            case "start":
                result = await desk.start(args.incident_id)
            case "reject":
                result = await desk.reject(args.incident_id)
            case "assign":
                result = await desk.assign(args.incident_id, args.user_id)
            case "resolve":
                result = await desk.resolve(args.incident_id, args.notes)
            case "comment":
                result = await desk.comment(args.incident_id, args.text)
            case "assign-work":
                result = await desk.create_assignment(args.incident_id, args.user_id, args.department, args.due, args.notes)
            case "update-assignment":
                result = await desk.update_assignment(args.incident_id, args.assignment_id, args.status, args.notes)
            case "stats":
                result = await desk.stats(args.park)
                if result.ok:
                    console.print(render_stats(result.value))
            case "health":
                try:
                    health = await client.health()
                except IncidentDeskError as e:
                    desk.notifier.notify(notification_for_error(e, "Incidents API is not healthy"))
                    return 1
                console.print(f"[green]{health.status}[/green] {health.version} ({health.environment}), {health.incident_count} incidents")
                return 0
            case _:
                raise ValueError(f"Unknown command {args.command}")

    return 0 if result.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point of the ``parks-incidents`` command."""
    args = build_parser().parse_args(argv)
    configure_logging()

    if args.command == "serve":
        from .main import run_server

        run_server(host=args.host, port=args.port, reload=args.reload)
        return 0

    return asyncio.run(run_client_command(args))


if __name__ == "__main__":
    sys.exit(main())
