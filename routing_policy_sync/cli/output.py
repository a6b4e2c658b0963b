"""Output formatting utilities."""

import json
from typing import Any, List

import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from ..models import CloneReport, EventSubscription, ValidationIssue

console = Console()


def print_data(data: Any, format_type: str) -> None:
    """Print structured data as JSON or YAML."""
    if format_type == "yaml":
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    else:
        text = json.dumps(data, indent=2, default=str)
    console.print(Syntax(text, format_type, theme="monokai", line_numbers=False))


def print_subscriptions(subscriptions: List[EventSubscription], format_type: str = "table") -> None:
    """Print the event subscriptions of a policy."""
    if format_type != "table":
        print_data([s.to_dict() for s in subscriptions], format_type)
        return

    if not subscriptions:
        console.print("[dim]No event subscriptions[/dim]")
        return

    table = Table(title="Event Subscriptions", show_header=True, header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Event Type")
    table.add_column("Enabled")
    table.add_column("Filters", justify="right")
    table.add_column("Updated")

    for subscription in subscriptions:
        table.add_row(
            subscription.id,
            subscription.name,
            subscription.event_type,
            "[green]✓[/green]" if subscription.enabled else "[red]✗[/red]",
            str(len(subscription.filters)),
            subscription.updated_at or "-",
        )

    console.print(table)


def print_issues(issues: List[ValidationIssue], format_type: str = "table") -> None:
    """Print validation issues."""
    if format_type != "table":
        print_data([i.to_dict() for i in issues], format_type)
        return

    table = Table(title="Validation Issues", show_header=True, header_style="bold cyan")
    table.add_column("Severity")
    table.add_column("Message")
    table.add_column("Node")
    table.add_column("Item")

    for issue in issues:
        color = "red" if issue.severity == "error" else "yellow"
        table.add_row(
            f"[{color}]{issue.severity}[/{color}]",
            issue.message,
            issue.node_id or "-",
            issue.item_id or "-",
        )

    console.print(table)


def print_clone_report(report: CloneReport, policy_name: str) -> None:
    """Print the references removed while cloning."""
    if not report.messages:
        console.print("[dim]No organization-specific references removed[/dim]")
        return
    console.print(report.to_text(policy_name), markup=False)


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]![/yellow] {message}")
