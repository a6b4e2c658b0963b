"""Routing Policy Sync CLI - Main entry point."""

import logging
import sys
from typing import Optional

import click

from .. import __version__
from ..config import get_settings
from ..exceptions import PolicySyncError, ValidationError
from ..graph import PolicyGraphValidator
from ..sync import summarize
from .files import load_graph_file, save_graph_file
from .output import (
    print_clone_report,
    print_error,
    print_issues,
    print_subscriptions,
    print_success,
    print_warning,
)
from .session import open_session


@click.group()
@click.version_option(version=__version__, prog_name="routing-policy-sync")
@click.option("--token", envvar="ROUTING_POLICY_TOKEN", help="Bearer token (JWT) for the remote services")
@click.option("--org-id", envvar="ROUTING_POLICY_ORG_ID", type=int, help="Organization ID")
@click.option("--output", "-o", type=click.Choice(["table", "json", "yaml"]), default="table",
              help="Output format")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, token: Optional[str], org_id: Optional[int], output: str, debug: bool):
    """Routing Policy Sync - Publish routing policy graphs.

    \b
    Examples:
      routing-policy-sync validate policy.yaml
      routing-policy-sync pull 4711 -f policy.yaml
      routing-policy-sync push policy.yaml
      routing-policy-sync events 4711
      routing-policy-sync clone policy.yaml copy.yaml --name "Copy"
    """
    ctx.ensure_object(dict)

    settings = get_settings()
    level = logging.DEBUG if debug or settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    ctx.obj["token"] = token
    ctx.obj["org_id"] = org_id
    ctx.obj["output"] = output
    ctx.obj["debug"] = debug


@cli.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx: click.Context, path: str):
    """Validate a local policy graph file."""
    try:
        graph = load_graph_file(path)
    except PolicySyncError as e:
        print_error(f"Failed to load {path}: {e}")
        sys.exit(1)

    result = PolicyGraphValidator(registry=graph.registry).validate(graph)
    if result.issues:
        print_issues(result.issues, ctx.obj["output"])

    if not result.valid:
        print_error(f"{len(result.errors)} error(s) found")
        sys.exit(1)
    print_success(f"Policy '{graph.name}' is valid")


@cli.command("pull")
@click.argument("policy_id", type=int)
@click.option("--file", "-f", "path", default=None, help="File to write (default: policy-<id>.json)")
@click.pass_context
def pull(ctx: click.Context, policy_id: int, path: Optional[str]):
    """Download a policy into a local graph file."""
    path = path or f"policy-{policy_id}.json"
    try:
        with open_session(ctx.obj) as session:
            graph = session.persistence.load(policy_id)
    except PolicySyncError as e:
        print_error(f"Failed to load policy {policy_id}: {e}")
        sys.exit(1)

    save_graph_file(graph, path)
    print_success(f"Wrote policy {policy_id} ({len(graph.nodes)} nodes) to {path}")


@cli.command("push")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def push(ctx: click.Context, path: str):
    """Save a local graph file to the policy engine.

    Creates the policy when the file has no id. The file is rewritten with
    the policy id and event subscription ids afterwards.
    """
    try:
        graph = load_graph_file(path)
        with open_session(ctx.obj) as session:
            saved = session.persistence.save(graph)
            report = session.persistence.last_report
    except ValidationError as e:
        print_issues(e.issues, ctx.obj["output"])
        print_error("Policy is invalid, nothing was saved")
        sys.exit(1)
    except PolicySyncError as e:
        print_error(f"Failed to save policy: {e}")
        sys.exit(1)

    save_graph_file(graph, path)
    print_success(f"Saved policy {saved.id} ({graph.name})")

    if report is None:
        print_warning("Event subscriptions were not synced; they will be on the next push")
    else:
        print_success(f"Event subscriptions: {summarize(report)}")
        for failure in report.failures:
            print_warning(str(failure))


@cli.command("delete")
@click.argument("policy_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx: click.Context, policy_id: int, yes: bool):
    """Delete a policy and its event subscriptions."""
    if not yes:
        click.confirm(f"Delete policy {policy_id} and its event subscriptions?", abort=True)

    try:
        with open_session(ctx.obj) as session:
            report = session.persistence.delete(policy_id)
    except PolicySyncError as e:
        print_error(f"Failed to delete policy {policy_id}: {e}")
        sys.exit(1)

    print_success(f"Deleted policy {policy_id} ({len(report.deleted)} event subscription(s) removed)")
    for failure in report.failures:
        print_warning(str(failure))


@cli.command("clone")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("destination", type=click.Path(dir_okay=False))
@click.option("--name", "-n", default=None, help="Name of the copy (default: same name)")
@click.pass_context
def clone(ctx: click.Context, source: str, destination: str, name: Optional[str]):
    """Copy a local policy graph file as a new, unsaved policy."""
    try:
        graph = load_graph_file(source)
    except PolicySyncError as e:
        print_error(f"Failed to load {source}: {e}")
        sys.exit(1)

    duplicate, report = graph.clone(name)
    save_graph_file(duplicate, destination)

    print_success(f"Wrote '{duplicate.name}' ({len(duplicate.nodes)} nodes) to {destination}")
    print_clone_report(report, duplicate.name)


@cli.command("events")
@click.argument("policy_id", type=int)
@click.pass_context
def events(ctx: click.Context, policy_id: int):
    """List the event subscriptions of a policy."""
    try:
        with open_session(ctx.obj) as session:
            subscriptions = session.events.list_for_policy(session.organization_id, policy_id)
    except PolicySyncError as e:
        print_error(f"Failed to list event subscriptions: {e}")
        sys.exit(1)

    print_subscriptions(subscriptions, ctx.obj["output"])


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
