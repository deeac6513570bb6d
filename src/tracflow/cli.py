"""CLI entry point for tracflow.

Every command loads the connection settings (``-c`` or auto-detected
tracflow.yaml, plus TRAC_* environment overrides), talks to the server and
prints a short result.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from tracflow.config import ConfigError, find_config, load_config
from tracflow.logging import get_logger, setup_logging
from tracflow.trac import Ticket, Trac, TracError

logger = get_logger("cli")


@contextmanager
def report_errors() -> Iterator[None]:
    """Turn configuration and Trac errors into a message and exit status 1."""
    try:
        yield
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except TracError as e:
        click.echo(f"Trac error: {e}", err=True)
        sys.exit(1)


def connect(ctx: click.Context) -> Trac:
    """Build a Trac client from the group options."""
    config_path = ctx.obj.get("config_path")
    if config_path is None:
        config_path = find_config()
    logger.debug("Using configuration %s", config_path or "from environment")
    return Trac(load_config(config_path), transport=ctx.obj.get("transport"))


def fetch(ctx: click.Context, ticket_id: int) -> tuple[Trac, Ticket]:
    trac = connect(ctx)
    return trac, trac.get_ticket(ticket_id)


comment_option = click.option("-m", "--message", "comment", default=None, help="Ticket comment")


@click.group()
@click.version_option(package_name="tracflow")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to tracflow.yaml (auto-detected if not specified)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """tracflow - drive Trac tickets through the team workflow."""
    # Errors reach the user through report_errors; console logs only with -v
    setup_logging(level="DEBUG" if verbose else None, console=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
@click.argument("ticket_id", type=int)
@click.option("--detail", is_flag=True, help="Include the description")
@click.pass_context
def show(ctx: click.Context, ticket_id: int, detail: bool) -> None:
    """Print a ticket summary."""
    with report_errors():
        _, ticket = fetch(ctx, ticket_id)
        click.echo(ticket.format_detail() if detail else ticket.format_terse())


@main.command()
@click.pass_context
def fields(ctx: click.Context) -> None:
    """List the ticket fields defined on the server."""
    with report_errors():
        for ticket_field in connect(ctx).list_fields():
            line = f"{ticket_field.name} ({ticket_field.type})"
            if ticket_field.default is not None:
                line += f" default={ticket_field.default}"
            if ticket_field.options is not None:
                line += f" options: {', '.join(ticket_field.options)}"
            click.echo(line)


@main.command()
@click.argument("ticket_id", type=int)
@click.pass_context
def actions(ctx: click.Context, ticket_id: int) -> None:
    """List the workflow actions available on a ticket."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        available = ticket.actions(trac)
        if not available:
            click.echo("No actions available")
        for action in available:
            click.echo(f"{action.name}: {action.description}")


@main.command()
@click.argument("ticket_id", type=int)
@click.pass_context
def url(ctx: click.Context, ticket_id: int) -> None:
    """Print the browser URL of a ticket."""
    with report_errors():
        click.echo(connect(ctx).ticket_url(ticket_id))


@main.command("set-reviewer")
@click.argument("ticket_id", type=int)
@click.argument("reviewer")
@click.pass_context
def set_reviewer(ctx: click.Context, ticket_id: int, reviewer: str) -> None:
    """Set the reviewer of a ticket."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.set_reviewer(trac, reviewer)
        click.echo(f"Reviewer of #{ticket_id} set to {reviewer}")


@main.command("request-review")
@click.argument("ticket_id", type=int)
@click.argument("reviewer")
@click.pass_context
def request_review(ctx: click.Context, ticket_id: int, reviewer: str) -> None:
    """Assign a reviewer and send the ticket to peer review."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.request_review(trac, reviewer)
        click.echo(f"Sent #{ticket_id} to {reviewer} for review")


@main.command("review-pass")
@click.argument("ticket_id", type=int)
@comment_option
@click.pass_context
def review_pass(ctx: click.Context, ticket_id: int, comment: str | None) -> None:
    """Pass peer review."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.review_pass(trac, comment)
        click.echo(f"Review of #{ticket_id} passed")


@main.command("review-fail")
@click.argument("ticket_id", type=int)
@click.argument("reason")
@click.pass_context
def review_fail(ctx: click.Context, ticket_id: int, reason: str) -> None:
    """Reject the change under review with a REASON."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.review_fail(trac, reason)
        click.echo(f"Review of #{ticket_id} failed")


@main.command()
@click.argument("ticket_id", type=int)
@click.option("--no-estimate", is_flag=True, help="Skip the estimation step")
@comment_option
@click.pass_context
def accept(ctx: click.Context, ticket_id: int, no_estimate: bool, comment: str | None) -> None:
    """Take ownership of a ticket."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.accept(trac, estimate_needed=not no_estimate, comment=comment)
        click.echo(f"Accepted #{ticket_id}")


@main.command()
@click.argument("ticket_id", type=int)
@comment_option
@click.pass_context
def release(ctx: click.Context, ticket_id: int, comment: str | None) -> None:
    """Give a ticket up."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.release(trac, comment)
        click.echo(f"Released #{ticket_id}")


@main.command()
@click.argument("ticket_id", type=int)
@comment_option
@click.pass_context
def reopen(ctx: click.Context, ticket_id: int, comment: str | None) -> None:
    """Reopen a closed ticket."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.reopen(trac, comment)
        click.echo(f"Reopened #{ticket_id}")


@main.command()
@click.argument("ticket_id", type=int)
@comment_option
@click.pass_context
def close(ctx: click.Context, ticket_id: int, comment: str | None) -> None:
    """Resolve a ticket."""
    with report_errors():
        trac, ticket = fetch(ctx, ticket_id)
        ticket.close(trac, comment)
        click.echo(f"Closed #{ticket_id}")


if __name__ == "__main__":
    main()
