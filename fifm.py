#!/usr/bin/env python3
"""
FIFM - Friendly Interactive File Manager

Main entry point for the FIFM command line.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core import AuditLogger, ConfigError, FifmError, ListingError, __version__, load_config
from modules.file_manager import Session, list_directory


console = Console()

HELP_TEXT = (
    "j/n -> down    k/p -> up    enter/o -> open directory\n"
    "c -> copy    x -> cut    v -> paste    d -> delete (trash)\n"
    "u -> unselect    ? -> help    q -> quit"
)


def get_config(ctx: click.Context):
    """Load the configuration named on the command line."""
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        raise click.ClickException(str(e))


def render_snapshot(session: Session) -> Table:
    """Build the listing table with the selected row highlighted."""
    table = Table(
        title=Text(session.status_message, style="italic blue"),
        show_header=False,
        border_style="bold cyan",
        expand=True,
    )
    table.add_column("", width=3, no_wrap=True)
    table.add_column("Entry", style="bright_cyan")

    for i, row in enumerate(session.snapshot.detail_rows):
        if i == session.selection:
            table.add_row(">>", Text(row), style="bold on black")
        else:
            table.add_row("", Text(row))
    return table


@click.group()
@click.version_option(version=__version__, prog_name="fifm")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to a fifm.yaml configuration file.")
@click.pass_context
def fifm(ctx, config_path):
    """
    FIFM - Friendly Interactive File Manager

    Browse a directory, copy, cut, paste and trash entries.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@fifm.command("ls")
@click.argument("path", type=click.Path(file_okay=False), default=".")
@click.pass_context
def ls(ctx, path):
    """List a directory the way the browser shows it."""
    config = get_config(ctx)
    try:
        snapshot = list_directory(path, include_parent_entry=config.show_parent_entry)
    except ListingError as e:
        raise click.ClickException(str(e))

    table = Table(title=snapshot.path)
    table.add_column("Kind", style="dim", no_wrap=True)
    table.add_column("Details")
    for entry in snapshot.entries:
        table.add_row(entry.kind.value, Text(entry.detail_row))
    console.print(table)


@fifm.command()
@click.argument("path", type=click.Path(file_okay=False), default=".")
@click.pass_context
def browse(ctx, path):
    """Start an interactive browsing session."""
    config = get_config(ctx)
    try:
        session = Session(start_path=path, config=config)
    except ListingError as e:
        raise click.ClickException(str(e))

    console.print(Panel.fit(
        "[bold blue]FIFM - Friendly Interactive File Manager[/bold blue]\n"
        f"[dim]{HELP_TEXT}[/dim]",
        title="Manual"
    ))

    actions = {
        "j": session.move_cursor_next,
        "n": session.move_cursor_next,
        "k": session.move_cursor_previous,
        "p": session.move_cursor_previous,
        "u": session.clear_selection,
        "c": session.begin_copy,
        "x": session.begin_cut,
        "v": session.paste_if_pending,
        "d": session.delete_selected,
        "o": session.activate_selected,
        "": session.activate_selected,
    }

    while True:
        console.print(render_snapshot(session))
        try:
            key = console.input("[bold green]fifm>[/bold green] ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Goodbye![/dim]")
            break

        if key in ("q", "quit", "exit"):
            console.print("[dim]Goodbye![/dim]")
            break
        if key == "?":
            console.print(f"[dim]{HELP_TEXT}[/dim]")
            continue

        action = actions.get(key)
        if action is None:
            console.print(f"[red]Unknown key:[/red] {key}")
            continue

        try:
            action()
        except ListingError as e:
            console.print(f"[red]Error:[/red] {e}")
            break

        if session.logger.last_write_error is not None:
            console.print(f"[yellow]Audit log not written:[/yellow] {session.logger.last_write_error}")


@fifm.command()
@click.option("--limit", default=20, show_default=True, help="Number of entries to show.")
@click.option("--failed", is_flag=True, help="Only show failed or denied actions.")
@click.pass_context
def audit(ctx, limit, failed):
    """View the audit log."""
    config = get_config(ctx)
    logger = AuditLogger(log_path=config.audit_log_path, enabled=config.audit_enabled)
    entries = logger.get_failed_actions(limit=limit) if failed else logger.get_recent(limit=limit)

    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return

    table = Table(title="Recent Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Type")
    table.add_column("Action")
    table.add_column("Status")

    for entry in entries:
        time_str = entry.timestamp.split("T")[1].split(".")[0] if "T" in entry.timestamp else entry.timestamp

        status_str = entry.status
        if entry.status == "executed":
            status_str = f"[green]{entry.status}[/green]"
        elif entry.status in ("failed", "denied"):
            status_str = f"[red]{entry.status}[/red]"

        description = entry.action_description
        if len(description) > 60:
            description = description[:60] + "..."

        table.add_row(time_str, entry.action_type, Text(description), status_str)

    console.print(table)


@fifm.group("config")
def config_group():
    """Inspect and edit FIFM settings."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Show the effective configuration."""
    config = get_config(ctx)
    console.print(f"\n[bold]Config file:[/bold] {config.source_path}")
    console.print(f"  show_parent_entry: {config.show_parent_entry}")
    console.print(f"  collision_naming: {config.collision_naming}")
    console.print(f"  navigation_errors: {config.navigation_errors}")
    console.print(f"  audit: {'enabled' if config.audit_enabled else 'disabled'} ({config.audit_log_path})")
    console.print("\n[bold]Protected entries:[/bold]")
    for name in config.protected_names:
        console.print(f"  {name}")


@config_group.command("protect")
@click.argument("name")
@click.pass_context
def config_protect(ctx, name: str):
    """Protect an entry name from copy, cut, paste and delete."""
    config = get_config(ctx)
    if name in config.protected_names:
        console.print(f"[dim]Already protected:[/dim] {name}")
        return
    config.protected_names.append(name)
    try:
        path = config.save()
    except OSError as e:
        raise click.ClickException(f"Cannot write config: {e}")
    console.print(f"[green]Protected:[/green] {name} [dim]({path})[/dim]")


def main():
    try:
        fifm(obj={})
    except FifmError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
