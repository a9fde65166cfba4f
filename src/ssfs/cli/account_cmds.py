"""Account and configuration inspection commands."""

import typer
from rich.table import Table

from . import account_app, config_app, console
from ..daemon.storage import build_stores
from ..daemon.utils.config_loader import config_loader


def _load_settings():
    try:
        return config_loader.get_settings()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@account_app.command("show")
def show_account(munchkin_id: str):
    """Show remaining quota and whether an API key is stored."""
    settings = _load_settings()
    documents, _ = build_stores(settings)
    try:
        data = documents.get(settings.subscriptions_collection, munchkin_id)
    except Exception as e:
        console.print(f"[red]Lookup failed: {e}[/red]")
        raise typer.Exit(1)

    if data is None:
        console.print(f"[red]ID not found: {munchkin_id}[/red]")
        raise typer.Exit(1)

    quota = data.get("quota") or 0
    table = Table(title=f"Account {munchkin_id}")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("quota", str(quota))
    table.add_row("leads affordable", f"{quota / settings.cost_per_unit:g}")
    table.add_row("api key", "set" if data.get(settings.api_key_field) is not None else "missing")
    console.print(table)


@config_app.command("show")
def show_config():
    """Print the effective settings (file + environment)."""
    settings = _load_settings()
    table = Table(title="SSFS configuration")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)
