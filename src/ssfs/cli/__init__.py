"""SSFS CLI — modular command package."""

from pathlib import Path

import typer
from rich.console import Console

# ── Shared state ────────────────────────────────────────────────────────────

app = typer.Typer(help="SSFS - quota-metered webhook intake")
console = Console()

# Sub-command groups
daemon_app = typer.Typer()
account_app = typer.Typer()
config_app = typer.Typer()

app.add_typer(daemon_app, name="daemon", help="Manage the SSFS intake daemon process")
app.add_typer(account_app, name="account", help="Inspect subscription accounts")
app.add_typer(config_app, name="config", help="Inspect effective configuration")

# ── Path constants ──────────────────────────────────────────────────────────

SSFS_DIR = Path.home() / ".ssfs"
PID_FILE = SSFS_DIR / "ssfs.pid"
LOG_DIR = SSFS_DIR / "logs"


# ── Shared helpers ──────────────────────────────────────────────────────────

def get_daemon_pid():
    if PID_FILE.exists():
        try:
            return int(PID_FILE.read_text().strip())
        except ValueError:
            return None
    return None


# ── Register submodule commands (import triggers decorator registration) ────

from . import daemon_cmds   # noqa: E402, F401
from . import account_cmds  # noqa: E402, F401
