"""Daemon lifecycle commands: start, stop, status."""

import sys
import signal
import subprocess
import os

import typer

from . import daemon_app, console, SSFS_DIR, PID_FILE, LOG_DIR, get_daemon_pid


@daemon_app.command("start")
def start_daemon(port: int = 8080, host: str = "127.0.0.1", reload: bool = False):
    """Start the SSFS intake daemon."""
    SSFS_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    pid = get_daemon_pid()
    if pid:
        try:
            os.kill(pid, 0)
            console.print(f"[red]Daemon already running (PID {pid})[/red]")
            return
        except ProcessLookupError:
            console.print("[yellow]Stale PID file found, removing...[/yellow]")
            PID_FILE.unlink()

    if not (os.getenv("SSFS_SERVICE_CALLBACK_URL") or "").strip():
        console.print("[yellow]SSFS_SERVICE_CALLBACK_URL is not set; notifications will fail.[/yellow]")

    console.print(f"[green]Starting SSFS daemon on {host}:{port}...[/green]")

    env = os.environ.copy()
    env["SSFS_LOG_DIR"] = str(LOG_DIR)

    cmd = [
        sys.executable, "-m", "uvicorn",
        "ssfs.daemon.app:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")

    log_file = open(LOG_DIR / "daemon.out", "a")
    proc = subprocess.Popen(cmd, env=env, stdout=log_file, stderr=subprocess.STDOUT)

    PID_FILE.write_text(str(proc.pid))

    console.print(f"Daemon started with PID {proc.pid}")
    console.print(f"Logs: {LOG_DIR}/daemon.out")


@daemon_app.command("stop")
def stop_daemon():
    """Stop the SSFS daemon."""
    pid = get_daemon_pid()
    if not pid:
        console.print("[red]Daemon not running (PID file not found)[/red]")
        return

    try:
        os.kill(pid, signal.SIGTERM)
        console.print(f"[green]Stopped daemon (PID {pid})[/green]")
        if PID_FILE.exists():
            PID_FILE.unlink()
    except ProcessLookupError:
        console.print("[yellow]Daemon process not found, cleaning up PID file[/yellow]")
        if PID_FILE.exists():
            PID_FILE.unlink()


@daemon_app.command("status")
def status_daemon():
    """Check daemon status."""
    pid = get_daemon_pid()
    if pid:
        try:
            os.kill(pid, 0)
            console.print(f"[green]Daemon is running (PID {pid})[/green]")
            console.print(f"Logs: {LOG_DIR}")
            return
        except ProcessLookupError:
            pass

    console.print("[red]Daemon is NOT running[/red]")
    raise typer.Exit(1)
