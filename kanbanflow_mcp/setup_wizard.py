"""Interactive first-run setup.

Writes the MCP host configuration (``.cursor/mcp.json`` in the current
project) so the host can launch this server with the KanbanFlow API token.
"""

import json
import logging
import shutil
import sys
import time
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.prompt import Prompt

logger = logging.getLogger(__name__)

SERVER_NAME = "kanban-flow"
EXECUTABLE_NAME = "kanbanflow-mcp"
TOKEN_ENV_VAR = "KANBAN_API_TOKEN"


def detect_launch_command() -> dict[str, Any]:
    """Work out how the MCP host should start this server.

    Prefers the installed console script; falls back to running the module
    with the current interpreter.
    """
    executable = shutil.which(EXECUTABLE_NAME)
    if executable:
        return {"command": executable, "args": []}
    return {"command": sys.executable, "args": ["-m", "kanbanflow_mcp.mcp_server"]}


def _atomic_write(file_path: Path, data: dict) -> None:
    """Atomically write data to file using temp file + rename."""
    temp_file = file_path.with_suffix(".tmp")
    temp_file.write_text(json.dumps(data, indent=2))
    temp_file.replace(file_path)


def _load_existing(config_path: Path) -> dict[str, Any] | None:
    """Load an existing host config, or None if missing or unreadable."""
    if not config_path.exists():
        return None
    try:
        data = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return None
    return data if isinstance(data, dict) else None


def write_host_config(
    project_path: Path,
    launch_command: dict[str, Any],
    api_token: str,
    console: Console | None = None,
) -> Path:
    """
    Add or replace this server's entry in ``<project>/.cursor/mcp.json``.

    Other configured servers and top-level keys are preserved. When the
    existing file already lists servers it is first copied to
    ``mcp.json.backup.<epoch-ms>``.

    Args:
        project_path: Project root directory
        launch_command: {"command": ..., "args": [...]} for starting the server
        api_token: KanbanFlow API token, stored in the entry's env
        console: Console for progress messages

    Returns:
        Path of the written config file
    """
    console = console or Console()
    config_dir = project_path / ".cursor"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "mcp.json"

    existing = _load_existing(config_path)
    servers = dict((existing or {}).get("mcpServers") or {})

    if servers:
        console.print(f"Found existing MCP configuration with {len(servers)} server(s)")
        if SERVER_NAME in servers:
            console.print(f"Updating existing {SERVER_NAME} configuration...")
        else:
            console.print(f"Adding {SERVER_NAME} to existing configuration...")
        backup_path = config_path.with_name(f"{config_path.name}.backup.{int(time.time() * 1000)}")
        try:
            shutil.copyfile(config_path, backup_path)
            console.print(f"Created backup: [cyan]{backup_path.name}[/cyan]")
        except OSError as e:
            console.print(f"[yellow]Could not create backup file: {e}[/yellow]")
    elif existing is None:
        console.print("Creating new MCP configuration file...")

    servers[SERVER_NAME] = {**launch_command, "env": {TOKEN_ENV_VAR: api_token}}
    config = {**(existing or {}), "mcpServers": servers}
    _atomic_write(config_path, config)
    return config_path


def run_setup_wizard(project_path: Path | None = None) -> int:
    """
    Prompt for the API token and write the host configuration.

    Returns:
        Process exit code
    """
    console = Console()
    console.print("\n[bold]KanbanFlow MCP Server Setup Wizard[/bold]\n")

    launch_command = detect_launch_command()
    console.print(f"Launch command: [cyan]{' '.join([launch_command['command'], *launch_command['args']])}[/cyan]")

    try:
        api_token = Prompt.ask("Enter your KanbanFlow API token (get it from kanbanflow.com/api)", password=True)
    except (KeyboardInterrupt, EOFError):
        api_token = ""
    if not api_token or not api_token.strip():
        console.print("[red]Setup cancelled[/red]")
        return 0

    try:
        config_path = write_host_config(project_path or Path.cwd(), launch_command, api_token.strip(), console)
    except OSError as e:
        console.print(f"\n[red]Setup failed: {e}[/red]")
        return 1

    console.print("\n[green]Setup complete![/green]")
    console.print(f"Configuration: [cyan]{config_path}[/cyan]")
    console.print("Restart your editor to use the KanbanFlow tools.")
    console.print("Your existing MCP servers (if any) are preserved.")
    return 0
