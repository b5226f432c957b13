"""jiracon projects — List the saved projects."""

from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


def projects_list(
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", "-c", help="Directory holding data.yml"),
):
    """List the projects saved from "Manage Projects".

    Example:
        jiracon projects
    """
    from jiracon.config import DATA_FILE_NAME, JiraconConfig, ProjectStore
    from jiracon.exceptions import ConfigError

    cfg = JiraconConfig()
    if config_dir is not None:
        cfg.config_dir = str(config_dir)

    try:
        store = ProjectStore(cfg.config_path / DATA_FILE_NAME).load()
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if not store.projects:
        console.print("[yellow]No projects saved.[/yellow] Add some with `jiracon start` → Manage Projects.")
        return

    type_color = {"scrum": "green", "kanban": "blue"}

    table = Table(
        box=box.ROUNDED,
        header_style="bold dim",
        show_lines=False,
        title=f"[bold]{len(store.projects)} Saved Projects[/bold]",
    )
    table.add_column("Key", style="cyan", width=12)
    table.add_column("Name", width=40)
    table.add_column("Type", width=8)
    table.add_column("Id", style="dim", justify="right", width=10)

    for project in store.projects:
        kind = project.type.value
        color = type_color.get(kind, "white")
        table.add_row(project.key, project.name, f"[{color}]{kind}[/{color}]", project.id)

    console.print(table)
