"""jiracon init — Write the default configuration files."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

console = Console()


def init_config(
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", "-c", help="Directory to create"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing files"),
):
    """Create config.yml and data.yml in the configuration directory.

    Creates:
    - config.yml with account placeholders and preferences
    - data.yml with an empty project list

    Existing files are kept unless --force is given.
    """
    from jiracon.config import CONFIG_FILE_NAME, DATA_FILE_NAME, JiraconConfig, ensure_file

    cfg = JiraconConfig()
    target = Path(config_dir).expanduser() if config_dir is not None else cfg.config_path

    console.print(f"[green]Configuration directory:[/green] {target}")
    for name in (CONFIG_FILE_NAME, DATA_FILE_NAME):
        path = target / name
        if path.exists():
            if not force:
                console.print(f"  [dim]exists[/dim]   {name}")
                continue
            path.unlink()
        ensure_file(target, name)
        console.print(f"  [dim]created[/dim]  {name}")

    console.print()
    console.print("Next steps:")
    console.print(f"  # Edit {target / CONFIG_FILE_NAME} and set your Jira URL, user and API token")
    console.print("  jiracon start")
