"""jiracon config — Show resolved jiracon configuration."""

from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


def mask(val: str) -> str:
    s = str(val)
    if not s:
        return ""
    if len(s) <= 8:
        return "***"
    return s[:4] + "…" + "***"


def config_show(
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", "-c", help="Directory holding config.yml"),
):
    """Show the resolved jiracon configuration.

    Merges environment variables, .env and config.yml the way
    `jiracon start` does. The password / API token is masked.

    Example:
        jiracon config
    """
    from jiracon.config import CONFIG_FILE_NAME, JiraconConfig, load_config_yaml, resolve_account
    from jiracon.exceptions import ConfigError

    cfg = JiraconConfig()
    if config_dir is not None:
        cfg.config_dir = str(config_dir)

    config_file = cfg.config_path / CONFIG_FILE_NAME
    try:
        file_config = load_config_yaml(config_file) if config_file.exists() else load_config_yaml()
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    account = resolve_account(cfg, file_config)

    table = Table(
        box=box.ROUNDED,
        header_style="bold dim",
        show_lines=False,
        title="[bold]jiracon Configuration[/bold]",
    )
    table.add_column("Key", style="cyan", width=24)
    table.add_column("Value", width=48)
    table.add_column("Source", style="dim", width=30)

    def source(attr: str, env_var: str) -> str:
        return env_var if getattr(cfg, attr) else "config.yml"

    sections = [
        ("Account", [
            ("base_url", account.base_url, source("base_url", "JIRACON_BASE_URL")),
            ("username", account.username, source("username", "JIRACON_USERNAME")),
            ("password", mask(account.password), source("password", "JIRACON_PASSWORD")),
        ]),
        ("Preferences", [
            ("page_size", file_config.preferences.page_size or cfg.page_size, "config.yml / JIRACON_PAGE_SIZE"),
            ("assignee_roster", ", ".join(e.name for e in file_config.preferences.assignee_roster),
             "config.yml"),
            ("fuzzy_score_cutoff", cfg.fuzzy_score_cutoff, "JIRACON_FUZZY_SCORE_CUTOFF"),
        ]),
        ("App", [
            ("config_dir", cfg.config_path, "JIRACON_CONFIG_DIR"),
            ("log_file", cfg.log_path, "JIRACON_LOG_FILE"),
            ("log_level", cfg.log_level, "JIRACON_LOG_LEVEL"),
            ("request_timeout", cfg.request_timeout, "JIRACON_REQUEST_TIMEOUT"),
        ]),
    ]

    first = True
    for section_name, rows in sections:
        if not first:
            table.add_row("", "", "")
        first = False
        table.add_row(f"[bold dim]── {section_name} ──[/bold dim]", "", "")
        for key, value, origin in rows:
            display = "[dim](not set)[/dim]" if value in (None, "") else str(value)
            table.add_row(f"  {key}", display, origin)

    console.print()
    console.print(table)
    console.print()
    if not config_file.exists():
        console.print("[dim]No config.yml yet; showing defaults. Run `jiracon init` to create one.[/dim]")
    else:
        console.print(f"[dim]Source: {config_file} + environment variables (prefix: JIRACON_)[/dim]")
