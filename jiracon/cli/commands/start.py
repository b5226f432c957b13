"""jiracon start — Open the interactive console."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

console = Console()
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(cfg, debug: bool = False) -> None:
    """Log to the log file, or to stderr at DEBUG level with --debug.

    Prompts own the terminal, so nothing is logged to it unless asked for.
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, force=True)
        return
    log_path = cfg.log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format=LOG_FORMAT,
        filename=str(log_path),
        force=True,
    )


def build_console_app(cfg, transport=None):
    """Wire the console from settings + config.yml. Returns (app, gateway)."""
    from jiracon.api import BulkOrchestrator, JiraService, RequestGateway
    from jiracon.app import ConsoleApp
    from jiracon.callbacks import LoggingCallback
    from jiracon.config import (
        CONFIG_FILE_NAME, DATA_FILE_NAME, ProjectStore, ensure_file, load_config_yaml, resolve_account,
    )
    from jiracon.exceptions import ConfigError
    from jiracon.input import FieldValueResolver, QuestionaryPrompts
    from jiracon.tasks import TaskServices

    config_file = ensure_file(cfg.config_path, CONFIG_FILE_NAME)
    file_config = load_config_yaml(config_file)
    account = resolve_account(cfg, file_config)
    if not account.base_url:
        raise ConfigError(
            f"No Jira URL configured. Set account.base_url in {config_file} or JIRACON_BASE_URL.",
            path=str(config_file),
        )

    store = ProjectStore(ensure_file(cfg.config_path, DATA_FILE_NAME)).load()

    gateway = RequestGateway(
        account.base_url,
        username=account.username,
        password=account.password,
        timeout=cfg.request_timeout,
        console=console,
        transport=transport,
    )
    bulk = BulkOrchestrator(gateway, console=console)
    prompts = QuestionaryPrompts(
        page_size=file_config.preferences.page_size or cfg.page_size,
        score_cutoff=cfg.fuzzy_score_cutoff,
    )
    services = TaskServices(
        jira=JiraService(gateway, bulk),
        prompts=prompts,
        fields=FieldValueResolver(gateway, prompts),
        console=console,
        assignee_roster=[entry.model_dump() for entry in file_config.preferences.assignee_roster],
        callbacks=[LoggingCallback()],
    )
    logger.info("Console ready for %s (%d saved project(s))", account.base_url, len(store.projects))
    return ConsoleApp(services, store, config_file=config_file), gateway


async def _execute(cfg) -> None:
    app, gateway = build_console_app(cfg)
    async with gateway:
        await app.run()
    console.print("[dim]Bye.[/dim]")


def start_console(
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", "-c", help="Directory holding config.yml"),
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level to stderr"),
):
    """Open the interactive console.

    Reads account settings from config.yml (seeded on first run) and the
    JIRACON_* environment variables, which take precedence.

    Example:
        jiracon start
        jiracon start --config-dir ./work --debug
    """
    from jiracon.config import JiraconConfig

    cfg = JiraconConfig()
    if config_dir is not None:
        cfg.config_dir = str(config_dir)
    configure_logging(cfg, debug or cfg.debug)

    try:
        asyncio.run(_execute(cfg))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise typer.Exit(1)
    except Exception as exc:
        logger.exception("Console stopped")
        console.print(f"\n[red]Error:[/red] {exc}")
        raise typer.Exit(1)
