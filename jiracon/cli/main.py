"""jiracon command line."""

import typer

from jiracon.cli.commands import config, init, projects, start
from jiracon.version import __version__

app = typer.Typer(name="jiracon", help="Guided Jira workflows in the terminal.", no_args_is_help=True)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"jiracon v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v", callback=_print_version, is_eager=True, help="Show version and exit",
    ),
):
    """Open the console with ``jiracon start``."""


app.command(name="start", help="Open the interactive console")(start.start_console)
app.command(name="init", help="Write the default config.yml and data.yml")(init.init_config)
app.command(name="config", help="Show resolved configuration")(config.config_show)
app.command(name="projects", help="List the saved projects")(projects.projects_list)
