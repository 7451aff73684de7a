from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from . import __version__
from .config import ConfigError
from .events import event_from_dict
from .logging import setup_logging
from .normalize import extract_text
from .parse import parse_message
from .plugins import PluginRegistry
from .settings import BotSettings, load_settings
from .store import BotDatabase

_CONFIG_PATH_OPTION = typer.Option(
    None,
    "--config-path",
    help="Override the default config path.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _exit_config_error(exc: ConfigError, *, code: int = 2) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=code) from exc


def _load(config_path: Path | None) -> BotSettings:
    try:
        settings, _ = load_settings(config_path)
    except ConfigError as exc:
        _exit_config_error(exc)
    return settings


def plugins_cmd(
    config_path: Path | None = _CONFIG_PATH_OPTION,
    plugins_dir: Path | None = typer.Option(
        None, "--plugins-dir", help="Scan this directory instead of the configured one."
    ),
) -> None:
    """Load plugins, report failures and list commands by category."""
    settings = _load(config_path)
    registry = PluginRegistry(plugins_dir or settings.plugins_dir)
    report = registry.load()
    typer.echo(registry.summary(report))
    for tag in sorted(registry.categories):
        typer.echo(f"{tag}:")
        for commands in registry.categories[tag]:
            typer.echo(f"  {', '.join(commands)}")
    if not report.ok:
        raise typer.Exit(code=1)


def init_db_cmd(config_path: Path | None = _CONFIG_PATH_OPTION) -> None:
    """Create the JSON database with an empty skeleton if it does not exist."""
    settings = _load(config_path)
    database = BotDatabase(settings.database_path)
    existed = database.path.exists()
    database.init()
    state = "exists" if existed else "created"
    typer.echo(f"database {state}: {database.path}")


def parse_cmd(
    text: str = typer.Argument(..., help="Message text to parse."),
    config_path: Path | None = _CONFIG_PATH_OPTION,
) -> None:
    """Show how a message text would be parsed with the configured prefixes."""
    settings = _load(config_path)
    event = event_from_dict(
        {"key": {"remoteJid": "0@s.whatsapp.net"}, "message": {"conversation": text}}
    )
    parsed = parse_message(event, settings.prefixes, bot_name=settings.bot_name)
    if parsed is None:
        typer.echo(f"no command in {extract_text(event)!r}")
        raise typer.Exit(code=1)
    typer.echo(f"prefix: {parsed.prefix!r}")
    typer.echo(f"command: {parsed.command_text!r}")
    typer.echo(f"args: {parsed.args!r}")


def create_app() -> typer.Typer:
    app = typer.Typer(
        add_completion=False,
        invoke_without_command=True,
        help="Plugin-driven chat bot runtime.",
    )

    @app.callback()
    def _root(
        ctx: typer.Context,
        version: bool = typer.Option(
            False,
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
        debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    ) -> None:
        setup_logging(debug=debug)
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()

    app.command(name="plugins")(plugins_cmd)
    app.command(name="init-db")(init_db_cmd)
    app.command(name="parse")(parse_cmd)
    return app


def main() -> None:
    app = create_app()
    app()
