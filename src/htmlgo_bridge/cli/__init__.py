from __future__ import annotations

import asyncio
import dataclasses
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, dump_config, load_config
from ..controller import create_controller
from ..editors import TextBuffer
from ..environment import HostIdentity, resolve_environment
from ..models import ConversionDirection
from ..prefixes import PrefixField
from ..settings import get_settings
from ..utils import atomic_write, normalize_newlines
from ..validation import OutcomeKind, prevalidate

console = Console()

app = typer.Typer(help="Client for the HTML/Go conversion service")


def _load_config(path: Path | None) -> AppConfig:
    settings = get_settings()
    config = load_config(path or settings.config_path)
    if settings.env:
        config.environment = settings.env
    return config


def _configure_logging(verbose: bool, config: AppConfig) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log.level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def convert(
    file: Path,
    direction: ConversionDirection = typer.Option(ConversionDirection.TO_CODE, "--direction", "-d"),
    package_prefix: str | None = typer.Option(None, "--package-prefix", help="Prefix for HTML elements"),
    vuetify_prefix: str | None = typer.Option(None, "--vuetify-prefix", help="Prefix for Vuetify components"),
    vuetify_x_prefix: str | None = typer.Option(None, "--vuetify-x-prefix", help="Prefix for VuetifyX components"),
    children_mode: bool = typer.Option(False, "--children-mode", help="Emit explicit Children() calls"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the result to a file"),
    env: str | None = typer.Option(None, "--env", help="Force 'local' or 'prod'"),
    host: str = typer.Option("localhost", "--host", help="Host used to classify the environment"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    cfg = _load_config(config)
    _configure_logging(verbose, cfg)
    environment = resolve_environment(env or cfg.environment, HostIdentity(hostname=host))
    # one-shot run: the explicit convert below is the only dispatch
    cfg.editor = dataclasses.replace(cfg.editor, auto_convert=False)
    markup, code = TextBuffer("markup"), TextBuffer("code")
    controller = create_controller(
        cfg,
        environment=environment,
        markup_editor=markup,
        code_editor=code,
        service_url=get_settings().service_url,
    )
    for field, value in (
        (PrefixField.PACKAGE, package_prefix),
        (PrefixField.PRIMARY, vuetify_prefix),
        (PrefixField.EXTENDED, vuetify_x_prefix),
    ):
        if value is not None:
            controller.prefixes.set(field, value)
    controller.options.children_mode = children_mode or controller.options.children_mode
    controller.editor(direction.source).set_text(file.read_text(encoding="utf-8"))

    outcome = asyncio.run(controller.convert(direction))
    controller.close()
    if outcome is None:
        console.print("[yellow]Conversion dropped[/yellow]: another conversion is in progress")
        raise typer.Exit(1)
    result = controller.editor(direction.target).get_text()
    if output is not None:
        atomic_write(output, normalize_newlines(result))
    else:
        console.print(result, markup=False, highlight=False)
    if not outcome.ok:
        console.print(f"[red]Conversion failed[/red]: {outcome.error_code.value}")  # type: ignore[union-attr]
        raise typer.Exit(1)
    if output is not None:
        console.print(f"[green]Success[/green]: {file.name} -> {output}")


@app.command()
def validate(file: Path) -> None:
    outcome = prevalidate(file.read_text(encoding="utf-8"))
    table = Table(title="Pre-validation")
    table.add_column("Result")
    table.add_column("Rule")
    table.add_column("Detail")
    detail = outcome.diagnostic if outcome.rejected else outcome.code
    table.add_row(outcome.kind.value, outcome.rule or "-", detail or "-")
    console.print(table)
    if outcome.kind is OutcomeKind.REJECT:
        raise typer.Exit(1)


@app.command()
def env(
    host: str = typer.Option("localhost", "--host"),
    port: str | None = typer.Option(None, "--port"),
    override: str | None = typer.Option(None, "--override"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    environment = resolve_environment(override or cfg.environment, HostIdentity(hostname=host, port=port))
    console.print(f"{environment} -> {cfg.base_url(environment)}{cfg.service.endpoint}")


@app.command("show-config")
def show_config(config: Path | None = typer.Option(None, "--config", help="Path to config.toml")) -> None:
    console.print_json(dump_config(_load_config(config)))


if __name__ == "__main__":
    app()
