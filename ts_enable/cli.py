# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for inspecting ts-enable configuration files."""

import logging
from pathlib import Path
from typing import IO, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ts_enable import __version__
from ts_enable.config import ConfigResolver, load_config
from ts_enable.errors import ConfigurationError

app = typer.Typer(
    name="ts-enable",
    help="Inspect ts-enable configuration",
    add_completion=False,
)

console = Console()


def _configure_logging(level: str, stream: Optional[IO[str]] = None) -> None:
    """Configure root logging with a rich handler."""
    handler_console = Console(file=stream, stderr=stream is None)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=handler_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"ts-enable v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """ts-enable - syntax-tree feature enablement."""
    _configure_logging(log_level)


def _load_or_exit(config_path: Path):
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/] {escape(e.message)}")
        raise typer.Exit(1)


@app.command()
def resolve(
    config_path: Path = typer.Argument(..., help="YAML configuration file"),
    language: Optional[List[str]] = typer.Option(
        None, "--language", "-l", help="Language to resolve (repeatable)"
    ),
) -> None:
    """Show the effective features of each language."""
    config = _load_or_exit(config_path)
    resolver = ConfigResolver(config)

    languages = list(language or [])
    if not languages:
        languages = list(dict.fromkeys([*config.parsers, *config.parser_settings]))

    table = Table(title="Effective ts-enable features")
    table.add_column("Language", style="cyan")
    table.add_column("Source")
    for column in ("auto_install", "highlights", "folds", "indents"):
        table.add_column(column, justify="center")

    for lang in languages:
        features = resolver.resolve(lang)
        source = "override" if resolver.has_override(lang) else "global"
        table.add_row(
            lang,
            source,
            *("[green]yes[/green]" if getattr(features, flag) else "[dim]no[/dim]"
              for flag in ("auto_install", "highlights", "folds", "indents")),
        )

    console.print(table)


@app.command()
def validate(
    config_path: Path = typer.Argument(..., help="YAML configuration file"),
) -> None:
    """Check that a configuration file loads."""
    if not config_path.exists():
        console.print(f"[bold red]Error:[/] {config_path} does not exist")
        raise typer.Exit(1)

    config = _load_or_exit(config_path)
    console.print(
        f"[green]OK[/green] {len(config.parsers)} parsers, "
        f"{len(config.parser_settings)} language overrides"
    )


if __name__ == "__main__":
    app()
