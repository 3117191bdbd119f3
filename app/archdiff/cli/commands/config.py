"""Configuration inspection commands."""

from pathlib import Path
from typing import Annotated

import typer

from archdiff.core.config import ConfigError, dump_config, load_config
from archdiff.core.paths import get_config_path
from archdiff.utils.formatting import print_error, print_warning

app = typer.Typer(
    help="Inspect the audit configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file to read."),
    ] = None,
) -> None:
    """Print the effective configuration as TOML."""
    path = config_path or get_config_path()
    if config_path is None and not path.exists():
        print_warning(f"No config file at {path}, showing defaults.")

    try:
        config = load_config(path, required=config_path is not None)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    typer.echo(dump_config(config), nl=False)
