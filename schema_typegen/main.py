"""schema-typegen - Main entry point."""

import re
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .commands.generate import EXIT_ERROR, generate_command
from .config import load_settings
from .errors import ConfigError
from .options import build_config, read_config_file

app = typer.Typer(
    name="schema-typegen",
    help="Generate Kysely type declarations from database schemas",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("generate")(generate_command)

console = Console()

_URL_PASSWORD = re.compile(r"(://[^:/@]+:)[^@]+@")


def mask_url(url: Optional[str]) -> str:
    if not url:
        return "Not set"
    return _URL_PASSWORD.sub(r"\1****@", url)


@app.command()
def config(
    config_file: Optional[str] = typer.Option(None, "--config-file", "-c", help="JSON config file (default: .schema-typegenrc.json if present)"),
):
    """Show the effective configuration."""
    try:
        options = build_config(read_config_file(config_file), {})
    except ConfigError as e:
        console.print(f"[red]Invalid configuration: {escape(e.get_user_friendly_message())}[/red]")
        raise typer.Exit(EXIT_ERROR)

    settings = load_settings(options.env_file)

    table = Table(title="Current Configuration")
    table.add_column("Option", style="cyan")
    table.add_column("Value", style="green")
    for name, field in type(options).model_fields.items():
        value = getattr(options, name)
        if name == "url":
            value = mask_url(value)
        elif hasattr(value, "value"):
            value = value.value
        table.add_row(field.alias or name, escape(str(value)))
    table.add_row("DATABASE_URL", escape(mask_url(settings.database_url)))
    console.print(table)


@app.callback()
def main():
    """
    schema-typegen - Generate Kysely type declarations from database schemas.

    Examples:

        schema-typegen generate --url postgres://user:pw@localhost/db

        schema-typegen generate --url app.db --print

        schema-typegen config
    """
    pass


if __name__ == "__main__":
    app()
