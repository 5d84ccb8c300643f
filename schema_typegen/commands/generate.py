"""Generate command - introspects a database and writes Kysely declarations."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import load_settings
from ..database.dialects import get_dialect
from ..errors import ConfigError, TypegenError, VerificationMismatchError
from ..logger import configure_logging
from ..options import CodegenConfig, build_config, check_deprecated_flags, read_config_file
from ..pipeline import generate
from ..verifier import verify

console = Console(stderr=True)

EXIT_ERROR = 1
EXIT_DRIFT = 3


def _parse_overrides(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Overrides must be valid JSON: {e}", path=["overrides"], kind="json_invalid") from e


def resolve_url(config: CodegenConfig) -> str:
    """Configured URL, else DATABASE_URL from the environment or env file."""
    if config.url:
        return config.url
    settings = load_settings(config.env_file)
    if settings.database_url:
        return settings.database_url
    raise ConfigError(
        "No database URL configured. Pass --url or set DATABASE_URL.",
        path=["url"],
        kind="missing",
    )


def run_generate(config: CodegenConfig) -> str:
    """Run the pipeline for ``config`` and write, print or verify the result.

    Returns:
        The generated text

    Raises:
        VerificationMismatchError: In verify mode, when the output drifted
    """
    url = resolve_url(config)
    dialect = get_dialect(config.resolve_dialect_name(url))
    console.print(f"[bold]Introspecting {dialect.name.value} database...[/bold]")

    output = generate(dialect.create_reader(url), dialect, config)

    if config.verify:
        out_file = config.out_file or ""
        path = Path(out_file)
        previous = path.read_text(encoding="utf-8") if out_file and path.exists() else None
        if not verify(output, previous):
            raise VerificationMismatchError(out_file)
        console.print(f"[green]Generated types are up-to-date with {escape(out_file)}[/green]")
        return output

    if config.print_output or config.out_file is None:
        typer.echo(output, nl=False)
        return output

    path = Path(config.out_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(output, encoding="utf-8")
    console.print(f"[green]Wrote types to {escape(str(path))}[/green]")
    return output


def generate_command(
    url: Optional[str] = typer.Option(None, "--url", help="Database connection URL (or DATABASE_URL env)"),
    dialect: Optional[str] = typer.Option(None, "--dialect", help="Dialect: duckdb, postgres, snowflake, sqlite (inferred from URL if omitted)"),
    camel_case: Optional[bool] = typer.Option(None, "--camel-case/--no-camel-case", help="Use camelCase member names and table keys"),
    date_parser: Optional[str] = typer.Option(None, "--date-parser", help="How dates are typed: timestamp or string"),
    default_schema: Optional[List[str]] = typer.Option(None, "--default-schema", help="Schema to introspect. Can be specified multiple times."),
    domains: Optional[bool] = typer.Option(None, "--domains/--no-domains", help="Expand domains to their base types"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Env file to read DATABASE_URL from (default: .env)"),
    exclude_pattern: Optional[str] = typer.Option(None, "--exclude-pattern", help="Glob of tables to exclude (e.g. public._*)"),
    include_pattern: Optional[str] = typer.Option(None, "--include-pattern", help="Glob of tables to include (e.g. public.*)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="silent, info, warn, error or debug"),
    numeric_parser: Optional[str] = typer.Option(None, "--numeric-parser", help="How decimals are typed: string, number or number-or-string"),
    out_file: Optional[str] = typer.Option(None, "--out-file", "-o", help="Output file (default: ./db.d.ts)"),
    overrides: Optional[str] = typer.Option(None, "--overrides", help='Column type overrides as JSON, e.g. \'{"columns": {"users.meta": "UserMeta"}}\''),
    partitions: Optional[bool] = typer.Option(None, "--partitions/--no-partitions", help="List partition tables individually"),
    print_output: Optional[bool] = typer.Option(None, "--print", help="Print the output instead of writing a file"),
    runtime_enums: Optional[bool] = typer.Option(None, "--runtime-enums/--no-runtime-enums", help="Emit TypeScript enums instead of string unions"),
    runtime_enums_style: Optional[str] = typer.Option(None, "--runtime-enums-style", help="Enum member style: pascal-case or screaming-snake-case"),
    singular: Optional[bool] = typer.Option(None, "--singular/--no-singular", help="Singularize table type names"),
    type_only_imports: Optional[bool] = typer.Option(None, "--type-only-imports/--no-type-only-imports", help="Use 'import type' for kysely imports"),
    verify_output: Optional[bool] = typer.Option(None, "--verify/--no-verify", help="Check the out file is up-to-date instead of writing it"),
    config_file: Optional[str] = typer.Option(None, "--config-file", "-c", help="JSON config file (default: .schema-typegenrc.json if present)"),
    schema: Optional[str] = typer.Option(None, "--schema", hidden=True, help="Deprecated, use --default-schema"),
):
    """
    Generate Kysely type declarations from a live database schema.

    Examples:
        schema-typegen generate --url postgres://user:pw@localhost/db
        schema-typegen generate --url app.db --camel-case --singular --print
        schema-typegen generate --verify --out-file src/db.d.ts
    """
    try:
        check_deprecated_flags({"schema": schema})
        file_data = read_config_file(config_file)
        cli_values = {
            "url": url,
            "dialectName": dialect,
            "camelCase": camel_case,
            "dateParser": date_parser,
            "defaultSchemas": list(default_schema) if default_schema else None,
            "domains": domains,
            "envFile": env_file,
            "excludePattern": exclude_pattern,
            "includePattern": include_pattern,
            "logLevel": log_level,
            "numericParser": numeric_parser,
            "outFile": out_file,
            "overrides": _parse_overrides(overrides),
            "partitions": partitions,
            "print": print_output,
            "runtimeEnums": runtime_enums,
            "runtimeEnumsStyle": runtime_enums_style,
            "singular": singular,
            "typeOnlyImports": type_only_imports,
            "verify": verify_output,
        }
        config = build_config(file_data, cli_values)
        configure_logging(config.log_level, console)
        run_generate(config)
    except VerificationMismatchError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        console.print("Run 'schema-typegen generate' without --verify to update it.")
        raise typer.Exit(EXIT_DRIFT)
    except ConfigError as e:
        console.print(f"[red]Invalid configuration: {escape(e.get_user_friendly_message())}[/red]")
        raise typer.Exit(EXIT_ERROR)
    except TypegenError as e:
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(EXIT_ERROR)
    except ImportError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_ERROR)
