# src/seedtrail/cli.py
"""seedtrail Command Line Interface.

Entry point for the seedtrail CLI tool.
"""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from seedtrail import __version__
from seedtrail.contracts import RawKey, SeedTrailError, Tag
from seedtrail.core.config import SeedTrailSettings, load_settings

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session

    from seedtrail.core.registry import Registry
    from seedtrail.engine import SeedTrail

__all__ = [
    "app",
]

app = typer.Typer(
    name="seedtrail",
    help="seedtrail: record data changes and replay them as portable seed scripts.",
    no_args_is_help=True,
)


class OutputFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"


SETTINGS_OPTION = typer.Option(
    ...,
    "--settings",
    "-s",
    help="Path to settings YAML file.",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"seedtrail version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """seedtrail: record data changes and replay them as portable seed scripts."""
    from seedtrail.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_settings_or_exit(settings: str) -> SeedTrailSettings:
    """Load and validate settings, exiting with a readable message on failure."""
    try:
        return load_settings(Path(settings).expanduser())
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _build_registry(config: SeedTrailSettings) -> Registry:
    from seedtrail.core.config import import_object
    from seedtrail.core.registry import Registry
    from seedtrail.orm import entity_type_for_model

    registry = Registry(default_candidate_key=config.default_candidate_key)
    try:
        for path in config.trackable:
            registry.register(entity_type_for_model(import_object(path)))
    except (ImportError, AttributeError, ValueError) as e:
        typer.echo(f"Error registering trackable models: {e}", err=True)
        raise typer.Exit(1) from None
    return registry


def _database_engine(config: SeedTrailSettings) -> Engine:
    from sqlalchemy import create_engine

    if config.database is None:
        typer.echo("Error: 'database' must be configured for this command", err=True)
        raise typer.Exit(1)
    return create_engine(config.database.url, echo=config.database.echo)


def _tag_to_dict(tag: Tag) -> dict[str, object]:
    candidate_key: object = tag.candidate_key.text if isinstance(tag.candidate_key, RawKey) else dict(tag.candidate_key.values)
    return {
        "tag_id": tag.tag_id,
        "entity_type": tag.entity_type,
        "kind": tag.kind.value,
        "row_id": tag.row_id,
        "candidate_key": candidate_key,
        "created_this_session": tag.created_this_session,
    }


@app.command()
def order(
    settings: str = SETTINGS_OPTION,
    destroy: bool = typer.Option(
        False,
        "--destroy",
        "-d",
        help="Print the destruction order (dependents first).",
    ),
) -> None:
    """Print the order in which entity types are replayed."""
    config = _load_settings_or_exit(settings)
    registry = _build_registry(config)

    try:
        names = registry.graph.destroy_order() if destroy else registry.graph.seed_order()
    except SeedTrailError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    for name in names:
        typer.echo(name)


@app.command()
def tags(
    settings: str = SETTINGS_OPTION,
    entity_types: list[str] | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Only list tags of this type (repeatable). Defaults to all trackable types.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.CONSOLE,
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """List outstanding tags."""
    from seedtrail.core.tags import TagDB

    config = _load_settings_or_exit(settings)
    names = entity_types if entity_types else [t.name for t in _build_registry(config).entity_types]

    try:
        with TagDB(config.tag_store.url, echo=config.tag_store.echo) as db, db.transaction() as store:
            found = store.for_types(names)
    except SeedTrailError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if output_format is OutputFormat.JSON:
        typer.echo(json.dumps([_tag_to_dict(tag) for tag in found], indent=2))
        return

    if not found:
        typer.echo("No outstanding tags.")
        return
    for tag in found:
        typer.echo(f"{tag.tag_id}  {tag.entity_type}  {tag.kind.value}  row_id={tag.row_id or '-'}  {tag.candidate_key}")


def _build_trail(config: SeedTrailSettings, session_engine: Engine) -> tuple[SeedTrail, Session]:
    from sqlalchemy.orm import Session

    from seedtrail.engine import SeedTrail

    session = Session(session_engine)
    try:
        trail = SeedTrail.from_settings(config, session=session)
    except (ImportError, AttributeError, TypeError, ValueError, SeedTrailError) as e:
        session.close()
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    return trail, session


@app.command()
def generate(
    settings: str = SETTINGS_OPTION,
    entity_types: list[str] | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Only generate seeds for this type (repeatable). Defaults to all trackable types.",
    ),
) -> None:
    """Write seed scripts for outstanding tags and consume them."""
    config = _load_settings_or_exit(settings)
    engine = _database_engine(config)
    trail, session = _build_trail(config, engine)

    try:
        paths = trail.generate_seed_for_types(entity_types) if entity_types else trail.generate_seeds()
    except SeedTrailError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        session.close()
        trail.close()
        engine.dispose()

    if not paths:
        typer.echo("No outstanding tags; nothing written.")
        return
    for path in paths:
        typer.echo(str(path))


@app.command()
def apply(
    settings: str = SETTINGS_OPTION,
    files: list[Path] = typer.Argument(
        ...,
        help="Generated seed scripts. Applied in file-name order.",
    ),
) -> None:
    """Apply generated seed scripts to the configured database in one transaction."""
    from sqlalchemy.orm import Session

    from seedtrail.orm import apply_seed_files

    config = _load_settings_or_exit(settings)

    missing = [str(f) for f in files if not f.exists()]
    if missing:
        typer.echo(f"Error: Seed file(s) not found: {', '.join(missing)}", err=True)
        raise typer.Exit(1)

    engine = _database_engine(config)
    try:
        with Session(engine) as session, session.begin():
            applied = apply_seed_files(files, session)
    except Exception as e:
        typer.echo(f"Error applying seeds: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        engine.dispose()

    typer.echo(f"Applied {len(applied)} seed file(s).")


if __name__ == "__main__":
    app()
