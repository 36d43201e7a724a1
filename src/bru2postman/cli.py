"""CLI entry point for bru2postman."""

from datetime import datetime
from pathlib import Path

import click

from bru2postman.config import ConfigError, build_config, load_config_file, parse_replace_pairs
from bru2postman.converter.assembler import ENVIRONMENTS_DIR, CollectionError, walk_and_convert
from bru2postman.parser.bru import parse_bru_file
from bru2postman.parser.environment import parse_env_file


def _load_environment(input_dir: Path, env: str) -> dict[str, str]:
    """Read environments/<env>.bru. A missing file only warns."""
    env_path = input_dir / ENVIRONMENTS_DIR / f"{env}.bru"
    try:
        env_vars = parse_env_file(env_path)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Warning: Could not load environment file {env_path}: {e}", err=True)
        return {}
    click.echo(f"Loaded environment: {env}")
    return env_vars


def _default_output_name(folders: list[str], now: datetime) -> Path:
    prefix = "".join(folders) if folders else "FullCollection"
    return Path(f"{prefix}-{now:%Y-%m-%d-%H%M%S}.json")


@click.group()
def main():
    """bru2postman: convert Bruno collections to Postman Collection v2.1."""
    pass


@main.command()
@click.option("-i", "--input", "input_dir", default=None, type=click.Path(path_type=Path), help="Root directory of the Bruno collection (default: current directory).")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file (default: <folders|FullCollection>-<timestamp>.json).")
@click.option("--folders", default=None, help="Comma-separated top-level folders to include (e.g. Core,Users).")
@click.option("--replace", "replaces", multiple=True, help="Collection variable as key=value (repeatable).")
@click.option("--remove", "removes", multiple=True, help="Drop requests using this variable (repeatable).")
@click.option("--ignore", "ignores", multiple=True, help="Skip requests whose name contains this text (repeatable).")
@click.option("--env", default=None, help="Environment to load variables from (environments/<env>.bru).")
@click.option("--keep-folders/--flatten", default=None, help="Keep the folder structure or flatten requests (default: flatten).")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML file with default settings.")
@click.option("-v", "--verbose", is_flag=True, help="Report every exported and skipped request.")
def convert(
    input_dir: Path | None,
    output: Path | None,
    folders: str | None,
    replaces: tuple[str, ...],
    removes: tuple[str, ...],
    ignores: tuple[str, ...],
    env: str | None,
    keep_folders: bool | None,
    config_path: Path | None,
    verbose: bool,
):
    """Convert a Bruno collection into a Postman collection file."""
    try:
        file_values = load_config_file(config_path) if config_path else {}
        replace = parse_replace_pairs(replaces)
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e

    if env:
        root = input_dir or Path(file_values.get("input") or ".")
        replace = {**_load_environment(root, env), **replace}

    try:
        config = build_config(
            file_values,
            input=input_dir,
            folders=[f for f in folders.split(",") if f] if folders else None,
            replace=replace or None,
            remove=list(removes) or None,
            ignore=list(ignores) or None,
            keep_folders=keep_folders,
            verbose=verbose or None,
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        output = _default_output_name(config.folders, datetime.now())

    click.echo(f"Converting {config.input} -> {output}")
    try:
        collection = walk_and_convert(config)
    except CollectionError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(collection.to_json() + "\n", encoding="utf-8")
    click.echo(f"Exported {len(collection.item)} top-level items to {output}")


@main.command()
@click.argument("bru_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(bru_path: Path):
    """Print the parsed content of a single .bru file as JSON."""
    record = parse_bru_file(bru_path)
    click.echo(record.model_dump_json(indent=2))


@main.command()
@click.argument("env_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def env(env_path: Path):
    """Print the variables of a Bruno environment file."""
    for key, value in parse_env_file(env_path).items():
        click.echo(f"{key}={value}")
