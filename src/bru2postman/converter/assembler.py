"""Walks a Bruno collection directory and builds the Postman collection.

Folders are visited depth-first: subfolders before the folder's own .bru
files. Each folder's auth (from its ``folder.bru``) is resolved against its
parent's and handed down; a child never changes its parent's auth.
"""

import json
from datetime import datetime
from pathlib import Path

import click

from bru2postman.config import ConvertConfig
from bru2postman.converter.mapper import bru_to_item
from bru2postman.parser.auth import AuthSettings, NoAuth, resolve_auth
from bru2postman.parser.base import EndpointRecord
from bru2postman.parser.bru import parse_bru_file
from bru2postman.postman.models import Collection, Info, Item, Variable

COLLECTION_META = "bruno.json"
COLLECTION_BRU = "collection.bru"
FOLDER_BRU = "folder.bru"
ENVIRONMENTS_DIR = "environments"

DESCRIPTOR_FILES = {COLLECTION_BRU, FOLDER_BRU}


class CollectionError(Exception):
    """Raised when the collection root cannot be read."""


def walk_and_convert(config: ConvertConfig, exported_at: datetime | None = None) -> Collection:
    """Convert the Bruno collection at ``config.input``."""
    root = config.input
    if not root.is_dir():
        raise CollectionError(f"Input directory '{root}' does not exist or is not a directory")

    exported_at = exported_at or datetime.now()
    collection = Collection(
        info=Info(
            name=collection_name(root),
            description=f"Exported on {exported_at:%Y-%m-%d %H:%M:%S}",
        ),
    )

    # Explicit replacements first, then collection.bru vars not yet declared
    variables = [Variable(key=k, value=v) for k, v in config.replace.items()]
    root_auth: AuthSettings = NoAuth()
    descriptor = _read_descriptor(root / COLLECTION_BRU, config)
    if descriptor is not None:
        root_auth = resolve_auth(descriptor.auth, NoAuth())
        declared = set(config.replace)
        for v in descriptor.vars:
            if v.key not in declared:
                variables.append(Variable(key=v.key, value=v.value))
                declared.add(v.key)
    collection.variable = variables or None

    for folder in _top_level_folders(root, config):
        item = process_folder(folder, config, root_auth)
        collection.item.extend(_place(item, config))

    return collection


def collection_name(root: Path) -> str:
    """Name from ``bruno.json``, else the directory's own name."""
    try:
        meta = json.loads((root / COLLECTION_META).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        meta = None

    name = meta.get("name") if isinstance(meta, dict) else None
    if isinstance(name, str) and name:
        return name
    return root.resolve().name


def process_folder(path: Path, config: ConvertConfig, parent_auth: AuthSettings) -> Item | None:
    """Build the folder item for ``path``, or None when nothing in it survives."""
    if config.verbose:
        click.echo(f"Scanning folder: {path}")
    try:
        entries = sorted(path.iterdir())
    except OSError as e:
        click.echo(f"Warning: Could not read folder '{path}': {e}", err=True)
        return None

    folder_auth = parent_auth
    description = None
    variables = None
    descriptor = _read_descriptor(path / FOLDER_BRU, config)
    if descriptor is not None:
        folder_auth = resolve_auth(descriptor.auth, parent_auth)
        description = descriptor.docs or None
        variables = [Variable(key=v.key, value=v.value) for v in descriptor.vars] or None

    children: list[Item] = []
    for entry in entries:
        if entry.is_dir() and not entry.name.startswith("."):
            children.extend(_place(process_folder(entry, config, folder_auth), config))

    for entry in entries:
        if entry.is_file() and entry.suffix == ".bru" and entry.name not in DESCRIPTOR_FILES:
            item = _convert_file(entry, config, folder_auth)
            if item is not None:
                children.append(item)

    if not children:
        return None
    return Item(name=path.name, description=description, variable=variables, item=children)


def _top_level_folders(root: Path, config: ConvertConfig) -> list[Path]:
    if config.folders:
        folders = []
        for name in config.folders:
            path = root / name
            if not path.is_dir():
                click.echo(f"Warning: Could not process folder '{path}': not a readable directory", err=True)
                continue
            folders.append(path)
        return folders

    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        raise CollectionError(f"Could not read input directory '{root}': {e}") from e
    return [
        p for p in entries
        if p.is_dir() and not p.name.startswith(".") and p.name != ENVIRONMENTS_DIR
    ]


def _place(item: Item | None, config: ConvertConfig) -> list[Item]:
    """What a folder contributes to its parent: itself, or its children when flattening."""
    if item is None:
        return []
    if config.keep_folders:
        return [item]
    return list(item.item or [])


def _convert_file(file_path: Path, config: ConvertConfig, folder_auth: AuthSettings) -> Item | None:
    try:
        record = parse_bru_file(file_path)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Warning: Could not read file '{file_path}': {e}", err=True)
        return None
    if not record.name:
        record = record.model_copy(update={"name": file_path.stem})

    pattern = next((p for p in config.ignore if p and p in record.name), None)
    if pattern is not None:
        if config.verbose:
            click.echo(f"[SKIP] Skipped: {record.name} (matches ignore pattern '{pattern}')")
        return None

    item = bru_to_item(record, config, folder_auth)
    if item is not None and config.verbose:
        click.echo(f"[OK] Exported: {record.name}")
    return item


def _read_descriptor(file_path: Path, config: ConvertConfig) -> EndpointRecord | None:
    """Parse an optional folder.bru / collection.bru."""
    if not file_path.is_file():
        return None
    try:
        return parse_bru_file(file_path)
    except (OSError, UnicodeDecodeError) as e:
        if config.verbose:
            click.echo(f"Warning: Could not read '{file_path}': {e}", err=True)
        return None
