"""Bruno environment file parser (``environments/<name>.bru``)."""

from pathlib import Path


def parse_env_file(file_path: Path) -> dict[str, str]:
    """Return the ``key: value`` pairs of the file's ``vars`` block.

    Anything outside that block (``vars:secret [...]`` included) is ignored.
    """
    text = file_path.read_text(encoding="utf-8")

    env: dict[str, str] = {}
    vars_indent: str | None = None  # set while inside ``vars {``
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        indent = line[: len(line) - len(line.lstrip())]

        if vars_indent is None:
            if stripped.endswith(" {") and stripped[:-2].strip() == "vars":
                vars_indent = indent
            continue

        if stripped == "}" and indent == vars_indent:
            vars_indent = None
            continue

        key, sep, value = stripped.partition(":")
        if sep:
            env[key.strip()] = value.strip()
    return env
