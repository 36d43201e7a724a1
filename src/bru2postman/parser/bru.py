"""Bruno .bru file parser.

Parses one endpoint file into an EndpointRecord. The format has no formal
grammar, so the parser works line by line on a stack of open blocks.
A block opens on a ``name {`` line and closes on a ``}`` line carrying
exactly the same indentation, so braces inside JSON bodies or docs never
end the enclosing block.

Unknown blocks (``params:query``, ``script:*``, ``tests``, ...) are skipped.
"""

import re
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from .auth import classify_auth
from .base import EndpointRecord, Example, KeyValue

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "options", "head")
FENCE = "'''"


class BlockKind(Enum):
    META = "meta"
    REQUEST = "request"
    HEADERS = "headers"
    VARS = "vars"
    BODY = "body"
    DOCS = "docs"
    AUTH = "auth"
    EXAMPLE = "example"
    EXAMPLE_REQUEST = "example-request"
    EXAMPLE_REQUEST_HEADERS = "example-request-headers"
    EXAMPLE_REQUEST_BODY = "example-request-body"
    EXAMPLE_RESPONSE = "example-response"
    EXAMPLE_RESPONSE_STATUS = "example-response-status"
    EXAMPLE_RESPONSE_HEADERS = "example-response-headers"
    EXAMPLE_RESPONSE_BODY = "example-response-body"
    IGNORED = "ignored"


# Blocks made of ``key: value`` lines. A keyword line inside one of these
# starts the next top-level block, so a missing close brace only loses
# the rest of that block.
KEY_VALUE_BLOCKS = {
    BlockKind.META,
    BlockKind.REQUEST,
    BlockKind.HEADERS,
    BlockKind.VARS,
    BlockKind.AUTH,
}

# Blocks whose lines are copied verbatim, blank lines included.
RAW_BLOCKS = {
    BlockKind.BODY,
    BlockKind.DOCS,
    BlockKind.EXAMPLE_REQUEST_BODY,
    BlockKind.EXAMPLE_RESPONSE_BODY,
}

# Nested blocks inside ``example``, matched on the end of the line.
EXAMPLE_CHILDREN = {
    BlockKind.EXAMPLE: (
        ("request: {", BlockKind.EXAMPLE_REQUEST),
        ("response: {", BlockKind.EXAMPLE_RESPONSE),
    ),
    BlockKind.EXAMPLE_REQUEST: (
        ("body:json: {", BlockKind.EXAMPLE_REQUEST_BODY),
        ("body: {", BlockKind.EXAMPLE_REQUEST_BODY),
        ("headers: {", BlockKind.EXAMPLE_REQUEST_HEADERS),
    ),
    BlockKind.EXAMPLE_RESPONSE: (
        ("status: {", BlockKind.EXAMPLE_RESPONSE_STATUS),
        ("headers: {", BlockKind.EXAMPLE_RESPONSE_HEADERS),
        ("body: {", BlockKind.EXAMPLE_RESPONSE_BODY),
    ),
}


class _Frame(NamedTuple):
    kind: BlockKind
    indent: str


def parse_bru_file(file_path: Path) -> EndpointRecord:
    """Parse a .bru file into an EndpointRecord.

    Only a failure to read the file raises; malformed content is tolerated.
    """
    text = file_path.read_text(encoding="utf-8")
    return parse_bru(text)


def parse_bru(text: str) -> EndpointRecord:
    """Parse the text of a .bru file."""
    parser = _BruParser()
    for line in text.splitlines():
        parser.feed(line)
    return parser.record()


def top_level_block(name: str) -> BlockKind | None:
    """Map the name in front of ``{`` to the block it opens, if recognised."""
    if name == "meta":
        return BlockKind.META
    if name == "headers":
        return BlockKind.HEADERS
    if name in ("vars:pre-request", "vars:post-response"):
        return BlockKind.VARS
    if name.startswith("body"):
        return BlockKind.BODY
    if name == "docs":
        return BlockKind.DOCS
    if name.startswith("auth"):
        return BlockKind.AUTH
    if name == "example":
        return BlockKind.EXAMPLE
    if name in HTTP_METHODS:
        return BlockKind.REQUEST
    return None


class _BruParser:
    """Accumulates the content of one file. Not reusable."""

    def __init__(self):
        self._stack: list[_Frame] = []
        self._raw: list[str] = []

        self._meta: dict[str, str] = {}
        self._method = ""
        self._url = ""
        self._headers: list[KeyValue] = []
        self._vars: list[KeyValue] = []
        self._body = ""
        self._docs = ""
        self._auth: dict[str, str] = {}
        self._examples: list[Example] = []

    def record(self) -> EndpointRecord:
        return EndpointRecord(
            name=self._meta.get("name", ""),
            type=self._meta.get("type", ""),
            method=self._method,
            url=self._url,
            headers=self._headers,
            body=self._body,
            vars=self._vars,
            docs=self._docs,
            auth=classify_auth(self._auth),
            examples=self._examples,
        )

    def feed(self, line: str) -> None:
        stripped = line.strip()
        indent = line[: len(line) - len(line.lstrip())]
        top = self._stack[-1] if self._stack else None

        if top is not None and stripped == "}" and indent == top.indent:
            self._close()
            return

        if top is not None and top.kind in RAW_BLOCKS:
            self._append_raw(top.kind, line, stripped)
            return

        if not stripped:
            return

        if top is None or top.kind in KEY_VALUE_BLOCKS:
            if self._open_top_level(stripped, indent):
                return
            if top is None:
                return
            self._key_value(top.kind, stripped)
            return

        if top.kind == BlockKind.IGNORED:
            return

        self._example_line(top.kind, stripped, indent)

    def _open_top_level(self, stripped: str, indent: str) -> bool:
        if not stripped.endswith(" {"):
            return False
        name = stripped[:-2].strip()
        kind = top_level_block(name)

        if kind is None:
            if self._stack:
                return False
            self._stack.append(_Frame(BlockKind.IGNORED, indent))
            return True

        # Replaces an unterminated key/value block, if any.
        self._stack.clear()
        if kind == BlockKind.REQUEST:
            self._method = name.upper()
        elif kind == BlockKind.EXAMPLE:
            self._examples.append(Example())
        self._stack.append(_Frame(kind, indent))
        return True

    def _close(self) -> None:
        frame = self._stack.pop()
        if frame.kind not in RAW_BLOCKS:
            return

        content = "".join(self._raw)
        self._raw = []
        if frame.kind == BlockKind.BODY:
            self._body = content
        elif frame.kind == BlockKind.DOCS:
            self._docs = content
        elif frame.kind == BlockKind.EXAMPLE_REQUEST_BODY:
            self._examples[-1].request.body += content
        elif frame.kind == BlockKind.EXAMPLE_RESPONSE_BODY:
            self._examples[-1].response.body += content

    def _append_raw(self, kind: BlockKind, line: str, stripped: str) -> None:
        if kind == BlockKind.EXAMPLE_RESPONSE_BODY and _is_body_noise(line, stripped):
            return
        self._raw.append(line + "\n")

    def _key_value(self, kind: BlockKind, stripped: str) -> None:
        pair = _split_pair(stripped)
        if pair is None:
            return
        key, value = pair

        if kind == BlockKind.META:
            if key in ("name", "type"):
                self._meta[key] = value
        elif kind == BlockKind.REQUEST:
            if key == "url":
                self._url = value
        elif kind == BlockKind.HEADERS:
            self._headers.append(KeyValue(key=key, value=value))
        elif kind == BlockKind.VARS:
            self._vars.append(KeyValue(key=key, value=value))
        elif kind == BlockKind.AUTH:
            self._auth[key] = value

    def _example_line(self, kind: BlockKind, stripped: str, indent: str) -> None:
        for suffix, child in EXAMPLE_CHILDREN.get(kind, ()):
            if stripped.endswith(suffix):
                self._stack.append(_Frame(child, indent))
                return
        if stripped.endswith("{"):
            self._stack.append(_Frame(BlockKind.IGNORED, indent))
            return

        pair = _split_pair(stripped)
        if pair is None:
            return
        key, value = pair
        example = self._examples[-1]

        if kind == BlockKind.EXAMPLE:
            if key == "name":
                example.name = value
        elif kind == BlockKind.EXAMPLE_REQUEST:
            if key == "url":
                example.request.url = value
            elif key == "method":
                example.request.method = value
        elif kind == BlockKind.EXAMPLE_REQUEST_HEADERS:
            example.request.headers.append(KeyValue(key=key, value=value))
        elif kind == BlockKind.EXAMPLE_RESPONSE_STATUS:
            if key == "code":
                example.response.status = _leading_int(value)
            elif key == "text":
                example.response.status_text = value
        elif kind == BlockKind.EXAMPLE_RESPONSE_HEADERS:
            example.response.headers.append(KeyValue(key=key, value=value))


def _split_pair(stripped: str) -> tuple[str, str] | None:
    key, sep, value = stripped.partition(":")
    if not sep:
        return None
    return key.strip(), value.strip()


def _is_body_noise(line: str, stripped: str) -> bool:
    """Response bodies are wrapped as ``type: json`` + ``content: '''...'''``."""
    if stripped in ("type: json", FENCE):
        return True
    return FENCE in line and "content:" in line


def _leading_int(value: str) -> int:
    match = re.match(r"[+-]?\d+", value)
    return int(match.group(0)) if match else 0
