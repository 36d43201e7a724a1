"""Maps a parsed .bru record to a Postman request item."""

import click

from bru2postman.config import ConvertConfig
from bru2postman.parser.auth import AuthSettings, BasicAuth, BearerAuth, resolve_auth
from bru2postman.parser.base import EndpointRecord, Example, KeyValue
from bru2postman.postman.models import (
    Auth,
    AuthAttribute,
    Body,
    Header,
    Item,
    Request,
    Response,
    Url,
)


def bru_to_item(
    record: EndpointRecord,
    config: ConvertConfig,
    parent_auth: AuthSettings,
) -> Item | None:
    """Convert one record, or return None when it uses a removed variable.

    ``parent_auth`` is the auth in effect for the record's folder. Variables
    are never substituted: ``{{var}}`` placeholders are left for the
    collection variables to resolve.
    """
    veto = _find_removed_variable(record, config.remove)
    if veto:
        name, location = veto
        if config.verbose:
            click.echo(f"[SKIP] Skipped: {record.name} (uses removed variable '{name}' in {location})")
        return None

    body = project_body(record.body)
    request = Request(
        method=record.method,
        header=filter_headers(record.headers, config.remove),
        body=body,
        url=decompose_url(record.url),
        description=record.docs or None,
        auth=project_auth(resolve_auth(record.auth, parent_auth)),
    )
    responses = [project_example(ex) for ex in record.examples]

    # Postman drops GET bodies unless told otherwise
    behavior = {"disableBodyPruning": True} if record.method == "GET" and body else None

    return Item(
        name=record.name,
        request=request,
        response=responses or None,
        protocol_profile_behavior=behavior,
    )


def decompose_url(raw: str) -> Url:
    """Split a URL into protocol, a single host entry and path segments.

    ``{{baseUrl}}/users/1`` gives host ``{{baseUrl}}`` and path
    ``users, 1``. The raw string is kept unchanged.
    """
    protocol = None
    rest = raw
    if "://" in raw:
        protocol, rest = raw.split("://", 1)

    segments = rest.split("/")
    return Url(
        raw=raw,
        protocol=protocol or None,
        host=[segments[0]],
        path=segments[1:] or None,
    )


def filter_headers(headers: list[KeyValue], removed: list[str]) -> list[Header]:
    """Drop headers that mention a removed variable in their key or value."""
    result = []
    for h in headers:
        if any(r in h.key or _placeholder(r) in h.value for r in removed):
            continue
        result.append(Header(key=h.key, value=h.value, type="text"))
    return result


def project_auth(auth: AuthSettings) -> Auth | None:
    """Build the Postman auth object. Only bearer and basic are exported."""
    if isinstance(auth, BearerAuth):
        return Auth(
            type="bearer",
            bearer=[AuthAttribute(key="token", value=auth.token)],
        )
    if isinstance(auth, BasicAuth):
        return Auth(
            type="basic",
            basic=[
                AuthAttribute(key="username", value=auth.username),
                AuthAttribute(key="password", value=auth.password),
            ],
        )
    return None


def project_body(raw: str) -> Body | None:
    if not raw:
        return None
    body = Body(mode="raw", raw=raw)
    if raw.strip().startswith(("{", "[")):
        body.options = {"raw": {"language": "json"}}
    return body


def project_example(example: Example) -> Response:
    original = Request(
        method=example.request.method,
        header=[Header(key=h.key, value=h.value) for h in example.request.headers],
        body=project_body(example.request.body),
        url=decompose_url(example.request.url),
    )
    return Response(
        name=example.name,
        original_request=original,
        status=example.response.status_text,
        code=example.response.status,
        header=[Header(key=h.key, value=h.value) for h in example.response.headers],
        body=example.response.body,
    )


def _find_removed_variable(record: EndpointRecord, removed: list[str]) -> tuple[str, str] | None:
    for r in removed:
        placeholder = _placeholder(r)
        if placeholder in record.url or placeholder in record.body:
            return r, "URL or Body"
        if any(placeholder in v for v in record.auth.raw.values()):
            return r, "Auth"
    return None


def _placeholder(name: str) -> str:
    return "{{" + name + "}}"
