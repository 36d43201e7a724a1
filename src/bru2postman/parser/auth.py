"""Authentication settings declared in ``auth`` / ``auth:*`` blocks.

A .bru file spreads its auth over several blocks (``auth { mode: bearer }``
plus ``auth:bearer { token: ... }``). The parser merges them into one flat
map and classifies that map once into one of the variants below.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Auth(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: dict[str, str] = {}  # merged fields exactly as written


class NoAuth(_Auth):
    kind: Literal["noauth"] = "noauth"


class InheritAuth(_Auth):
    kind: Literal["inherit"] = "inherit"


class BearerAuth(_Auth):
    kind: Literal["bearer"] = "bearer"
    token: str = ""


class BasicAuth(_Auth):
    kind: Literal["basic"] = "basic"
    username: str = ""
    password: str = ""


class AwsV4Auth(_Auth):
    kind: Literal["awsv4"] = "awsv4"


class CustomAuth(_Auth):
    """Any mode Postman export does not model (oauth2, digest, none, ...)."""

    kind: Literal["custom"] = "custom"
    mode: str = ""


AuthSettings = Annotated[
    Union[NoAuth, InheritAuth, BearerAuth, BasicAuth, AwsV4Auth, CustomAuth],
    Field(discriminator="kind"),
]


def classify_auth(raw: dict[str, str]) -> AuthSettings:
    """Turn the merged auth fields of one file into a tagged auth value."""
    if not raw:
        return NoAuth()
    raw = dict(raw)

    if raw.get("inherit", "").lower() == "true" or raw.get("mode") == "inherit":
        return InheritAuth(raw=raw)

    mode = raw.get("mode") or _infer_mode(raw)
    if mode == "bearer":
        return BearerAuth(raw=raw, token=raw.get("token", ""))
    if mode == "basic":
        return BasicAuth(
            raw=raw,
            username=raw.get("username", ""),
            password=raw.get("password", ""),
        )
    if mode == "awsv4":
        return AwsV4Auth(raw=raw)
    return CustomAuth(raw=raw, mode=mode)


def resolve_auth(own: AuthSettings, inherited: AuthSettings) -> AuthSettings:
    """Return the auth in effect for a request or folder.

    Missing or ``inherit`` auth falls back to the enclosing folder's.
    """
    if isinstance(own, (NoAuth, InheritAuth)):
        return inherited
    return own


def _infer_mode(raw: dict[str, str]) -> str:
    if "token" in raw:
        return "bearer"
    if "username" in raw:
        return "basic"
    return ""
