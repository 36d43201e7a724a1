"""Postman Collection v2.1 document models.

Dump with ``by_alias=True, exclude_none=True`` so optional members are
left out instead of written as null.
"""

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_URL = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


class _PostmanModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Variable(_PostmanModel):
    key: str
    value: str


class Header(_PostmanModel):
    key: str
    value: str
    description: str | None = None
    type: str | None = None  # "text" on request headers


class Body(_PostmanModel):
    mode: str = "raw"
    raw: str | None = None
    options: dict | None = None  # {"raw": {"language": "json"}}


class Url(_PostmanModel):
    raw: str
    protocol: str | None = None
    host: list[str] | None = None
    path: list[str] | None = None


class AuthAttribute(_PostmanModel):
    key: str
    value: str
    type: str = "string"


class Auth(_PostmanModel):
    type: str  # bearer / basic
    bearer: list[AuthAttribute] | None = None
    basic: list[AuthAttribute] | None = None


class Request(_PostmanModel):
    method: str
    header: list[Header] = []
    body: Body | None = None
    url: Url
    description: str | None = None
    auth: Auth | None = None


class Response(_PostmanModel):
    """A saved example attached to a request item."""

    name: str
    original_request: Request = Field(alias="originalRequest")
    status: str
    code: int
    preview_language: str = Field("json", alias="_postman_previewlanguage")
    header: list[Header] = []
    cookie: list = []
    body: str = ""


class Item(_PostmanModel):
    """A folder (``item`` set) or a request (``request`` set), never both."""

    name: str
    description: str | None = None
    variable: list[Variable] | None = None
    item: list["Item"] | None = None
    request: Request | None = None
    response: list[Response] | None = None
    protocol_profile_behavior: dict | None = Field(None, alias="protocolProfileBehavior")

    @property
    def is_folder(self) -> bool:
        return self.request is None


class Info(_PostmanModel):
    name: str
    description: str | None = None
    schema_url: str = Field(SCHEMA_URL, alias="schema")


class Collection(_PostmanModel):
    info: Info
    item: list[Item] = []
    variable: list[Variable] | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
