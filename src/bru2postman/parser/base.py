"""Data models for parsed Bruno files.

The .bru parser converts each endpoint file into these models
for the Postman mapping step.
"""

from pydantic import BaseModel, ConfigDict, Field

from .auth import AuthSettings, NoAuth


class KeyValue(BaseModel):
    """A header or variable line (``key: value``)."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str
    enabled: bool = True


class ExampleRequest(BaseModel):
    method: str = ""
    url: str = ""
    headers: list[KeyValue] = []
    body: str = ""


class ExampleResponse(BaseModel):
    status: int = 0
    status_text: str = ""
    headers: list[KeyValue] = []
    body: str = ""


class Example(BaseModel):
    """A saved request/response pair from an ``example`` block."""

    name: str = ""
    request: ExampleRequest = Field(default_factory=ExampleRequest)
    response: ExampleResponse = Field(default_factory=ExampleResponse)


class EndpointRecord(BaseModel):
    """Everything the converter needs from a single .bru file."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: str = ""  # http / graphql
    method: str = ""
    url: str = ""
    headers: list[KeyValue] = []
    body: str = ""
    vars: list[KeyValue] = []
    docs: str = ""
    auth: AuthSettings = Field(default_factory=NoAuth)
    examples: list[Example] = []
