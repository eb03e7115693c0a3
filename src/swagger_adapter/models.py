"""Internal models for specifications, operations and requests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .config import DEFAULT_TIMEOUT_MS


HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

CUSTOM_PARAMETER = "custom"
UNTAGGED = "Untagged"


class ParameterDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    location: str  # path / query / header / cookie
    required: bool = False
    description: str = ""
    type_hint: Optional[str] = None


@dataclass(frozen=True)
class Operation:
    operation_id: Optional[str]
    summary: Optional[str]
    description: Optional[str]
    tags: List[str]
    parameters: List[ParameterDeclaration]


@dataclass
class Specification:
    document: Dict[str, Any]
    paths: Dict[str, Dict[str, Operation]]
    servers: List[str] = field(default_factory=list)
    host: Optional[str] = None
    schemes: List[str] = field(default_factory=list)
    base_path: Optional[str] = None

    def operations(self):
        for path, methods in self.paths.items():
            for method, operation in methods.items():
                yield path, method, operation


class OperationDescriptor(BaseModel):
    """Snapshot of one operation, threaded through selection and execution.

    ``encode`` produces canonical JSON (sorted keys, compact separators) so the
    same operation in the same document always yields the same string.
    """

    path: str
    method: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    parameters: List[ParameterDeclaration] = Field(default_factory=list)

    @classmethod
    def from_operation(cls, path: str, method: str, operation: Operation) -> "OperationDescriptor":
        return cls(
            path=path,
            method=method.upper(),
            operation_id=operation.operation_id,
            summary=operation.summary,
            description=operation.description,
            tags=list(operation.tags),
            parameters=list(operation.parameters),
        )

    def encode(self) -> str:
        return json.dumps(self.model_dump(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def decode(cls, value: str) -> "OperationDescriptor":
        return cls.model_validate_json(value)


@dataclass(frozen=True)
class UrlSpecSource:
    address: str
    insecure_tls: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass(frozen=True)
class InlineSpecSource:
    document: Union[str, Dict[str, Any]]


SpecSource = Union[UrlSpecSource, InlineSpecSource]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoAuth(_CamelModel):
    type: Literal["none"] = "none"


class ApiKeyAuth(_CamelModel):
    type: Literal["apiKey"] = "apiKey"
    location: Literal["header", "query"] = "header"
    name: str = "X-API-Key"
    value: str = ""


class BearerAuth(_CamelModel):
    type: Literal["bearerToken"] = "bearerToken"
    token: str = ""


class BasicAuth(_CamelModel):
    type: Literal["basicAuth"] = "basicAuth"
    username: str = ""
    password: str = ""


class OAuth2Auth(_CamelModel):
    type: Literal["oauth2"] = "oauth2"
    access_token: str = ""


AuthConfig = Annotated[
    Union[NoAuth, ApiKeyAuth, BearerAuth, BasicAuth, OAuth2Auth],
    Field(discriminator="type"),
]


class SwaggerCredentials(_CamelModel):
    """Credential record as stored by the host (camelCase keys accepted)."""

    swagger_source: Literal["url", "json"] = "url"
    swagger_url: str = ""
    swagger_json: Union[str, Dict[str, Any]] = "{}"
    base_url: str = ""
    authentication: Literal["none", "apiKey", "bearerToken", "basicAuth", "oauth2"] = "none"
    api_key_location: Literal["header", "query"] = "header"
    api_key_name: str = "X-API-Key"
    api_key_value: str = ""
    bearer_token: str = ""
    username: str = ""
    password: str = ""
    access_token: str = ""
    allow_unauthorized_certs: bool = False
    timeout: Optional[int] = DEFAULT_TIMEOUT_MS

    def spec_source(self) -> SpecSource:
        if self.swagger_source == "url":
            return UrlSpecSource(
                address=self.swagger_url,
                insecure_tls=self.allow_unauthorized_certs,
                timeout_ms=self.timeout or DEFAULT_TIMEOUT_MS,
            )
        return InlineSpecSource(document=self.swagger_json)

    def auth_config(self) -> AuthConfig:
        if self.authentication == "apiKey":
            return ApiKeyAuth(
                location=self.api_key_location, name=self.api_key_name, value=self.api_key_value
            )
        if self.authentication == "bearerToken":
            return BearerAuth(token=self.bearer_token)
        if self.authentication == "basicAuth":
            return BasicAuth(username=self.username, password=self.password)
        if self.authentication == "oauth2":
            return OAuth2Auth(access_token=self.access_token)
        return NoAuth()


def _to_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ParameterBinding(_CamelModel):
    name: str = ""
    custom_name: str = ""
    value: str = ""

    coerce_text = field_validator("name", "custom_name", "value", mode="before")(_to_text)

    @property
    def effective_name(self) -> str:
        if self.name == CUSTOM_PARAMETER:
            return self.custom_name
        return self.name


class HeaderBinding(_CamelModel):
    name: str = ""
    value: str = ""

    coerce_text = field_validator("name", "value", mode="before")(_to_text)


class RequestOptions(_CamelModel):
    response_format: Literal["json", "text", "autodetect"] = "autodetect"
    full_response: bool = False
    follow_redirects: bool = True
    ignore_response_code: bool = False
    timeout: Optional[int] = None


class OperationRequest(_CamelModel):
    """Per-item configuration resolved by the host for one input item."""

    operation: Union[str, Dict[str, Any], None] = None
    path_parameters: List[ParameterBinding] = Field(default_factory=list)
    query_parameters: List[ParameterBinding] = Field(default_factory=list)
    headers: List[HeaderBinding] = Field(default_factory=list)
    send_body: bool = False
    body_content_type: Literal["json", "raw", "form-urlencoded"] = "json"
    body: Any = None
    options: RequestOptions = Field(default_factory=RequestOptions)


@dataclass
class RequestDescriptor:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    body_mode: Optional[str] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    verify_tls: bool = True
    full_response: bool = False
    ignore_response_code: bool = False
    follow_redirects: bool = True
    response_format: str = "autodetect"


@dataclass(frozen=True)
class ResultItem:
    item_index: int
    payload: Any = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.is_error:
            return {"item_index": self.item_index, "error": self.error}
        return {"item_index": self.item_index, "payload": self.payload}


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    value: str
    description: str = ""
    is_header: bool = False


@dataclass(frozen=True)
class ParameterOption:
    name: str
    value: str
    description: str = ""
    is_custom: bool = False
