"""Core adapter service: spec loading, operation search and batch execution."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from pydantic import ValidationError

from .catalog import (
    build_catalog,
    decode_selection,
    is_operation_key,
    path_parameters,
    query_parameters,
    resolve_selection,
)
from .config import Settings
from .errors import InvalidItemError
from .executors import BatchExecutor, HttpRequester, Requester
from .models import (
    CatalogEntry,
    OperationDescriptor,
    OperationRequest,
    ParameterOption,
    RequestDescriptor,
    ResultItem,
    Specification,
    SwaggerCredentials,
)
from .openapi import OpenAPILoader, resolve_base_url
from .request_builder import RequestBuilder

logger = logging.getLogger(__name__)

CredentialsInput = Union[SwaggerCredentials, Mapping[str, Any]]
ItemInput = Union[OperationRequest, Mapping[str, Any]]


class ConfigurationProvider(Protocol):
    """Host capability exposing the values an operator has entered so far."""

    def get_credentials(self) -> CredentialsInput:
        ...

    def get_current_selection(self, field: str) -> Any:
        ...


class StaticConfigurationProvider:
    def __init__(
        self, credentials: CredentialsInput, selections: Optional[Dict[str, Any]] = None
    ) -> None:
        self.credentials = credentials
        self.selections = selections or {}

    def get_credentials(self) -> CredentialsInput:
        return self.credentials

    def get_current_selection(self, field: str) -> Any:
        return self.selections.get(field)


class SwaggerApiService:
    """
    Operation search and execution for APIs described by Swagger/OpenAPI.

    The specification is loaded fresh for every call; nothing is cached
    between invocations.
    """

    def __init__(
        self,
        settings: Settings,
        loader: Optional[OpenAPILoader] = None,
        requester: Optional[Requester] = None,
    ) -> None:
        self.settings = settings
        self.loader = loader or OpenAPILoader()
        self.executor = BatchExecutor(requester or HttpRequester())

    async def load_specification(self, credentials: CredentialsInput) -> Specification:
        creds = _credentials(credentials)
        return await self.loader.load(creds.spec_source())

    async def search_operations(
        self, provider: ConfigurationProvider, filter_text: Optional[str] = None
    ) -> List[CatalogEntry]:
        spec = await self.load_specification(provider.get_credentials())
        entries = build_catalog(spec)
        if not filter_text:
            return entries
        return _filter_catalog(entries, filter_text)

    async def path_parameter_options(
        self, provider: ConfigurationProvider
    ) -> List[ParameterOption]:
        descriptor = await self._selected_operation(provider)
        return path_parameters(descriptor)

    async def query_parameter_options(
        self, provider: ConfigurationProvider
    ) -> List[ParameterOption]:
        descriptor = await self._selected_operation(provider)
        return query_parameters(descriptor)

    async def execute(
        self,
        credentials: CredentialsInput,
        items: Sequence[ItemInput],
        continue_on_fail: bool = False,
    ) -> List[ResultItem]:
        creds = _credentials(credentials)

        # Batch-fatal: raised before any item runs, regardless of continue_on_fail.
        spec = await self.loader.load(creds.spec_source())
        base_url = resolve_base_url(spec, creds.base_url)
        logger.info("Executing %s item(s) against %s", len(items), base_url)

        builder = RequestBuilder(
            auth_config=creds.auth_config(),
            verify_tls=not creds.allow_unauthorized_certs,
            timeout_ms=creds.timeout or self.settings.adapter_default_timeout_ms,
            strict_path_parameters=self.settings.adapter_strict_path_parameters,
        )

        def prepare(item: ItemInput, index: int) -> RequestDescriptor:
            request = _item(item, index)
            descriptor = resolve_selection(spec, request.operation)
            return builder.build(base_url, descriptor, request)

        return await self.executor.run(items, prepare, continue_on_fail=continue_on_fail)

    async def _selected_operation(self, provider: ConfigurationProvider) -> OperationDescriptor:
        selection = provider.get_current_selection("operation")
        if is_operation_key(selection):
            spec = await self.load_specification(provider.get_credentials())
            return resolve_selection(spec, selection)
        return decode_selection(selection)


def _credentials(credentials: CredentialsInput) -> SwaggerCredentials:
    if isinstance(credentials, SwaggerCredentials):
        return credentials
    return SwaggerCredentials.model_validate(dict(credentials))


def _item(item: ItemInput, index: int) -> OperationRequest:
    if isinstance(item, OperationRequest):
        return item
    try:
        return OperationRequest.model_validate(dict(item))
    except ValidationError as exc:
        raise InvalidItemError(f"Invalid parameters for item {index}: {exc}") from exc


def _filter_catalog(entries: List[CatalogEntry], filter_text: str) -> List[CatalogEntry]:
    needle = filter_text.lower()
    filtered: List[CatalogEntry] = []
    header: Optional[CatalogEntry] = None
    for entry in entries:
        if entry.is_header:
            header = entry
            continue
        if needle in entry.name.lower() or needle in entry.description.lower():
            if header is not None:
                filtered.append(header)
                header = None
            filtered.append(entry)
    return filtered
