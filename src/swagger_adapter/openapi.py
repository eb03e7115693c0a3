"""OpenAPI spec loader and operation parser."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

import httpx

from .errors import InvalidBaseUrlError, MissingBaseUrlError, SpecFetchError, SpecParseError
from .models import (
    HTTP_METHODS,
    UNTAGGED,
    InlineSpecSource,
    Operation,
    ParameterDeclaration,
    SpecSource,
    Specification,
    UrlSpecSource,
)


logger = logging.getLogger(__name__)


class OpenAPILoader:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.transport = transport

    async def load(self, source: SpecSource) -> Specification:
        if isinstance(source, UrlSpecSource):
            document = await self.fetch(source)
        elif isinstance(source, InlineSpecSource):
            document = source.document
            if isinstance(document, str):
                document = parse_document(document)
        else:
            raise TypeError(f"Unsupported spec source: {source!r}")

        if not isinstance(document, dict):
            raise SpecParseError("Failed to parse Swagger JSON: document is not an object")
        return self.parse(document)

    async def fetch(self, source: UrlSpecSource) -> Dict[str, Any]:
        logger.info("Fetching OpenAPI spec: %s", source.address)
        try:
            async with httpx.AsyncClient(
                timeout=source.timeout_ms / 1000,
                verify=not source.insecure_tls,
                transport=self.transport,
            ) as client:
                response = await client.get(
                    source.address, headers={"Accept": "application/json"}
                )
        except httpx.TimeoutException as exc:
            raise SpecFetchError(f"Failed to fetch Swagger spec: request timeout ({exc})") from exc
        except httpx.HTTPError as exc:
            raise SpecFetchError(f"Failed to fetch Swagger spec: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "Failed to fetch OpenAPI spec: %s (%s)", source.address, response.status_code
            )
            raise SpecFetchError(
                f"Failed to fetch Swagger spec: {source.address} returned {response.status_code}"
            )

        document = parse_document(response.text)
        if not isinstance(document, dict):
            raise SpecParseError("Failed to parse Swagger JSON: document is not an object")
        return document

    def parse(self, document: Dict[str, Any]) -> Specification:
        paths: Dict[str, Dict[str, Operation]] = {}

        for path, path_item in (document.get("paths") or {}).items():
            if not isinstance(path_item, dict):
                continue
            shared_parameters = path_item.get("parameters") or []
            methods: Dict[str, Operation] = {}
            for method, operation in path_item.items():
                if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                    continue
                methods[method.lower()] = self._build_operation(document, operation, shared_parameters)
            paths[path] = methods

        servers = [
            server["url"]
            for server in document.get("servers") or []
            if isinstance(server, dict) and server.get("url")
        ]

        return Specification(
            document=document,
            paths=paths,
            servers=servers,
            host=document.get("host"),
            schemes=list(document.get("schemes") or []),
            base_path=document.get("basePath"),
        )

    def _build_operation(
        self,
        document: Dict[str, Any],
        operation: Dict[str, Any],
        shared_parameters: List[Dict[str, Any]],
    ) -> Operation:
        merged: Dict[Tuple[str, str], ParameterDeclaration] = {}
        for raw in [*shared_parameters, *(operation.get("parameters") or [])]:
            parameter = self._parse_parameter(document, raw)
            if parameter:
                merged[(parameter.name, parameter.location)] = parameter

        return Operation(
            operation_id=operation.get("operationId"),
            summary=operation.get("summary"),
            description=operation.get("description"),
            tags=list(operation.get("tags") or [UNTAGGED]),
            parameters=list(merged.values()),
        )

    def _parse_parameter(
        self, document: Dict[str, Any], raw: Any
    ) -> Optional[ParameterDeclaration]:
        if isinstance(raw, dict) and "$ref" in raw:
            raw = _resolve_ref(document, raw["$ref"])
        if not isinstance(raw, dict):
            return None
        name = raw.get("name")
        if not name:
            return None
        return ParameterDeclaration(
            name=name,
            location=raw.get("in", "query"),
            required=bool(raw.get("required", False)),
            description=raw.get("description") or "",
            type_hint=self._type_hint(raw),
        )

    def _type_hint(self, parameter: Dict[str, Any]) -> Optional[str]:
        if parameter.get("type"):
            return parameter["type"]
        schema = parameter.get("schema") or {}
        if schema.get("type"):
            return schema["type"]
        ref = schema.get("$ref")
        if ref:
            return ref.rsplit("/", 1)[-1]
        return None


def parse_document(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SpecParseError(f"Failed to parse Swagger JSON: {exc}") from exc


def resolve_base_url(spec: Specification, override: Optional[str] = None) -> str:
    base_url = override or _extract_server_url(spec)
    if not base_url:
        raise MissingBaseUrlError(
            "Could not determine base URL. Please provide a base URL in the credentials."
        )
    try:
        urlsplit(base_url)
    except ValueError as exc:
        raise InvalidBaseUrlError(f"Invalid base URL {base_url!r}: {exc}") from exc
    if base_url.endswith("/"):
        base_url = base_url[:-1]
    return base_url


def _extract_server_url(spec: Specification) -> Optional[str]:
    if spec.servers:
        return spec.servers[0]
    if spec.host:
        scheme = spec.schemes[0] if spec.schemes else "https"
        return f"{scheme}://{spec.host}{spec.base_path or ''}"
    return None


def _resolve_ref(document: Dict[str, Any], ref: str) -> Any:
    if not ref.startswith("#/"):
        logger.warning("Skipping non-local parameter reference: %s", ref)
        return None
    node: Any = document
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            logger.warning("Unresolvable parameter reference: %s", ref)
            return None
        node = node[part]
    return node
