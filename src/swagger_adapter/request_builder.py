"""Assembles a fully specified request from an operation and item inputs."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

from . import auth as auth_strategy
from .binder import resolve_path, resolve_query, unresolved_placeholders
from .config import DEFAULT_TIMEOUT_MS
from .errors import BodyParseError, UnresolvedPathParameterError
from .models import (
    BODY_METHODS,
    AuthConfig,
    OperationDescriptor,
    OperationRequest,
    RequestDescriptor,
)


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class RequestBuilder:
    def __init__(
        self,
        auth_config: AuthConfig,
        verify_tls: bool = True,
        timeout_ms: Optional[int] = None,
        strict_path_parameters: bool = False,
    ) -> None:
        self.auth_config = auth_config
        self.verify_tls = verify_tls
        self.timeout_ms = timeout_ms
        self.strict_path_parameters = strict_path_parameters

    def build(
        self,
        base_url: str,
        descriptor: OperationDescriptor,
        item: OperationRequest,
    ) -> RequestDescriptor:
        """``base_url`` is expected as returned by ``resolve_base_url``."""
        path = resolve_path(descriptor.path, item.path_parameters)
        missing = unresolved_placeholders(path)
        if missing:
            if self.strict_path_parameters:
                raise UnresolvedPathParameterError(
                    f"Missing value for path parameter(s): {', '.join(missing)}"
                )
            logger.warning("Unresolved path parameter(s) %s in %s", missing, path)

        url = f"{base_url}{path}"
        query = resolve_query(item.query_parameters)
        if query:
            url = f"{url}?{query}"

        headers: Dict[str, str] = {"Content-Type": JSON_CONTENT_TYPE}
        for header in item.headers:
            if header.name:
                auth_strategy.set_header(headers, header.name, header.value)

        options = item.options
        request = RequestDescriptor(
            method=descriptor.method.upper(),
            url=url,
            headers=headers,
            timeout_ms=options.timeout or self.timeout_ms or DEFAULT_TIMEOUT_MS,
            verify_tls=self.verify_tls,
            full_response=options.full_response,
            ignore_response_code=options.ignore_response_code,
            follow_redirects=options.follow_redirects,
            response_format=options.response_format,
        )
        auth_strategy.apply(self.auth_config, request)

        if request.method in BODY_METHODS and item.send_body:
            request.body_mode, request.body, content_type = self._build_body(item)
            if content_type:
                auth_strategy.set_header(request.headers, "Content-Type", content_type)

        return request

    def _build_body(self, item: OperationRequest) -> Tuple[str, Any, Optional[str]]:
        mode = item.body_content_type
        if mode == "raw":
            if item.body is None or isinstance(item.body, str):
                raw = item.body or ""
            else:
                raw = json.dumps(item.body)
            return "raw", raw, TEXT_CONTENT_TYPE

        payload = _parse_json_body(item.body)
        if mode == "form-urlencoded":
            if not isinstance(payload, dict):
                raise BodyParseError("Form body must be a JSON object of field names to values")
            fields = {key: _form_value(value) for key, value in payload.items()}
            return "form-urlencoded", urlencode(fields), FORM_CONTENT_TYPE
        return "json", payload, None


def _parse_json_body(body: Any) -> Any:
    if body is None or body == "":
        return {}
    if not isinstance(body, str):
        return body
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise BodyParseError(f"Request body is not valid JSON: {exc}") from exc


def _form_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)
