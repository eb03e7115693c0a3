"""Authentication strategies applied to outgoing requests."""

from __future__ import annotations

import base64
import logging
from typing import Dict

from .binder import encode_component
from .models import (
    ApiKeyAuth,
    AuthConfig,
    BasicAuth,
    BearerAuth,
    NoAuth,
    OAuth2Auth,
    RequestDescriptor,
)


logger = logging.getLogger(__name__)


def set_header(headers: Dict[str, str], name: str, value: str) -> None:
    """Set a header, replacing any existing header of the same name in any case."""
    for existing in [key for key in headers if key.lower() == name.lower()]:
        del headers[existing]
    headers[name] = value


def append_query(url: str, name: str, value: str) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{encode_component(name)}={encode_component(value)}"


def apply(config: AuthConfig, request: RequestDescriptor) -> None:
    if isinstance(config, ApiKeyAuth):
        if config.location == "query":
            request.url = append_query(request.url, config.name, config.value)
        else:
            set_header(request.headers, config.name, config.value)
    elif isinstance(config, BearerAuth):
        set_header(request.headers, "Authorization", f"Bearer {config.token}")
    elif isinstance(config, BasicAuth):
        encoded = base64.b64encode(f"{config.username}:{config.password}".encode("utf-8"))
        set_header(request.headers, "Authorization", f"Basic {encoded.decode('ascii')}")
    elif isinstance(config, OAuth2Auth):
        set_header(request.headers, "Authorization", f"Bearer {config.access_token}")
    elif not isinstance(config, NoAuth):
        raise TypeError(f"Unsupported auth config: {type(config).__name__}")

    logger.debug("Applied %s authentication", config.type)
