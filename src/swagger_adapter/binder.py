"""Path and query parameter binding."""

from __future__ import annotations

from typing import Iterable
from urllib.parse import quote

from .catalog import path_placeholders
from .models import ParameterBinding

# Characters left alone by JavaScript's encodeURIComponent.
_UNRESERVED = "-_.!~*'()"


def encode_component(value: str) -> str:
    return quote(value, safe=_UNRESERVED)


def resolve_path(template: str, bindings: Iterable[ParameterBinding]) -> str:
    path = template
    for binding in bindings:
        name = binding.effective_name
        if not name:
            continue
        path = path.replace(f"{{{name}}}", encode_component(binding.value), 1)
    return path


def resolve_query(bindings: Iterable[ParameterBinding]) -> str:
    pairs = [
        f"{encode_component(binding.effective_name)}={encode_component(binding.value)}"
        for binding in bindings
        if binding.effective_name
    ]
    return "&".join(pairs)


def unresolved_placeholders(path: str) -> list[str]:
    return path_placeholders(path)
