"""Operation catalog: grouped operation listing and parameter suggestions."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .errors import OperationSelectionError
from .models import (
    CUSTOM_PARAMETER,
    UNTAGGED,
    CatalogEntry,
    OperationDescriptor,
    ParameterDeclaration,
    ParameterOption,
    Specification,
)


logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

CUSTOM_OPTION = ParameterOption(
    name="Custom (enter name)",
    value=CUSTOM_PARAMETER,
    description="Use a parameter name that is not declared in the specification",
    is_custom=True,
)
NO_PATH_PARAMETERS = ParameterOption(
    name="No path parameters declared",
    value="",
    description="This operation declares no path parameters",
)


def build_catalog(spec: Specification) -> List[CatalogEntry]:
    groups: Dict[str, List[CatalogEntry]] = {}

    for path, method, operation in spec.operations():
        descriptor = OperationDescriptor.from_operation(path, method, operation)
        tag = descriptor.tags[0] if descriptor.tags else UNTAGGED
        groups.setdefault(tag, []).append(
            CatalogEntry(
                name=descriptor.summary or f"{descriptor.method} {path}",
                value=descriptor.encode(),
                description=describe(descriptor),
            )
        )

    entries: List[CatalogEntry] = []
    for tag in sorted(groups):
        entries.append(CatalogEntry(name=tag, value="", description=f"Tag: {tag}", is_header=True))
        entries.extend(groups[tag])
    return entries


def describe(descriptor: OperationDescriptor) -> str:
    lines = [f"Endpoint: {descriptor.method} {descriptor.path}"]
    if descriptor.summary:
        lines.append(f"Summary: {descriptor.summary}")
    if descriptor.description:
        lines.append(f"Description: {descriptor.description}")
    if descriptor.operation_id:
        lines.append(f"Operation ID: {descriptor.operation_id}")
    return "\n".join(lines)


def path_placeholders(template: str) -> List[str]:
    names: List[str] = []
    for match in _PLACEHOLDER.finditer(template):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def path_parameters(descriptor: OperationDescriptor) -> List[ParameterOption]:
    options: Dict[str, ParameterOption] = {
        name: ParameterOption(name=name, value=name) for name in path_placeholders(descriptor.path)
    }

    for parameter in descriptor.parameters:
        if parameter.location != "path":
            continue
        options[parameter.name] = ParameterOption(
            name=_label(parameter, with_type=False),
            value=parameter.name,
            description=parameter.description,
        )

    if not options:
        return [NO_PATH_PARAMETERS, CUSTOM_OPTION]
    return [*options.values(), CUSTOM_OPTION]


def query_parameters(descriptor: OperationDescriptor) -> List[ParameterOption]:
    options = [
        ParameterOption(
            name=_label(parameter, with_type=True),
            value=parameter.name,
            description=parameter.description,
        )
        for parameter in descriptor.parameters
        if parameter.location == "query"
    ]
    return [*options, CUSTOM_OPTION]


def _label(parameter: ParameterDeclaration, with_type: bool) -> str:
    details = ["required" if parameter.required else "optional"]
    if with_type and parameter.type_hint:
        details.append(parameter.type_hint)
    return f"{parameter.name} ({', '.join(details)})"


def operation_key(descriptor: OperationDescriptor) -> str:
    return descriptor.operation_id or f"{descriptor.method} {descriptor.path}"


def is_operation_key(selection: Any) -> bool:
    return isinstance(selection, str) and bool(selection) and not selection.lstrip().startswith("{")


def decode_selection(selection: Union[str, Dict[str, Any], None]) -> OperationDescriptor:
    if not selection:
        raise OperationSelectionError("No operation selected")
    try:
        if isinstance(selection, dict):
            return OperationDescriptor.model_validate(selection)
        return OperationDescriptor.decode(selection)
    except ValidationError as exc:
        raise OperationSelectionError(f"Invalid operation selection: {exc}") from exc


def resolve_selection(
    spec: Specification, selection: Union[str, Dict[str, Any], None]
) -> OperationDescriptor:
    """Resolve a selection against the freshly loaded spec.

    Accepts a serialized descriptor, a descriptor mapping, or an operation key
    (``operationId`` or ``"METHOD /path"``). A decoded descriptor whose
    operation is gone from the spec is used as decoded.
    """
    if is_operation_key(selection):
        found = _find_by_key(spec, selection)
        if found is None:
            raise OperationSelectionError(f"Unknown operation: {selection}")
        return found

    decoded = decode_selection(selection)
    methods = spec.paths.get(decoded.path) or {}
    operation = methods.get(decoded.method.lower())
    if operation is None:
        logger.info("Operation %s %s not in spec; using stored selection", decoded.method, decoded.path)
        return decoded
    return OperationDescriptor.from_operation(decoded.path, decoded.method, operation)


def _find_by_key(spec: Specification, key: str) -> Optional[OperationDescriptor]:
    for path, method, operation in spec.operations():
        descriptor = OperationDescriptor.from_operation(path, method, operation)
        if key == operation_key(descriptor):
            return descriptor
    return None
