"""Error taxonomy for spec loading and operation execution."""

from __future__ import annotations


class AdapterError(Exception):
    pass


class BatchError(AdapterError):
    """Raised once per batch, before any item runs. Never captured per item."""


class SpecFetchError(BatchError):
    pass


class SpecParseError(BatchError):
    pass


class MissingBaseUrlError(BatchError):
    pass


class InvalidBaseUrlError(BatchError):
    pass


class ItemError(AdapterError):
    """Failure scoped to a single input item."""


class OperationSelectionError(ItemError):
    pass


class BodyParseError(ItemError):
    pass


class RequestExecutionError(ItemError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnresolvedPathParameterError(ItemError):
    pass


class InvalidItemError(ItemError):
    pass
