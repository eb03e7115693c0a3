"""Request execution and per-item batch processing."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, TypeVar

import httpx

from .errors import ItemError, RequestExecutionError
from .logging import redact_payload, redact_url
from .models import RequestDescriptor, ResultItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Requester(Protocol):
    async def send(self, request: RequestDescriptor) -> Any:
        ...


class HttpRequester:
    """Sends a ``RequestDescriptor`` with httpx. No retries."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.transport = transport

    async def send(self, request: RequestDescriptor) -> Any:
        content: Optional[bytes] = None
        if request.body_mode == "json":
            content = json.dumps(request.body).encode("utf-8")
        elif request.body is not None:
            content = str(request.body).encode("utf-8")

        try:
            async with httpx.AsyncClient(
                timeout=request.timeout_ms / 1000,
                verify=request.verify_tls,
                follow_redirects=request.follow_redirects,
                transport=self.transport,
            ) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=content,
                )
        except httpx.TimeoutException as exc:
            raise RequestExecutionError(
                f"Request timeout after {request.timeout_ms} ms"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            # Header values and URLs that httpx cannot encode fail this item only.
            raise RequestExecutionError(f"Request failed: {exc}") from exc

        if not response.is_success and not request.ignore_response_code:
            raise RequestExecutionError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
            )

        body = self._decode(response, request.response_format)
        if request.full_response:
            return {
                "status_code": response.status_code,
                "headers": dict(response.headers),
                "body": body,
            }
        return body

    def _decode(self, response: httpx.Response, response_format: str) -> Any:
        if response_format == "text":
            return response.text
        if not response.content:
            return {}
        content_type = response.headers.get("content-type", "")
        if response_format == "autodetect" and "json" not in content_type:
            return response.text
        try:
            return response.json()
        except ValueError as exc:
            if response_format == "autodetect":
                return response.text
            raise RequestExecutionError(f"Response is not valid JSON: {exc}") from exc


class BatchExecutor:
    def __init__(self, requester: Requester) -> None:
        self.requester = requester

    async def run(
        self,
        items: Sequence[T],
        prepare: Callable[[T, int], RequestDescriptor],
        continue_on_fail: bool = False,
    ) -> List[ResultItem]:
        """Run items strictly in order, one request at a time.

        ``prepare`` derives the request for one item. An ``ItemError`` raised
        while preparing or sending is captured into that item's result when
        ``continue_on_fail`` is set, otherwise it aborts the batch.
        """
        results: List[ResultItem] = []
        for index, item in enumerate(items):
            try:
                request = prepare(item, index)
                logger.info(
                    "Executing item=%s %s %s headers=%s",
                    index,
                    request.method,
                    redact_url(request.url),
                    redact_payload(request.headers),
                )
                payload = await self.requester.send(request)
            except ItemError as exc:
                if not continue_on_fail:
                    logger.error("Item %s failed; aborting batch: %s", index, exc)
                    raise
                logger.warning("Item %s failed: %s", index, exc)
                results.append(ResultItem(item_index=index, error=str(exc)))
                continue
            results.append(ResultItem(item_index=index, payload=payload))
        return results


def format_results(results: Sequence[ResultItem]) -> List[Dict[str, Any]]:
    return [result.to_dict() for result in results]
