import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import httpx
import pytest

from swagger_adapter.openapi import OpenAPILoader

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> Dict[str, Any]:
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


@pytest.fixture
def petstore_doc() -> Dict[str, Any]:
    return load_fixture("petstore_v3.json")


@pytest.fixture
def swagger2_doc() -> Dict[str, Any]:
    return load_fixture("users_swagger2.json")


@pytest.fixture
def petstore_spec(petstore_doc):
    return OpenAPILoader().parse(petstore_doc)


@pytest.fixture
def swagger2_spec(swagger2_doc):
    return OpenAPILoader().parse(swagger2_doc)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def make_transport():
    return RecordingTransport


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


@pytest.fixture
def spec_transport(petstore_doc, make_transport):
    return make_transport(lambda request: json_response(petstore_doc))
