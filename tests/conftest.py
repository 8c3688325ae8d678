"""Shared fixtures: sample Postman payloads and a fake Postman API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest

from postman_graph.core.client import PostmanClient
from postman_graph.core.entities import CombinedDataset


def request_item(item_id: Optional[str], name: str, method: Optional[str] = "GET", url: Any = None) -> Dict[str, Any]:
    request: Dict[str, Any] = {}
    if method is not None:
        request["method"] = method
    if url is not None:
        request["url"] = url
    item: Dict[str, Any] = {"name": name, "request": request}
    if item_id is not None:
        item["id"] = item_id
    return item


def folder_item(name: str, children: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"name": name, "item": children}


def collection_detail(collection_id: str, name: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "info": {"_postman_id": collection_id, "name": name, "schema": "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"},
        "item": items,
    }


@pytest.fixture
def raw_dataset() -> Dict[str, Any]:
    """1 user, 2 workspaces, 3 collections (2 detailed: 2 requests and 0), 1 environment."""
    return {
        "user": {"id": 12345, "username": "jdoe", "fullName": "Jane Doe", "email": "jane@example.com"},
        "workspaces": [
            {"id": "ws1", "name": "Team", "type": "team"},
            {"id": "ws2", "name": "Personal", "type": "personal", "description": "Mine"},
        ],
        "collections": [
            {"id": "c1", "name": "Orders API", "uid": "12345-c1"},
            {"id": "c2", "name": "Empty", "uid": "12345-c2"},
            {"id": "c3", "name": "Not detailed", "uid": "12345-c3"},
        ],
        "detailedCollections": [
            collection_detail("c1", "Orders API", [
                folder_item("Orders", [
                    request_item("r1", "List orders", "GET", {"raw": "https://api.example.com/orders"}),
                ]),
                request_item("r2", "Create order", "POST", "https://api.example.com/orders"),
            ]),
            collection_detail("c2", "Empty", []),
        ],
        "environments": [{"id": "e1", "name": "Production", "uid": "12345-e1"}],
        "timestamp": "2024-05-01T10:00:00.000Z",
    }


@pytest.fixture
def dataset(raw_dataset) -> CombinedDataset:
    return CombinedDataset.model_validate(raw_dataset)


class FakePostmanAPI:
    """In-memory Postman API served through httpx.MockTransport."""

    def __init__(self, collection_count: int = 3):
        self.calls: List[str] = []
        self.api_keys: List[Optional[str]] = []
        self.failures: Dict[str, int] = {}
        self.network_failures: set = set()
        self.details: Dict[str, Any] = {}
        self.collections = [
            {"id": f"c{i}", "name": f"Collection {i}", "uid": f"1-c{i}"}
            for i in range(1, collection_count + 1)
        ]
        self.routes: Dict[str, Any] = {
            "/workspaces": {"workspaces": [{"id": "ws1", "name": "Team", "type": "team"}]},
            "/environments": {"environments": [{"id": "e1", "name": "Production"}]},
            "/me": {"user": {"id": 1, "username": "jdoe"}},
        }

    def fail(self, path: str, status: int = 500) -> None:
        self.failures[path] = status

    def fail_network(self, path: str) -> None:
        self.network_failures.add(path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        self.api_keys.append(request.headers.get("X-API-Key"))

        if path in self.network_failures:
            raise httpx.ConnectError("Connection refused", request=request)
        if path in self.failures:
            status = self.failures[path]
            return httpx.Response(
                status, json={"error": {"name": "serverError", "message": f"Failure on {path}"}}
            )

        if path == "/collections":
            return httpx.Response(200, json={"collections": self.collections})
        if path.startswith("/collections/"):
            collection_id = path.rsplit("/", 1)[-1]
            if collection_id in self.details:
                return httpx.Response(200, json={"collection": self.details[collection_id]})
            items = [request_item(f"{collection_id}-r1", "Ping", "GET", "https://example.com/ping")]
            return httpx.Response(
                200, json={"collection": collection_detail(collection_id, collection_id, items)}
            )
        if path in self.routes:
            return httpx.Response(200, json=self.routes[path])
        return httpx.Response(404, json={"error": {"name": "notFound", "message": "Not found"}})

    def client(self, api_key: Optional[str] = "PMAK-test", **kwargs) -> PostmanClient:
        return PostmanClient(
            api_key=api_key,
            base_url="https://api.test",
            transport=httpx.MockTransport(self.handler),
            **kwargs,
        )


@pytest.fixture
def fake_api() -> FakePostmanAPI:
    return FakePostmanAPI()
