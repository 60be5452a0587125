"""Test fixtures for the brands client core."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import httpx
import pytest


def ensure_src_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.append(str(src_path))


ensure_src_on_path()

from services.api_client import ApiClient

BASE_URL = "http://brands.test/api"


def brand_json(brand_id: int, name: str, status: str = "PENDIENTE", owner: str = "acme", owner_id: int = 5) -> dict:
    return {"id": brand_id, "name": name, "status": status, "owner": {"id": owner_id, "name": owner}}


def envelope(data, msg: str = "ok") -> dict:
    return {"success": True, "msg": msg, "data": data, "errors": None}


class FakeBrandsApi:
    """In-memory stand-in for the remote brands API, served through httpx.MockTransport."""

    def __init__(self, brands: Optional[list[dict]] = None):
        self.brands: list[dict] = [dict(b) for b in (brands or [])]
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, Optional[dict]]] = {}
        self.gates: dict[tuple[str, str], asyncio.Event] = {}
        self._next_id = max([b["id"] for b in self.brands], default=0) + 1

    def fail(self, method: str, path: str, status: int, body: Optional[dict] = None) -> None:
        self.failures[(method, path)] = (status, body)

    def gate(self, method: str, path: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[(method, path)] = event
        return event

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        if key in self.failures:
            status, body = self.failures[key]
            return httpx.Response(status, json=body) if body is not None else httpx.Response(status)
        return self._route(request)

    def _route(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        owner = request.url.params.get("owner")

        if request.method == "GET" and path == "/brands":
            rows = [b for b in self.brands if not owner or owner.lower() in b["owner"]["name"].lower()]
            return httpx.Response(200, json=envelope(rows))
        if request.method == "GET" and path == "/brands/by-owner":
            rows = [b for b in self.brands if owner and owner.lower() in b["owner"]["name"].lower()]
            return httpx.Response(200, json=envelope(rows))
        if request.method == "POST" and path == "/brand":
            body = json.loads(request.content)
            brand = brand_json(self._next_id, body["brand_name"], owner=body["owner_name"], owner_id=100 + self._next_id)
            self._next_id += 1
            self.brands.append(brand)
            return httpx.Response(
                201,
                json=envelope({"name": brand["name"], "status": brand["status"], "owner_name": body["owner_name"]}),
            )

        parts = path.strip("/").split("/")
        if len(parts) >= 2 and parts[0] == "brand":
            brand = next((b for b in self.brands if b["id"] == int(parts[1])), None)
            if brand is None:
                return httpx.Response(404, json={"success": False, "msg": "Brand not found", "errors": None})
            if request.method == "PATCH" and parts[2:] == ["update"]:
                brand.update(json.loads(request.content))
                return httpx.Response(200, json=envelope(brand))
            if request.method == "DELETE":
                self.brands.remove(brand)
                return httpx.Response(200, json=envelope(None))

        return httpx.Response(404, json={"success": False, "msg": "Not found", "errors": None})


@pytest.fixture
def fake_api():
    return FakeBrandsApi(
        [
            brand_json(1, "Acme", "APROBADA", owner="acme", owner_id=5),
            brand_json(2, "Globex", "PENDIENTE", owner="globex", owner_id=6),
            brand_json(3, "Acme Labs", "RECHAZADA", owner="acme", owner_id=5),
        ]
    )


@pytest.fixture
def api_client(fake_api):
    return ApiClient(base_url=BASE_URL, timeout=5.0, transport=fake_api.transport())
