from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

import pydantic
from pydantic import TypeAdapter

from models.errors import UnknownServerError
from models.schemas import ApiEnvelope, Brand, BrandCreate, BrandUpdate, CreatedBrandData
from services.api_client import ApiClient
from services.query_cache import QueryKey

logger = logging.getLogger(__name__)

BRANDS_RESOURCE = "brands"
BRANDS_BY_OWNER_RESOURCE = "brands-by-owner"

_BRAND_LIST = TypeAdapter(list[Brand])


def brands_query_key(owner: Optional[str]) -> Optional[QueryKey]:
    """Key for the list shown under an owner filter.

    ``None`` (filter not settled yet) gives no key at all; a blank filter
    is the unfiltered list.
    """
    if owner is None:
        return None
    owner = owner.strip()
    if not owner:
        return QueryKey.of(BRANDS_RESOURCE)
    return QueryKey.of(BRANDS_BY_OWNER_RESOURCE, owner=owner)


class BrandsService:
    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()

    async def list(self, owner: Optional[str] = None) -> list[Brand]:
        params = {"owner": owner} if owner else None
        body = await self.client.get("/brands", params)
        return _parse(_BRAND_LIST, _data(body))

    async def search_by_owner(self, owner: str) -> list[Brand]:
        body = await self.client.get("/brands/by-owner", {"owner": owner})
        return _parse(_BRAND_LIST, _data(body))

    async def create(self, payload: BrandCreate) -> CreatedBrandData:
        body = await self.client.post("/brand", payload.model_dump())
        return _parse(TypeAdapter(CreatedBrandData), _data(body))

    async def update(self, brand_id: int, payload: BrandUpdate) -> Brand:
        body = await self.client.patch(f"/brand/{brand_id}/update", payload.changed_fields())
        return _parse(TypeAdapter(Brand), _data(body))

    async def remove(self, brand_id: int) -> bool:
        await self.client.delete(f"/brand/{brand_id}")
        return True

    def fetcher_for(self, key: QueryKey) -> Callable[[], Awaitable[list[Brand]]]:
        if key.resource == BRANDS_BY_OWNER_RESOURCE:
            owner = key.as_params()["owner"]
            return lambda: self.search_by_owner(owner)
        if key.resource == BRANDS_RESOURCE:
            owner = key.as_params().get("owner")
            return lambda: self.list(owner)
        raise ValueError(f"No fetcher for resource {key.resource!r}")


def _data(body: Any) -> Any:
    if body is None:
        return None
    try:
        return ApiEnvelope.model_validate(body).data
    except pydantic.ValidationError as e:
        raise UnknownServerError("Malformed response from server", raw=body) from e


def _parse(adapter: TypeAdapter, data: Any) -> Any:
    try:
        return adapter.validate_python(data)
    except pydantic.ValidationError as e:
        logger.warning(f"Unexpected response payload: {e}")
        raise UnknownServerError("Malformed response from server", raw=data) from e
