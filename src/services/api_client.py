import logging
from typing import Any, Mapping, Optional

import httpx

from config import settings
from models.errors import ApiError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

_BODY_METHODS = {"POST", "PUT", "PATCH"}


class ApiClient:
    """Issues single calls against the brands API and normalizes failures.

    No retries happen here; whether a call is safe to repeat depends on the
    operation, so that decision stays with the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self._transport = transport

    def build_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"
        url = httpx.URL(base + path.lstrip("/"))
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        if query:
            url = url.copy_merge_params(query)
        return str(url)

    async def execute(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """Run one request and return the decoded JSON body (None when empty).

        Raises an ApiError subclass on non-2xx responses and NetworkError when
        no response arrives at all.
        """
        method = method.upper()
        url = self.build_url(path, params)
        request_kwargs: dict[str, Any] = {"headers": DEFAULT_HEADERS}
        if method in _BODY_METHODS and body is not None:
            request_kwargs["json"] = body

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.request(method, url, **request_kwargs)
            except httpx.RequestError as e:
                logger.warning(f"{method} {url} failed without response: {e}")
                raise NetworkError(raw=e) from e

        payload = _decode(response)
        if response.is_success:
            return payload

        error = ApiError.from_response(response.status_code, payload)
        logger.info(f"{method} {url} -> {response.status_code}: {error.message}")
        raise error

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.execute("GET", path, params=params)

    async def post(self, path: str, body: Any) -> Any:
        return await self.execute("POST", path, body=body)

    async def patch(self, path: str, body: Any) -> Any:
        return await self.execute("PATCH", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self.execute("DELETE", path)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None
