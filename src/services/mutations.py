"""
Create, update and delete calls with cache refresh on success.

Every operation returns a MutationResult instead of raising: the failure is
handed back to the UI action that started it, the list cache is left as it
was and nothing is retried. A successful write is followed by exactly one
refetch of the active list key, awaited before the result is returned so a
deleted row never shows up again.
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

import pydantic
from pydantic import BaseModel

from models.errors import ApiError, ValidationError
from models.schemas import Brand, BrandCreate, BrandUpdate, CreatedBrandData
from services.brands import BrandsService
from services.edit_session import EditSession
from services.notifications import NotificationQueue
from services.query_cache import ActiveQuery

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

CREATE_SUCCESS_MESSAGE = "Brand created successfully!"
UPDATE_SUCCESS_MESSAGE = "Brand updated"
DELETE_SUCCESS_MESSAGE = "Brand deleted"
INVALID_PAYLOAD_MESSAGE = "Invalid data"


@dataclass(frozen=True)
class MutationResult(Generic[T]):
    ok: bool
    data: Optional[T] = None
    error: Optional[ApiError] = None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "MutationResult[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: ApiError) -> "MutationResult[T]":
        return cls(ok=False, error=error)

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return self.error.display_message()


class MutationCoordinator:
    def __init__(
        self,
        brands: BrandsService,
        query: ActiveQuery,
        edit_session: Optional[EditSession] = None,
        notifications: Optional[NotificationQueue] = None,
    ):
        self.brands = brands
        self.query = query
        self.edit_session = edit_session
        self.notifications = notifications

    async def create_brand(self, payload: Union[BrandCreate, dict]) -> MutationResult[CreatedBrandData]:
        try:
            payload = _coerce(BrandCreate, payload)
            created = await self.brands.create(payload)
        except ApiError as e:
            return self._failed("create", e, "brand_name")

        logger.info(f"Created brand {created.name!r} for owner {created.owner_name!r}")
        self._notify_success(CREATE_SUCCESS_MESSAGE)
        await self._refresh()
        return MutationResult.success(created)

    async def update_brand(self, brand_id: int, changes: Union[BrandUpdate, dict]) -> MutationResult[Brand]:
        """Send the fields set on ``changes``; an empty change set only revalidates the list."""
        try:
            changes = _coerce(BrandUpdate, changes)
        except ApiError as e:
            return self._failed("update", e, "name", "status")

        fields = changes.changed_fields()
        if not fields:
            self._close_edit(brand_id)
            await self._refresh()
            return MutationResult.success(self._cached_brand(brand_id))

        try:
            updated = await self.brands.update(brand_id, changes)
        except ApiError as e:
            return self._failed("update", e, "name", "status")

        logger.info(f"Updated brand {brand_id}: {fields}")
        self._close_edit(brand_id)
        self._notify_success(UPDATE_SUCCESS_MESSAGE)
        await self._refresh()
        return MutationResult.success(updated)

    async def delete_brand(self, brand_id: int) -> MutationResult[None]:
        """Hard-delete a brand. Callers confirm with the user before calling this."""
        try:
            await self.brands.remove(brand_id)
        except ApiError as e:
            return self._failed("delete", e)

        logger.info(f"Deleted brand {brand_id}")
        self._close_edit(brand_id)
        self._notify_success(DELETE_SUCCESS_MESSAGE)
        await self._refresh()
        return MutationResult.success(None)

    async def _refresh(self) -> None:
        task = self.query.refetch()
        if task is not None:
            await task

    def _cached_brand(self, brand_id: int) -> Optional[Brand]:
        for brand in self.query.data or []:
            if brand.id == brand_id:
                return brand
        return None

    def _close_edit(self, brand_id: int) -> None:
        if self.edit_session is not None:
            self.edit_session.complete(brand_id)

    def _notify_success(self, message: str) -> None:
        if self.notifications is not None:
            self.notifications.success(message)

    def _failed(self, operation: str, error: ApiError, *fields: str) -> MutationResult:
        logger.info(f"Brand {operation} failed ({type(error).__name__}): {error.message}")
        if self.notifications is not None:
            self.notifications.error(error.display_message(*fields))
        return MutationResult.failure(error)


def _coerce(model: type[M], value: Union[M, dict]) -> M:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except pydantic.ValidationError as e:
        field_errors: dict[str, list[str]] = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "__root__"
            field_errors.setdefault(field, []).append(err["msg"])
        raise ValidationError(INVALID_PAYLOAD_MESSAGE, field_errors=field_errors, raw=value) from e
