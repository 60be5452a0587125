import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from models.errors import ValidationError
from models.schemas import Brand, BrandStatus
from services.api_client import ApiClient
from services.brands import BrandsService, brands_query_key
from services.creation_wizard import CreationWizard
from services.debounce import DebouncedInput
from services.edit_session import DiscardHook, EditSession
from services.mutations import MutationCoordinator, MutationResult
from services.notifications import NotificationQueue
from services.query_cache import ActiveQuery, QueryCache

logger = logging.getLogger(__name__)

NAME_REQUIRED_MESSAGE = "Brand name is required"


@dataclass(frozen=True)
class BrandStats:
    total: int = 0
    by_status: dict[BrandStatus, int] = field(default_factory=dict)
    unique_owners: int = 0

    @classmethod
    def from_brands(cls, brands: list[Brand]) -> "BrandStats":
        counts = Counter(b.status for b in brands)
        owners = {b.owner.name for b in brands if b.owner and b.owner.name}
        return cls(
            total=len(brands),
            by_status={s: counts.get(s, 0) for s in BrandStatus},
            unique_owners=len(owners),
        )


class BrandsViewController:
    """State behind the brands page: owner filter, list query, inline edit and writes."""

    def __init__(
        self,
        client: Optional[ApiClient] = None,
        cache: Optional[QueryCache] = None,
        notifications: Optional[NotificationQueue] = None,
        quiet_period: Optional[float] = None,
        confirm_discard: Optional[DiscardHook] = None,
    ):
        self.brands = BrandsService(client)
        self.cache = cache or QueryCache()
        self.query: ActiveQuery[list[Brand]] = ActiveQuery(self.cache, self.brands.fetcher_for)
        self.filter = DebouncedInput(quiet_period, on_settle=self._on_filter_settled)
        self.edit_session = EditSession(confirm_discard)
        self.notifications = notifications or NotificationQueue()
        self.mutations = MutationCoordinator(self.brands, self.query, self.edit_session, self.notifications)

    def mount(self, initial_filter: Optional[str] = None) -> None:
        """Load the list for the filter value without waiting for the quiet period."""
        if initial_filter is not None:
            self.filter.raw_value = initial_filter
        if self.filter.settled_value is None or self.filter.pending:
            self.filter.flush()

    def on_filter_change(self, raw: str) -> None:
        self.filter.on_input_change(raw)

    def clear_filter(self) -> None:
        self.filter.on_input_change("")

    async def wait_idle(self) -> None:
        await self.filter.wait_settled()
        await self.query.settled()

    @property
    def rows(self) -> list[Brand]:
        return self.query.data or []

    @property
    def stats(self) -> BrandStats:
        return BrandStats.from_brands(self.rows)

    def start_edit(self, brand: Brand) -> bool:
        return self.edit_session.start_edit(brand)

    def change_draft(self, name: Optional[str] = None, status: Optional[BrandStatus] = None) -> None:
        self.edit_session.change_field(name=name, status=status)

    def cancel_edit(self) -> None:
        self.edit_session.cancel()

    async def save_edit(self) -> Optional[MutationResult[Brand]]:
        editing = self.edit_session.state
        brand_id = self.edit_session.active_id
        if brand_id is None:
            return None
        if not editing.draft.name.strip():
            error = ValidationError(NAME_REQUIRED_MESSAGE, field_errors={"name": [NAME_REQUIRED_MESSAGE]})
            self.notifications.error(NAME_REQUIRED_MESSAGE)
            return MutationResult.failure(error)
        return await self.mutations.update_brand(brand_id, editing.changes())

    async def delete_brand(self, brand_id: int) -> MutationResult[None]:
        return await self.mutations.delete_brand(brand_id)

    def new_wizard(self) -> CreationWizard:
        return CreationWizard(self.mutations)

    def dispose(self) -> None:
        self.filter.dispose()
        self.query.close()

    def _on_filter_settled(self, value: str) -> None:
        key = brands_query_key(value)
        logger.debug(f"Filter settled, active key is now {key}")
        self.query.set_key(key)
