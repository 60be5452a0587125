"""
Inline edit state for the brands table.

At most one row is edited at a time. Starting an edit on another row
discards the current draft unless a ``confirm_discard`` hook vetoes it.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from models.schemas import Brand, BrandStatus, BrandUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrandDraft:
    name: str
    status: BrandStatus

    @classmethod
    def from_brand(cls, brand: Brand) -> "BrandDraft":
        return cls(name=brand.name, status=brand.status)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Editing:
    brand_id: int
    draft: BrandDraft
    original: BrandDraft

    def changes(self) -> BrandUpdate:
        return BrandUpdate(
            name=self.draft.name if self.draft.name != self.original.name else None,
            status=self.draft.status if self.draft.status != self.original.status else None,
        )


EditState = Union[Idle, Editing]
DiscardHook = Callable[[Editing, Brand], bool]


class EditSession:
    def __init__(self, confirm_discard: Optional[DiscardHook] = None):
        self.state: EditState = Idle()
        self.confirm_discard = confirm_discard
        self.last_discarded: Optional[Editing] = None

    @property
    def active_id(self) -> Optional[int]:
        if isinstance(self.state, Editing):
            return self.state.brand_id
        return None

    @property
    def draft(self) -> Optional[BrandDraft]:
        if isinstance(self.state, Editing):
            return self.state.draft
        return None

    def is_editing(self, brand_id: Optional[int] = None) -> bool:
        if brand_id is None:
            return isinstance(self.state, Editing)
        return self.active_id == brand_id

    def start_edit(self, brand: Brand) -> bool:
        """Snapshot ``brand`` into a new draft. Returns False if the switch was vetoed."""
        current = self.state
        if isinstance(current, Editing):
            if current.brand_id == brand.id:
                return True
            if self.confirm_discard is not None and not self.confirm_discard(current, brand):
                logger.debug(f"Switch from brand {current.brand_id} to {brand.id} vetoed")
                return False
            self._discard(current)

        snapshot = BrandDraft.from_brand(brand)
        self.state = Editing(brand_id=brand.id, draft=snapshot, original=snapshot)
        return True

    def change_field(self, name: Optional[str] = None, status: Optional[BrandStatus] = None) -> BrandDraft:
        current = self.state
        if not isinstance(current, Editing):
            raise RuntimeError("No brand is being edited")
        draft = current.draft
        if name is not None:
            draft = replace(draft, name=name)
        if status is not None:
            draft = replace(draft, status=BrandStatus(status))
        self.state = replace(current, draft=draft)
        return draft

    def cancel(self) -> None:
        if isinstance(self.state, Editing):
            self._discard(self.state)
        self.state = Idle()

    def complete(self, brand_id: int) -> bool:
        """Close the session after a successful save of ``brand_id``."""
        if self.active_id != brand_id:
            return False
        self.state = Idle()
        return True

    def _discard(self, editing: Editing) -> None:
        self.last_discarded = editing
        if editing.draft != editing.original:
            logger.debug(f"Discarding unsaved draft for brand {editing.brand_id}")
