import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from models.schemas import BrandCreate, CreatedBrandData
from services.mutations import MutationCoordinator, MutationResult

logger = logging.getLogger(__name__)

DEFAULT_CREATE_ERROR = "Error creating brand"


class WizardStep(IntEnum):
    BRAND = 1
    OWNER = 2
    SUMMARY = 3


@dataclass(frozen=True)
class StepInfo:
    step: WizardStep
    title: str
    description: str


STEPS = [
    StepInfo(WizardStep.BRAND, "Brand information", "Enter the name of the brand you want to register"),
    StepInfo(WizardStep.OWNER, "Owner information", "Specify who will own this brand"),
    StepInfo(WizardStep.SUMMARY, "Summary", "Review the information before creating the brand"),
]

_STEP_FIELDS = {
    WizardStep.BRAND: ("brand_name",),
    WizardStep.OWNER: ("owner_name",),
    WizardStep.SUMMARY: ("brand_name", "owner_name"),
}


class CreationWizard:
    def __init__(self, coordinator: MutationCoordinator):
        self.coordinator = coordinator
        self.reset()

    def reset(self) -> None:
        self.step = WizardStep.BRAND
        self.form = {"brand_name": "", "owner_name": ""}
        self.is_submitting = False
        self.error_message: Optional[str] = None
        self.created: Optional[CreatedBrandData] = None

    @property
    def info(self) -> StepInfo:
        return STEPS[self.step - 1]

    @property
    def completed(self) -> bool:
        return self.created is not None

    def set_field(self, field: str, value: str) -> None:
        if field not in self.form:
            raise KeyError(field)
        self.form[field] = value

    def can_continue(self) -> bool:
        return all(self.form[f].strip() for f in _STEP_FIELDS[self.step])

    def next_step(self) -> WizardStep:
        if self.step < WizardStep.SUMMARY and self.can_continue():
            self.step = WizardStep(self.step + 1)
        return self.step

    def prev_step(self) -> WizardStep:
        if self.step > WizardStep.BRAND:
            self.step = WizardStep(self.step - 1)
        return self.step

    async def submit(self) -> Optional[MutationResult[CreatedBrandData]]:
        if self.step != WizardStep.SUMMARY or self.is_submitting or not self.can_continue():
            return None

        self.is_submitting = True
        self.error_message = None
        try:
            result = await self.coordinator.create_brand(BrandCreate(**self.form))
        finally:
            self.is_submitting = False

        if result.ok:
            self.created = result.data
        else:
            message = result.error.display_message("brand_name") if result.error else None
            self.error_message = message or DEFAULT_CREATE_ERROR
        return result
