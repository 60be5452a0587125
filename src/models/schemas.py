from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class BrandStatus(str, Enum):
    PENDIENTE = "PENDIENTE"
    APROBADA = "APROBADA"
    RECHAZADA = "RECHAZADA"


class Owner(BaseModel):
    id: int
    name: str


class Brand(BaseModel):
    id: int
    name: str = Field(..., min_length=1)
    status: BrandStatus
    owner: Optional[Owner] = None


class ApiEnvelope(BaseModel):
    success: bool = True
    msg: Optional[str] = None
    data: Any = None
    errors: Any = None


class BrandCreate(BaseModel):
    brand_name: str
    owner_name: str


class BrandUpdate(BaseModel):
    name: Optional[str] = None
    status: Optional[BrandStatus] = None

    def changed_fields(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class CreatedBrandData(BaseModel):
    name: str
    status: BrandStatus
    owner_name: str
