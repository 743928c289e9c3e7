from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional

from ..models.business import BusinessType
from ..models.provider import ProviderRole


class BusinessRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    business_type: BusinessType = BusinessType.SMALL_BUSINESS
    business_name: Optional[str] = None

    @field_validator("business_type", mode="before")
    def lower_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def is_independent(self) -> bool:
        return self.business_type == BusinessType.INDEPENDENT


class ProviderRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    business_id: int
    provider_role: ProviderRole = ProviderRole.PROVIDER
    is_active: bool = True
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("provider_role", mode="before")
    def lower_role(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ProviderServiceRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    provider_id: int
    service_id: int
    is_active: bool = True


class ActingContext(BaseModel):
    """Who is performing an operation, and on behalf of which business."""

    model_config = ConfigDict(frozen=True)

    provider_id: int
    business_id: int
    role: ProviderRole

    @property
    def can_assign(self) -> bool:
        return self.role in (ProviderRole.OWNER, ProviderRole.DISPATCHER)


class ProviderResponse(BaseModel):
    id: int
    business_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    provider_role: ProviderRole
    is_active: bool

    model_config = {
        "from_attributes": True
    }
