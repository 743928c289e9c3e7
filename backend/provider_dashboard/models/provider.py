import enum

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class ProviderRole(str, enum.Enum):
    OWNER = "owner"
    DISPATCHER = "dispatcher"
    PROVIDER = "provider"


class Provider(BaseModel):
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=True, unique=True)
    provider_role = Column(
        CaseInsensitiveEnum(ProviderRole, name="providerrole"),
        nullable=False,
        default=ProviderRole.PROVIDER,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    business = relationship("Business", back_populates="providers")
    services = relationship("ProviderService", back_populates="provider")


class ProviderService(BaseModel):
    """Which services a provider is qualified to deliver."""

    __tablename__ = "provider_services"
    __table_args__ = (UniqueConstraint("provider_id", "service_id", name="uq_provider_service"),)

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(Integer, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    provider = relationship("Provider", back_populates="services")
