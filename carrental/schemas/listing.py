"""
Schémas Annonce / Listing schemas.
Création et mise à jour partagent les mêmes règles.
Create and update share the same rules.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from carrental.models.listing import PREMIUM_DURATIONS, City
from carrental.schemas.availability import AvailabilityInput, DaySchedule, WindowRead


class ListingCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=1000)
    car_model: str = Field(min_length=1, max_length=255)
    city: City
    color: str = Field(max_length=7, pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$")
    price: Decimal = Field(ge=0, le=Decimal("999999.99"), decimal_places=2)
    premium: bool = False
    premium_duration: int | None = Field(None, validate_default=True)
    availability: list[AvailabilityInput] = []

    @field_validator("premium_duration")
    @classmethod
    def _premium_duration(cls, value: int | None, info: ValidationInfo) -> int | None:
        if not info.data.get("premium"):
            return None
        if value is None:
            raise ValueError("The premium duration field is required when premium is true.")
        if value not in PREMIUM_DURATIONS:
            raise ValueError("The selected premium duration is invalid.")
        return value

    @field_validator("availability")
    @classmethod
    def _one_entry_per_day(cls, value: list[AvailabilityInput]) -> list[AvailabilityInput]:
        days = [entry.day for entry in value]
        if len(days) != len(set(days)):
            raise ValueError("Each day may only appear once.")
        return value


class ListingStatusUpdate(BaseModel):
    active: bool


class OwnerBrief(BaseModel):
    name: str
    email: str


class ListingRead(BaseModel):
    """Annonce vue par son propriétaire / Listing as seen by its owner."""
    id: int
    title: str
    description: str
    car_model: str
    city: str
    color: str
    price: float
    premium: bool
    premium_duration: int | None
    is_active: bool
    images: list[str]
    availability: list[DaySchedule]
    created_at: datetime
    updated_at: datetime


class CatalogListing(BaseModel):
    """Annonce publique du catalogue / Public catalog entry."""
    id: int
    title: str
    description: str
    car_model: str
    city: str
    color: str
    price: float
    premium: bool
    images: list[str]
    owner: OwnerBrief
    availability: list[WindowRead]
    created_at: datetime


class PriceRange(BaseModel):
    min: float
    max: float


class FilterOptions(BaseModel):
    cities: list[str]
    car_models: list[str]
    colors: list[str]
    price_range: PriceRange
