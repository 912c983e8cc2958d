"""Schémas Panier / Cart schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from carrental.schemas.booking import CarDetails
from carrental.schemas.common import MAX_INT


class CartCreate(BaseModel):
    listing_id: int = Field(ge=1, le=MAX_INT)
    promo_code: str | None = Field(None, max_length=50)


class CartRead(BaseModel):
    id: int
    listing_id: int
    promo_code: str | None
    car_details: CarDetails
    created_at: datetime
