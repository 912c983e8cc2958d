"""Schémas Demande de location / Booking schemas."""

import enum
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from carrental.models.booking import BookingState, FeedbackStatus
from carrental.schemas.common import MAX_INT


class BookingAction(str, enum.Enum):
    """Décision du partenaire / Partner decision."""
    ACCEPT = "accept"
    REJECT = "reject"


class BookingCreate(BaseModel):
    window_id: int = Field(ge=1, le=MAX_INT)
    reservation_date: date


class BookingStatusUpdate(BaseModel):
    action: BookingAction


class CarDetails(BaseModel):
    title: str
    car_model: str
    city: str
    price: float
    image: str | None = None


class TimeSlot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    time_from: str = Field(alias="from")
    time_to: str = Field(alias="to")


class ClientBrief(BaseModel):
    id: int
    name: str
    email: str


class BookingRead(BaseModel):
    id: int
    listing_id: int
    window_id: int | None
    reservation_date: date
    reservation_day: str
    state: BookingState
    feedback_client: FeedbackStatus
    feedback_article: FeedbackStatus
    car_details: CarDetails
    time_slot: TimeSlot
    client: ClientBrief | None = None
    created_at: datetime
