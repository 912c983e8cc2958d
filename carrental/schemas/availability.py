"""Schémas Disponibilités / Availability schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carrental.models.availability import Weekday
from carrental.utils.timeslots import is_valid_hhmm


class AvailabilityInput(BaseModel):
    """Un jour du planning soumis / One day of a submitted schedule.

    `from`/`to` sont ignorés quand `selected` est faux.
    from/to are ignored when selected is false.
    """
    model_config = ConfigDict(populate_by_name=True)

    day: Weekday
    selected: bool = False
    time_from: str | None = Field(None, alias="from")
    time_to: str | None = Field(None, alias="to")

    @field_validator("time_from", "time_to", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("time_from", "time_to")
    @classmethod
    def _check_format(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_hhmm(value):
            raise ValueError("The time does not match the format H:i.")
        return value


class DaySchedule(BaseModel):
    """Jour normalisé pour l'affichage / Normalized day for presentation."""
    model_config = ConfigDict(populate_by_name=True)

    day: Weekday
    selected: bool
    time_from: str = Field(alias="from")
    time_to: str = Field(alias="to")


class WindowRead(BaseModel):
    """Créneau tel qu'affiché au catalogue / Window as shown in the catalog."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    day: Weekday
    time_from: str = Field(alias="from")
    time_to: str = Field(alias="to")
    available: bool


class WindowStatusUpdate(BaseModel):
    active: bool
