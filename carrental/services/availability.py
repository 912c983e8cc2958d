"""
Service Planning de disponibilité / Availability schedule service.
Remplacement atomique du planning hebdomadaire d'une annonce et lecture
normalisée sur 7 jours.
Atomic replacement of a listing's weekly schedule and 7-day normalized read.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.exceptions import NotFoundError, ValidationError
from carrental.models.availability import WEEKDAYS, AvailabilityWindow, Weekday
from carrental.models.booking import Booking
from carrental.models.listing import Listing
from carrental.schemas.availability import AvailabilityInput
from carrental.utils.timeslots import is_same_day_range, is_valid_hhmm


class AvailabilityService:
    """Planning hebdomadaire / Weekly schedule."""

    @staticmethod
    def selected_windows(entries: list[AvailabilityInput]) -> list[tuple[Weekday, str, str]]:
        """
        Valider le planning soumis / Validate the submitted schedule.
        Retourne (jour, début, fin) pour chaque jour sélectionné, en ordre canonique.
        Returns (day, from, to) for each selected day, in canonical order.
        """
        errors: dict[str, list[str]] = {}
        seen: set[Weekday] = set()
        selected = {}
        for entry in entries:
            key = f"availability.{entry.day.value}"
            if entry.day in seen:
                errors.setdefault(f"{key}.day", []).append("Each day may only appear once.")
                continue
            seen.add(entry.day)
            if not entry.selected:
                continue
            if not is_valid_hhmm(entry.time_from):
                errors.setdefault(f"{key}.from", []).append("The from field is required when the day is selected.")
            if not is_valid_hhmm(entry.time_to):
                errors.setdefault(f"{key}.to", []).append("The to field is required when the day is selected.")
            elif is_valid_hhmm(entry.time_from) and not is_same_day_range(entry.time_from, entry.time_to):
                errors.setdefault(f"{key}.to", []).append("The to field must be a time after from.")
            selected[entry.day] = (entry.day, entry.time_from, entry.time_to)
        if errors:
            raise ValidationError(errors)
        return [selected[day] for day in WEEKDAYS if day in selected]

    @staticmethod
    async def replace_windows(
        db: AsyncSession,
        listing_id: int,
        entries: list[AvailabilityInput],
    ) -> list[AvailabilityWindow]:
        """
        Remplacer tout le planning dans la transaction courante / Replace the whole schedule
        within the current transaction. Idempotent pour une même entrée / for the same input.
        Les demandes liées aux anciens créneaux gardent leur copie d'horaire.
        Bookings on the old windows keep their time snapshot.
        """
        windows = AvailabilityService.selected_windows(entries)

        old_ids = select(AvailabilityWindow.id).where(AvailabilityWindow.listing_id == listing_id)
        await db.execute(
            update(Booking).where(Booking.window_id.in_(old_ids)).values(window_id=None)
        )
        await db.execute(delete(AvailabilityWindow).where(AvailabilityWindow.listing_id == listing_id))

        created = [
            AvailabilityWindow(listing_id=listing_id, day=day, time_from=start, time_to=end, is_active=True)
            for day, start, end in windows
        ]
        db.add_all(created)
        await db.flush()
        return created

    @staticmethod
    def normalize_week(windows: list[AvailabilityWindow]) -> list[dict]:
        """7 jours, forme fixe / 7 days, fixed shape {day, selected, from, to}."""
        week = []
        for day in WEEKDAYS:
            window = next((w for w in windows if w.day == day), None)
            week.append({
                "day": day,
                "selected": window is not None,
                "from": window.time_from if window else "",
                "to": window.time_to if window else "",
            })
        return week

    @staticmethod
    async def list_availability(db: AsyncSession, listing_id: int) -> list[dict]:
        """Planning normalisé d'une annonce / Normalized schedule of a listing."""
        if await db.get(Listing, listing_id) is None:
            raise NotFoundError("Listing not found")
        result = await db.execute(
            select(AvailabilityWindow)
            .where(AvailabilityWindow.listing_id == listing_id)
            .order_by(AvailabilityWindow.id)
        )
        return AvailabilityService.normalize_week(list(result.scalars().all()))

    @staticmethod
    async def set_window_status(
        db: AsyncSession, listing_id: int, window_id: int, active: bool
    ) -> AvailabilityWindow:
        """Activer/désactiver un créneau / Toggle one window."""
        window = await db.get(AvailabilityWindow, window_id)
        if window is None or window.listing_id != listing_id:
            raise NotFoundError("Availability window not found")
        window.is_active = active
        await db.flush()
        return window
