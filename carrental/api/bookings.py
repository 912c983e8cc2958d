"""
Routes Demandes de location / Booking routes.
Client : réserver, lister, annuler. Partenaire : demandes reçues, accepter/refuser.
Client: book, list, cancel. Partner: incoming requests, accept/reject.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.api.deps import EntityId, get_current_user, require_role
from carrental.api.presenters import booking_read
from carrental.database import get_db
from carrental.models.booking import BookingState
from carrental.models.user import Role, User
from carrental.schemas.booking import BookingCreate, BookingRead, BookingStatusUpdate
from carrental.schemas.common import ApiResponse
from carrental.services.bookings import BookingService
from carrental.services.image_store import ImageStore, get_image_store
from carrental.utils.clock import Clock, get_clock

router = APIRouter()


@router.post("/", response_model=ApiResponse[BookingRead], status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    client: User = Depends(require_role(Role.CLIENT)),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Réserver un créneau à une date / Book a window on a date."""
    booking = await BookingService.create_booking(db, clock, client, data.window_id, data.reservation_date)
    return ApiResponse(message="Booking request submitted successfully", data=booking_read(booking, store))


@router.get("/mine", response_model=ApiResponse[list[BookingRead]])
async def list_my_bookings(
    client: User = Depends(require_role(Role.CLIENT)),
    db: AsyncSession = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    """Demandes du client / Client's bookings."""
    bookings = await BookingService.list_client_bookings(db, client)
    return ApiResponse(data=[booking_read(b, store) for b in bookings])


@router.post("/{booking_id}/cancel", response_model=ApiResponse[BookingRead])
async def cancel_booking(
    booking_id: EntityId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Annuler sa demande / Cancel one's own booking."""
    booking = await BookingService.cancel_booking(db, clock, user, booking_id)
    return ApiResponse(message="Reservation cancelled successfully", data=booking_read(booking, store))


@router.get("/requests", response_model=ApiResponse[list[BookingRead]])
async def list_incoming_requests(
    state: BookingState | None = None,
    partner: User = Depends(require_role(Role.PARTNER)),
    db: AsyncSession = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    """Demandes reçues par le partenaire / Requests received by the partner."""
    bookings = await BookingService.list_partner_requests(db, partner, state)
    return ApiResponse(data=[booking_read(b, store, include_client=True) for b in bookings])


@router.put("/{booking_id}/status", response_model=ApiResponse[BookingRead])
async def update_booking_status(
    booking_id: EntityId,
    data: BookingStatusUpdate,
    partner: User = Depends(require_role(Role.PARTNER)),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Accepter ou refuser une demande / Accept or reject a request."""
    booking = await BookingService.update_booking_status(db, clock, partner, booking_id, data.action)
    return ApiResponse(
        message=f"Booking {booking.state.value}",
        data=booking_read(booking, store, include_client=True),
    )
