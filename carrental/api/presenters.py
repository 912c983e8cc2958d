"""
Mise en forme des réponses / Response shaping.
Transforme les modèles ORM en schémas de lecture, URLs d'images comprises.
Turns ORM models into read schemas, image URLs included.
"""

from carrental.models.booking import Booking
from carrental.models.cart import Cart
from carrental.models.listing import Listing
from carrental.schemas.availability import DaySchedule, WindowRead
from carrental.schemas.booking import BookingRead, CarDetails, ClientBrief, TimeSlot
from carrental.schemas.cart import CartRead
from carrental.schemas.listing import CatalogListing, ListingRead, OwnerBrief
from carrental.services.availability import AvailabilityService
from carrental.services.image_store import ImageStore


def image_urls(listing: Listing, store: ImageStore) -> list[str]:
    return [store.url_for(ref) for ref in listing.images or []]


def listing_read(listing: Listing, store: ImageStore) -> ListingRead:
    return ListingRead(
        id=listing.id,
        title=listing.title,
        description=listing.description,
        car_model=listing.car_model,
        city=listing.city,
        color=listing.color,
        price=float(listing.price),
        premium=listing.premium,
        premium_duration=listing.premium_duration,
        is_active=listing.is_active,
        images=image_urls(listing, store),
        availability=[DaySchedule(**day) for day in AvailabilityService.normalize_week(listing.windows)],
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )


def catalog_listing(listing: Listing, store: ImageStore) -> CatalogListing:
    return CatalogListing(
        id=listing.id,
        title=listing.title,
        description=listing.description,
        car_model=listing.car_model,
        city=listing.city,
        color=listing.color,
        price=float(listing.price),
        premium=listing.premium,
        images=image_urls(listing, store),
        owner=OwnerBrief(
            name=listing.owner.name if listing.owner else "Unknown",
            email=listing.owner.email if listing.owner else "Unknown",
        ),
        availability=[
            WindowRead(id=w.id, day=w.day, time_from=w.time_from, time_to=w.time_to, available=w.is_active)
            for w in listing.windows
        ],
        created_at=listing.created_at,
    )


def car_details(listing: Listing, store: ImageStore) -> CarDetails:
    images = image_urls(listing, store)
    return CarDetails(
        title=listing.title,
        car_model=listing.car_model,
        city=listing.city,
        price=float(listing.price),
        image=images[0] if images else None,
    )


def booking_read(booking: Booking, store: ImageStore, include_client: bool = False) -> BookingRead:
    client = None
    if include_client:
        client = ClientBrief(id=booking.client.id, name=booking.client.name, email=booking.client.email)
    return BookingRead(
        id=booking.id,
        listing_id=booking.listing_id,
        window_id=booking.window_id,
        reservation_date=booking.reservation_date,
        reservation_day=booking.reservation_day,
        state=booking.state,
        feedback_client=booking.feedback_client,
        feedback_article=booking.feedback_article,
        car_details=car_details(booking.listing, store),
        time_slot=TimeSlot(time_from=booking.time_from, time_to=booking.time_to),
        client=client,
        created_at=booking.created_at,
    )


def cart_read(cart: Cart, store: ImageStore) -> CartRead:
    return CartRead(
        id=cart.id,
        listing_id=cart.listing_id,
        promo_code=cart.promo_code,
        car_details=car_details(cart.listing, store),
        created_at=cart.created_at,
    )
