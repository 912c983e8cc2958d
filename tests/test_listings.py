"""Tests des annonces partenaire / Partner listing tests."""

from datetime import date

import pytest
from sqlalchemy import func, select

from carrental.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from carrental.models.availability import AvailabilityWindow, Weekday
from carrental.models.booking import Booking
from carrental.models.cart import Cart
from carrental.models.listing import Listing
from carrental.models.user import Role
from carrental.schemas.booking import BookingAction
from carrental.services.bookings import BookingService
from carrental.services.cart import CartService
from carrental.services.image_store import ImageUpload
from carrental.services.listings import ListingService

from conftest import listing_data, week


def jpeg(name="car.jpg", content=b"\xff\xd8jpeg"):
    return ImageUpload(name, content, "image/jpeg")


async def _count(db, model, **where):
    query = select(func.count()).select_from(model)
    for column, value in where.items():
        query = query.where(getattr(model, column) == value)
    return await db.scalar(query)


@pytest.fixture
async def partner(make_user):
    return await make_user(Role.PARTNER)


@pytest.mark.asyncio
async def test_create_listing_with_images(clock, store, partner, make_listing):
    listing = await make_listing(partner, images=[jpeg("a.jpg"), jpeg("b.png", b"png")])

    stamp = int(clock.now().timestamp())
    assert listing.images == [
        f"announcements/announcement_{listing.id}_0_{stamp}.jpg",
        f"announcements/announcement_{listing.id}_1_{stamp}.png",
    ]
    assert (store.root / listing.images[1]).read_bytes() == b"png"
    assert listing.is_active is True
    assert listing.premium_duration is None
    assert [w.day for w in listing.windows] == [Weekday.MONDAY]


@pytest.mark.asyncio
async def test_create_rejects_bad_images(db, store, partner, make_listing):
    with pytest.raises(ValidationError) as exc:
        await make_listing(partner, images=[jpeg(), ImageUpload("doc.pdf", b"x", "application/pdf")])
    assert list(exc.value.errors) == ["images.1"]
    assert await _count(db, Listing) == 0
    assert not (store.root / "announcements").exists()


@pytest.mark.asyncio
async def test_create_with_invalid_schedule_writes_nothing(db, partner, make_listing):
    with pytest.raises(ValidationError):
        await make_listing(partner, availability=week(monday=("18:00", "08:00")))
    assert await _count(db, Listing) == 0


@pytest.mark.asyncio
async def test_update_replaces_schedule_and_images(db, clock, store, partner, make_listing):
    listing = await make_listing(partner, images=[jpeg()])
    old_ref = listing.images[0]

    clock.advance(seconds=30)
    data = listing_data(title="Clio 5", availability=week(tuesday=("10:00", "12:00")))
    updated = await ListingService.update_listing(db, clock, store, partner, listing.id, data, [jpeg("new.png")])

    assert updated.title == "Clio 5"
    assert [(w.day, w.time_from, w.time_to) for w in updated.windows] == [(Weekday.TUESDAY, "10:00", "12:00")]
    assert len(updated.images) == 1 and updated.images[0] != old_ref
    assert (store.root / updated.images[0]).exists()
    # Ancien fichier supprimé au commit / Old file removed on commit
    assert (store.root / old_ref).exists()
    await db.commit()
    assert not (store.root / old_ref).exists()


@pytest.mark.asyncio
async def test_rolled_back_update_keeps_old_images(db, clock, store, partner, make_listing):
    listing = await make_listing(partner, images=[jpeg()])
    old_ref = listing.images[0]
    await db.commit()

    clock.advance(seconds=30)
    await ListingService.update_listing(db, clock, store, partner, listing.id, listing_data(), [jpeg("new.png")])
    await db.rollback()

    assert (store.root / old_ref).exists()
    reloaded = await ListingService.load(db, listing.id)
    assert reloaded.images == [old_ref]


@pytest.mark.asyncio
async def test_update_in_same_second_keeps_new_images(db, clock, store, partner, make_listing):
    listing = await make_listing(partner, images=[jpeg(content=b"old")])

    updated = await ListingService.update_listing(
        db, clock, store, partner, listing.id, listing_data(), [jpeg(content=b"new")]
    )
    assert (store.root / updated.images[0]).read_bytes() == b"new"


@pytest.mark.asyncio
async def test_update_without_images_keeps_them(db, clock, store, partner, make_listing):
    listing = await make_listing(partner, images=[jpeg()])
    refs = list(listing.images)

    updated = await ListingService.update_listing(db, clock, store, partner, listing.id, listing_data(), [])
    assert updated.images == refs
    assert (store.root / refs[0]).exists()


@pytest.mark.asyncio
async def test_only_owner_can_change_listing(db, clock, store, partner, make_user, make_listing):
    listing = await make_listing(partner)
    other = await make_user(Role.PARTNER)

    with pytest.raises(AuthorizationError):
        await ListingService.update_listing(db, clock, store, other, listing.id, listing_data(), [])
    with pytest.raises(AuthorizationError):
        await ListingService.delete_listing(db, clock, store, other, listing.id)
    with pytest.raises(AuthorizationError):
        await ListingService.set_status(db, clock, other, listing.id, False)
    with pytest.raises(NotFoundError):
        await ListingService.delete_listing(db, clock, store, partner, listing.id + 100)


@pytest.mark.asyncio
async def test_delete_cascades_to_windows_carts_and_images(db, clock, store, partner, make_user, make_listing):
    listing = await make_listing(partner, images=[jpeg()])
    client = await make_user(Role.CLIENT)
    await CartService.add_to_cart(db, clock, client, listing.id)
    ref = listing.images[0]

    await ListingService.delete_listing(db, clock, store, partner, listing.id)

    assert await _count(db, Listing, id=listing.id) == 0
    assert await _count(db, AvailabilityWindow, listing_id=listing.id) == 0
    assert await _count(db, Cart, listing_id=listing.id) == 0
    assert (store.root / ref).exists()
    await db.commit()
    assert not (store.root / ref).exists()


@pytest.mark.asyncio
async def test_delete_refused_with_pending_booking(db, clock, store, partner, make_user, make_listing):
    listing = await make_listing(partner)
    client = await make_user(Role.CLIENT)
    await BookingService.create_booking(db, clock, client, listing.windows[0].id, date(2026, 3, 9))

    with pytest.raises(ConflictError):
        await ListingService.delete_listing(db, clock, store, partner, listing.id)
    assert await _count(db, Listing, id=listing.id) == 1


@pytest.mark.asyncio
async def test_delete_refused_with_upcoming_accepted_booking(db, clock, store, partner, make_user, make_listing):
    listing = await make_listing(partner)
    client = await make_user(Role.CLIENT)
    booking = await BookingService.create_booking(db, clock, client, listing.windows[0].id, date(2026, 3, 9))
    await BookingService.update_booking_status(db, clock, partner, booking.id, BookingAction.ACCEPT)

    with pytest.raises(ConflictError):
        await ListingService.delete_listing(db, clock, store, partner, listing.id)

    # Une fois la date passée / Once the date is past
    clock.advance(days=8)
    await ListingService.delete_listing(db, clock, store, partner, listing.id)
    assert await _count(db, Booking, listing_id=listing.id) == 0


@pytest.mark.asyncio
async def test_delete_allowed_after_rejection(db, clock, store, partner, make_user, make_listing):
    listing = await make_listing(partner)
    client = await make_user(Role.CLIENT)
    booking = await BookingService.create_booking(db, clock, client, listing.windows[0].id, date(2026, 3, 9))
    await BookingService.update_booking_status(db, clock, partner, booking.id, BookingAction.REJECT)

    await ListingService.delete_listing(db, clock, store, partner, listing.id)
    assert await _count(db, Listing, id=listing.id) == 0


@pytest.mark.asyncio
async def test_list_owned_newest_first(db, clock, partner, make_user, make_listing):
    first = await make_listing(partner)
    clock.advance(minutes=1)
    second = await make_listing(partner)
    await make_listing(await make_user(Role.PARTNER))

    owned = await ListingService.list_owned(db, partner)
    assert [l.id for l in owned] == [second.id, first.id]


@pytest.mark.asyncio
async def test_cart_is_unique_per_listing(db, clock, partner, make_user, make_listing):
    listing = await make_listing(partner)
    client = await make_user(Role.CLIENT)

    cart = await CartService.add_to_cart(db, clock, client, listing.id, "SUMMER")
    assert cart.promo_code == "SUMMER"
    with pytest.raises(ConflictError):
        await CartService.add_to_cart(db, clock, client, listing.id)
    with pytest.raises(NotFoundError):
        await CartService.add_to_cart(db, clock, client, 999)
    assert [c.listing_id for c in await CartService.list_cart(db, client)] == [listing.id]
