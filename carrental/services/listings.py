"""
Service Annonces / Listing service.
Création, mise à jour, suppression et lecture des annonces d'un partenaire.
Chaque opération s'exécute dans la transaction de la requête ; les fichiers
image écrits avant un échec sont supprimés, les anciens après le commit.
Each operation runs inside the request transaction; image files written
before a failure are removed, replaced ones after the commit.
"""

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carrental.exceptions import AuthorizationError, ConflictError, NotFoundError
from carrental.models.availability import AvailabilityWindow
from carrental.models.booking import Booking, BookingState
from carrental.models.cart import Cart
from carrental.models.listing import Listing
from carrental.models.user import User
from carrental.schemas.listing import ListingCreate
from carrental.services.availability import AvailabilityService
from carrental.services.image_store import ImageStore, ImageUpload, validate_images
from carrental.utils.audit import log_audit
from carrental.utils.clock import Clock

log = logging.getLogger(__name__)


class ListingService:
    """Annonces d'un partenaire / A partner's listings."""

    @staticmethod
    async def load(db: AsyncSession, listing_id: int) -> Listing | None:
        """Annonce avec créneaux et propriétaire / Listing with windows and owner."""
        result = await db.execute(
            select(Listing)
            .where(Listing.id == listing_id)
            .options(selectinload(Listing.windows), selectinload(Listing.owner))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_owned(db: AsyncSession, partner: User, listing_id: int) -> Listing:
        listing = await ListingService.load(db, listing_id)
        if listing is None:
            raise NotFoundError("Listing not found")
        if listing.user_id != partner.id:
            raise AuthorizationError("You do not own this listing")
        return listing

    @staticmethod
    def _save_images(
        store: ImageStore, clock: Clock, listing_id: int, images: list[ImageUpload]
    ) -> list[str]:
        stamp = int(clock.now().timestamp())
        refs = []
        try:
            for index, image in enumerate(images):
                filename = f"announcement_{listing_id}_{index}_{stamp}{image.extension}"
                refs.append(store.save(image, filename))
        except OSError:
            for ref in refs:
                store.delete(ref)
            raise
        return refs

    @staticmethod
    async def create_listing(
        db: AsyncSession,
        clock: Clock,
        store: ImageStore,
        partner: User,
        data: ListingCreate,
        images: list[ImageUpload],
    ) -> Listing:
        """Créer annonce + images + planning / Create listing + images + schedule."""
        validate_images(images)
        AvailabilityService.selected_windows(data.availability)

        now = clock.now()
        listing = Listing(
            user_id=partner.id,
            title=data.title,
            description=data.description,
            car_model=data.car_model,
            city=data.city.value,
            color=data.color,
            price=data.price,
            premium=data.premium,
            premium_duration=data.premium_duration,
            images=[],
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        db.add(listing)
        await db.flush()

        refs = ListingService._save_images(store, clock, listing.id, images)
        try:
            listing.images = refs
            await AvailabilityService.replace_windows(db, listing.id, data.availability)
            log_audit(db, clock, "listing", listing.id, "CREATE", partner, {"title": listing.title})
            await db.flush()
        except Exception:
            for ref in refs:
                store.delete(ref)
            raise

        log.info("Listing %s created by user %s", listing.id, partner.id)
        return await ListingService.load(db, listing.id)

    @staticmethod
    async def update_listing(
        db: AsyncSession,
        clock: Clock,
        store: ImageStore,
        partner: User,
        listing_id: int,
        data: ListingCreate,
        images: list[ImageUpload],
    ) -> Listing:
        """
        Mettre à jour l'annonce et remplacer son planning / Update the listing and replace its schedule.
        Les images ne sont remplacées que si de nouvelles sont envoyées.
        Images are only replaced when new ones are sent.
        """
        validate_images(images)
        AvailabilityService.selected_windows(data.availability)
        listing = await ListingService.get_owned(db, partner, listing_id)

        listing.title = data.title
        listing.description = data.description
        listing.car_model = data.car_model
        listing.city = data.city.value
        listing.color = data.color
        listing.price = data.price
        listing.premium = data.premium
        listing.premium_duration = data.premium_duration
        listing.updated_at = clock.now()

        old_refs = list(listing.images or [])
        new_refs = ListingService._save_images(store, clock, listing.id, images) if images else []
        try:
            if images:
                listing.images = new_refs
            await AvailabilityService.replace_windows(db, listing.id, data.availability)
            log_audit(db, clock, "listing", listing.id, "UPDATE", partner, {"images_replaced": bool(images)})
            await db.flush()
        except Exception:
            for ref in new_refs:
                store.delete(ref)
            raise

        if images:
            # Même seconde : même nom de fichier, déjà écrasé / Same second: same file name, already overwritten
            store.delete_after_commit(db, [ref for ref in old_refs if ref not in new_refs])
        return await ListingService.load(db, listing.id)

    @staticmethod
    async def delete_listing(
        db: AsyncSession,
        clock: Clock,
        store: ImageStore,
        partner: User,
        listing_id: int,
    ) -> None:
        """
        Supprimer l'annonce et ses dépendances / Delete the listing and its dependents.
        Refusé tant qu'une demande est en attente ou acceptée à venir.
        Refused while a booking is pending, or accepted for today or later.
        """
        listing = await ListingService.get_owned(db, partner, listing_id)

        blocking = await db.execute(
            select(Booking.id).where(
                Booking.listing_id == listing.id,
                or_(
                    Booking.state == BookingState.PENDING,
                    (Booking.state == BookingState.ACCEPTED) & (Booking.reservation_date >= clock.today()),
                ),
            ).limit(1)
        )
        if blocking.scalar_one_or_none() is not None:
            raise ConflictError("This listing still has pending or upcoming accepted bookings")

        refs = list(listing.images or [])
        title = listing.title
        await db.execute(delete(Booking).where(Booking.listing_id == listing.id))
        await db.execute(delete(Cart).where(Cart.listing_id == listing.id))
        await db.execute(delete(AvailabilityWindow).where(AvailabilityWindow.listing_id == listing.id))
        await db.execute(delete(Listing).where(Listing.id == listing.id))
        log_audit(db, clock, "listing", listing_id, "DELETE", partner, {"title": title})
        await db.flush()

        store.delete_after_commit(db, refs)
        log.info("Listing %s deleted by user %s", listing_id, partner.id)

    @staticmethod
    async def list_owned(db: AsyncSession, partner: User) -> list[Listing]:
        """Annonces du partenaire, plus récentes d'abord / Partner's listings, newest first."""
        result = await db.execute(
            select(Listing)
            .where(Listing.user_id == partner.id)
            .options(selectinload(Listing.windows))
            .order_by(Listing.created_at.desc(), Listing.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def set_status(db: AsyncSession, clock: Clock, partner: User, listing_id: int, active: bool) -> Listing:
        """Activer/désactiver l'annonce / Toggle the listing."""
        listing = await ListingService.get_owned(db, partner, listing_id)
        listing.is_active = active
        listing.updated_at = clock.now()
        await db.flush()
        return await ListingService.load(db, listing.id)
