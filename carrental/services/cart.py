"""Service Panier / Cart service."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carrental.exceptions import ConflictError, NotFoundError
from carrental.models.cart import Cart
from carrental.models.listing import Listing
from carrental.models.user import User
from carrental.utils.clock import Clock


class CartService:

    @staticmethod
    async def add_to_cart(
        db: AsyncSession, clock: Clock, client: User, listing_id: int, promo_code: str | None = None
    ) -> Cart:
        """Ajouter une annonce, une seule fois / Add a listing, once."""
        listing = await db.get(Listing, listing_id)
        if listing is None:
            raise NotFoundError("Listing not found")

        existing = await db.execute(
            select(Cart.id).where(Cart.listing_id == listing_id, Cart.user_id == client.id)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Item already in cart")

        cart = Cart(listing_id=listing_id, user_id=client.id, promo_code=promo_code, created_at=clock.now())
        db.add(cart)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Item already in cart")
        cart.listing = listing
        return cart

    @staticmethod
    async def list_cart(db: AsyncSession, client: User) -> list[Cart]:
        result = await db.execute(
            select(Cart)
            .where(Cart.user_id == client.id)
            .options(selectinload(Cart.listing))
            .order_by(Cart.created_at.desc(), Cart.id.desc())
        )
        return list(result.scalars().all())
