"""
Service Catalogue / Catalog query service.
Vue publique paginée des annonces actives.
Paginated public view of active listings.
"""

import math
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carrental.models.listing import Listing

DEFAULT_PRICE_RANGE = (0, 1000)


@dataclass
class CatalogFilters:
    city: str | None = None
    car_model: str | None = None
    color: str | None = None
    min_price: float | None = None
    max_price: float | None = None


@dataclass
class CatalogPage:
    items: list[Listing]
    current_page: int
    last_page: int
    per_page: int
    total: int


class CatalogService:
    """Lecture du catalogue / Catalog reads."""

    @staticmethod
    def _filtered(filters: CatalogFilters):
        query = select(Listing).where(Listing.is_active.is_(True))
        if filters.city:
            query = query.where(Listing.city.ilike(f"%{filters.city}%"))
        if filters.car_model:
            query = query.where(Listing.car_model.ilike(f"%{filters.car_model}%"))
        if filters.color:
            query = query.where(Listing.color == filters.color)
        if filters.min_price is not None:
            query = query.where(Listing.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Listing.price <= filters.max_price)
        return query

    @staticmethod
    async def list_active_listings(
        db: AsyncSession, filters: CatalogFilters, page: int = 1, page_size: int = 10
    ) -> CatalogPage:
        """
        Annonces actives filtrées / Filtered active listings.
        Tri : premium d'abord, puis plus récentes. Order: premium first, then newest.
        """
        base = CatalogService._filtered(filters)
        total = await db.scalar(select(func.count()).select_from(base.subquery()))

        result = await db.execute(
            base.options(selectinload(Listing.windows), selectinload(Listing.owner))
            .order_by(Listing.premium.desc(), Listing.created_at.desc(), Listing.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return CatalogPage(
            items=list(result.scalars().all()),
            current_page=page,
            last_page=max(1, math.ceil(total / page_size)),
            per_page=page_size,
            total=total,
        )

    @staticmethod
    async def filter_options(db: AsyncSession) -> dict:
        """Valeurs distinctes pour les filtres / Distinct values for the filter widgets."""
        active = Listing.is_active.is_(True)

        async def _distinct(column) -> list[str]:
            result = await db.execute(
                select(column).where(active, column.is_not(None), column != "").distinct().order_by(column)
            )
            return list(result.scalars().all())

        price_row = (await db.execute(
            select(func.min(Listing.price), func.max(Listing.price)).where(active)
        )).one()
        min_price, max_price = price_row
        return {
            "cities": await _distinct(Listing.city),
            "car_models": await _distinct(Listing.car_model),
            "colors": await _distinct(Listing.color),
            "price_range": {
                "min": float(min_price) if min_price is not None else DEFAULT_PRICE_RANGE[0],
                "max": float(max_price) if max_price is not None else DEFAULT_PRICE_RANGE[1],
            },
        }
