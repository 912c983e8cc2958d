"""
Routes Catalogue public / Public catalog routes.
Pas d'authentification requise / No authentication required.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.api.presenters import catalog_listing
from carrental.config import settings
from carrental.database import get_db
from carrental.schemas.common import MAX_INT, ApiResponse, PaginatedResponse, Pagination
from carrental.schemas.listing import CatalogListing, FilterOptions
from carrental.services.catalog import CatalogFilters, CatalogService
from carrental.services.image_store import ImageStore, get_image_store

router = APIRouter()


@router.get("/listings", response_model=PaginatedResponse[CatalogListing])
async def list_active_listings(
    city: str | None = None,
    car_model: str | None = None,
    color: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    page: int = Query(1, ge=1, le=MAX_INT),
    per_page: int = Query(settings.CATALOG_PAGE_SIZE, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    """Annonces actives, premium d'abord / Active listings, premium first."""
    filters = CatalogFilters(
        city=city, car_model=car_model, color=color, min_price=min_price, max_price=max_price,
    )
    result = await CatalogService.list_active_listings(db, filters, page, per_page)
    return PaginatedResponse[CatalogListing](
        data=[catalog_listing(listing, store) for listing in result.items],
        pagination=Pagination(
            current_page=result.current_page,
            last_page=result.last_page,
            per_page=result.per_page,
            total=result.total,
        ),
    )


@router.get("/filter-options", response_model=ApiResponse[FilterOptions])
async def filter_options(db: AsyncSession = Depends(get_db)):
    """Valeurs disponibles pour les filtres / Available filter values."""
    return ApiResponse(data=FilterOptions(**await CatalogService.filter_options(db)))
