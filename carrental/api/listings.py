"""
Routes Annonces partenaire / Partner listing routes.
Création et mise à jour en multipart : champs du formulaire, `availability`
en JSON et jusqu'à 3 fichiers `images`.
Create and update are multipart: form fields, `availability` as JSON and up
to 3 `images` files.
"""

import json

import pydantic
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.api.deps import EntityId, require_role
from carrental.api.presenters import listing_read
from carrental.database import get_db
from carrental.exceptions import ValidationError
from carrental.models.user import Role, User
from carrental.schemas.availability import DaySchedule, WindowRead, WindowStatusUpdate
from carrental.schemas.common import ApiResponse
from carrental.schemas.listing import ListingCreate, ListingRead, ListingStatusUpdate
from carrental.services.availability import AvailabilityService
from carrental.services.image_store import ImageStore, ImageUpload, get_image_store
from carrental.services.listings import ListingService
from carrental.utils.clock import Clock, get_clock

router = APIRouter()

require_partner = require_role(Role.PARTNER)


async def listing_form(
    title: str | None = Form(None),
    description: str | None = Form(None),
    car_model: str | None = Form(None),
    city: str | None = Form(None),
    color: str | None = Form(None),
    price: str | None = Form(None),
    premium: str | None = Form(None),
    premium_duration: str | None = Form(None),
    availability: str | None = Form(None),
) -> ListingCreate:
    """Construire ListingCreate depuis le formulaire / Build ListingCreate from the form fields."""
    raw = {
        "title": title,
        "description": description,
        "car_model": car_model,
        "city": city,
        "color": color,
        "price": price,
        "premium": premium,
        "premium_duration": premium_duration,
    }
    if availability:
        try:
            raw["availability"] = json.loads(availability)
        except json.JSONDecodeError:
            raise ValidationError({"availability": ["The availability field must be a valid JSON string."]})
    try:
        return ListingCreate.model_validate({k: v for k, v in raw.items() if v not in (None, "")})
    except pydantic.ValidationError as exc:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in exc.errors(include_url=False)]
        )


async def read_images(images: list[UploadFile] = File(default=[])) -> list[ImageUpload]:
    return [
        ImageUpload(filename=f.filename, content=await f.read(), content_type=f.content_type)
        for f in images
        if f.filename
    ]


@router.get("/mine", response_model=ApiResponse[list[ListingRead]])
async def list_my_listings(
    partner: User = Depends(require_partner),
    db: AsyncSession = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    """Annonces du partenaire / Partner's own listings."""
    listings = await ListingService.list_owned(db, partner)
    return ApiResponse(data=[listing_read(listing, store) for listing in listings])


@router.post("/", response_model=ApiResponse[ListingRead], status_code=status.HTTP_201_CREATED)
async def create_listing(
    partner: User = Depends(require_partner),
    data: ListingCreate = Depends(listing_form),
    images: list[ImageUpload] = Depends(read_images),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Créer une annonce / Create a listing."""
    listing = await ListingService.create_listing(db, clock, store, partner, data, images)
    return ApiResponse(message="Announcement created successfully", data=listing_read(listing, store))


@router.put("/{listing_id}", response_model=ApiResponse[ListingRead])
async def update_listing(
    listing_id: EntityId,
    partner: User = Depends(require_partner),
    data: ListingCreate = Depends(listing_form),
    images: list[ImageUpload] = Depends(read_images),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Modifier une annonce et remplacer son planning / Update a listing and replace its schedule."""
    listing = await ListingService.update_listing(db, clock, store, partner, listing_id, data, images)
    return ApiResponse(message="Announcement updated successfully", data=listing_read(listing, store))


@router.delete("/{listing_id}", response_model=ApiResponse[None])
async def delete_listing(
    listing_id: EntityId,
    partner: User = Depends(require_partner),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Supprimer une annonce / Delete a listing."""
    await ListingService.delete_listing(db, clock, store, partner, listing_id)
    return ApiResponse(message="Announcement deleted successfully")


@router.patch("/{listing_id}/status", response_model=ApiResponse[ListingRead])
async def set_listing_status(
    listing_id: EntityId,
    data: ListingStatusUpdate,
    partner: User = Depends(require_partner),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Activer/désactiver une annonce / Toggle a listing."""
    listing = await ListingService.set_status(db, clock, partner, listing_id, data.active)
    return ApiResponse(data=listing_read(listing, store))


@router.get("/{listing_id}/availability", response_model=ApiResponse[list[DaySchedule]])
async def list_availability(listing_id: EntityId, db: AsyncSession = Depends(get_db)):
    """Planning sur 7 jours (public) / 7-day schedule (public)."""
    week = await AvailabilityService.list_availability(db, listing_id)
    return ApiResponse(data=[DaySchedule(**day) for day in week])


@router.patch("/{listing_id}/availability/{window_id}", response_model=ApiResponse[WindowRead])
async def set_window_status(
    listing_id: EntityId,
    window_id: EntityId,
    data: WindowStatusUpdate,
    partner: User = Depends(require_partner),
    db: AsyncSession = Depends(get_db),
):
    """Activer/désactiver un créneau / Toggle one window."""
    listing = await ListingService.get_owned(db, partner, listing_id)
    window = await AvailabilityService.set_window_status(db, listing.id, window_id, data.active)
    return ApiResponse(data=WindowRead(
        id=window.id, day=window.day, time_from=window.time_from, time_to=window.time_to,
        available=window.is_active,
    ))
