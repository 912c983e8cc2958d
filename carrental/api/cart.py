"""Routes Panier client / Client cart routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.api.deps import require_role
from carrental.api.presenters import cart_read
from carrental.database import get_db
from carrental.models.user import Role, User
from carrental.schemas.cart import CartCreate, CartRead
from carrental.schemas.common import ApiResponse
from carrental.services.cart import CartService
from carrental.services.image_store import ImageStore, get_image_store
from carrental.utils.clock import Clock, get_clock

router = APIRouter()


@router.post("/", response_model=ApiResponse[CartRead], status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    data: CartCreate,
    client: User = Depends(require_role(Role.CLIENT)),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    store: ImageStore = Depends(get_image_store),
):
    """Ajouter au panier / Add to cart."""
    cart = await CartService.add_to_cart(db, clock, client, data.listing_id, data.promo_code)
    return ApiResponse(message="Added to cart successfully", data=cart_read(cart, store))


@router.get("/", response_model=ApiResponse[list[CartRead]])
async def list_cart(
    client: User = Depends(require_role(Role.CLIENT)),
    db: AsyncSession = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
):
    """Contenu du panier / Cart contents."""
    carts = await CartService.list_cart(db, client)
    return ApiResponse(data=[cart_read(c, store) for c in carts])
