import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Request, Response

from takeaway.domain.schemas import (
    AddToCart,
    CartOut,
    CheckoutRequest,
    PickupSlotsOut,
    SetQuantity,
    SubmitResult,
    UserProfile,
)
from takeaway.interfaces.auth_routes import require_user

router = APIRouter(prefix="/api", tags=["customer"])
logger = logging.getLogger(__name__)

CART_COOKIE = "cart_id"


def cart_id(request: Request, response: Response) -> str:
    """One cart per browser, identified by a cookie."""
    value = request.cookies.get(CART_COOKIE)
    if not value:
        value = uuid.uuid4().hex
        response.set_cookie(CART_COOKIE, value, httponly=True, samesite="lax")
    return value


@router.get("/menu")
def list_menu(request: Request):
    catalog = request.app.state.catalog
    return {
        "categories": [
            {"name": category, "items": [item.model_dump(mode="json") for item in items]}
            for category, items in catalog.by_category().items()
        ]
    }


# --- Cart ---

@router.get("/cart", response_model=CartOut)
def get_cart(request: Request, cid: str = Depends(cart_id)):
    return request.app.state.checkout.view_cart(cid)


@router.post("/cart/items", response_model=CartOut)
def add_to_cart(payload: AddToCart, request: Request, cid: str = Depends(cart_id)):
    return request.app.state.checkout.add_item(cid, payload.item_id)


@router.put("/cart/items/{item_id}", response_model=CartOut)
def set_quantity(item_id: str, payload: SetQuantity, request: Request, cid: str = Depends(cart_id)):
    return request.app.state.checkout.set_quantity(cid, item_id, payload.quantity)


@router.delete("/cart/items/{item_id}", response_model=CartOut)
def remove_from_cart(item_id: str, request: Request, cid: str = Depends(cart_id)):
    return request.app.state.checkout.remove_item(cid, item_id)


@router.delete("/cart", response_model=CartOut)
def clear_cart(request: Request, cid: str = Depends(cart_id)):
    return request.app.state.checkout.clear_cart(cid)


# --- Checkout ---

@router.get("/pickup-slots", response_model=PickupSlotsOut)
def pickup_slots(request: Request, day: date = Query(..., alias="date")):
    return request.app.state.checkout.pickup_slots(day, request.app.state.clock())


@router.post("/checkout", response_model=SubmitResult, status_code=201)
def checkout(
    payload: CheckoutRequest,
    request: Request,
    cid: str = Depends(cart_id),
    user: UserProfile = Depends(require_user),
):
    result = request.app.state.checkout.checkout(cid, user, payload, now=request.app.state.clock())
    logger.info(f"✅ Checkout {result.order_number} for cart {cid}")
    return result
