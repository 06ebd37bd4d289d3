import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from textile_pos.config import Settings
from textile_pos.core.errors import (
    CartNotFoundError,
    CheckoutInProgressError,
    CustomerNotFoundError,
    InsufficientStockError,
    ProductNotFoundError,
    UnpersistedProductError,
)
from textile_pos.dependencies import get_app_settings, get_cart_registry, get_db, require_login
from textile_pos.schemas.cart import (
    CartCustomerSelect,
    CartItemAdd,
    CartQuantityChange,
    CartRead,
    CartRedeemToggle,
    CheckoutRequest,
)
from textile_pos.schemas.sale import CompletedOrderRead
from textile_pos.services.cart import Cart, CartRegistry
from textile_pos.services.checkout import CheckoutOrchestrator
from textile_pos.services.customer_service import get_customer
from textile_pos.services.product_service import get_product

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/carts", tags=["Point of Sale"], dependencies=[Depends(require_login)])


def _get_cart(registry: CartRegistry, cart_id: str) -> Cart:
    try:
        return registry.get(cart_id)
    except CartNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _read(cart: Cart) -> CartRead:
    return CartRead.model_validate(cart)


@router.post("", response_model=CartRead, status_code=201)
def open_cart(registry: CartRegistry = Depends(get_cart_registry)):
    return _read(registry.create())


@router.get("/{cart_id}", response_model=CartRead)
def get_cart(cart_id: str, registry: CartRegistry = Depends(get_cart_registry)):
    return _read(_get_cart(registry, cart_id))


@router.delete("/{cart_id}", status_code=204)
def abandon_cart(cart_id: str, registry: CartRegistry = Depends(get_cart_registry)):
    try:
        registry.discard(cart_id)
    except CartNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@router.post("/{cart_id}/items", response_model=CartRead)
def add_item(
    cart_id: str,
    payload: CartItemAdd,
    db: Session = Depends(get_db),
    registry: CartRegistry = Depends(get_cart_registry),
):
    cart = _get_cart(registry, cart_id)
    try:
        product = get_product(db, payload.product_id)
        cart.add_item(product)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except UnpersistedProductError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CheckoutInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _read(cart)


@router.patch("/{cart_id}/items/{product_id}", response_model=CartRead)
def change_quantity(
    cart_id: str,
    product_id: int,
    payload: CartQuantityChange,
    registry: CartRegistry = Depends(get_cart_registry),
):
    cart = _get_cart(registry, cart_id)
    try:
        line = cart.change_quantity(product_id, payload.delta)
    except CheckoutInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    if line is None:
        raise HTTPException(status_code=404, detail="Product is not in the cart.")
    return _read(cart)


@router.delete("/{cart_id}/items/{product_id}", response_model=CartRead)
def remove_item(
    cart_id: str,
    product_id: int,
    registry: CartRegistry = Depends(get_cart_registry),
):
    cart = _get_cart(registry, cart_id)
    try:
        removed = cart.remove_item(product_id)
    except CheckoutInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    if not removed:
        raise HTTPException(status_code=404, detail="Product is not in the cart.")
    return _read(cart)


@router.put("/{cart_id}/customer", response_model=CartRead)
def select_customer(
    cart_id: str,
    payload: CartCustomerSelect,
    db: Session = Depends(get_db),
    registry: CartRegistry = Depends(get_cart_registry),
):
    cart = _get_cart(registry, cart_id)
    try:
        customer = get_customer(db, payload.customer_id) if payload.customer_id is not None else None
        cart.select_customer(customer)
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except CheckoutInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _read(cart)


@router.put("/{cart_id}/redeem", response_model=CartRead)
def set_redeem_points(
    cart_id: str,
    payload: CartRedeemToggle,
    registry: CartRegistry = Depends(get_cart_registry),
):
    cart = _get_cart(registry, cart_id)
    try:
        cart.set_redeem_points(payload.redeem)
    except CheckoutInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _read(cart)


@router.post("/{cart_id}/checkout", response_model=CompletedOrderRead)
def checkout(
    cart_id: str,
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    registry: CartRegistry = Depends(get_cart_registry),
    settings: Settings = Depends(get_app_settings),
):
    """Record the cart as a sale. A completed sale closes the cart; open a new one for the next customer."""
    cart = _get_cart(registry, cart_id)
    orchestrator = CheckoutOrchestrator(db, settings=settings)
    try:
        order = orchestrator.checkout(cart, payload.payment_method)
    except CheckoutInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InsufficientStockError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (ProductNotFoundError, CustomerNotFoundError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("Checkout failed for cart %s", cart_id)
        raise HTTPException(status_code=500, detail="Checkout failed.") from exc
    if order is None:
        return Response(status_code=204)
    registry.discard(cart_id, missing_ok=True)
    return CompletedOrderRead.model_validate(order)


__all__ = ["router"]
