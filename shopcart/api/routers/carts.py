#shopcart/api/routers/carts.py
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, Response
from pydantic import ValidationError
from redis import RedisError
from sqlalchemy.orm import Session

from shopcart.data.database import get_db
from shopcart.domain.context import CartContext
from shopcart.domain.errors import InsufficientStock, ProductNotFound, ProductServiceUnavailable, StorageUnavailable
from shopcart.domain.schemas import AddItemIn, Cart, CartPatchIn, UpdateItemAmountIn
from shopcart.services.cart_cache import CartCache
from shopcart.services.cart_service import CartService
from shopcart.services.notification_service import CartNotifier
from shopcart.services.product_client import ProductClient
from shopcart.services.sweeper import CartSweeper
from shopcart.utils.settings import CART_ADMIN_KEY, CART_COOKIE_NAME
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])

MIN_TOKEN_LENGTH = 32


def get_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(
        db=db,
        product_client=ProductClient(),
        cache=CartCache(),
        notifier=CartNotifier(),
    )


def get_sweeper() -> CartSweeper:
    return CartSweeper()


def get_context(
    request: Request,
    response: Response,
    x_user_id: Optional[str] = Header(None),
) -> CartContext:
    token = request.cookies.get(CART_COOKIE_NAME)

    #brak cookie albo za krotki token = nowa sesja koszyka
    if not token or len(token) < MIN_TOKEN_LENGTH:
        token = uuid.uuid4().hex
        response.set_cookie(CART_COOKIE_NAME, token, httponly=True, samesite="lax")

    ip = request.client.host if request.client else None
    return CartContext(token=token, user=x_user_id, ip=ip)


@router.get("/me", response_model=Optional[Cart])
def get_my_cart(
    ctx: CartContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    return svc.me(ctx)


@router.post("/items", response_model=Cart)
def add_item(
    payload: AddItemIn,
    ctx: CartContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.add(
            ctx,
            item_id=payload.item_id,
            amount=payload.amount,
            requirements=payload.requirements,
        )
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientStock as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ProductServiceUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/items", response_model=Optional[Cart])
def delete_item(
    item_id: Optional[str] = Query(None, alias="itemId", min_length=3),
    amount: Optional[float] = Query(None, gt=0),
    ctx: CartContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.delete(ctx, item_id=item_id, amount=amount)
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.patch("/items", response_model=Optional[Cart])
def update_item_amount(
    payload: UpdateItemAmountIn,
    ctx: CartContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_cart_item_amount(ctx, item_id=payload.item_id, amount=payload.amount)
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.put("", response_model=Cart)
def update_my_cart(
    payload: CartPatchIn,
    ctx: CartContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_my_cart(ctx, payload.cart_new)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


def require_admin_key(x_admin_key: Optional[str] = Header(None)):
    #bez skonfigurowanego klucza endpoint jest zamkniety
    if not CART_ADMIN_KEY or x_admin_key != CART_ADMIN_KEY:
        logger.warning("Rejected cart clean request: bad admin key")
        raise HTTPException(status_code=403, detail="Forbidden")


@router.post("/clean", response_model=List[str], dependencies=[Depends(require_admin_key)])
def clean_carts(sweeper: CartSweeper = Depends(get_sweeper)):
    try:
        return sweeper.clean_carts()
    except RedisError as e:
        raise HTTPException(status_code=503, detail=f"Sweep lock unavailable: {e}")
