# shopcart/services/cart_service.py
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from shopcart.domain.context import CartContext
from shopcart.domain.errors import StorageUnavailable
from shopcart.domain.items import (
    attach_requirements,
    build_cart_item,
    check_availability,
    delete_item,
    merge_item,
    now_utc,
    reconcile,
    set_item_amount,
    touch,
)
from shopcart.domain.schemas import Cart, Requirement
from shopcart.repos.cart_repo import CartRepo, prepare_for_update
from shopcart.services.cart_cache import CartCache
from shopcart.services.notification_service import CartNotifier
from shopcart.services.product_client import ProductClient
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka przypietego do tokenu sesji (cookie):
    query (me) tylko odczyt, commands (add, delete, update amount,
    update cart) modyfikuja stan, zapisuja i wysylaja powiadomienie.
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        cache: CartCache,
        notifier: CartNotifier,
    ):
        self.repo = CartRepo(db)
        self.product_client = product_client
        self.cache = cache
        self.notifier = notifier

    #query - odczyt
    def resolve(self, ctx: CartContext) -> Optional[Cart]:
        """
        Koszyk dla tokenu z kontekstu requestu. Tworzy pusty jesli nie ma.
        Blad bazy albo niepoprawny zapisany koszyk -> log + None, nigdy wyjatek.
        """
        if ctx.token and ctx.cart is not None:
            return ctx.cart

        if not ctx.token:
            logger.warning("Cart requested without identity token")
            return None

        try:
            cart = self.repo.find_by_hash(ctx.token)
            if cart is None:
                cart = self._create_empty_cart(ctx)
        except StorageUnavailable as e:
            logger.error(f"cart.me - error: {e}")
            return None
        except ValidationError as e:
            #uszkodzony dokument w bazie
            logger.error(f"cart.me - invalid stored cart for token: {e}")
            return None

        ctx.cart = cart
        return cart

    def me(self, ctx: CartContext) -> Optional[Cart]:
        if ctx.token and ctx.cart is None:
            cached = self.cache.get_me(ctx.token)
            if cached is not None:
                ctx.cart = cached
                return cached

        cart = self.resolve(ctx)
        if cart is not None:
            self.cache.set_me(ctx.token, cart)
        return cart

    def _create_empty_cart(self, ctx: CartContext) -> Cart:
        now = now_utc()
        cart = Cart(
            user=ctx.user,
            ip=ctx.ip,
            hash=ctx.token,
            date_created=now,
            date_updated=now,
            items=[],
        )
        created = self.repo.insert(cart)
        logger.info(f"Created new cart {created.id} for session {ctx.token[:8]}...")
        return created

    #commands
    def add(
        self,
        ctx: CartContext,
        item_id: str,
        amount: float,
        requirements: Optional[List[Requirement]] = None,
    ) -> Cart:
        # 1. produkt istnieje, 2. jest go dosc na stanie
        logger.info(f"Fetching product {item_id} from product-service")
        product = self.product_client.fetch_product(item_id)
        amount = check_availability(product, amount)

        product = attach_requirements(product, requirements)

        cart = self._require_cart(ctx)
        items = merge_item(cart.items, build_cart_item(product, amount))

        logger.info(f"Adding {amount} x product {item_id} to cart {cart.id}")
        return self._save(ctx, touch(cart, items=items), "updated")

    def delete(
        self,
        ctx: CartContext,
        item_id: Optional[str] = None,
        amount: Optional[float] = None,
    ) -> Optional[Cart]:
        cart = self.resolve(ctx)
        if cart is None or not cart.items:
            return None

        if item_id:
            logger.info(f"Removing product {item_id} (amount {amount}) from cart {cart.id}")
        else:
            logger.info(f"Removing all items from cart {cart.id}")

        items = delete_item(cart.items, item_id, amount)
        return self._save(ctx, touch(cart, items=items), "removed")

    def update_cart_item_amount(
        self,
        ctx: CartContext,
        item_id: Optional[str] = None,
        amount: Optional[float] = None,
    ) -> Optional[Cart]:
        if amount is None:
            amount = 1

        cart = self.resolve(ctx)
        if cart is None or not cart.items:
            return None

        logger.info(f"Setting amount of product {item_id} to {amount} in cart {cart.id}")
        items = set_item_amount(cart.items, item_id, amount)
        return self._save(ctx, touch(cart, items=items), "updated")

    def update_my_cart(self, ctx: CartContext, cart_new: Dict[str, Any]) -> Cart:
        cart = self._require_cart(ctx)

        updated = reconcile(cart, cart_new or {})
        logger.info(f"cart.updateMyCart - cart {cart.id}, fields: {sorted(cart_new or {})}")
        return self._save(ctx, updated, "updated")

    def _require_cart(self, ctx: CartContext) -> Cart:
        cart = self.resolve(ctx)
        if cart is None:
            raise StorageUnavailable("No cart available for this session")
        return cart

    def _save(self, ctx: CartContext, cart: Cart, kind: str) -> Cart:
        # bledy zapisu ida do wywolujacego, stan sie nie zmienil
        saved = self.repo.update_fields(cart.id, prepare_for_update(cart))

        ctx.cart = saved
        self.cache.set_me(ctx.token, saved)
        self.notifier.entity_changed(kind, saved)
        return saved
