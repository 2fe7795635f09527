# shopcart/repos/cart_repo.py
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopcart.data.models.cart import CartModel
from shopcart.domain.errors import StorageUnavailable
from shopcart.domain.items import IDENTITY_FIELDS
from shopcart.domain.schemas import Cart
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


def prepare_for_update(cart: Cart) -> Dict[str, Any]:
    """Koszyk -> kolumny do zapisu, bez id rekordu."""
    return {
        "user": cart.user,
        "ip": cart.ip,
        "hash": cart.hash,
        "order": cart.order,
        "date_created": cart.date_created,
        "date_updated": cart.date_updated,
        "items": [
            item.model_dump(by_alias=True, exclude_none=True, mode="json")
            for item in cart.items
        ],
    }


def to_cart(row: CartModel) -> Cart:
    return Cart.model_validate(
        {
            "id": row.id,
            "user": row.user,
            "ip": row.ip,
            "hash": row.hash,
            "order": row.order,
            "dateCreated": row.date_created,
            "dateUpdated": row.date_updated,
            "items": row.items or [],
        }
    )


class CartRepo:
    """
    Dostep do koszykow w bazie. Bledy SQLAlchemy zamieniane na StorageUnavailable.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_hash(self, token: str) -> Cart | None:
        # aktywny = bez podpietego zamowienia, najstarszy wygrywa
        stmt = (
            select(CartModel)
            .where(CartModel.hash == token, CartModel.order.is_(None))
            .order_by(CartModel.date_created)
            .limit(1)
        )
        try:
            row = self.db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cart lookup failed: {e}") from e
        return to_cart(row) if row else None

    def get(self, cart_id: str) -> Cart | None:
        try:
            row = self.db.get(CartModel, cart_id)
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cart lookup failed: {e}") from e
        return to_cart(row) if row else None

    def find_updated_before(self, cutoff: datetime) -> List[Cart]:
        stmt = (
            select(CartModel)
            .where(CartModel.date_updated < cutoff)
            .order_by(CartModel.date_updated)
        )
        try:
            rows = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cart query failed: {e}") from e
        return [to_cart(row) for row in rows]

    def insert(self, cart: Cart) -> Cart:
        row = CartModel(**prepare_for_update(cart))
        if cart.id:
            row.id = cart.id
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageUnavailable(f"Cart insert failed: {e}") from e
        return to_cart(row)

    def update_fields(self, cart_id: str, fields: Dict[str, Any]) -> Cart:
        # id nadaje baza, nigdy go nie nadpisujemy
        fields = {k: v for k, v in fields.items() if k not in IDENTITY_FIELDS}
        try:
            row = self.db.get(CartModel, cart_id)
            if row is None:
                raise StorageUnavailable(f"Cart {cart_id} no longer exists")
            for name, value in fields.items():
                setattr(row, name, value)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageUnavailable(f"Cart update failed: {e}") from e
        return to_cart(row)

    def remove(self, cart_id: str) -> str:
        try:
            self.db.execute(delete(CartModel).where(CartModel.id == cart_id))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageUnavailable(f"Cart remove failed: {e}") from e
        logger.info(f"Cart {cart_id} removed")
        return cart_id
