# shopcart/data/models/cart.py
import uuid

from sqlalchemy import JSON, Column, DateTime, String

from shopcart.data.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(String(32), primary_key=True, default=_new_id)
    user = Column(String, nullable=True, index=True)
    ip = Column(String(64), nullable=True)
    hash = Column(String(128), nullable=False, index=True)
    order = Column(String, nullable=True)

    date_created = Column(DateTime(timezone=True), nullable=False)
    date_updated = Column(DateTime(timezone=True), nullable=False, index=True)

    # pozycje trzymane jako dokument JSON, kolejnosc = kolejnosc wyswietlania
    items = Column(JSON, nullable=False, default=list)
