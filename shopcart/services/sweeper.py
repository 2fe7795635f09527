# shopcart/services/sweeper.py
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import sessionmaker

from shopcart.data.database import SessionLocal
from shopcart.domain.errors import StorageUnavailable
from shopcart.domain.items import now_utc
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.lock_service import LockService
from shopcart.utils.settings import CART_RETENTION_MONTHS, CART_SWEEP_LOCK_TTL, CART_SWEEP_WORKERS
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)

SWEEP_LOCK = "cart-sweep"


class CartSweeper:
    """
    Usuwa koszyki nieaktualizowane dluzej niz okres retencji.
    Kazde usuniecie osobno (wlasna sesja, pula watkow), blad jednego
    koszyka nie przerywa reszty. Wynik = lista komunikatow per koszyk.
    Jedno uruchomienie na raz (lock w redisie), niezaleznie czy z crona czy z API.
    """

    def __init__(
        self,
        session_factory: sessionmaker | None = None,
        retention_months: int = CART_RETENTION_MONTHS,
        max_workers: int = CART_SWEEP_WORKERS,
        lock_service: LockService | None = None,
        lock_ttl: int = CART_SWEEP_LOCK_TTL,
    ):
        self.session_factory = session_factory or SessionLocal
        self.retention_months = retention_months
        self.max_workers = max_workers
        self.lock_service = lock_service or LockService()
        self.lock_ttl = lock_ttl

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        return (now or now_utc()) - relativedelta(months=self.retention_months)

    def clean_carts(self, now: Optional[datetime] = None) -> List[str]:
        owner = uuid.uuid4().hex
        if not self.lock_service.acquire(SWEEP_LOCK, owner, ttl=self.lock_ttl):
            logger.warning("Cart sweep already running, skipping")
            return []

        try:
            return self._sweep(now)
        finally:
            self.lock_service.release(SWEEP_LOCK, owner)

    def _sweep(self, now: Optional[datetime]) -> List[str]:
        cutoff = self.cutoff(now)

        try:
            with self.session_factory() as db:
                stale = CartRepo(db).find_updated_before(cutoff)
        except StorageUnavailable as e:
            logger.error(f"Cart sweep query failed: {e}")
            return [f"Failed to query carts: {e}"]

        logger.info(f"Found {len(stale)} carts not updated since {cutoff.isoformat()}")
        if not stale:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(self._remove, [cart.id for cart in stale]))

    def _remove(self, cart_id: str) -> str:
        try:
            with self.session_factory() as db:
                removed = CartRepo(db).remove(cart_id)
        except Exception as e:
            logger.warning(f"Failed to remove cart {cart_id}: {e}")
            return f"Failed to remove cart {cart_id}: {e}"

        return f"Removed cart {removed}"
