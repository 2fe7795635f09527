# shopcart/services/cart_cache.py
import redis
from redis.exceptions import RedisError

from shopcart.domain.schemas import Cart
from shopcart.utils.retry import redis_retry
from shopcart.utils.settings import REDIS_URL, CART_ME_CACHE_TTL
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)

NAMESPACE = "cart"


class CartCache:
    """
    Krotki cache odczytu koszyka ("me"), klucz = token + dateUpdated.

    cart.me:<token>          -> aktualny dateUpdated koszyka
    cart.me:<token>:<stamp>  -> json koszyka

    Po mutacji zapisujemy nowy stamp, wiec stare wpisy sa nieosiagalne
    i wygasaja same po TTL. Bledy redisa = brak cache, nie blad operacji.
    """

    def __init__(
        self,
        url: str | None = None,
        ttl: int = CART_ME_CACHE_TTL,
        client: redis.Redis | None = None,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _stamp_key(token: str) -> str:
        return f"{NAMESPACE}.me:{token}"

    @staticmethod
    def _entry_key(token: str, stamp: str) -> str:
        return f"{NAMESPACE}.me:{token}:{stamp}"

    @redis_retry()
    def _read(self, token: str) -> str | None:
        stamp = self.redis.get(self._stamp_key(token))
        if not stamp:
            return None
        return self.redis.get(self._entry_key(token, stamp))

    @redis_retry()
    def _write(self, token: str, cart: Cart) -> None:
        stamp = cart.date_updated.isoformat()
        pipe = self.redis.pipeline()
        pipe.set(self._stamp_key(token), stamp, ex=self.ttl)
        pipe.set(
            self._entry_key(token, stamp),
            cart.model_dump_json(by_alias=True),
            ex=self.ttl,
        )
        pipe.execute()

    @redis_retry()
    def _clean(self) -> int:
        keys = list(self.redis.scan_iter(match=f"{NAMESPACE}.*"))
        if keys:
            self.redis.delete(*keys)
        return len(keys)

    def get_me(self, token: str) -> Cart | None:
        try:
            raw = self._read(token)
        except RedisError as e:
            logger.warning(f"Cart cache read failed, falling back to storage: {e}")
            return None

        if raw is None:
            return None
        return Cart.model_validate_json(raw)

    def set_me(self, token: str, cart: Cart) -> None:
        try:
            self._write(token, cart)
        except RedisError as e:
            logger.warning(f"Cart cache write failed for cart {cart.id}: {e}")

    def clean(self) -> int:
        """Czysci caly namespace cache koszykow."""
        try:
            removed = self._clean()
        except RedisError as e:
            logger.warning(f"Cart cache clean failed: {e}")
            return 0

        logger.info(f"Cart cache cleaned, {removed} keys removed")
        return removed
