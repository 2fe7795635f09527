# shopcart/services/lock_service.py
import redis

from shopcart.utils.retry import redis_retry
from shopcart.utils.settings import REDIS_URL
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL


class LockService:
    """
    -blokada zadania (np. sweep koszykow), zeby dwa uruchomienia sie nie nakladaly
    -zwalnianie locka tylko przez wlasciciela
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(name: str) -> str:
        return f"lock:{name}"

    @redis_retry()
    def acquire(self, name: str, owner: str, ttl: int) -> bool:
        key = self._key(name)
        logger.info(f"Acquire lock {key} for {owner}")
        #SET lock:cart-sweep "<owner>" NX EX 3600
        return bool(self.redis.set(name=key, value=owner, nx=True, ex=ttl))

    @redis_retry()
    def release(self, name: str, owner: str) -> bool:
        key = self._key(name)
        logger.info(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)
