import uuid

import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo - nikt nie wcisnie sie miedzy GET a DEL,
#wiec nie zwolnimy locka, ktory po wygasnieciu przejal ktos inny


class LockService:
    """
    -lock na zadanie okresowe (np. sprzatanie koszykow), zeby dwa beaty
     nie przetwarzaly tych samych wierszy naraz
    -zwalnianie locka tylko przez wlasciciela (token)
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, name: str, ttl: int) -> str | None:
        key = f"lock:{name}"
        token = uuid.uuid4().hex
        logger.info(f"Acquire lock {key}")
        #SET lock:name token NX EX ttl
        if self.redis.set(name=key, value=token, nx=True, ex=ttl):
            return token
        return None

    @redis_retry()
    def release(self, name: str, token: str) -> bool:
        key = f"lock:{name}"
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
