# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests
import redis


def _backoff(errors, base: float, cap: float, attempts: int = 3):
    # po ostatniej probie oryginalny wyjatek leci do wywolujacego
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=base, min=base, max=cap),
        retry=retry_if_exception_type(errors),
    )


def http_retry(attempts: int = 3):
    """Bledy sieci/HTTP do zewnetrznych uslug (weryfikacja anty-bot)."""
    return _backoff(requests.RequestException, 0.3, 3, attempts)


def redis_retry(attempts: int = 3):
    return _backoff(redis.RedisError, 0.2, 2, attempts)
