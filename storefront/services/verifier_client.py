# storefront/services/verifier_client.py
import requests

from storefront.utils.retry import http_retry
from storefront.utils.settings import CAPTCHA_ENABLED, CAPTCHA_SECRET, CAPTCHA_VERIFY_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class VerifierClient:
    """
    Weryfikacja tokenu anty-bot (reCAPTCHA siteverify) dla checkout goscia.
    Bledy sieci sa ponawiane przez tenacity; po 3 probach wyjatek leci dalej.
    """

    def __init__(
        self,
        verify_url: str | None = None,
        secret: str | None = None,
        enabled: bool | None = None,
        timeout: int = 5,
    ):
        self.verify_url = verify_url or CAPTCHA_VERIFY_URL
        self.secret = CAPTCHA_SECRET if secret is None else secret
        self.enabled = CAPTCHA_ENABLED if enabled is None else enabled
        self.timeout = timeout

    @http_retry()
    def _siteverify(self, token: str, remote_ip: str | None) -> dict:
        data = {"secret": self.secret, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        logger.info(f"VerifierClient POST {self.verify_url}")
        resp = requests.post(self.verify_url, data=data, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def verify(self, token: str | None, remote_ip: str | None = None) -> bool:
        if not self.enabled:
            return True

        if not token:
            logger.warning("Bot verification skipped: no token supplied")
            return False

        result = self._siteverify(token, remote_ip)
        if not result.get("success"):
            logger.warning(f"Bot verification rejected: {result.get('error-codes')}")
            return False
        return True
