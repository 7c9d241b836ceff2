import hmac
from typing import Optional


class AuthGate:
    """Shared-secret bearer check run before any sync job touches an upstream."""

    def __init__(self, secret: str):
        self._secret = secret or ""

    def check(self, authorization: Optional[str]) -> bool:
        if not self._secret or authorization is None:
            return False
        expected = f"Bearer {self._secret}"
        return hmac.compare_digest(authorization.encode("utf-8"), expected.encode("utf-8"))
