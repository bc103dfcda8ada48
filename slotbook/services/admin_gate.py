"""
Administrator credential check.
"""

import hmac
from typing import Callable, Optional

from ..domain.exceptions import AuthenticationError


class AdminGate:
    """
    Decides whether a supplied credential grants administrator access.

    The expected secret is either fixed (an operator override) or read
    through ``secret_provider`` on every check, so a rotated secret in the
    stored configuration takes effect without a restart.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        secret_provider: Optional[Callable[[], str]] = None,
    ):
        if secret is None and secret_provider is None:
            raise ValueError("AdminGate needs a secret or a secret provider")
        self._secret = secret
        self._secret_provider = secret_provider

    @classmethod
    def for_store(cls, store, override: Optional[str] = None) -> "AdminGate":
        """Gate using ``override`` if given, else the store's configured secret."""
        if override:
            return cls(secret=override)
        return cls(secret_provider=lambda: store.read_config().admin_secret)

    def check(self, credential: Optional[str]) -> bool:
        """Return True if ``credential`` matches the expected secret."""
        expected = self._secret if self._secret is not None else self._secret_provider()
        if not credential or not expected:
            return False
        return hmac.compare_digest(credential.encode("utf-8"), expected.encode("utf-8"))

    def require(self, credential: Optional[str]) -> None:
        """Raise AuthenticationError unless ``credential`` is accepted."""
        if not self.check(credential):
            raise AuthenticationError("Administrator secret required or incorrect.")
