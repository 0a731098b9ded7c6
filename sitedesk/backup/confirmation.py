"""Two-step confirmation for destructive operations.

``request()`` issues a single-use token describing what will happen;
``consume()`` redeems it. A caller (HTTP client, CLI prompt, test) can only
run the destructive step by presenting a token it was handed earlier.
"""

import secrets
from datetime import timedelta
from typing import Dict

from .._utils import utc_now
from ..errors import ConfirmationError
from .models import ConfirmationToken


class ConfirmationGate:
    def __init__(self, ttl_seconds: float = 300.0):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._pending: Dict[str, ConfirmationToken] = {}

    def request(self, backup_name: str, description: str) -> ConfirmationToken:
        self._expire()
        token = ConfirmationToken(
            token=secrets.token_urlsafe(24),
            backup_name=backup_name,
            description=description,
            expires_at=utc_now() + self.ttl,
        )
        self._pending[token.token] = token
        return token

    def consume(self, token: str) -> ConfirmationToken:
        """Redeem a token once. Unknown, expired or reused tokens are rejected."""
        issued = self._pending.pop(token, None)
        if issued is None:
            raise ConfirmationError("Unknown or already used confirmation token")
        if issued.expires_at <= utc_now():
            raise ConfirmationError(f"Confirmation for '{issued.backup_name}' has expired")
        return issued

    def _expire(self) -> None:
        now = utc_now()
        for key in [k for k, t in self._pending.items() if t.expires_at <= now]:
            del self._pending[key]
