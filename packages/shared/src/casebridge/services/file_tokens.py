"""Short-lived signed capability tokens for case file downloads.

Token layout (ASCII, dot separated)::

    <file_id>.<user_id>.<expires_at>.<signature>

``expires_at`` is a Unix timestamp in whole seconds and ``signature`` is
HMAC-SHA256 over the first three fields, base64url encoded without
padding. Tokens are stateless: a token stays valid until it expires and
there is no revocation.
"""

import base64
import hashlib
import hmac
import time
from typing import Callable, NamedTuple, Optional

from casebridge.models import CaseFile, User
from casebridge.utils import setup_logging

logger = setup_logging(__name__)

DEFAULT_TTL_SECONDS = 300


class FileToken(NamedTuple):
    token: str
    expires_at: int


class FileTokenSigner:
    """Issue and validate file download tokens with one secret."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("File token secret must not be empty")
        self._secret = secret.encode()
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def _sign(self, payload: str) -> str:
        digest = hmac.new(self._secret, payload.encode(), hashlib.sha256).digest()
        return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")

    def issue(self, case_file: CaseFile, actor: User, ttl_seconds: Optional[int] = None) -> FileToken:
        """Sign a token for ``actor`` to download ``case_file``.

        The caller is responsible for checking ``can_access_file`` first.
        """
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        expires_at = self._now() + ttl
        payload = f"{case_file.id}.{actor.id}.{expires_at}"
        token = f"{payload}.{self._sign(payload)}"

        logger.info(
            f"Issued download token for file {case_file.id}",
            extra={"user_id": actor.id, "expires_at": expires_at},
        )
        return FileToken(token=token, expires_at=expires_at)

    def validate(self, token: str, expected_file_id: str, expected_user_id: str) -> bool:
        """True if ``token`` grants ``expected_user_id`` access to ``expected_file_id`` now.

        The expiry second itself is still valid. Malformed input returns
        False instead of raising.
        """
        try:
            parts = token.split(".")
            if len(parts) != 4:
                return False

            file_id, user_id, expires_raw, signature = parts
            if file_id != expected_file_id or user_id != expected_user_id:
                return False

            if not (expires_raw.isascii() and expires_raw.isdigit()):
                return False
            if self._now() > int(expires_raw):
                return False

            expected = self._sign(f"{file_id}.{user_id}.{expires_raw}")
            return hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii"))
        except (AttributeError, TypeError, ValueError, UnicodeError):
            return False

    @staticmethod
    def user_id_of(token: str) -> Optional[str]:
        """Second field of a well-formed token, without checking it."""
        parts = token.split(".") if token else []
        if len(parts) != 4:
            return None
        return parts[1]


__all__ = ["DEFAULT_TTL_SECONDS", "FileToken", "FileTokenSigner"]
