"""Signed, time-bounded access credentials.

The credential is an ``itsdangerous`` timed serializer token: the identity
payload is JSON-encoded, stamped with the signing time and HMAC-signed with the
server secret. Expiry is enforced at verification as ``signed_at + ttl``.

Logout only asks the client to drop the cookie. There is no server-side
revocation list, so a copied credential stays valid until it expires.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from itsdangerous import BadData, BadSignature, SignatureExpired, URLSafeTimedSerializer

from marketjobs.core.auth import Identity
from marketjobs.core.config import Settings

REASON_EXPIRED = "expired"
REASON_BAD_SIGNATURE = "bad_signature"
REASON_MALFORMED = "malformed"


class CredentialConfigurationError(RuntimeError):
    """Raised when no signing secret is configured."""


@dataclass(slots=True, frozen=True)
class CredentialCheck:
    valid: bool
    claims: dict[str, Any] = field(default_factory=dict)
    reason: str | None = None

    @property
    def identity(self) -> Identity | None:
        if not self.valid:
            return None
        return Identity.from_claims(self.claims)


class CredentialIssuer:
    def __init__(self, secret: str, *, salt: str, ttl_seconds: int) -> None:
        if not secret:
            raise CredentialConfigurationError("MJ_ACCESS_TOKEN_SECRET is required")
        self.ttl_seconds = ttl_seconds
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=salt)

    def issue(self, identity_payload: dict[str, Any]) -> str:
        Identity.from_claims(identity_payload)
        return self._serializer.dumps(identity_payload)

    def verify(self, credential: Any) -> CredentialCheck:
        """Check signature and age; a credential is valid only while ``now < signed_at + ttl``.

        The serializer rejects a token once ``age > max_age`` with ages in whole
        seconds, so ``ttl - 1`` is passed to reject it from the expiry second on.
        """
        if not isinstance(credential, str) or not credential:
            return CredentialCheck(valid=False, reason=REASON_MALFORMED)

        try:
            claims = self._serializer.loads(credential, max_age=self.ttl_seconds - 1)
        except SignatureExpired:
            return CredentialCheck(valid=False, reason=REASON_EXPIRED)
        except BadSignature:
            return CredentialCheck(valid=False, reason=REASON_BAD_SIGNATURE)
        except BadData:
            return CredentialCheck(valid=False, reason=REASON_MALFORMED)

        try:
            Identity.from_claims(claims)
        except ValueError:
            return CredentialCheck(valid=False, reason=REASON_MALFORMED)
        return CredentialCheck(valid=True, claims=claims)


def build_issuer(settings: Settings) -> CredentialIssuer:
    return CredentialIssuer(
        settings.access_token_secret or "",
        salt=settings.access_token_salt,
        ttl_seconds=settings.access_token_ttl_seconds,
    )
