from __future__ import annotations

import pytest
from itsdangerous import TimestampSigner

from marketjobs.core.config import Settings
from marketjobs.core.credentials import (
    REASON_BAD_SIGNATURE,
    REASON_EXPIRED,
    REASON_MALFORMED,
    CredentialConfigurationError,
    CredentialIssuer,
    build_issuer,
)

PAYLOAD = {"email": "buyer@example.com", "name": "Buyer", "photo": "https://example.com/p.png"}


def _issuer(ttl_seconds: int = 3600, secret: str = "secret-a") -> CredentialIssuer:
    return CredentialIssuer(secret, salt="test-salt", ttl_seconds=ttl_seconds)


def test_verify_recovers_issued_payload() -> None:
    issuer = _issuer()
    check = issuer.verify(issuer.issue(PAYLOAD))

    assert check.valid is True
    assert check.claims == PAYLOAD
    assert check.reason is None
    assert check.identity is not None
    assert check.identity.email == "buyer@example.com"


def test_verify_rejects_expired_credential() -> None:
    # A negative TTL makes a freshly signed credential already past expiry.
    issuer = _issuer(ttl_seconds=-1)
    check = issuer.verify(issuer.issue(PAYLOAD))

    assert check.valid is False
    assert check.reason == REASON_EXPIRED
    assert check.identity is None


def test_verify_rejects_credential_at_expiry_instant(monkeypatch: pytest.MonkeyPatch) -> None:
    clock = [1_700_000_000]
    monkeypatch.setattr(TimestampSigner, "get_timestamp", lambda self: clock[0])
    issuer = _issuer(ttl_seconds=60)
    credential = issuer.issue(PAYLOAD)

    clock[0] += 59
    assert issuer.verify(credential).valid is True

    clock[0] += 1
    check = issuer.verify(credential)
    assert check.valid is False
    assert check.reason == REASON_EXPIRED


def test_zero_ttl_credential_is_never_valid() -> None:
    issuer = _issuer(ttl_seconds=0)
    assert issuer.verify(issuer.issue(PAYLOAD)).reason == REASON_EXPIRED


def test_verify_rejects_tampered_credential() -> None:
    issuer = _issuer()
    payload_part, timestamp, signature = issuer.issue(PAYLOAD).rsplit(".", 2)
    other_payload, _, other_signature = issuer.issue({"email": "admin@example.com"}).rsplit(".", 2)
    forged = _issuer(secret="attacker").issue({"email": "admin@example.com"})

    assert issuer.verify(f"{payload_part}.{timestamp}.{other_signature}").reason == REASON_BAD_SIGNATURE
    assert issuer.verify(f"{other_payload}.{timestamp}.{signature}").reason == REASON_BAD_SIGNATURE
    assert issuer.verify(forged).reason == REASON_BAD_SIGNATURE


def test_verify_rejects_credential_signed_with_other_salt() -> None:
    other = CredentialIssuer("secret-a", salt="other-salt", ttl_seconds=3600)
    assert _issuer().verify(other.issue(PAYLOAD)).valid is False


@pytest.mark.parametrize("credential", ["", "garbage", "a.b.c", None, 42])
def test_verify_never_raises_on_malformed_input(credential: object) -> None:
    check = _issuer().verify(credential)

    assert check.valid is False
    assert check.reason in {REASON_MALFORMED, REASON_BAD_SIGNATURE}


def test_issue_requires_email_claim() -> None:
    with pytest.raises(ValueError):
        _issuer().issue({"name": "nobody"})


def test_build_issuer_requires_secret() -> None:
    with pytest.raises(CredentialConfigurationError):
        build_issuer(Settings(access_token_secret=None))


def test_build_issuer_uses_configured_ttl() -> None:
    issuer = build_issuer(Settings(access_token_secret="configured", access_token_ttl_seconds=120))
    assert issuer.ttl_seconds == 120
    assert issuer.verify(issuer.issue(PAYLOAD)).claims == PAYLOAD
