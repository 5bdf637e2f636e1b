from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GuardRejection(str, Enum):
    NO_CREDENTIAL = "no_credential"
    INVALID_CREDENTIAL = "invalid_credential"


@dataclass(slots=True)
class Identity:
    email: str
    claims: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: Any) -> "Identity":
        if not isinstance(claims, dict):
            raise ValueError("identity payload must be a mapping")
        email = claims.get("email")
        if not isinstance(email, str) or not email.strip():
            raise ValueError("identity payload requires an email claim")
        return cls(email=email, claims=dict(claims))


def parse_bearer_header(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", maxsplit=1)[1].strip()
    return token or None
