import logging
from typing import Any, NoReturn

from fastapi import Depends, Header, HTTPException, Request, Response, status

from marketjobs.core.auth import GuardRejection, Identity, parse_bearer_header
from marketjobs.core.config import Settings, get_settings
from marketjobs.core.credentials import CredentialConfigurationError, CredentialIssuer, build_issuer

logger = logging.getLogger(__name__)

REJECTION_DETAILS: dict[GuardRejection, str] = {
    GuardRejection.NO_CREDENTIAL: "No permission",
    GuardRejection.INVALID_CREDENTIAL: "Unauthorized",
}


def get_credential_issuer(settings: Settings = Depends(get_settings)) -> CredentialIssuer:
    try:
        return build_issuer(settings)
    except CredentialConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


async def require_identity(
    request: Request,
    settings: Settings = Depends(get_settings),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Identity:
    token = request.cookies.get(settings.cookie_name) or parse_bearer_header(authorization)
    if not token:
        _reject(request, GuardRejection.NO_CREDENTIAL, reason="missing")

    check = get_credential_issuer(settings).verify(token)
    identity = check.identity
    if identity is None:
        _reject(request, GuardRejection.INVALID_CREDENTIAL, reason=check.reason or "unknown")

    request.state.identity = identity
    return identity


def set_credential_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.access_token_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "strict",
    )


def clear_credential_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "strict",
    )


def _reject(request: Request, rejection: GuardRejection, *, reason: str) -> NoReturn:
    logger.info(
        "access guard rejected request method=%s path=%s rejection=%s reason=%s",
        request.method,
        request.url.path,
        rejection.value,
        reason,
    )
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=REJECTION_DETAILS[rejection])


async def read_guarded_document(
    request: Request,
    identity: Identity = Depends(require_identity),
) -> dict[str, Any]:
    """Decode the JSON object body once the access guard has accepted the request.

    Declaring the body as a handler parameter would make FastAPI decode it
    before any dependency runs, so a malformed body without a credential
    would answer 422 instead of 401.
    """
    try:
        document = await request.json()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="request body must be valid JSON",
        ) from exc
    if not isinstance(document, dict):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="request body must be a JSON object",
        )
    return document
