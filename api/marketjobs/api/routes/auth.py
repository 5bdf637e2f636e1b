from fastapi import APIRouter, Depends, Response

from marketjobs.core.config import Settings, get_settings
from marketjobs.core.credentials import CredentialIssuer
from marketjobs.core.security import clear_credential_cookie, get_credential_issuer, set_credential_cookie
from marketjobs.schemas.market import AuthStatusOut, IdentityPayload

router = APIRouter()


@router.post("/jwt", response_model=AuthStatusOut)
async def issue_token(
    payload: IdentityPayload,
    response: Response,
    settings: Settings = Depends(get_settings),
    issuer: CredentialIssuer = Depends(get_credential_issuer),
) -> AuthStatusOut:
    token = issuer.issue(payload.model_dump())
    set_credential_cookie(response, settings, token)
    return AuthStatusOut(success=True)


@router.get("/logout", response_model=AuthStatusOut)
async def logout(response: Response, settings: Settings = Depends(get_settings)) -> AuthStatusOut:
    # The credential itself stays valid until it expires; only the cookie is dropped.
    clear_credential_cookie(response, settings)
    return AuthStatusOut(success=True)
