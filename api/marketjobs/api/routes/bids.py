from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from marketjobs.core.auth import Identity
from marketjobs.core.security import read_guarded_document, require_identity
from marketjobs.schemas.market import InsertResult, UpdateResult
from marketjobs.services.bids import BidRepository
from marketjobs.services.query import compile_market_bids
from marketjobs.services.repository import (
    DuplicateBidError,
    MalformedIdError,
    RepositoryConflictError,
    RepositoryUnavailableError,
    get_bid_repository,
)

router = APIRouter()


@router.get("")
async def list_bids(
    request: Request,
    identity: Identity = Depends(require_identity),
    repository: BidRepository = Depends(get_bid_repository),
) -> list[dict[str, Any]]:
    query = compile_market_bids(request.query_params)
    try:
        return await repository.find(query)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("", response_model=InsertResult)
async def create_bid(
    identity: Identity = Depends(require_identity),
    payload: dict[str, Any] = Depends(read_guarded_document),
    repository: BidRepository = Depends(get_bid_repository),
):
    try:
        return await repository.insert(payload)
    except DuplicateBidError as exc:
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.patch("/{bid_id}", response_model=UpdateResult)
async def update_bid(
    bid_id: str,
    identity: Identity = Depends(require_identity),
    payload: dict[str, Any] = Depends(read_guarded_document),
    repository: BidRepository = Depends(get_bid_repository),
) -> UpdateResult:
    try:
        return await repository.update(bid_id, payload)
    except MalformedIdError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RepositoryConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
