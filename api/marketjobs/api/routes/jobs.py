from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from marketjobs.core.auth import Identity
from marketjobs.core.security import read_guarded_document, require_identity
from marketjobs.schemas.market import DeleteResult, InsertResult, UpdateResult
from marketjobs.services.jobs import JobRepository
from marketjobs.services.query import compile_market_jobs
from marketjobs.services.repository import (
    MalformedIdError,
    RepositoryConflictError,
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    get_job_repository,
)

router = APIRouter()


@router.get("")
async def list_jobs(
    request: Request,
    identity: Identity = Depends(require_identity),
    repository: JobRepository = Depends(get_job_repository),
) -> list[dict[str, Any]]:
    query = compile_market_jobs(request.query_params)
    try:
        return await repository.find(query)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.get("/{job_id}")
async def get_job(
    job_id: str,
    identity: Identity = Depends(require_identity),
    repository: JobRepository = Depends(get_job_repository),
) -> dict[str, Any]:
    try:
        return await repository.find_by_id(job_id)
    except MalformedIdError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RepositoryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("", response_model=InsertResult)
async def create_job(
    identity: Identity = Depends(require_identity),
    payload: dict[str, Any] = Depends(read_guarded_document),
    repository: JobRepository = Depends(get_job_repository),
) -> InsertResult:
    try:
        return await repository.insert(payload)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.put("/{job_id}", response_model=UpdateResult)
async def replace_job(
    job_id: str,
    identity: Identity = Depends(require_identity),
    payload: dict[str, Any] = Depends(read_guarded_document),
    repository: JobRepository = Depends(get_job_repository),
) -> UpdateResult:
    try:
        return await repository.replace(job_id, payload)
    except MalformedIdError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RepositoryConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.delete("/{job_id}", response_model=DeleteResult)
async def delete_job(
    job_id: str,
    identity: Identity = Depends(require_identity),
    repository: JobRepository = Depends(get_job_repository),
) -> DeleteResult:
    try:
        return await repository.delete(job_id)
    except MalformedIdError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
