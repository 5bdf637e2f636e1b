from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from marketjobs.services.jobs import JobRepository
from marketjobs.services.query import compile_all_jobs
from marketjobs.services.repository import RepositoryUnavailableError, get_job_repository

router = APIRouter()


@router.get("")
async def search_jobs(request: Request, repository: JobRepository = Depends(get_job_repository)) -> list[dict[str, Any]]:
    query = compile_all_jobs(request.query_params)
    try:
        return await repository.find(query)
    except RepositoryUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
