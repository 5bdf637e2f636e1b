from __future__ import annotations

import logging
from functools import lru_cache

from marketjobs.core.config import get_settings
from marketjobs.services.bids import BidRepository
from marketjobs.services.store import Database, InMemoryDatabase, PostgresDatabase, parse_document_id
from marketjobs.services.errors import (
    DuplicateBidError,
    MalformedIdError,
    RepositoryConflictError,
    RepositoryError,
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    RepositoryValidationError,
)
from marketjobs.services.jobs import JobRepository

__all__ = [
    "DuplicateBidError",
    "MalformedIdError",
    "RepositoryConflictError",
    "RepositoryError",
    "RepositoryNotFoundError",
    "RepositoryUnavailableError",
    "RepositoryValidationError",
    "get_bid_repository",
    "get_database",
    "get_job_repository",
    "parse_document_id",
]

logger = logging.getLogger(__name__)

JOBS_TABLE = "market_jobs"
BIDS_TABLE = "market_bids"


@lru_cache
def get_database() -> Database:
    settings = get_settings()
    if settings.storage_backend == "memory":
        logger.warning("using in-memory storage backend; data is lost on restart")
        return InMemoryDatabase()
    return PostgresDatabase(
        database_url=settings.database_url,
        min_pool_size=settings.database_pool_min_size,
        max_pool_size=settings.database_pool_max_size,
    )


@lru_cache
def get_job_repository() -> JobRepository:
    return JobRepository(get_database().collection(JOBS_TABLE))


@lru_cache
def get_bid_repository() -> BidRepository:
    return BidRepository(get_database().collection(BIDS_TABLE))
