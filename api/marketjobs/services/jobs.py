from __future__ import annotations

from marketjobs.schemas.market import DeleteResult, Document, InsertResult, UpdateResult
from marketjobs.services.errors import RepositoryNotFoundError
from marketjobs.services.query import CompiledQuery
from marketjobs.services.store import Collection, parse_document_id, strip_id


class JobRepository:
    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    async def find(self, query: CompiledQuery) -> list[Document]:
        return await self.collection.find(query.filter, sort=query.sort, window=query.window)

    async def find_by_id(self, job_id: str) -> Document:
        key = parse_document_id(job_id)
        job = await self.collection.find_by_id(key)
        if job is None:
            raise RepositoryNotFoundError("job not found")
        return job

    async def insert(self, job: Document) -> InsertResult:
        return await self.collection.insert_one(job)

    async def replace(self, job_id: str, fields: Document) -> UpdateResult:
        """Overwrite the given fields of a job, creating it under ``job_id`` if absent."""
        key = parse_document_id(job_id)
        return await self.collection.update_one(key, strip_id(fields), upsert=True)

    async def delete(self, job_id: str) -> DeleteResult:
        key = parse_document_id(job_id)
        return await self.collection.delete_one(key)
