from __future__ import annotations

import logging

from marketjobs.schemas.market import Document, InsertResult, UpdateResult
from marketjobs.services.errors import DuplicateBidError
from marketjobs.services.query import BID_JOB_ID_FIELD, BIDDER_EMAIL_FIELD, CompiledQuery, bidder_job_filter
from marketjobs.services.store import Collection, parse_document_id, strip_id

logger = logging.getLogger(__name__)


class BidRepository:
    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    async def find(self, query: CompiledQuery) -> list[Document]:
        return await self.collection.find(query.filter, sort=query.sort, window=query.window)

    async def insert(self, bid: Document) -> InsertResult:
        """Insert a bid unless the bidder already applied to the same job.

        The lookup and the insert are separate store calls, so two concurrent
        submissions for the same (bidder, job) pair can both pass the check.
        """
        email = bid.get(BIDDER_EMAIL_FIELD)
        job_id = bid.get(BID_JOB_ID_FIELD)
        existing = await self.collection.find_one(bidder_job_filter(email, job_id))
        if existing is not None:
            logger.info("duplicate bid rejected email=%s job_id=%s", email, job_id)
            raise DuplicateBidError("You already applied")
        return await self.collection.insert_one(bid)

    async def update(self, bid_id: str, fields: Document) -> UpdateResult:
        key = parse_document_id(bid_id)
        return await self.collection.update_one(key, strip_id(fields), upsert=True)
