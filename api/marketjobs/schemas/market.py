from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IdentityPayload(BaseModel):
    # Signed as submitted; the email is an opaque identifier, not normalized.
    email: str = Field(min_length=1)

    model_config = ConfigDict(extra="allow")


class AuthStatusOut(BaseModel):
    success: bool


class InsertResult(BaseModel):
    acknowledged: bool = True
    inserted_id: str


class UpdateResult(BaseModel):
    acknowledged: bool = True
    matched_count: int
    modified_count: int
    upserted_id: str | None = None


class DeleteResult(BaseModel):
    acknowledged: bool = True
    deleted_count: int


Document = dict[str, Any]
