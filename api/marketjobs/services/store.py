from __future__ import annotations

import copy
import json
from collections.abc import Sequence
from typing import Any, Protocol
from uuid import UUID, uuid4

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc

from marketjobs.schemas.market import DeleteResult, Document, InsertResult, UpdateResult
from marketjobs.services.errors import MalformedIdError, RepositoryConflictError, RepositoryUnavailableError
from marketjobs.services.query import OP_CONTAINS_CI, OP_EQ, Condition, PageWindow, SortDirection, SortSpec

ID_FIELD = "_id"


def parse_document_id(raw: Any) -> UUID:
    """Validate an id token before any store lookup key is built from it."""
    if not isinstance(raw, str):
        raise MalformedIdError(f"malformed id: {raw!r}")
    try:
        return UUID(raw)
    except ValueError as exc:
        raise MalformedIdError(f"malformed id: {raw!r}") from exc


def strip_id(fields: Document) -> Document:
    return {key: value for key, value in fields.items() if key != ID_FIELD}


class Collection(Protocol):
    async def find(
        self,
        conditions: Sequence[Condition],
        sort: SortSpec | None = None,
        window: PageWindow | None = None,
    ) -> list[Document]: ...

    async def find_one(self, conditions: Sequence[Condition]) -> Document | None: ...

    async def find_by_id(self, document_id: UUID) -> Document | None: ...

    async def insert_one(self, document: Document) -> InsertResult: ...

    async def update_one(self, document_id: UUID, fields: Document, *, upsert: bool = True) -> UpdateResult: ...

    async def delete_one(self, document_id: UUID) -> DeleteResult: ...


class Database(Protocol):
    def collection(self, name: str) -> Collection: ...

    async def close(self) -> None: ...


class PostgresDatabase:
    def __init__(self, database_url: str | None, min_pool_size: int, max_pool_size: int) -> None:
        self.database_url = database_url
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None

    def collection(self, name: str) -> PostgresCollection:
        return PostgresCollection(self, table=name)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def get_pool(self) -> asyncpg.Pool:
        if not self.database_url:
            raise RepositoryUnavailableError("MJ_DATABASE_URL is required")

        if self._pool is not None:
            return self._pool

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.database_url,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
                command_timeout=15,
                init=_init_connection,
            )
            return self._pool
        except Exception as exc:  # pragma: no cover - depends on environment
            raise RepositoryUnavailableError("database unavailable") from exc


async def _init_connection(conn: asyncpg.Connection) -> None:
    await conn.set_type_codec("jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog")


class PostgresCollection:
    """A table of ``(id uuid, doc jsonb, created_at timestamptz)`` rows."""

    def __init__(self, database: PostgresDatabase, *, table: str) -> None:
        self.database = database
        self.table = table

    async def find(
        self,
        conditions: Sequence[Condition],
        sort: SortSpec | None = None,
        window: PageWindow | None = None,
    ) -> list[Document]:
        pool = await self.database.get_pool()
        params: list[Any] = []

        def bind(value: Any) -> str:
            params.append(value)
            return f"${len(params)}"

        where_sql = self._render_conditions(conditions, bind)
        order_by_sql = "created_at asc, id asc"
        if sort is not None:
            sort_expr = f"(doc -> {bind(sort.field)}::text)"
            if sort.direction is SortDirection.ASC:
                order_by_sql = f"{sort_expr} asc nulls first, {order_by_sql}"
            else:
                order_by_sql = f"{sort_expr} desc nulls last, {order_by_sql}"

        window = window or PageWindow()
        page_sql = f"offset {bind(window.skip)}"
        if window.limit > 0:
            page_sql = f"{page_sql} limit {bind(window.limit)}"

        rows = await pool.fetch(
            f"""
            select id::text as id, doc
            from {self.table}
            where {where_sql}
            order by {order_by_sql}
            {page_sql}
            """,
            *params,
        )
        return [self._row_to_document(row) for row in rows]

    async def find_one(self, conditions: Sequence[Condition]) -> Document | None:
        rows = await self.find(conditions, window=PageWindow(skip=0, limit=1))
        return rows[0] if rows else None

    async def find_by_id(self, document_id: UUID) -> Document | None:
        pool = await self.database.get_pool()
        row = await pool.fetchrow(
            f"select id::text as id, doc from {self.table} where id = $1",
            document_id,
        )
        return self._row_to_document(row) if row else None

    async def insert_one(self, document: Document) -> InsertResult:
        pool = await self.database.get_pool()
        inserted_id = await pool.fetchval(
            f"insert into {self.table} (doc) values ($1::jsonb) returning id::text",
            strip_id(document),
        )
        return InsertResult(inserted_id=inserted_id)

    async def update_one(self, document_id: UUID, fields: Document, *, upsert: bool = True) -> UpdateResult:
        changes = strip_id(fields)
        pool = await self.database.get_pool()
        async with pool.acquire() as conn:
            async with conn.transaction():
                existing = await conn.fetchval(
                    f"select doc from {self.table} where id = $1 for update",
                    document_id,
                )
                if existing is not None:
                    merged = {**existing, **changes}
                    if merged == existing:
                        return UpdateResult(matched_count=1, modified_count=0)
                    await conn.execute(
                        f"update {self.table} set doc = $2::jsonb where id = $1",
                        document_id,
                        merged,
                    )
                    return UpdateResult(matched_count=1, modified_count=1)

                if not upsert:
                    return UpdateResult(matched_count=0, modified_count=0)
                try:
                    await conn.execute(
                        f"insert into {self.table} (id, doc) values ($1, $2::jsonb)",
                        document_id,
                        changes,
                    )
                except pg_exc.UniqueViolationError as exc:
                    raise RepositoryConflictError(f"concurrent upsert on {self.table} id={document_id}") from exc
                return UpdateResult(matched_count=0, modified_count=0, upserted_id=str(document_id))

    async def delete_one(self, document_id: UUID) -> DeleteResult:
        pool = await self.database.get_pool()
        status = await pool.execute(f"delete from {self.table} where id = $1", document_id)
        return DeleteResult(deleted_count=_affected_rows(status))

    @staticmethod
    def _render_conditions(conditions: Sequence[Condition], bind: Any) -> str:
        clauses: list[str] = []
        for condition in conditions:
            field_token = bind(condition.field)
            if condition.op == OP_EQ:
                if condition.value is None:
                    clauses.append(
                        f"(doc -> {field_token}::text is null or doc -> {field_token}::text = 'null'::jsonb)"
                    )
                else:
                    clauses.append(f"doc -> {field_token}::text = {bind(condition.value)}::jsonb")
            elif condition.op == OP_CONTAINS_CI:
                clauses.append(
                    f"strpos(lower(coalesce(doc ->> {field_token}::text, '')), lower({bind(str(condition.value))}::text)) > 0"
                )
            else:
                raise ValueError(f"unsupported filter operator: {condition.op}")
        return " and ".join(clauses) if clauses else "true"

    @staticmethod
    def _row_to_document(row: asyncpg.Record) -> Document:
        doc = row["doc"]
        if isinstance(doc, str):
            doc = json.loads(doc)
        return {ID_FIELD: row["id"], **(doc or {})}


class InMemoryDatabase:
    """Process-local store for local runs and tests."""

    def __init__(self) -> None:
        self._collections: dict[str, InMemoryCollection] = {}

    def collection(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection()
        return self._collections[name]

    async def close(self) -> None:
        self._collections.clear()


class InMemoryCollection:
    def __init__(self) -> None:
        # Insertion order doubles as the store-default order.
        self.documents: dict[str, Document] = {}

    async def find(
        self,
        conditions: Sequence[Condition],
        sort: SortSpec | None = None,
        window: PageWindow | None = None,
    ) -> list[Document]:
        rows = [
            self._with_id(document_id, doc)
            for document_id, doc in self.documents.items()
            if all(_matches(doc, condition) for condition in conditions)
        ]
        if sort is not None:
            rows.sort(
                key=lambda row: _sort_key(row.get(sort.field)),
                reverse=sort.direction is SortDirection.DESC,
            )

        window = window or PageWindow()
        rows = rows[window.skip :]
        if window.limit > 0:
            rows = rows[: window.limit]
        return rows

    async def find_one(self, conditions: Sequence[Condition]) -> Document | None:
        rows = await self.find(conditions, window=PageWindow(skip=0, limit=1))
        return rows[0] if rows else None

    async def find_by_id(self, document_id: UUID) -> Document | None:
        key = str(document_id)
        doc = self.documents.get(key)
        return self._with_id(key, doc) if doc is not None else None

    async def insert_one(self, document: Document) -> InsertResult:
        document_id = str(uuid4())
        self.documents[document_id] = copy.deepcopy(strip_id(document))
        return InsertResult(inserted_id=document_id)

    async def update_one(self, document_id: UUID, fields: Document, *, upsert: bool = True) -> UpdateResult:
        key = str(document_id)
        changes = copy.deepcopy(strip_id(fields))
        existing = self.documents.get(key)
        if existing is not None:
            merged = {**existing, **changes}
            if merged == existing:
                return UpdateResult(matched_count=1, modified_count=0)
            self.documents[key] = merged
            return UpdateResult(matched_count=1, modified_count=1)

        if not upsert:
            return UpdateResult(matched_count=0, modified_count=0)
        self.documents[key] = changes
        return UpdateResult(matched_count=0, modified_count=0, upserted_id=key)

    async def delete_one(self, document_id: UUID) -> DeleteResult:
        removed = self.documents.pop(str(document_id), None)
        return DeleteResult(deleted_count=0 if removed is None else 1)

    @staticmethod
    def _with_id(document_id: str, doc: Document) -> Document:
        return {ID_FIELD: document_id, **copy.deepcopy(doc)}


def _matches(doc: Document, condition: Condition) -> bool:
    value = doc.get(condition.field)
    if condition.op == OP_EQ:
        return value == condition.value
    if condition.op == OP_CONTAINS_CI:
        if value is None:
            text = ""
        else:
            text = value if isinstance(value, str) else json.dumps(value)
        return str(condition.value).lower() in text.lower()
    raise ValueError(f"unsupported filter operator: {condition.op}")


def _sort_key(value: Any) -> tuple[int, Any]:
    # jsonb ordering: null < string < number < boolean < array/object.
    if value is None:
        return (0, 0)
    if isinstance(value, str):
        return (1, value)
    if isinstance(value, bool):
        return (3, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    return (4, json.dumps(value, sort_keys=True))


def _affected_rows(status: str) -> int:
    try:
        return int(status.rsplit(" ", maxsplit=1)[-1])
    except (AttributeError, ValueError):
        return 0
