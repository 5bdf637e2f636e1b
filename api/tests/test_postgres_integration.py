from __future__ import annotations

import asyncio
import os
from collections.abc import Coroutine
from typing import Any, TypeVar
from uuid import uuid4

import asyncpg  # type: ignore[import-untyped]
import pytest
from fastapi.testclient import TestClient

from marketjobs.core.config import get_settings
from marketjobs.main import app
from marketjobs.services.repository import get_bid_repository, get_database, get_job_repository

T = TypeVar("T")

SCHEMA_SQL = """
create table if not exists market_jobs (
  id uuid primary key default gen_random_uuid(),
  doc jsonb not null default '{}'::jsonb,
  created_at timestamptz not null default now()
);
create table if not exists market_bids (
  id uuid primary key default gen_random_uuid(),
  doc jsonb not null default '{}'::jsonb,
  created_at timestamptz not null default now()
);
"""


@pytest.fixture(scope="session")
def database_url() -> str:
    url = os.getenv("MJ_DATABASE_URL") or os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("integration tests require MJ_DATABASE_URL or DATABASE_URL")
    return url


@pytest.fixture(autouse=True)
def reset_tables(database_url: str) -> None:
    _run(_reset_tables(database_url))


@pytest.fixture
def api_client(database_url: str, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setenv("MJ_DATABASE_URL", database_url)
    monkeypatch.setenv("MJ_STORAGE_BACKEND", "postgres")
    _clear_caches()

    with TestClient(app) as client:
        response = client.post("/jwt", json={"email": "buyer@example.com"})
        assert response.status_code == 200
        yield client

    _clear_caches()


def test_job_search_sort_and_paging_against_postgres(api_client: TestClient) -> None:
    for title, category, deadline in [
        ("Django backend", "Web Development", "2026-11-15"),
        ("django admin tweaks", "Web Development", "2026-10-28"),
        ("Brand kit", "Graphics Design", "2026-11-01"),
    ]:
        created = api_client.post(
            "/market-jobs",
            json={"job_title": title, "category": category, "deadline": deadline, "buyer_email": "buyer@example.com"},
        )
        assert created.status_code == 200

    ascending = api_client.get("/all-jobs", params={"search": "DJANGO", "sort": "Asc"}).json()
    assert [job["deadline"] for job in ascending] == ["2026-10-28", "2026-11-15"]

    first_page = api_client.get("/all-jobs", params={"sort": "Dsc", "page": "0", "number": "2"}).json()
    second_page = api_client.get("/all-jobs", params={"sort": "Dsc", "page": "1", "number": "2"}).json()
    assert [job["deadline"] for job in first_page] == ["2026-11-15", "2026-11-01"]
    assert [job["deadline"] for job in second_page] == ["2026-10-28"]

    by_category = api_client.get("/market-jobs", params={"filter": "Graphics Design"}).json()
    assert [job["job_title"] for job in by_category] == ["Brand kit"]


def test_oversized_paging_against_postgres(api_client: TestClient) -> None:
    huge = str(2**70)
    response = api_client.get("/all-jobs", params={"page": huge, "number": huge})

    assert response.status_code == 200
    assert response.json() == []


def test_job_replace_upsert_and_delete_against_postgres(api_client: TestClient) -> None:
    job_id = str(uuid4())

    upserted = api_client.put(f"/market-jobs/{job_id}", json={"job_title": "Fresh", "_id": "ignored"})
    assert upserted.json()["upserted_id"] == job_id

    updated = api_client.put(f"/market-jobs/{job_id}", json={"category": "Digital Marketing"})
    assert updated.json()["matched_count"] == 1
    assert updated.json()["modified_count"] == 1

    fetched = api_client.get(f"/market-jobs/{job_id}").json()
    assert fetched == {"_id": job_id, "job_title": "Fresh", "category": "Digital Marketing"}

    assert api_client.delete(f"/market-jobs/{job_id}").json()["deleted_count"] == 1
    assert api_client.get(f"/market-jobs/{job_id}").status_code == 404


def test_duplicate_bid_against_postgres(api_client: TestClient) -> None:
    bid = {"email": "bidder@example.com", "job_id": "J1", "buyer_email": "buyer@example.com", "price": 75}

    assert api_client.post("/market-bids", json=bid).status_code == 200
    duplicate = api_client.post("/market-bids", json=bid)
    assert duplicate.status_code == 400
    assert duplicate.text == "You already applied"

    rows = api_client.get("/market-bids", params={"email": "bidder@example.com"}).json()
    assert len(rows) == 1
    assert rows[0]["price"] == 75


def _clear_caches() -> None:
    get_settings.cache_clear()
    get_job_repository.cache_clear()
    get_bid_repository.cache_clear()
    get_database.cache_clear()


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


async def _reset_tables(database_url: str) -> None:
    conn = await asyncpg.connect(database_url)
    try:
        await conn.execute(SCHEMA_SQL)
        await conn.execute("truncate table market_jobs, market_bids")
    finally:
        await conn.close()
