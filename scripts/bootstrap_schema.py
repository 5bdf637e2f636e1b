#!/usr/bin/env python3
"""Emit deterministic SQL for the market-jobs document tables."""

from __future__ import annotations

import argparse

DEFAULT_TABLES = ("market_jobs", "market_bids")


def _quote_ident(value: str) -> str:
    escaped = value.replace('"', '""')
    return f'"{escaped}"'


def render_sql(*, tables: list[str], drop_existing: bool) -> str:
    statements = [
        "-- market-jobs document tables",
        "-- Run this against the database referenced by MJ_DATABASE_URL.",
        "",
        "create extension if not exists pgcrypto;",
    ]
    for table in tables:
        ident = _quote_ident(table)
        if drop_existing:
            statements.append(f"drop table if exists {ident};")
        statements.append(
            f"""
create table if not exists {ident} (
  id uuid primary key default gen_random_uuid(),
  doc jsonb not null default '{{}}'::jsonb,
  created_at timestamptz not null default now()
);

create index if not exists {_quote_ident(f"{table}_created_at_idx")} on {ident} (created_at, id);"""
        )
    return "\n".join(statements) + "\n"


def main() -> None:
    parser = argparse.ArgumentParser(description="Emit SQL that creates the market-jobs document tables.")
    parser.add_argument(
        "--table",
        action="append",
        dest="tables",
        help="Table to create (repeatable). Defaults to market_jobs and market_bids.",
    )
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop each table before creating it",
    )
    args = parser.parse_args()

    print(render_sql(tables=args.tables or list(DEFAULT_TABLES), drop_existing=args.drop_existing))


if __name__ == "__main__":
    main()
