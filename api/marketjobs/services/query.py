"""Compile raw query-string parameters into store-neutral filters.

Each route owns a decision table: an ordered list of ``(parameter, builder)``
rows. A parameter counts as present only when it carries a non-empty value.
The compiler never raises; missing or malformed input falls back to a
match-all filter, no sort and an unbounded window.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

OP_EQ = "eq"
OP_CONTAINS_CI = "contains_ci"

JOB_TITLE_FIELD = "job_title"
JOB_CATEGORY_FIELD = "category"
JOB_DEADLINE_FIELD = "deadline"
BUYER_EMAIL_FIELD = "buyer_email"
BIDDER_EMAIL_FIELD = "email"
BID_JOB_ID_FIELD = "job_id"

ALL_JOBS_CATEGORY_PARAMS = ("filter", "category")
MAX_PAGE_NUMBER = 1_000_000


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(slots=True, frozen=True)
class Condition:
    field: str
    op: str
    value: Any


@dataclass(slots=True, frozen=True)
class SortSpec:
    field: str
    direction: SortDirection


@dataclass(slots=True, frozen=True)
class PageWindow:
    skip: int = 0
    # 0 means no limit.
    limit: int = 0


@dataclass(slots=True, frozen=True)
class CompiledQuery:
    filter: tuple[Condition, ...] = ()
    sort: SortSpec | None = None
    window: PageWindow = field(default_factory=PageWindow)


ConditionBuilder = Callable[[str], Condition]
DecisionTable = tuple[tuple[str, ConditionBuilder], ...]


def _equals(field_name: str) -> ConditionBuilder:
    return lambda value: Condition(field=field_name, op=OP_EQ, value=value)


def _title_contains(value: str) -> Condition:
    return Condition(field=JOB_TITLE_FIELD, op=OP_CONTAINS_CI, value=value)


MARKET_JOBS_TABLE: DecisionTable = (
    ("email", _equals(BUYER_EMAIL_FIELD)),
    ("filter", _equals(JOB_CATEGORY_FIELD)),
    ("search", _title_contains),
)

MARKET_BIDS_TABLE: DecisionTable = (
    ("email", _equals(BIDDER_EMAIL_FIELD)),
    ("buyer_email", _equals(BUYER_EMAIL_FIELD)),
)


def param_value(params: Mapping[str, str], name: str) -> str | None:
    value = params.get(name)
    if value is None or value == "":
        return None
    return value


def parse_page_number(raw: str | None) -> int:
    """Lenient integer parse: absent, non-numeric or negative input yields 0.

    Values are capped at MAX_PAGE_NUMBER so page * number stays within bigint.
    """
    if raw is None:
        return 0
    try:
        parsed = int(raw.strip())
    except (AttributeError, ValueError):
        return 0
    return max(0, min(parsed, MAX_PAGE_NUMBER))


def first_match(params: Mapping[str, str], table: DecisionTable) -> tuple[Condition, ...]:
    for name, build in table:
        value = param_value(params, name)
        if value is not None:
            return (build(value),)
    return ()


def compile_market_jobs(params: Mapping[str, str]) -> CompiledQuery:
    return CompiledQuery(filter=first_match(params, MARKET_JOBS_TABLE))


def compile_market_bids(params: Mapping[str, str]) -> CompiledQuery:
    return CompiledQuery(filter=first_match(params, MARKET_BIDS_TABLE))


def compile_all_jobs(params: Mapping[str, str]) -> CompiledQuery:
    conditions = [_title_contains(params.get("search") or "")]
    for name in ALL_JOBS_CATEGORY_PARAMS:
        category = param_value(params, name)
        if category is not None:
            conditions.append(_equals(JOB_CATEGORY_FIELD)(category))
            break

    sort: SortSpec | None = None
    sort_param = param_value(params, "sort")
    if sort_param is not None:
        direction = SortDirection.ASC if sort_param == "Asc" else SortDirection.DESC
        sort = SortSpec(field=JOB_DEADLINE_FIELD, direction=direction)

    page = parse_page_number(params.get("page"))
    number = parse_page_number(params.get("number"))
    return CompiledQuery(
        filter=tuple(conditions),
        sort=sort,
        window=PageWindow(skip=page * number, limit=number),
    )


def bidder_job_filter(email: Any, job_id: Any) -> tuple[Condition, ...]:
    return (
        Condition(field=BIDDER_EMAIL_FIELD, op=OP_EQ, value=email),
        Condition(field=BID_JOB_ID_FIELD, op=OP_EQ, value=job_id),
    )
