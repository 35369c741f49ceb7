"""Batch loaders used to attach related rows to query results."""

from collections.abc import Iterable, Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import Column, Table, select
from sqlalchemy.ext.asyncio import AsyncSession


async def fetch_by_ids(
    db: AsyncSession,
    table: Table,
    ids: Iterable[UUID | None],
    columns: Sequence[Column] | None = None,
    key: str = "id",
) -> dict[UUID, dict[str, Any]]:
    """
    Load rows whose ``key`` column is in ``ids`` with a single query.

    Args:
        db: Database session
        table: Table to read
        ids: Ids to look up; None values are skipped
        columns: Columns to select, defaults to the whole table
        key: Column used for matching and for keying the result

    Returns:
        Mapping of key value to row dict
    """
    wanted = {value for value in ids if value is not None}
    if not wanted:
        return {}

    query = select(*(columns or table.c)).where(table.c[key].in_(wanted))
    result = await db.execute(query)
    return {row[key]: dict(row) for row in result.mappings().all()}


async def fetch_grouped(
    db: AsyncSession,
    table: Table,
    key: str,
    ids: Iterable[UUID],
    order_by: Any | None = None,
) -> dict[UUID, list[dict[str, Any]]]:
    """Load child rows for several parents, grouped by the foreign key column."""
    wanted = set(ids)
    grouped: dict[UUID, list[dict[str, Any]]] = {parent: [] for parent in wanted}
    if not wanted:
        return grouped

    query = select(table).where(table.c[key].in_(wanted))
    if order_by is not None:
        query = query.order_by(order_by)
    result = await db.execute(query)
    for row in result.mappings().all():
        grouped[row[key]].append(dict(row))
    return grouped
