"""Pagination helper bridging SQLModel statements and fastapi-pagination pages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi_pagination.ext.sqlalchemy import paginate as _paginate

if TYPE_CHECKING:
    from sqlalchemy.sql import Select
    from sqlmodel.ext.asyncio.session import AsyncSession


async def paginate(session: AsyncSession, statement: Select[Any]) -> Any:
    """Execute ``statement`` with the request's limit/offset params."""
    return await _paginate(session, statement)
