"""
FastAPI Dependency Injection utilities.

The engine and session factory live on ``app.state``; each request gets
its own session from there.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from iqx.services.company_query import CompanyQueryService


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session, rolled back on error."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Type alias for database dependency
DatabaseDep = Annotated[AsyncSession, Depends(get_db)]


def get_query_service(db: DatabaseDep) -> CompanyQueryService:
    return CompanyQueryService(db)


QueryServiceDep = Annotated[CompanyQueryService, Depends(get_query_service)]
