"""Database initialization and dependency injection."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

import fastapi
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import DatabaseManager
# Import all models to ensure they're registered
import components.debtor.models
import components.credit.models
import components.payment.models
import components.letter.models

# Create a single instance of DatabaseManager
db_manager = DatabaseManager()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    async with db_manager.get_db() as session:
        yield session

@asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
    """Create missing tables on startup and close the connection pool on shutdown."""
    await db_manager.create_all()
    yield
    await db_manager.dispose()
