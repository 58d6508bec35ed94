"""
FastAPI dependencies for database access and identifier parsing
"""
from bson import ObjectId
from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.database import DatabaseManager


def get_database_manager(request: Request) -> DatabaseManager:
    """Get the database manager owned by the running application."""
    return request.app.state.db_manager


async def get_database(db_manager: DatabaseManager = Depends(get_database_manager)) -> AsyncIOMotorDatabase:
    """
    Dependency to get the database instance

    Returns:
        AsyncIOMotorDatabase instance, connecting on first use

    Raises:
        DatabaseUnavailableError: If the connection cannot be established
    """
    return await db_manager.acquire()


def parse_object_id(object_id: str) -> ObjectId:
    """
    Convert a path parameter to an ObjectId.

    An invalid value raises bson.errors.InvalidId, which callers inside a
    store_operation route report as a server error.
    """
    return ObjectId(object_id)
