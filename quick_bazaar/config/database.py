"""
Database configuration and connection management.
Handles the MongoDB session lifecycle: one client per process, created on first demand.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.server_api import ServerApi

from ..exceptions import DatabaseConfigurationError, DatabaseUnavailableError
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Collection names
CATEGORIES = "categories"
PRODUCTS = "products"
SORTS = "sorts"
COMMENTS = "comment"
ADDED_PRODUCTS = "addProducts"


class DatabaseManager:
    """Owns the single cached MongoDB session shared by every request."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ):
        self.settings = settings or get_settings()
        self.client_factory = client_factory
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._connecting: Optional["asyncio.Future[AsyncIOMotorDatabase]"] = None

    async def acquire(self) -> AsyncIOMotorDatabase:
        """
        Return the cached database handle, connecting on first use.

        Concurrent first callers share one in-flight attempt, so exactly one
        client is opened and pinged per attempt and every caller gets its
        outcome. A failed attempt is dropped so the next caller tries once.

        Raises:
            DatabaseUnavailableError: If the client cannot be built or the ping fails
        """
        if self.database is not None:
            return self.database

        if self._connecting is None:
            self._connecting = asyncio.ensure_future(self._connect())
        attempt = self._connecting
        try:
            # shield: a cancelled request must not cancel the shared attempt
            return await asyncio.shield(attempt)
        finally:
            if attempt.done() and self._connecting is attempt:
                self._connecting = None

    async def _connect(self) -> AsyncIOMotorDatabase:
        try:
            uri = self.settings.build_mongodb_uri()
        except ValueError as e:
            logger.warning(f"⚠️  MongoDB connection failed: {e}")
            raise DatabaseConfigurationError(str(e)) from e

        logger.info("🚀 Connecting to MongoDB...")
        client = None
        try:
            client = self.client_factory(
                uri,
                server_api=ServerApi("1", strict=True, deprecation_errors=True),
                serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
                connectTimeoutMS=self.settings.connect_timeout_ms,
            )
            await client.admin.command("ping")
        except Exception as db_error:
            logger.warning(f"⚠️  MongoDB connection failed: {db_error}")
            if client is not None:
                client.close()
            raise DatabaseUnavailableError(context={"error": repr(db_error)}) from db_error

        self.client = client
        self.database = client[self.settings.database_name]
        logger.info("✅ Pinged your deployment. Successfully connected to MongoDB!")
        return self.database

    async def initialize(self) -> None:
        """Warm the connection at startup; a failure is logged, never raised."""
        try:
            await self.acquire()
        except DatabaseUnavailableError:
            logger.error("❌ Error connecting to MongoDB, requests will retry the connection on demand")

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client is not None:
            self.client.close()
            logger.info("🔌 MongoDB connection closed")
        self.client = None
        self.database = None

    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self.database is not None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for the database connection."""
    db_manager: DatabaseManager = app.state.db_manager
    if db_manager.settings.connect_on_startup:
        await db_manager.initialize()

    yield

    await db_manager.disconnect()
