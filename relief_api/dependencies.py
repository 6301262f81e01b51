"""
Dependency wiring for the FastAPI app.

Clients are opened once by the application lifespan and shared by every
request until shutdown.
"""

from __future__ import annotations

import logging

from relief_api.config import Settings, get_settings
from relief_api.db import DbClient, InMemoryDbClient, MongoDbClient
from relief_api.media import CloudinaryMediaClient, InMemoryMediaClient, MediaClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_media_client: MediaClient | None = None


def build_db_client(settings: Settings) -> DbClient:
    if settings.use_in_memory_backends or not settings.mongodb_uri:
        logger.info("Using in-memory database")
        return InMemoryDbClient()
    logger.info("Connecting to MongoDB database %s", settings.mongodb_database)
    return MongoDbClient(settings.mongodb_uri, settings.mongodb_database)


def build_media_client(settings: Settings) -> MediaClient:
    if settings.use_in_memory_backends:
        return InMemoryMediaClient(folder=settings.media_folder)
    if settings.cloud_name and settings.api_key and settings.api_secret:
        return CloudinaryMediaClient(
            cloud_name=settings.cloud_name,
            api_key=settings.api_key,
            api_secret=settings.api_secret,
            folder=settings.media_folder,
            timeout=settings.media_timeout_seconds,
        )
    logger.warning("No media host configured; uploads are kept in memory")
    return InMemoryMediaClient(folder=settings.media_folder)


def get_db_client() -> DbClient:
    """
    Return the shared DB client, opening it on first use.
    """
    global _db_client
    if _db_client:
        return _db_client
    _db_client = build_db_client(get_settings())
    return _db_client


def get_media_client() -> MediaClient:
    global _media_client
    if _media_client:
        return _media_client
    _media_client = build_media_client(get_settings())
    return _media_client


def open_clients() -> None:
    get_db_client()
    get_media_client()


def close_clients() -> None:
    global _db_client, _media_client
    if _db_client is not None:
        _db_client.close()
        _db_client = None
    if _media_client is not None:
        _media_client.close()
        _media_client = None
