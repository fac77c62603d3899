import logging
from dataclasses import dataclass
from fastapi import HTTPException, Request

from netsume.services.cache import SessionCache, create_redis_client
from netsume.services.config import Settings
from netsume.services.generator import SkillsAIGenerator
from netsume.services.storage import ResumeStorage
from netsume.services.store import ProfileStore
from netsume.utils.db import ensure_db_initialized

logger = logging.getLogger("uvicorn.error")


@dataclass
class AppContext:
    """Service handles built once at startup and handed to every route."""

    settings: Settings
    store: ProfileStore
    cache: SessionCache
    generator: SkillsAIGenerator
    storage: ResumeStorage


def build_context(settings: Settings) -> AppContext:
    return AppContext(
        settings=settings,
        store=ProfileStore(settings.APP_ID),
        cache=SessionCache(create_redis_client(settings.REDIS_URL)),
        generator=SkillsAIGenerator(settings),
        storage=ResumeStorage(settings.UPLOAD_CHUNK_SIZE),
    )


async def get_context(request: Request) -> AppContext:
    # Retries the connection when MongoDB was unreachable at startup
    try:
        await ensure_db_initialized()
    except Exception as e:
        logger.error(f"Database initialization failed: {repr(e)}")
        raise HTTPException(status_code=503, detail="Database unavailable. Please try again later.")
    return request.app.state.context
