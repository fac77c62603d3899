import logging
import asyncio
from pymongo import AsyncMongoClient
from beanie import init_beanie
from netsume.services.config import get_settings
from netsume.models.user import UserProfile, Account
from netsume.models.history import EmploymentRecord, AccreditationRecord
from netsume.models.skills import SkillProfileRecord

logger = logging.getLogger("uvicorn.error")

DOCUMENT_MODELS = [
    Account,
    UserProfile,
    EmploymentRecord,
    AccreditationRecord,
    SkillProfileRecord,
]

_db_initialized = False
_client = None
_db_lock = asyncio.Lock()


async def init_db():
    global _db_initialized, _client

    if _db_initialized:
        logger.debug("Database already initialized")
        return

    settings = get_settings()
    if not settings.MONGO_URI or not settings.DB_NAME:
        raise ValueError("Missing MONGO_URI or DB_NAME in environment variables")

    logger.info("Connecting to MongoDB...")
    _client = AsyncMongoClient(settings.MONGO_URI)
    db = _client[settings.DB_NAME]

    logger.info("Initializing Beanie with models...")
    await init_beanie(database=db, document_models=DOCUMENT_MODELS)

    _db_initialized = True
    logger.info("Database initialized successfully.")


async def ensure_db_initialized():
    async with _db_lock:
        if not _db_initialized:
            logger.info("Beanie not initialized. Initializing now...")
            await init_db()
