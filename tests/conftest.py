"""
Pytest configuration and shared fixtures.

Routes run against in-memory stand-ins for MongoDB and Redis, wired in
through the same ``get_context`` dependency the app uses.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from netsume.models.history import ITEM_MODELS
from netsume.models.skills import SkillProfile
from netsume.models.user import AccountInfo, ProfileFields
from netsume.server import app
from netsume.services.cache import SessionCache
from netsume.services.config import Settings
from netsume.services.generator import SkillsAIGenerator
from netsume.services.storage import ResumeStorage
from netsume.utils.auth import create_access_token
from netsume.utils.context import AppContext, get_context
from netsume.utils.limits import limiter


def _new_id() -> str:
    return uuid.uuid4().hex[:24]


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.ttls = {}

    def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl

    def get(self, key):
        return self.data.get(key)

    def exists(self, key):
        return int(key in self.data)


class InMemoryStore:
    """Same interface as ProfileStore, backed by dictionaries."""

    def __init__(self):
        self.accounts: Dict[str, AccountInfo] = {}
        self.profiles: Dict[str, ProfileFields] = {}
        self.items: Dict[tuple, list] = {}
        self.skill_profiles: Dict[str, Dict[str, SkillProfile]] = {}
        self.fail_saves = False

    async def get_account_by_email(self, email: str) -> Optional[AccountInfo]:
        return next((a for a in self.accounts.values() if a.email == email.lower()), None)

    async def get_account(self, uid: str) -> Optional[AccountInfo]:
        return self.accounts.get(uid)

    async def create_account(self, email: str, password_hash: str) -> AccountInfo:
        account = AccountInfo(uid=_new_id(), email=email.lower(), passwordHash=password_hash)
        self.accounts[account.uid] = account
        return account

    async def get_profile(self, uid: str) -> Optional[ProfileFields]:
        return self.profiles.get(uid)

    async def merge_profile(self, uid: str, fields: dict) -> ProfileFields:
        current = self.profiles.get(uid, ProfileFields())
        self.profiles[uid] = current.model_copy(update=fields)
        return self.profiles[uid]

    async def list_profiles(self) -> List[tuple]:
        return list(self.profiles.items())

    async def list_items(self, uid: str, kind: str) -> list:
        return sorted(self.items.get((uid, kind), []), key=lambda item: item.order)

    async def add_item(self, uid: str, kind: str, item):
        siblings = self.items.setdefault((uid, kind), [])
        stored = item.model_copy(update={"id": _new_id(), "order": len(siblings)})
        siblings.append(stored)
        return stored

    async def update_item(self, uid: str, kind: str, item_id: str, fields: dict):
        siblings = self.items.get((uid, kind), [])
        for index, item in enumerate(siblings):
            if item.id == item_id:
                siblings[index] = item.model_copy(update=fields)
                return siblings[index]
        return None

    async def delete_item(self, uid: str, kind: str, item_id: str) -> bool:
        siblings = self.items.get((uid, kind), [])
        remaining = [item for item in siblings if item.id != item_id]
        self.items[(uid, kind)] = remaining
        return len(remaining) != len(siblings)

    async def save_items(self, uid: str, kind: str, items) -> list:
        if self.fail_saves:
            raise RuntimeError("batch write rejected")
        siblings = self.items.setdefault((uid, kind), [])
        for item in items:
            if item.id is None:
                siblings.append(item.model_copy(update={"id": _new_id()}))
            else:
                await self.update_item(uid, kind, item.id, item.model_dump(exclude={"id"}))
        return await self.list_items(uid, kind)

    async def commit_order(self, uid: str, kind: str, ordered_ids) -> None:
        for index, item_id in enumerate(ordered_ids):
            await self.update_item(uid, kind, item_id, {"order": index})

    async def list_skill_profiles(self, uid: str) -> List[SkillProfile]:
        return list(self.skill_profiles.get(uid, {}).values())

    async def get_skill_profile(self, uid: str, profile_id: str) -> Optional[SkillProfile]:
        profile = self.skill_profiles.get(uid, {}).get(profile_id)
        return profile.model_copy(deep=True) if profile else None

    async def create_skill_profile(self, uid: str, job_title: str, skills) -> SkillProfile:
        profile = SkillProfile(id=_new_id(), jobTitle=job_title, skills=skills, createdAt=datetime(2026, 1, 5, 9, 30))
        self.skill_profiles.setdefault(uid, {})[profile.id] = profile
        return profile.model_copy(deep=True)

    async def replace_skill_profile(self, uid: str, profile_id: str, skills, summary: str):
        profile = self.skill_profiles.get(uid, {}).get(profile_id)
        if profile is None:
            return None
        updated = profile.model_copy(update={"skills": list(skills), "summary": summary}, deep=True)
        self.skill_profiles[uid][profile_id] = updated
        return updated.model_copy(deep=True)

    async def delete_skill_profile(self, uid: str, profile_id: str) -> bool:
        return self.skill_profiles.get(uid, {}).pop(profile_id, None) is not None

    async def skill_profiles_by_user(self) -> Dict[str, List[SkillProfile]]:
        return {uid: list(profiles.values()) for uid, profiles in self.skill_profiles.items()}

    def seed_items(self, uid: str, kind: str, rows: List[dict]) -> list:
        model = ITEM_MODELS[kind]
        self.items[(uid, kind)] = [model(id=_new_id(), order=i, **row) for i, row in enumerate(rows)]
        return self.items[(uid, kind)]


@pytest.fixture
def settings():
    return Settings(
        GEMINI_API_KEY="test-gemini-key",
        JWT_SECRET_KEY="test-secret",
        ADMIN_UIDS="admin-uid",
        _env_file=None,
    )


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def context(settings, redis_client):
    return AppContext(
        settings=settings,
        store=InMemoryStore(),
        cache=SessionCache(redis_client),
        generator=MagicMock(spec=SkillsAIGenerator),
        storage=MagicMock(spec=ResumeStorage),
    )


@pytest.fixture
def client(context):
    limiter.reset()
    app.dependency_overrides[get_context] = lambda: context
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def uid():
    return "user-123"


@pytest.fixture
def auth_headers(context, uid):
    token = create_access_token(uid, context.settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(context):
    token = create_access_token("admin-uid", context.settings)
    return {"Authorization": f"Bearer {token}"}
