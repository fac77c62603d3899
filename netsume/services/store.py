"""
Document store access for one application namespace.

Every document is keyed by ``appId`` and ``uid``, mirroring the
app -> user -> collection hierarchy the client works with. Methods return
plain pydantic models so routers never hold live Beanie documents.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from beanie import BulkWriter
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from netsume.models.history import ITEM_MODELS, RECORD_MODELS
from netsume.models.skills import Skill, SkillProfile, SkillProfileRecord
from netsume.models.user import Account, AccountInfo, ProfileFields, UserProfile

logger = logging.getLogger("uvicorn.error")


def _object_id(value: str) -> Optional[ObjectId]:
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


class ProfileStore:

    def __init__(self, app_id: str):
        self.app_id = app_id

    def _owner(self, uid: str) -> dict:
        return {"appId": self.app_id, "uid": uid}

    # ---------- Accounts ----------
    async def get_account_by_email(self, email: str) -> Optional[AccountInfo]:
        account = await Account.find_one({"appId": self.app_id, "email": email.lower()})
        if not account:
            return None
        return AccountInfo(uid=account.uid, email=account.email, passwordHash=account.passwordHash)

    async def get_account(self, uid: str) -> Optional[AccountInfo]:
        account = await Account.find_one(self._owner(uid))
        if not account:
            return None
        return AccountInfo(uid=account.uid, email=account.email, passwordHash=account.passwordHash)

    async def create_account(self, email: str, password_hash: str) -> Optional[AccountInfo]:
        account = Account(
            appId=self.app_id,
            uid=uuid.uuid4().hex,
            email=email.lower(),
            passwordHash=password_hash,
        )
        try:
            await account.insert()
        except DuplicateKeyError:
            logger.info("Account email already registered")
            return None
        logger.info(f"Created account {account.uid}")
        return AccountInfo(uid=account.uid, email=account.email, passwordHash=account.passwordHash)

    # ---------- Profile ----------
    async def get_profile(self, uid: str) -> Optional[ProfileFields]:
        profile = await UserProfile.find_one(self._owner(uid))
        if not profile:
            return None
        return ProfileFields.model_validate(profile.model_dump())

    async def merge_profile(self, uid: str, fields: dict) -> ProfileFields:
        """Set ``fields`` on the profile, creating it on first save."""
        update = {"$set": {**fields, "updated_at": datetime.utcnow()}}
        try:
            await UserProfile.find_one(self._owner(uid)).upsert(
                update,
                on_insert=UserProfile(appId=self.app_id, uid=uid, **fields),
            )
        except DuplicateKeyError:
            # A concurrent first save created the profile between the update and the insert
            await UserProfile.find_one(self._owner(uid)).update(update)
        logger.info(f"Merged {len(fields)} profile field(s) for {uid}")
        profile = await UserProfile.find_one(self._owner(uid))
        return ProfileFields.model_validate(profile.model_dump())

    async def list_profiles(self) -> List[Tuple[str, ProfileFields]]:
        profiles = await UserProfile.find({"appId": self.app_id}).to_list()
        return [(p.uid, ProfileFields.model_validate(p.model_dump())) for p in profiles]

    # ---------- Ordered collections ----------
    def _to_item(self, kind: str, record):
        data = record.model_dump(exclude={"id", "appId", "uid", "revision_id"})
        return ITEM_MODELS[kind](id=str(record.id), **data)

    async def list_items(self, uid: str, kind: str) -> list:
        record_cls = RECORD_MODELS[kind]
        records = await record_cls.find(self._owner(uid)).sort("order").to_list()
        return [self._to_item(kind, r) for r in records]

    async def add_item(self, uid: str, kind: str, item):
        record_cls = RECORD_MODELS[kind]
        siblings = await record_cls.find(self._owner(uid)).count()
        data = item.model_dump(exclude={"id", "order"})
        record = record_cls(appId=self.app_id, uid=uid, order=siblings, **data)
        await record.insert()
        return self._to_item(kind, record)

    async def update_item(self, uid: str, kind: str, item_id: str, fields: dict):
        oid = _object_id(item_id)
        if oid is None:
            return None
        record_cls = RECORD_MODELS[kind]
        record = await record_cls.find_one({"_id": oid, **self._owner(uid)})
        if not record:
            return None
        for key, value in fields.items():
            setattr(record, key, value)
        await record.save()
        return self._to_item(kind, record)

    async def delete_item(self, uid: str, kind: str, item_id: str) -> bool:
        oid = _object_id(item_id)
        if oid is None:
            return False
        record_cls = RECORD_MODELS[kind]
        record = await record_cls.find_one({"_id": oid, **self._owner(uid)})
        if not record:
            return False
        await record.delete()
        return True

    async def save_items(self, uid: str, kind: str, items: Sequence) -> list:
        """Insert items without an id and merge the rest, in one bulk write."""
        record_cls = RECORD_MODELS[kind]
        async with BulkWriter() as bulk_writer:
            for item in items:
                data = item.model_dump(exclude={"id"})
                oid = _object_id(item.id) if item.id else None
                if oid is None:
                    record = record_cls(appId=self.app_id, uid=uid, **data)
                    await record_cls.insert_one(record, bulk_writer=bulk_writer)
                else:
                    await record_cls.find_one({"_id": oid, **self._owner(uid)}).update(
                        {"$set": data}, bulk_writer=bulk_writer
                    )
        logger.info(f"Saved {len(items)} {kind} item(s) for {uid}")
        return await self.list_items(uid, kind)

    async def commit_order(self, uid: str, kind: str, ordered_ids: Sequence[str]) -> None:
        """Rewrite ``order`` of every sibling to its index in ``ordered_ids``."""
        record_cls = RECORD_MODELS[kind]
        async with BulkWriter() as bulk_writer:
            for index, item_id in enumerate(ordered_ids):
                oid = _object_id(item_id)
                if oid is None:
                    continue
                await record_cls.find_one({"_id": oid, **self._owner(uid)}).update(
                    {"$set": {"order": index}}, bulk_writer=bulk_writer
                )
        logger.info(f"Committed order of {len(ordered_ids)} {kind} item(s) for {uid}")

    # ---------- Skill profiles ----------
    def _to_skill_profile(self, record: SkillProfileRecord) -> SkillProfile:
        return SkillProfile(
            id=str(record.id),
            jobTitle=record.jobTitle,
            skills=record.skills,
            summary=record.summary,
            createdAt=record.createdAt,
        )

    async def list_skill_profiles(self, uid: str) -> List[SkillProfile]:
        records = await SkillProfileRecord.find(self._owner(uid)).sort("createdAt").to_list()
        return [self._to_skill_profile(r) for r in records]

    async def get_skill_profile(self, uid: str, profile_id: str) -> Optional[SkillProfile]:
        oid = _object_id(profile_id)
        if oid is None:
            return None
        record = await SkillProfileRecord.find_one({"_id": oid, **self._owner(uid)})
        return self._to_skill_profile(record) if record else None

    async def create_skill_profile(self, uid: str, job_title: str, skills: List[Skill]) -> SkillProfile:
        record = SkillProfileRecord(appId=self.app_id, uid=uid, jobTitle=job_title, skills=skills)
        await record.insert()
        logger.info(f"Created skill profile {record.id} for {uid}")
        return self._to_skill_profile(record)

    async def replace_skill_profile(
        self, uid: str, profile_id: str, skills: List[Skill], summary: str
    ) -> Optional[SkillProfile]:
        oid = _object_id(profile_id)
        if oid is None:
            return None
        record = await SkillProfileRecord.find_one({"_id": oid, **self._owner(uid)})
        if not record:
            return None
        record.skills = list(skills)
        record.summary = summary
        await record.save()
        return self._to_skill_profile(record)

    async def delete_skill_profile(self, uid: str, profile_id: str) -> bool:
        oid = _object_id(profile_id)
        if oid is None:
            return False
        record = await SkillProfileRecord.find_one({"_id": oid, **self._owner(uid)})
        if not record:
            return False
        await record.delete()
        return True

    async def skill_profiles_by_user(self) -> Dict[str, List[SkillProfile]]:
        records = await SkillProfileRecord.find({"appId": self.app_id}).sort("createdAt").to_list()
        grouped: Dict[str, List[SkillProfile]] = {}
        for record in records:
            grouped.setdefault(record.uid, []).append(self._to_skill_profile(record))
        return grouped
