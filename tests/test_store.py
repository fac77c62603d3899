"""
ProfileStore against mocked Beanie document classes.

Queries are asserted at the Beanie call boundary, so these tests need no
MongoDB server.
"""

import asyncio
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from netsume.models.history import EMPLOYMENT_HISTORY, EmploymentItem
from netsume.models.skills import Certification, Skill, SupportLevel
from netsume.services.store import ProfileStore

UID = "user-123"
OWNER = {"appId": "netsume", "uid": UID}


class FakeQuery:
    """Stands in for Beanie's FindOne: awaitable, with update and upsert."""

    def __init__(self, document=None):
        self.document = document
        self.update = AsyncMock()
        self.upsert = AsyncMock()

    def __await__(self):
        async def fetch():
            return self.document
        return fetch().__await__()


@pytest.fixture
def store():
    return ProfileStore("netsume")


@pytest.fixture
def bulk_writer():
    with patch("netsume.services.store.BulkWriter") as writer_cls:
        yield writer_cls.return_value.__aenter__.return_value


def _record_class():
    record_cls = MagicMock()
    record_cls.insert_one = AsyncMock()
    record_cls.find_one.return_value.update = AsyncMock()
    record_cls.find.return_value.sort.return_value.to_list = AsyncMock(return_value=[])
    return record_cls


def test_save_items_inserts_new_and_merges_existing_in_one_batch(store, bulk_writer):
    record_cls = _record_class()
    existing_id = str(ObjectId())
    items = [
        EmploymentItem(company="Acme", jobTitle="Auditor", startDate="2019", order=0),
        EmploymentItem(id=existing_id, company="Globex", jobTitle="Analyst", startDate="2016", order=1),
    ]

    with patch.dict("netsume.services.store.RECORD_MODELS", {EMPLOYMENT_HISTORY: record_cls}):
        asyncio.run(store.save_items(UID, EMPLOYMENT_HISTORY, items))

    record_cls.assert_called_once_with(appId="netsume", uid=UID, **items[0].model_dump(exclude={"id"}))
    record_cls.insert_one.assert_awaited_once_with(record_cls.return_value, bulk_writer=bulk_writer)
    record_cls.find_one.assert_called_once_with({"_id": ObjectId(existing_id), **OWNER})
    record_cls.find_one.return_value.update.assert_awaited_once_with(
        {"$set": items[1].model_dump(exclude={"id"})}, bulk_writer=bulk_writer
    )


def test_commit_order_sets_contiguous_order(store, bulk_writer):
    record_cls = _record_class()
    ids = [str(ObjectId()) for _ in range(3)]

    with patch.dict("netsume.services.store.RECORD_MODELS", {EMPLOYMENT_HISTORY: record_cls}):
        asyncio.run(store.commit_order(UID, EMPLOYMENT_HISTORY, ids))

    assert record_cls.find_one.call_args_list == [call({"_id": ObjectId(i), **OWNER}) for i in ids]
    assert record_cls.find_one.return_value.update.await_args_list == [
        call({"$set": {"order": index}}, bulk_writer=bulk_writer) for index in range(3)
    ]


def test_list_items_reads_in_order_and_converts_records(store):
    record_cls = _record_class()
    record = MagicMock(id=ObjectId())
    record.model_dump.return_value = {"company": "Acme", "jobTitle": "Auditor", "startDate": "2019", "order": 0}
    record_cls.find.return_value.sort.return_value.to_list = AsyncMock(return_value=[record])

    with patch.dict("netsume.services.store.RECORD_MODELS", {EMPLOYMENT_HISTORY: record_cls}):
        items = asyncio.run(store.list_items(UID, EMPLOYMENT_HISTORY))

    record_cls.find.assert_called_once_with(OWNER)
    record_cls.find.return_value.sort.assert_called_once_with("order")
    assert items == [EmploymentItem(id=str(record.id), company="Acme", jobTitle="Auditor", startDate="2019")]


def test_unknown_item_id_is_not_queried(store):
    record_cls = _record_class()
    with patch.dict("netsume.services.store.RECORD_MODELS", {EMPLOYMENT_HISTORY: record_cls}):
        assert asyncio.run(store.update_item(UID, EMPLOYMENT_HISTORY, "not-an-id", {"city": "Oslo"})) is None
    record_cls.find_one.assert_not_called()


def test_skill_profile_round_trip_keeps_assessment(store):
    records = {}

    def build(**fields):
        record = SimpleNamespace(id=ObjectId(), summary="", createdAt=datetime(2026, 1, 5, 9, 30), **fields)
        record.insert = AsyncMock()
        record.save = AsyncMock()
        records[record.id] = record
        return record

    record_cls = MagicMock(side_effect=build)
    record_cls.find_one = AsyncMock(side_effect=lambda query: records.get(query["_id"]))

    assessed = [
        Skill(
            name="Financial Reporting",
            rating=4,
            proof="Prepared IFRS statements",
            certifications=[Certification(courseName="ACCA", institution="ACCA Global")],
        ),
        Skill(name="Auditing", rating=2, supportLevel=SupportLevel.SUPPORTED),
        Skill(name="Taxation", rating=0),
    ]

    with patch("netsume.services.store.SkillProfileRecord", record_cls):
        created = asyncio.run(store.create_skill_profile(
            UID, "Accountant", [Skill.unrated(skill.name) for skill in assessed]
        ))
        asyncio.run(store.replace_skill_profile(UID, created.id, assessed, "Detail oriented."))
        reloaded = asyncio.run(store.get_skill_profile(UID, created.id))

    assert reloaded.jobTitle == "Accountant"
    assert reloaded.createdAt == datetime(2026, 1, 5, 9, 30)
    assert [(s.name, s.rating) for s in reloaded.skills] == [("Financial Reporting", 4), ("Auditing", 2), ("Taxation", 0)]
    assert reloaded.skills[0].certifications == [Certification(courseName="ACCA", institution="ACCA Global")]
    assert reloaded.skills[1].supportLevel is SupportLevel.SUPPORTED
    assert reloaded.summary == "Detail oriented."


def test_merge_profile_upserts_fields(store):
    document = MagicMock()
    document.model_dump.return_value = {"name": "Ada", "city": "London"}
    query = FakeQuery(document)

    with patch("netsume.services.store.UserProfile") as profile_cls:
        profile_cls.find_one.return_value = query
        merged = asyncio.run(store.merge_profile(UID, {"name": "Ada", "city": "London"}))

    profile_cls.find_one.assert_called_with(OWNER)
    update = query.upsert.await_args.args[0]
    assert update["$set"]["name"] == "Ada"
    assert "updated_at" in update["$set"]
    assert query.upsert.await_args.kwargs["on_insert"] is profile_cls.return_value
    profile_cls.assert_called_once_with(appId="netsume", uid=UID, name="Ada", city="London")
    query.update.assert_not_awaited()
    assert merged.name == "Ada"


def test_merge_profile_after_losing_insert_race_updates_winner(store):
    document = MagicMock()
    document.model_dump.return_value = {"resumeUrl": "https://res.cloudinary.com/demo/cv.pdf"}
    query = FakeQuery(document)
    query.upsert.side_effect = DuplicateKeyError("E11000 duplicate key error")

    with patch("netsume.services.store.UserProfile") as profile_cls:
        profile_cls.find_one.return_value = query
        merged = asyncio.run(store.merge_profile(UID, {"resumeUrl": "https://res.cloudinary.com/demo/cv.pdf"}))

    query.update.assert_awaited_once_with(query.upsert.await_args.args[0])
    assert merged.resumeUrl == "https://res.cloudinary.com/demo/cv.pdf"


def _account_factory(insert_error=None):
    def build(**fields):
        account = SimpleNamespace(**fields)
        account.insert = AsyncMock(side_effect=insert_error)
        return account
    return MagicMock(side_effect=build)


def test_create_account_lowercases_email(store):
    with patch("netsume.services.store.Account", _account_factory()):
        account = asyncio.run(store.create_account("Ada@Netsume.io", "hash"))
    assert account.email == "ada@netsume.io"
    assert len(account.uid) == 32


def test_create_account_with_taken_email_returns_none(store):
    with patch("netsume.services.store.Account", _account_factory(DuplicateKeyError("E11000 duplicate key error"))):
        assert asyncio.run(store.create_account("ada@netsume.io", "hash")) is None


def test_profile_document_carries_only_profile_fields():
    from netsume.models.user import ProfileFields, UserProfile

    stored = set(UserProfile.model_fields) - {"id", "revision_id", "appId", "uid", "created_at", "updated_at"}
    assert stored == set(ProfileFields.model_fields)
