from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field, ValidationError
from typing import Callable, List, Optional, Type
import logging

from netsume.models.history import (
    ACCREDITATIONS,
    EMPLOYMENT_HISTORY,
    AccreditationItem,
    EmploymentItem,
)
from netsume.models.user import ProfileFields, ProfileUpdate
from netsume.services.errors import INTERNAL, FunctionsError
from netsume.services.generator import SkillsAIGenerator, check_document, parse_array
from netsume.services.ordering import append_unsaved, move_item
from netsume.utils.auth import CurrentUser, get_current_user
from netsume.utils.context import AppContext, get_context

logger = logging.getLogger("uvicorn.error")

router = APIRouter(
    prefix="/profile",
    tags=["Profile"]
)


class SaveProfileRequest(BaseModel):
    profile: ProfileUpdate = Field(default_factory=ProfileUpdate)
    employmentHistory: Optional[List[EmploymentItem]] = None
    accreditations: Optional[List[AccreditationItem]] = None


class ReorderRequest(BaseModel):
    fromIndex: int
    toIndex: int


async def _profile_state(ctx: AppContext, uid: str) -> dict:
    profile = await ctx.store.get_profile(uid)
    return {
        "profile": profile or ProfileFields(),
        "employmentHistory": await ctx.store.list_items(uid, EMPLOYMENT_HISTORY),
        "accreditations": await ctx.store.list_items(uid, ACCREDITATIONS),
    }


@router.get("")
async def get_profile(
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await _profile_state(ctx, user.uid)


@router.put("")
async def save_profile(
    payload: SaveProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    fields = payload.profile.model_dump(exclude_none=True)
    account = await ctx.store.get_account(user.uid)
    if account:
        fields["email"] = account.email

    try:
        await ctx.store.merge_profile(user.uid, fields)
        if payload.employmentHistory is not None:
            await ctx.store.save_items(user.uid, EMPLOYMENT_HISTORY, payload.employmentHistory)
        if payload.accreditations is not None:
            await ctx.store.save_items(user.uid, ACCREDITATIONS, payload.accreditations)
    except Exception as e:
        logger.exception("Profile save failed")
        raise HTTPException(status_code=500, detail=f"Failed to save: {e}")

    logger.info(f"Profile details saved for {user.uid}")
    return {"message": "Profile details saved successfully!", **await _profile_state(ctx, user.uid)}


@router.post("/resume")
async def upload_resume(
    resume: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    resume_bytes = await resume.read()
    # Any file type is stored; only extraction is limited to the model's media types
    if not resume_bytes:
        raise HTTPException(status_code=400, detail="The resume file is empty.")
    if len(resume_bytes) > ctx.settings.MAX_DOCUMENT_BYTES:
        raise HTTPException(status_code=400, detail=f"The resume exceeds {ctx.settings.MAX_DOCUMENT_BYTES} bytes.")
    logger.info(f"Resume file read: {len(resume_bytes)} bytes, content_type={resume.content_type}, filename={resume.filename}")

    def report_progress(percent: int) -> None:
        ctx.cache.set_upload_progress(user.uid, percent)

    try:
        resume_url = await run_in_threadpool(
            ctx.storage.upload_resume, user.uid, resume.filename or "resume", resume_bytes, report_progress
        )
    except Exception as e:
        logger.exception("Resume upload failed")
        raise HTTPException(status_code=500, detail=f"Resume upload failed: {e}")

    # The metadata write waits for the upload to resolve
    profile = await ctx.store.merge_profile(user.uid, {"resumeUrl": resume_url})
    return {"resumeUrl": resume_url, "profile": profile}


@router.get("/resume/progress")
async def get_upload_progress(
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return {"progress": ctx.cache.get_upload_progress(user.uid)}


def collection_router(
    path: str,
    kind: str,
    item_model: Type[BaseModel],
    extract: Callable[[SkillsAIGenerator], Callable[[bytes, str], str]],
    label: str,
    required_message: str,
    extracted_message: str,
) -> APIRouter:
    """CRUD, reorder and resume extraction routes for one ordered collection."""
    collection = APIRouter(prefix=path)

    @collection.get("")
    async def list_items(
        user: CurrentUser = Depends(get_current_user),
        ctx: AppContext = Depends(get_context),
    ):
        return await ctx.store.list_items(user.uid, kind)

    @collection.post("", status_code=201)
    async def add_item(
        item: item_model,
        user: CurrentUser = Depends(get_current_user),
        ctx: AppContext = Depends(get_context),
    ):
        if item.missing_required():
            raise HTTPException(status_code=400, detail=required_message)
        return await ctx.store.add_item(user.uid, kind, item)

    @collection.put("/{item_id}")
    async def update_item(
        item_id: str,
        item: item_model,
        user: CurrentUser = Depends(get_current_user),
        ctx: AppContext = Depends(get_context),
    ):
        if item.missing_required():
            raise HTTPException(status_code=400, detail=required_message)
        updated = await ctx.store.update_item(user.uid, kind, item_id, item.model_dump(exclude={"id", "order"}))
        if updated is None:
            raise HTTPException(status_code=404, detail=f"{label} not found.")
        return updated

    @collection.delete("/{item_id}")
    async def delete_item(
        item_id: str,
        user: CurrentUser = Depends(get_current_user),
        ctx: AppContext = Depends(get_context),
    ):
        if not await ctx.store.delete_item(user.uid, kind, item_id):
            raise HTTPException(status_code=404, detail=f"{label} not found.")
        return {"status": "deleted"}

    @collection.post("/reorder")
    async def reorder_items(
        move: ReorderRequest,
        user: CurrentUser = Depends(get_current_user),
        ctx: AppContext = Depends(get_context),
    ):
        items = await ctx.store.list_items(user.uid, kind)
        try:
            reordered = move_item(items, move.fromIndex, move.toIndex)
        except IndexError as e:
            raise HTTPException(status_code=400, detail=str(e))
        try:
            await ctx.store.commit_order(user.uid, kind, [item.id for item in reordered])
        except Exception as e:
            logger.exception(f"Reorder of {kind} failed")
            raise HTTPException(status_code=500, detail=f"Failed to reorder: {e}")
        return reordered

    @collection.post("/extract")
    async def extract_items(
        resume: UploadFile = File(...),
        user: CurrentUser = Depends(get_current_user),
        ctx: AppContext = Depends(get_context),
    ):
        document = await resume.read()
        check_document(document, resume.content_type, ctx.settings.MAX_DOCUMENT_BYTES)
        json_string = await run_in_threadpool(extract(ctx.generator), document, resume.content_type)
        entries = [entry for entry in parse_array(json_string, label.lower()) if isinstance(entry, dict)]
        try:
            # id and order are assigned by append_unsaved
            extracted = [
                item_model.model_validate({k: v for k, v in entry.items() if k not in ("id", "order")})
                for entry in entries
            ]
        except ValidationError as e:
            logger.error(f"Extracted {kind} items failed validation: {e}")
            raise FunctionsError(INTERNAL, f"AI returned {label.lower()} data in an invalid format.")

        existing = await ctx.store.list_items(user.uid, kind)
        items = append_unsaved(len(existing), extracted)
        logger.info(f"Extracted {len(items)} {kind} item(s) for {user.uid}")
        return {"items": items, "message": extracted_message.format(count=len(items))}

    return collection


router.include_router(collection_router(
    "/employment-history",
    EMPLOYMENT_HISTORY,
    EmploymentItem,
    lambda generator: generator.extract_employment_history,
    "Job",
    "Please fill in Company, Job Title, and Start Date.",
    "Successfully extracted {count} job position(s).",
))

router.include_router(collection_router(
    "/accreditations",
    ACCREDITATIONS,
    AccreditationItem,
    lambda generator: generator.extract_education,
    "Accreditation",
    "Please fill in all accreditation fields.",
    "Successfully extracted {count} education/certification items.",
))
