"""
Callable AI entry points.

Request body is ``{"data": {...}}``; success is ``{"result": ...}`` and
failures are rendered by the ``FunctionsError`` handler as
``{"error": {"status": <code>, "message": ...}}``.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from typing import Any, Dict
import logging

from netsume.services.generator import decode_document
from netsume.utils.auth import CurrentUser, get_current_user
from netsume.utils.context import AppContext, get_context
from netsume.utils.limits import ai_rate_limit, limiter

logger = logging.getLogger("uvicorn.error")

router = APIRouter(
    prefix="/functions",
    tags=["AI Functions"]
)


class CallableRequest(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)


@router.post("/extractResumeData")
@limiter.limit(ai_rate_limit)
async def extract_resume_data(
    request: Request,
    body: CallableRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    document = decode_document(body.data.get("fileData"), body.data.get("mimeType"), ctx.settings.MAX_DOCUMENT_BYTES)
    logger.info(f"Extracting employment history for {user.uid} ({len(document)} bytes)")
    result = await run_in_threadpool(ctx.generator.extract_employment_history, document, body.data["mimeType"])
    return {"result": result}


@router.post("/extractEducationData")
@limiter.limit(ai_rate_limit)
async def extract_education_data(
    request: Request,
    body: CallableRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    document = decode_document(body.data.get("fileData"), body.data.get("mimeType"), ctx.settings.MAX_DOCUMENT_BYTES)
    logger.info(f"Extracting education for {user.uid} ({len(document)} bytes)")
    result = await run_in_threadpool(ctx.generator.extract_education, document, body.data["mimeType"])
    return {"result": result}


@router.post("/generateSkills")
@limiter.limit(ai_rate_limit)
async def generate_skills(
    request: Request,
    body: CallableRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    result = await run_in_threadpool(ctx.generator.generate_skills, body.data.get("jobTitle"))
    return {"result": result}


@router.post("/validateSkillWithAI")
@limiter.limit(ai_rate_limit)
async def validate_skill_with_ai(
    request: Request,
    body: CallableRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    verdict = await run_in_threadpool(ctx.generator.validate_skill, body.data.get("skill"))
    return {"result": verdict.value}


@router.post("/generateSummaryWithAI")
@limiter.limit(ai_rate_limit)
async def generate_summary_with_ai(
    request: Request,
    body: CallableRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    summary = await run_in_threadpool(ctx.generator.generate_summary, body.data.get("allProofPoints"))
    return {"result": summary}
