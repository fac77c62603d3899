from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
import logging

from netsume.models.history import ACCREDITATIONS, EMPLOYMENT_HISTORY
from netsume.services.report import Report, admin_rows, build_report, render_text
from netsume.utils.auth import CurrentUser, get_current_user, require_admin
from netsume.utils.context import AppContext, get_context

logger = logging.getLogger("uvicorn.error")

router = APIRouter(
    tags=["Reports"]
)


async def _load_report(ctx: AppContext, uid: str, profile_id: str) -> Report:
    profile = await ctx.store.get_profile(uid)
    skill_profile = await ctx.store.get_skill_profile(uid, profile_id)
    if profile is None or skill_profile is None:
        logger.warning(f"Report data missing for {uid}, skill profile {profile_id}")
        raise HTTPException(status_code=404, detail="Could not load report data.")
    return build_report(
        profile,
        skill_profile,
        await ctx.store.list_items(uid, EMPLOYMENT_HISTORY),
        await ctx.store.list_items(uid, ACCREDITATIONS),
    )


@router.get("/report/{profile_id}", response_model=Report)
async def get_report(
    profile_id: str,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await _load_report(ctx, user.uid, profile_id)


@router.get("/report/{profile_id}/print", response_class=PlainTextResponse)
async def print_report(
    profile_id: str,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return render_text(await _load_report(ctx, user.uid, profile_id))


@router.get("/admin/report")
async def get_admin_report(
    admin: CurrentUser = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    try:
        profiles = await ctx.store.list_profiles()
        skill_profiles = await ctx.store.skill_profiles_by_user()
    except Exception as e:
        logger.exception("Admin report query failed")
        raise HTTPException(status_code=500, detail=f"Failed to fetch report data: {e}")
    return admin_rows(profiles, skill_profiles)
