from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional
import logging

from netsume.services.views import InvalidTransition, from_dict, initial_view, to_dict, transition
from netsume.utils.auth import CurrentUser, get_current_user, is_admin
from netsume.utils.context import AppContext, get_context

logger = logging.getLogger("uvicorn.error")

router = APIRouter(
    prefix="/session",
    tags=["Session"]
)


class NavigateRequest(BaseModel):
    view: str
    profileId: Optional[str] = None


@router.get("/view")
async def get_view(
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    view = ctx.cache.get_view(user.uid)
    if view.kind == "loading":
        profile = await ctx.store.get_profile(user.uid)
        view = initial_view(signed_in=True, profile_name=profile.name if profile else None)
        ctx.cache.set_view(user.uid, view)
    return to_dict(view)


@router.post("/navigate")
async def navigate(
    payload: NavigateRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    current = ctx.cache.get_view(user.uid)
    try:
        target = from_dict({"view": payload.view, "profile_id": payload.profileId})
        if target.kind == "auth":
            raise InvalidTransition("Use sign-out to return to the auth view")
        if target.kind == "admin" and not is_admin(user.uid, ctx.settings):
            raise HTTPException(status_code=403, detail="Admin access required.")
        if target.kind == "report" and await ctx.store.get_skill_profile(user.uid, target.profile_id) is None:
            raise HTTPException(status_code=404, detail="Skill profile not found.")
        view = transition(current, target)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    ctx.cache.set_view(user.uid, view)
    logger.info(f"View of {user.uid}: {current.kind} -> {view.kind}")
    return to_dict(view)
