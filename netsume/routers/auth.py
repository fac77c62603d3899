from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr
import logging

from netsume.services.views import AUTHENTICATED, Auth, initial_view, sign_out as sign_out_view
from netsume.utils.auth import (
    MIN_PASSWORD_LENGTH,
    CurrentUser,
    create_access_token,
    get_current_user,
    hash_password,
    is_admin,
    verify_password,
)
from netsume.utils.context import AppContext, get_context

logger = logging.getLogger("uvicorn.error")

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)


class Credentials(BaseModel):
    email: EmailStr
    password: str


async def _signed_in_response(ctx: AppContext, uid: str, email: str) -> dict:
    profile = await ctx.store.get_profile(uid)
    view = initial_view(signed_in=True, profile_name=profile.name if profile else None)
    ctx.cache.set_view(uid, view)
    return {
        "access_token": create_access_token(uid, ctx.settings),
        "token_type": "bearer",
        "uid": uid,
        "email": email,
        "isAdmin": is_admin(uid, ctx.settings),
        "view": view.kind,
    }


@router.post("/sign-up")
async def sign_up(credentials: Credentials, ctx: AppContext = Depends(get_context)):
    if len(credentials.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="The password must be at least 6 characters long.")

    if await ctx.store.get_account_by_email(credentials.email):
        raise HTTPException(status_code=409, detail="An account already exists with this email address.")

    account = await ctx.store.create_account(credentials.email, hash_password(credentials.password))
    if account is None:
        raise HTTPException(status_code=409, detail="An account already exists with this email address.")
    logger.info(f"Signed up user {account.uid}")
    return await _signed_in_response(ctx, account.uid, account.email)


@router.post("/sign-in")
async def sign_in(credentials: Credentials, ctx: AppContext = Depends(get_context)):
    account = await ctx.store.get_account_by_email(credentials.email)
    if not account or not verify_password(credentials.password, account.passwordHash):
        logger.info("Rejected sign-in attempt")
        raise HTTPException(status_code=401, detail="Invalid email or password. Please try again.")

    logger.info(f"Signed in user {account.uid}")
    return await _signed_in_response(ctx, account.uid, account.email)


@router.post("/sign-out")
async def sign_out(
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    current = ctx.cache.get_view(user.uid)
    view = sign_out_view(current) if current.kind in AUTHENTICATED else Auth()
    ctx.cache.revoke_token(user.jti, user.seconds_left())
    ctx.cache.set_view(user.uid, view)
    logger.info(f"Signed out user {user.uid}")
    return {"status": "signed-out", "view": view.kind}


@router.get("/session")
async def get_session(
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    account = await ctx.store.get_account(user.uid)
    return {
        "uid": user.uid,
        "email": account.email if account else None,
        "isAdmin": is_admin(user.uid, ctx.settings),
        "view": ctx.cache.get_view(user.uid).kind,
    }
