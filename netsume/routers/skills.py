from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from typing import List
import logging

from netsume.models.skills import Certification, Skill, SkillProfile
from netsume.services.generator import parse_array
from netsume.utils.auth import CurrentUser, get_current_user
from netsume.utils.context import AppContext, get_context

logger = logging.getLogger("uvicorn.error")

router = APIRouter(
    prefix="/skill-profiles",
    tags=["Skill Profiles"]
)


class CreateSkillProfileRequest(BaseModel):
    jobTitle: str = ""


class SaveAssessmentRequest(BaseModel):
    skills: List[Skill] = Field(default_factory=list)
    summary: str = ""


class NewSkillRequest(BaseModel):
    name: str = ""


class CertificationRequest(BaseModel):
    courseName: str = ""
    institution: str = ""
    city: str = ""
    completionDate: str = ""
    degree: str = ""


async def _load(ctx: AppContext, uid: str, profile_id: str) -> SkillProfile:
    profile = await ctx.store.get_skill_profile(uid, profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Skill profile not found.")
    return profile


def _skill_at(profile: SkillProfile, index: int) -> Skill:
    if not 0 <= index < len(profile.skills):
        raise HTTPException(status_code=404, detail=f"Skill {index} not found.")
    return profile.skills[index]


async def _save(ctx: AppContext, uid: str, profile: SkillProfile) -> SkillProfile:
    saved = await ctx.store.replace_skill_profile(uid, profile.id, profile.skills, profile.summary)
    if saved is None:
        raise HTTPException(status_code=404, detail="Skill profile not found.")
    return saved


@router.get("")
async def list_skill_profiles(
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await ctx.store.list_skill_profiles(user.uid)


@router.post("", status_code=201)
async def create_skill_profile(
    payload: CreateSkillProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    job_title = payload.jobTitle.strip()
    if not job_title:
        raise HTTPException(status_code=400, detail="Please enter a job title to generate skills.")

    json_string = await run_in_threadpool(ctx.generator.generate_skills, job_title)
    names = [str(name).strip() for name in parse_array(json_string, "skill") if str(name).strip()]
    skills = [Skill.unrated(name) for name in names]

    profile = await ctx.store.create_skill_profile(user.uid, job_title, skills)
    logger.info(f"Generated {len(skills)} skills for '{job_title}' ({user.uid})")
    return profile


@router.get("/{profile_id}")
async def get_skill_profile(
    profile_id: str,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await _load(ctx, user.uid, profile_id)


@router.put("/{profile_id}")
async def save_assessment(
    profile_id: str,
    payload: SaveAssessmentRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    saved = await ctx.store.replace_skill_profile(user.uid, profile_id, payload.skills, payload.summary)
    if saved is None:
        raise HTTPException(status_code=404, detail="Skill profile not found.")
    logger.info(f"Assessment saved for skill profile {profile_id}")
    return saved


@router.delete("/{profile_id}")
async def delete_skill_profile(
    profile_id: str,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    if not await ctx.store.delete_skill_profile(user.uid, profile_id):
        raise HTTPException(status_code=404, detail="Skill profile not found.")
    return {"status": "deleted"}


@router.post("/{profile_id}/skills", status_code=201)
async def add_skill(
    profile_id: str,
    payload: NewSkillRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Please enter a skill name.")
    profile = await _load(ctx, user.uid, profile_id)
    profile.skills.append(Skill.unrated(name))
    return await _save(ctx, user.uid, profile)


@router.post("/{profile_id}/skills/{skill_index}/certifications", status_code=201)
async def add_certification(
    profile_id: str,
    skill_index: int,
    payload: CertificationRequest,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    if not payload.courseName or not payload.institution:
        raise HTTPException(status_code=400, detail="Please provide at least a Course Name and Institution.")
    profile = await _load(ctx, user.uid, profile_id)
    skill = _skill_at(profile, skill_index)
    skill.certifications.append(Certification(**payload.model_dump()))
    return await _save(ctx, user.uid, profile)


@router.delete("/{profile_id}/skills/{skill_index}/certifications/{cert_index}")
async def delete_certification(
    profile_id: str,
    skill_index: int,
    cert_index: int,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    profile = await _load(ctx, user.uid, profile_id)
    skill = _skill_at(profile, skill_index)
    if not 0 <= cert_index < len(skill.certifications):
        raise HTTPException(status_code=404, detail=f"Certification {cert_index} not found.")
    del skill.certifications[cert_index]
    return await _save(ctx, user.uid, profile)


@router.post("/{profile_id}/skills/{skill_index}/validate")
async def validate_skill(
    profile_id: str,
    skill_index: int,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    profile = await _load(ctx, user.uid, profile_id)
    skill = _skill_at(profile, skill_index)
    verdict = await run_in_threadpool(ctx.generator.validate_skill, skill)

    # Reload so edits saved while the model was answering are kept
    profile = await _load(ctx, user.uid, profile_id)
    _skill_at(profile, skill_index).supportLevel = verdict
    logger.info(f"Skill {skill_index} of {profile_id} validated as {verdict.value}")
    return await _save(ctx, user.uid, profile)


@router.post("/{profile_id}/summary")
async def generate_summary(
    profile_id: str,
    user: CurrentUser = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    profile = await _load(ctx, user.uid, profile_id)
    all_proof_points = "\n".join(skill.proof for skill in profile.skills if skill.proof)
    summary = await run_in_threadpool(ctx.generator.generate_summary, all_proof_points)

    profile = await _load(ctx, user.uid, profile_id)
    profile.summary = summary
    return await _save(ctx, user.uid, profile)
