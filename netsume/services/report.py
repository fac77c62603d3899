"""
Report assembly for the print view and the admin overview.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from netsume.models.history import PRESENT, AccreditationItem, EmploymentItem
from netsume.models.skills import RATING_LABELS, SkillProfile
from netsume.models.user import ProfileFields

NOT_AVAILABLE = "N/A"
NO_SKILL_PROFILES = "No skill profiles created"

# Reference rings drawn behind the user's ratings on the radar chart
ENTRY_LEVEL = 2
QUALIFIED_LEVEL = 3
EXPERT_LEVEL = 4


class ChartPoint(BaseModel):
    subject: str
    user: int
    entry: int = ENTRY_LEVEL
    qualified: int = QUALIFIED_LEVEL
    expert: int = EXPERT_LEVEL
    fullMark: int = EXPERT_LEVEL


class Report(BaseModel):
    profile: ProfileFields
    skillProfile: SkillProfile
    employmentHistory: List[EmploymentItem] = Field(default_factory=list)
    accreditations: List[AccreditationItem] = Field(default_factory=list)
    chart: List[ChartPoint] = Field(default_factory=list)
    ratingLegend: Dict[int, str] = Field(default_factory=lambda: dict(RATING_LABELS))


class AdminRow(BaseModel):
    userId: str
    name: str
    email: str
    city: str
    profileTitle: str
    createdAt: str


def chart_series(skill_profile: SkillProfile) -> List[ChartPoint]:
    return [ChartPoint(subject=skill.name, user=skill.rating) for skill in skill_profile.skills]


def build_report(
    profile: ProfileFields,
    skill_profile: SkillProfile,
    employment_history: List[EmploymentItem],
    accreditations: List[AccreditationItem],
) -> Report:
    return Report(
        profile=profile,
        skillProfile=skill_profile,
        employmentHistory=employment_history,
        accreditations=accreditations,
        chart=chart_series(skill_profile),
    )


def _heading(title: str) -> List[str]:
    return ["", title, "-" * len(title)]


def render_text(report: Report) -> str:
    """Plain-text rendering of the report, one section per printed page block."""
    profile = report.profile
    skill_profile = report.skillProfile
    lines = [f"Competence Assessment Report for {profile.name}"]

    lines += _heading("User Profile")
    lines.append(f"Name: {profile.name}")
    lines.append(f"City, Country: {profile.city}")
    lines.append(f"Current Employer: {profile.currentEmployer}")
    lines.append(f"Current Job Title: {profile.currentJobTitle}")
    if profile.linkedin:
        lines.append(f"LinkedIn: {profile.linkedin}")

    lines += _heading(f"About {profile.name}")
    lines.append(skill_profile.summary or "No summary provided.")

    lines += _heading("Employment History")
    for job in report.employmentHistory:
        lines.append(f"{job.jobTitle} at {job.company}")
        lines.append(f"  {job.startDate} - {job.endDate or PRESENT} | {job.city}")
        if job.description:
            lines.append(f"  {job.description}")

    lines += _heading("Diploma/Degree/Accreditation")
    for acc in report.accreditations:
        lines.append(acc.name)
        lines.append(f"  {acc.institute}, {acc.location} - {acc.year}")

    lines += _heading(f"{skill_profile.jobTitle}: Skill Profile for {profile.name}")
    for skill in skill_profile.skills:
        lines.append(f"{skill.name}: {skill.rating} ({RATING_LABELS[skill.rating]}) [{skill.supportLevel.value}]")
        if skill.proof:
            lines.append(f"  Proof: {skill.proof}")
        for cert in skill.certifications:
            lines.append(f"  Certification: {cert.courseName}, {cert.institution}")

    lines += _heading("Rating Legend")
    for level, description in report.ratingLegend.items():
        lines.append(f"{level}: {description}")

    return "\n".join(lines) + "\n"


def _format_created(created_at: Optional[datetime]) -> str:
    if not created_at:
        return NOT_AVAILABLE
    return created_at.strftime("%Y-%m-%d %H:%M:%S")


def admin_rows(
    profiles: List[tuple],
    skill_profiles_by_user: Dict[str, List[SkillProfile]],
) -> List[AdminRow]:
    """One row per skill profile, or a placeholder row for users without any."""
    rows = []
    for uid, profile in profiles:
        base = {
            "userId": uid,
            "name": profile.name or NOT_AVAILABLE,
            "email": profile.email or NOT_AVAILABLE,
            "city": profile.city or NOT_AVAILABLE,
        }
        user_profiles = skill_profiles_by_user.get(uid, [])
        if not user_profiles:
            rows.append(AdminRow(**base, profileTitle=NO_SKILL_PROFILES, createdAt=NOT_AVAILABLE))
            continue
        for skill_profile in user_profiles:
            rows.append(AdminRow(
                **base,
                profileTitle=skill_profile.jobTitle or NOT_AVAILABLE,
                createdAt=_format_created(skill_profile.createdAt),
            ))
    return rows
