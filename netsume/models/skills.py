from enum import Enum
from beanie import Document
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

RATING_LABELS = {
    0: "No Skill",
    1: "Learned",
    2: "Applied at Work",
    3: "Have Mentored others",
    4: "Expert Level",
}

MIN_RATING = 0
MAX_RATING = 4


class SupportLevel(str, Enum):
    NOT_VALIDATED = "Not Validated"
    NOT_SUPPORTED = "Not Supported"
    SUPPORTED = "Supported"
    STRONGLY_SUPPORTED = "Strongly Supported"

# ---------- Certification Model ----------
class Certification(BaseModel):
    courseName: str = Field(min_length=1)
    institution: str = Field(min_length=1)
    city: str = ""
    completionDate: str = ""
    degree: str = ""

# ---------- Skill Model ----------
class Skill(BaseModel):
    name: str = Field(min_length=1)
    rating: int = Field(default=MIN_RATING, ge=MIN_RATING, le=MAX_RATING)
    proof: str = ""
    certifications: List[Certification] = Field(default_factory=list)
    supportLevel: SupportLevel = SupportLevel.NOT_VALIDATED

    @classmethod
    def unrated(cls, name: str) -> "Skill":
        return cls(name=name)

# ---------- Skill Profile ----------
class SkillProfile(BaseModel):
    id: Optional[str] = None
    jobTitle: str
    skills: List[Skill] = Field(default_factory=list)
    summary: str = ""
    createdAt: Optional[datetime] = None


class SkillProfileRecord(Document):
    appId: str
    uid: str
    jobTitle: str
    skills: List[Skill] = Field(default_factory=list)
    summary: str = ""
    createdAt: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "skillProfiles"
