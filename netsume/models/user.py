from beanie import Document
from pymongo import ASCENDING, IndexModel
from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime

# ---------- Profile Fields ----------
class ProfileFields(BaseModel):
    name: str = ""
    sex: str = ""
    city: str = ""
    currentEmployer: str = ""
    currentJobTitle: str = ""
    yearsOfEmployment: str = ""
    linkedin: str = "https://www.linkedin.com"
    resumeUrl: str = ""
    email: Optional[EmailStr] = None

# ---------- Profile Update (merge semantics) ----------
class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    sex: Optional[str] = None
    city: Optional[str] = None
    currentEmployer: Optional[str] = None
    currentJobTitle: Optional[str] = None
    yearsOfEmployment: Optional[str] = None
    linkedin: Optional[str] = None

# ---------- Account (auth provider) ----------
class AccountInfo(BaseModel):
    uid: str
    email: EmailStr
    passwordHash: str

# ---------- Documents ----------
class UserProfile(Document):
    appId: str
    uid: str
    name: str = ""
    sex: str = ""
    city: str = ""
    currentEmployer: str = ""
    currentJobTitle: str = ""
    yearsOfEmployment: str = ""
    linkedin: str = "https://www.linkedin.com"
    resumeUrl: str = ""
    email: Optional[EmailStr] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
        indexes = [
            IndexModel([("appId", ASCENDING), ("uid", ASCENDING)], unique=True),
        ]


class Account(Document):
    appId: str
    uid: str
    email: EmailStr
    passwordHash: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "accounts"
        indexes = [
            IndexModel([("appId", ASCENDING), ("uid", ASCENDING)], unique=True),
            IndexModel([("appId", ASCENDING), ("email", ASCENDING)], unique=True),
        ]
