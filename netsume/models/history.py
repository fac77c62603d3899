from beanie import Document
from pydantic import BaseModel, field_validator
from typing import Optional

EMPLOYMENT_HISTORY = "employmentHistory"
ACCREDITATIONS = "accreditations"

PRESENT = "Present"


def _as_text(value):
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return value

# ---------- Employment History ----------
class EmploymentItem(BaseModel):
    id: Optional[str] = None
    company: str = ""
    jobTitle: str = ""
    startDate: str = ""
    endDate: str = ""
    city: str = ""
    description: str = ""
    order: int = 0

    # Extracted items may carry numbers or nulls for the free-text fields; lists and objects still fail
    @field_validator("company", "jobTitle", "startDate", "endDate", "city", "description", mode="before")
    def coerce_text(cls, v):
        return _as_text(v)

    def missing_required(self) -> bool:
        return not (self.company and self.jobTitle and self.startDate)

# ---------- Accreditations ----------
class AccreditationItem(BaseModel):
    id: Optional[str] = None
    name: str = ""
    institute: str = ""
    location: str = ""
    year: str = ""
    order: int = 0

    @field_validator("name", "institute", "location", "year", mode="before")
    def coerce_text(cls, v):
        return _as_text(v)

    def missing_required(self) -> bool:
        return not (self.name and self.institute and self.year)

# ---------- Documents ----------
class EmploymentRecord(Document):
    appId: str
    uid: str
    company: str = ""
    jobTitle: str = ""
    startDate: str = ""
    endDate: str = ""
    city: str = ""
    description: str = ""
    order: int = 0

    class Settings:
        name = EMPLOYMENT_HISTORY


class AccreditationRecord(Document):
    appId: str
    uid: str
    name: str = ""
    institute: str = ""
    location: str = ""
    year: str = ""
    order: int = 0

    class Settings:
        name = ACCREDITATIONS


ITEM_MODELS = {
    EMPLOYMENT_HISTORY: EmploymentItem,
    ACCREDITATIONS: AccreditationItem,
}

RECORD_MODELS = {
    EMPLOYMENT_HISTORY: EmploymentRecord,
    ACCREDITATIONS: AccreditationRecord,
}
