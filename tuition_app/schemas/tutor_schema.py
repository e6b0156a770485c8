from pydantic import field_validator
from typing import Optional
from datetime import datetime
from bleach import clean

from tuition_app.schemas.base_schema import CamelModel, DocumentResponse

class TutorProfileBase(CamelModel):
    """Base tutor profile data"""
    name: Optional[str] = None
    photo: Optional[str] = None
    university: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[str] = None
    bio: Optional[str] = None

    @field_validator('name', 'university', 'specialization', 'bio')
    def sanitize_text(cls, v):
        return clean(v, strip=True) if v is not None else v

class TutorProfileUpdate(TutorProfileBase):
    """Tutor profile upsert data, keyed by the tutor's email"""
    tutor_email: Optional[str] = None

class TutorProfileResponse(DocumentResponse, TutorProfileBase):
    """Tutor profile response"""
    tutor_email: str
    created_at: datetime
    last_updated: Optional[datetime] = None

class RevenueEntry(DocumentResponse):
    """A payment received by a tutor, joined with the application it paid for"""
    transaction_id: Optional[str] = None
    amount: float
    date: datetime
    subject: Optional[str] = None
    student_email: Optional[str] = None
