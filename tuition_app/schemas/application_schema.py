from pydantic import field_validator
from typing import Optional
from datetime import datetime
from bleach import clean

from tuition_app.database.database import ApplicationStatus
from tuition_app.schemas.base_schema import CamelModel, DocumentResponse

class ApplicationBase(CamelModel):
    """Base application data. An application is a tutor's response to a tuition post."""
    tutor_name: Optional[str] = None
    student_email: Optional[str] = None
    subject: Optional[str] = None
    expected_salary: Optional[float] = None
    qualifications: Optional[str] = None
    experience: Optional[str] = None

    @field_validator('tutor_name', 'subject', 'qualifications')
    def sanitize_text(cls, v):
        return clean(v, strip=True) if v is not None else v

    @field_validator('expected_salary')
    def validate_expected_salary(cls, v):
        if v is not None and v < 0:
            raise ValueError('Expected salary cannot be negative')
        return v

class ApplicationCreate(ApplicationBase):
    """Application creation data"""
    tuition_id: Optional[str] = None
    tutor_email: Optional[str] = None

class ApplicationResponse(ApplicationBase, DocumentResponse):
    """Application response data"""
    tuition_id: str
    tutor_email: str
    status: ApplicationStatus
    applied_at: datetime
