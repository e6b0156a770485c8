from pydantic import field_validator
from typing import Optional
from datetime import datetime
from bleach import clean

from tuition_app.database.database import TuitionStatus
from tuition_app.schemas.base_schema import CamelModel, DocumentResponse

class TuitionBase(CamelModel):
    """Editable tuition post data. A tuition post is a student's request for a tutor."""
    subject: Optional[str] = None
    class_level: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[float] = None
    days_per_week: Optional[int] = None
    schedule: Optional[str] = None
    description: Optional[str] = None

    @field_validator('subject', 'location', 'schedule', 'description')
    def sanitize_text(cls, v):
        return clean(v, strip=True) if v is not None else v

    @field_validator('salary')
    def validate_salary(cls, v):
        if v is not None and v < 0:
            raise ValueError('Salary cannot be negative')
        return v

    @field_validator('days_per_week')
    def validate_days_per_week(cls, v):
        if v is not None and not 1 <= v <= 7:
            raise ValueError('Days per week must be between 1 and 7')
        return v

class TuitionCreate(TuitionBase):
    """Tuition post creation data. Required fields are checked by the handler."""
    student_name: Optional[str] = None
    student_email: Optional[str] = None

class TuitionUpdate(TuitionBase):
    """Tuition post update data. Ownership, timestamps and status are not editable."""
    pass

class TuitionResponse(DocumentResponse):
    """Tuition post response data"""
    subject: str
    class_level: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[float] = None
    days_per_week: Optional[int] = None
    schedule: Optional[str] = None
    description: Optional[str] = None
    student_name: Optional[str] = None
    student_email: str
    status: TuitionStatus
    created_at: datetime

class MyTuitionsRequest(CamelModel):
    email: Optional[str] = None

class TuitionStatusUpdate(CamelModel):
    """Admin review decision"""
    status: Optional[str] = None
