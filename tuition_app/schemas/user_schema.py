from pydantic import EmailStr, StringConstraints, field_validator
from typing import Annotated, Optional
from datetime import datetime
from bleach import clean

from tuition_app.database.database import UserRole
from tuition_app.schemas.base_schema import CamelModel, DocumentResponse

############################
### USER ACCOUNT SCHEMAS ###
############################

class UserBase(CamelModel):
    """Base user data"""
    email: EmailStr
    # Add constraints to name field (min length: 1, max length: 100)
    name: Optional[Annotated[str, StringConstraints(min_length=1, max_length=100)]] = None
    photo: Optional[str] = None

    @field_validator('name')
    def sanitize_name(cls, v):
        return clean(v, strip=True) if v is not None else v

class UserCreate(UserBase):
    """Registration data. Role defaults to Student when omitted."""
    role: Optional[UserRole] = None

class UserResponse(DocumentResponse):
    """User response data"""
    email: str
    name: Optional[str] = None
    photo: Optional[str] = None
    role: UserRole
    status: str
    phone: Optional[str] = None
    institution: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    last_updated: Optional[datetime] = None

class UserUpdate(CamelModel):
    """Fields an admin may change on any account"""
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[str] = None

    @field_validator('name')
    def sanitize_name(cls, v):
        return clean(v, strip=True) if v is not None else v

############################
##### PROFILE SCHEMAS ######
############################

class StudentProfileUpdate(CamelModel):
    """Student self-service profile data, matched by email"""
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    institution: Optional[str] = None
    address: Optional[str] = None

    @field_validator('name', 'institution', 'address')
    def sanitize_text(cls, v):
        return clean(v, strip=True) if v is not None else v
