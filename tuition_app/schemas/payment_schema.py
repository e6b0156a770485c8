from pydantic import field_validator
from typing import Optional
from datetime import datetime

from tuition_app.schemas.base_schema import CamelModel, DocumentResponse

class CheckoutRequest(CamelModel):
    """Data needed to open a checkout session for an application"""
    application_id: str
    amount: float
    tutor_name: Optional[str] = None
    student_email: Optional[str] = None

    @field_validator('amount')
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError('Amount must be positive')
        return v

class CheckoutResponse(CamelModel):
    url: str

class VerifyResponse(CamelModel):
    success: bool

class PaymentResponse(DocumentResponse):
    """Payment record"""
    application_id: Optional[str] = None
    session_id: Optional[str] = None
    transaction_id: Optional[str] = None
    amount: float
    student_email: Optional[str] = None
    date: datetime
