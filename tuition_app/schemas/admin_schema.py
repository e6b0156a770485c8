from typing import List

from tuition_app.schemas.base_schema import CamelModel
from tuition_app.schemas.payment_schema import PaymentResponse

class AdminStatsResponse(CamelModel):
    """Admin dashboard data"""
    total_earnings: float
    total_users: int
    total_tuitions: int
    transactions: List[PaymentResponse]
