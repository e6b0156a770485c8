"""
Admin router providing moderation of tuition posts and the dashboard statistics.
Requires admin authentication for all endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List

from tuition_app.database.database import get_db, User, TuitionPost, TuitionStatus, Payment
from tuition_app.auth_tools import admin_only
from tuition_app.routers.authentication import limiter
from tuition_app.schemas.authentication_schema import DecodedAccessToken
from tuition_app.schemas.admin_schema import AdminStatsResponse
from tuition_app.schemas.base_schema import UpdateResult
from tuition_app.schemas.tuition_schema import TuitionResponse, TuitionStatusUpdate
from tuition_app.utilities import store_error, get_tuition_by_id
from tuition_app.logger import logger, audit_logger

router = APIRouter(prefix='/admin', tags=['admin'])

# Decisions an admin review can make
REVIEW_STATUSES = {TuitionStatus.APPROVED.value: TuitionStatus.APPROVED, TuitionStatus.REJECTED.value: TuitionStatus.REJECTED}

@router.get('/all-tuitions', response_model=List[TuitionResponse])
@limiter.limit("60/minute")
def get_all_tuitions(request: Request, db: Session = Depends(get_db), _=Depends(admin_only)):
    """Every tuition post, newest first, for review."""
    try:
        return db.query(TuitionPost).order_by(TuitionPost.created_at.desc()).all()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch tuitions.")

@router.patch('/tuition-status/{tuition_id}', response_model=UpdateResult)
@limiter.limit("60/minute")
def review_tuition(
    request: Request,
    tuition_id: str,
    review: TuitionStatusUpdate,
    db: Session = Depends(get_db),
    admin: DecodedAccessToken = Depends(admin_only)
):
    """
    Approve or reject a tuition post.

    Raises:
    - HTTPException(400): If the status is not Approved or Rejected, or the post was already closed by a payment
    - HTTPException(404): If the post does not exist
    """
    status = REVIEW_STATUSES.get(review.status)
    if status is None:
        raise HTTPException(status_code=400, detail=f"Status must be one of {list(REVIEW_STATUSES)}.")

    try:
        tuition = get_tuition_by_id(db, tuition_id)
        if tuition.status == TuitionStatus.CLOSED:
            raise HTTPException(status_code=400, detail="Closed tuition posts cannot be reviewed.")
        modified = int(tuition.status != status)
        tuition.status = status
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to update tuition status.")

    logger.info(f"Tuition {tuition_id} marked {status.value} by {admin.email}")
    audit_logger.log_security_event("tuition_reviewed", admin.email, {"tuition_id": tuition_id, "status": status.value})
    return UpdateResult(matched_count=1, modified_count=modified)

@router.get('/stats', response_model=AdminStatsResponse)
@limiter.limit("60/minute")
def get_stats(request: Request, db: Session = Depends(get_db), _=Depends(admin_only)):
    """
    Fetch dashboard statistics: total earnings, user and tuition counts, and every transaction.

    Returns:
        AdminStatsResponse: Dashboard statistics
    """
    try:
        total_earnings = db.query(func.coalesce(func.sum(Payment.amount), 0)).scalar()
        total_users = db.query(User).count()
        total_tuitions = db.query(TuitionPost).count()
        transactions = db.query(Payment).order_by(Payment.date.desc()).all()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch stats.")

    return {
        "total_earnings": total_earnings,
        "total_users": total_users,
        "total_tuitions": total_tuitions,
        "transactions": transactions
    }
