"""
Tutor router handling tutor profiles, ongoing tuitions and earnings.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import List

from tuition_app.database.database import get_db, TutorProfile, Application, ApplicationStatus, Payment
from tuition_app.schemas.base_schema import UpdateResult
from tuition_app.schemas.tutor_schema import TutorProfileUpdate, TutorProfileResponse, RevenueEntry
from tuition_app.schemas.application_schema import ApplicationResponse
from tuition_app.utilities import store_error, apply_changes
from tuition_app.logger import logger

router = APIRouter(tags=['tutor'])

LATEST_TUTORS_LIMIT = 3

@router.get('/tutor-profile/{email}')
def get_tutor_profile(email: str, db: Session = Depends(get_db)):
    """Return the tutor's profile, or an empty object when none was saved yet."""
    try:
        profile = db.query(TutorProfile).filter(TutorProfile.tutor_email == email).first()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Error fetching profile")
    return TutorProfileResponse.model_validate(profile) if profile else {}

@router.patch('/tutor-profile-update', response_model=UpdateResult)
def upsert_tutor_profile(profile: TutorProfileUpdate, db: Session = Depends(get_db)):
    """
    Create or update the profile keyed by the tutor's email.

    Returns:
    - UpdateResult: upsertedId is set when a new profile was created
    """
    if not profile.tutor_email:
        raise HTTPException(status_code=400, detail="Tutor email is required.")

    changes = profile.model_dump(exclude={"tutor_email"}, exclude_unset=True)
    try:
        existing = db.query(TutorProfile).filter(TutorProfile.tutor_email == profile.tutor_email).first()
        if existing:
            modified = apply_changes(existing, changes)
            existing.last_updated = datetime.now()
            db.commit()
            return UpdateResult(matched_count=1, modified_count=modified)

        created = TutorProfile(tutor_email=profile.tutor_email, last_updated=datetime.now(), **changes)
        db.add(created)
        db.commit()
        db.refresh(created)
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to update tutor profile.")

    logger.info(f"Created tutor profile for {profile.tutor_email}")
    return UpdateResult(matched_count=0, modified_count=0, upserted_id=created.id)

@router.get('/all-tutors', response_model=List[TutorProfileResponse])
def get_all_tutors(db: Session = Depends(get_db)):
    try:
        return db.query(TutorProfile).all()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch tutors")

@router.post('/latest-tutors', response_model=List[TutorProfileResponse])
def get_latest_tutors(db: Session = Depends(get_db)):
    """The newest tutor profiles for the home page."""
    try:
        return (
            db.query(TutorProfile)
            .order_by(TutorProfile.created_at.desc())
            .limit(LATEST_TUTORS_LIMIT)
            .all()
        )
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch latest tutors.")

@router.get('/tutor/ongoing/{email}', response_model=List[ApplicationResponse])
@router.get('/ongoing-tuitions/{email}', response_model=List[ApplicationResponse])
def get_ongoing_tuitions(email: str, db: Session = Depends(get_db)):
    """Applications of the tutor that were paid for and approved."""
    try:
        return (
            db.query(Application)
            .filter(Application.tutor_email == email, Application.status == ApplicationStatus.APPROVED)
            .all()
        )
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch ongoing tuitions.")

@router.get('/tutor/revenue/{email}', response_model=List[RevenueEntry])
def get_tutor_revenue(email: str, db: Session = Depends(get_db)):
    """
    Payments received by a tutor.

    Payments reference their application by a string id, so they are joined on that
    column and filtered by the application's tutor.
    """
    try:
        rows = (
            db.query(Payment, Application.subject)
            .join(Application, Application.id == Payment.application_id)
            .filter(Application.tutor_email == email)
            .order_by(Payment.date.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch revenue")

    return [
        RevenueEntry(
            id=payment.id,
            transaction_id=payment.transaction_id,
            amount=payment.amount,
            date=payment.date,
            subject=subject,
            student_email=payment.student_email,
        )
        for payment, subject in rows
    ]
