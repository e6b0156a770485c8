"""
Application router handling tutors applying to tuition posts.
A tutor can apply to a post once. An application can be withdrawn until it has been paid for.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import datetime
from typing import List

from tuition_app.database.database import get_db, Application, ApplicationStatus, is_valid_uuid
from tuition_app.schemas.base_schema import InsertResult, DeleteResult
from tuition_app.schemas.application_schema import ApplicationCreate, ApplicationResponse
from tuition_app.utilities import store_error
from tuition_app.logger import logger

router = APIRouter(tags=['applications'])

ALREADY_APPLIED_MESSAGE = "Already applied!"

@router.post('/applications', response_model=InsertResult)
def submit_application(application: ApplicationCreate, db: Session = Depends(get_db)):
    """
    Apply to a tuition post as a tutor.

    Raises:
    - HTTPException(400): If the tuition id or tutor email is missing, or the tutor already applied to this post
    """
    if not application.tuition_id or not application.tutor_email:
        raise HTTPException(status_code=400, detail="Missing required fields.")

    try:
        existing = db.query(Application).filter(
            Application.tuition_id == application.tuition_id,
            Application.tutor_email == application.tutor_email
        ).first()
        if existing:
            raise HTTPException(status_code=400, detail=ALREADY_APPLIED_MESSAGE)

        record = Application(
            **application.model_dump(),
            status=ApplicationStatus.PENDING,
            applied_at=datetime.now()
        )
        db.add(record)
        db.commit()
        db.refresh(record)
    except IntegrityError:
        # Same pair inserted concurrently, rejected by the unique index
        db.rollback()
        raise HTTPException(status_code=400, detail=ALREADY_APPLIED_MESSAGE)
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to submit application.")

    logger.info(f"{record.tutor_email} applied to tuition {record.tuition_id}")
    return InsertResult(inserted_id=record.id)

@router.get('/tutor-applications/{email}', response_model=List[ApplicationResponse])
def get_tutor_applications(email: str, db: Session = Depends(get_db)):
    """Every application a tutor has made."""
    try:
        return (
            db.query(Application)
            .filter(Application.tutor_email == email)
            .order_by(Application.applied_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch applications.")

@router.get('/applied-tutors/{email}', response_model=List[ApplicationResponse])
def get_applied_tutors(email: str, db: Session = Depends(get_db)):
    """Applications made to a student's tuition posts."""
    try:
        return (
            db.query(Application)
            .filter(Application.student_email == email)
            .order_by(Application.applied_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch applications.")

@router.delete('/application-cancel/{application_id}', response_model=DeleteResult)
def cancel_application(application_id: str, db: Session = Depends(get_db)):
    """
    Withdraw an application. Only Pending applications can be withdrawn.

    Raises:
    - HTTPException(404): If there is no Pending application with this id
    """
    if not is_valid_uuid(application_id):
        raise HTTPException(status_code=404, detail="Pending application not found.")

    try:
        deleted = (
            db.query(Application)
            .filter(Application.id == application_id, Application.status == ApplicationStatus.PENDING)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to cancel application.")

    if deleted == 0:
        raise HTTPException(status_code=404, detail="Pending application not found.")

    logger.info(f"Application {application_id} cancelled")
    return DeleteResult(deleted_count=deleted)
