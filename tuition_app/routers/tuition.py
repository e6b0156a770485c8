"""
Tuition router handling the posts students create to find a tutor.
New posts start as Pending and wait for admin review. Only an admin or a confirmed payment changes the status.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import List

from tuition_app.database.database import get_db, TuitionPost, TuitionStatus
from tuition_app.schemas.base_schema import InsertResult, UpdateResult, DeleteResult
from tuition_app.schemas.tuition_schema import TuitionCreate, TuitionUpdate, TuitionResponse, MyTuitionsRequest
from tuition_app.utilities import store_error, get_tuition_by_id, apply_changes
from tuition_app.logger import logger

router = APIRouter(tags=['tuition'])

LATEST_TUITIONS_LIMIT = 6

@router.post('/tuition', response_model=InsertResult)
def create_tuition(post: TuitionCreate, db: Session = Depends(get_db)):
    """
    Post a new tuition request. It is stored as Pending until an admin reviews it.

    Raises:
    - HTTPException(400): If the student email or subject is missing
    """
    if not post.student_email or not post.subject:
        raise HTTPException(status_code=400, detail="Missing required fields.")

    tuition = TuitionPost(
        **post.model_dump(),
        status=TuitionStatus.PENDING,
        created_at=datetime.now()
    )
    try:
        db.add(tuition)
        db.commit()
        db.refresh(tuition)
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to post tuition due to a server error.")

    logger.info(f"Tuition {tuition.id} posted by {tuition.student_email}")
    return InsertResult(
        inserted_id=tuition.id,
        message="Tuition post submitted successfully. It is currently pending admin review."
    )

@router.post('/my-tuitions', response_model=List[TuitionResponse])
def get_my_tuitions(body: MyTuitionsRequest, db: Session = Depends(get_db)):
    """Posts created by one student, newest first."""
    if not body.email:
        raise HTTPException(status_code=400, detail="Student email is required.")
    try:
        return (
            db.query(TuitionPost)
            .filter(TuitionPost.student_email == body.email)
            .order_by(TuitionPost.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch tuitions.")

@router.get('/all-tuitions', response_model=List[TuitionResponse])
def get_all_tuitions(db: Session = Depends(get_db)):
    try:
        return db.query(TuitionPost).order_by(TuitionPost.created_at.desc()).all()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch all tuitions")

@router.post('/latest-tuitions', response_model=List[TuitionResponse])
def get_latest_tuitions(db: Session = Depends(get_db)):
    """The newest posts for the home page."""
    try:
        return (
            db.query(TuitionPost)
            .order_by(TuitionPost.created_at.desc())
            .limit(LATEST_TUITIONS_LIMIT)
            .all()
        )
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch latest tuitions.")

@router.get('/tuition/{tuition_id}', response_model=TuitionResponse)
def get_tuition(tuition_id: str, db: Session = Depends(get_db)):
    try:
        return get_tuition_by_id(db, tuition_id)
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch tuition.")

@router.put('/tuition/{tuition_id}', response_model=UpdateResult)
def update_tuition(tuition_id: str, changes: TuitionUpdate, db: Session = Depends(get_db)):
    """
    Edit a tuition post. The owner, creation time and status cannot be changed here.

    Raises:
    - HTTPException(404): If the post does not exist
    """
    try:
        tuition = get_tuition_by_id(db, tuition_id)
        modified = apply_changes(tuition, changes.model_dump(exclude_unset=True, exclude_none=True))
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to update tuition.")

    return UpdateResult(
        matched_count=1,
        modified_count=modified,
        message="Tuition post updated successfully."
    )

@router.delete('/tuition/{tuition_id}', response_model=DeleteResult)
def delete_tuition(tuition_id: str, db: Session = Depends(get_db)):
    try:
        tuition = get_tuition_by_id(db, tuition_id)
        db.delete(tuition)
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to delete tuition.")

    logger.info(f"Tuition {tuition_id} deleted")
    return DeleteResult(deleted_count=1, message="Tuition post deleted successfully.")
