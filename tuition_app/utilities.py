from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException

from tuition_app.database.database import TuitionPost, User
from tuition_app.logger import logger

def store_error(db: Session, error: SQLAlchemyError, message: str) -> HTTPException:
    """Log a failed store call, roll the session back and build the generic 500 response"""
    logger.error(f"{message} {str(error)}")
    db.rollback()
    return HTTPException(status_code=500, detail=message)

def get_user_by_id(db: Session, user_id: str) -> User:
    """Get user by ID, 404 when missing"""
    user = User.get_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return user

def get_tuition_by_id(db: Session, tuition_id: str) -> TuitionPost:
    """Get tuition post by ID, 404 when missing"""
    tuition = TuitionPost.get_by_id(db, tuition_id)
    if not tuition:
        raise HTTPException(status_code=404, detail="Tuition post not found.")
    return tuition

def apply_changes(record, changes: dict) -> int:
    """Set the given attributes on a record. Returns 1 if any value changed, like a store's modifiedCount."""
    modified = 0
    for field, value in changes.items():
        if getattr(record, field) != value:
            setattr(record, field, value)
            modified = 1
    return modified
