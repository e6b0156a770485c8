"""
User router handling registration, account management and student profiles.
Registration is idempotent per email: a second call for the same email inserts nothing.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import datetime
from typing import List

from tuition_app.database.database import get_db, User, UserRole
from tuition_app.auth_tools import get_current_user, admin_only
from tuition_app.routers.authentication import limiter
from tuition_app.schemas.authentication_schema import DecodedAccessToken
from tuition_app.schemas.base_schema import InsertResult, UpdateResult, DeleteResult
from tuition_app.schemas.user_schema import UserCreate, UserResponse, UserUpdate, StudentProfileUpdate
from tuition_app.utilities import store_error, get_user_by_id, apply_changes
from tuition_app.logger import logger, audit_logger

router = APIRouter(tags=['users'])

USER_EXISTS_MESSAGE = "User already exists in DB"

@router.post('/users', response_model=InsertResult)
def register_user(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Save a user profile on registration or social login.

    Returns:
    - InsertResult: with the new id, or with insertedId null when the email is already registered
    """
    if user_data.role == UserRole.ADMIN:
        raise HTTPException(status_code=400, detail="Admin accounts cannot be self-registered.")

    try:
        if User.get_by_email(db, user_data.email):
            return InsertResult(inserted_id=None, message=USER_EXISTS_MESSAGE)

        user = User(
            email=user_data.email,
            name=user_data.name,
            photo=user_data.photo,
            role=user_data.role or UserRole.STUDENT
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # Registered concurrently between the lookup and the insert
        db.rollback()
        return InsertResult(inserted_id=None, message=USER_EXISTS_MESSAGE)
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to register user.")

    logger.info(f"New user registered: {user.email} as {user.role.value}")
    return InsertResult(inserted_id=user.id)

@router.get('/users/me', response_model=UserResponse)
def get_me(current_user: DecodedAccessToken = Depends(get_current_user), db: Session = Depends(get_db)):
    """Return the stored account behind the bearer token."""
    user = User.get_by_email(db, current_user.email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return user

@router.get('/users', response_model=List[UserResponse])
@limiter.limit("60/minute")
def get_all_users(request: Request, db: Session = Depends(get_db), _=Depends(admin_only)):
    """Retrieve all users. Admin only."""
    try:
        return db.query(User).order_by(User.created_at.desc()).all()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to fetch users.")

@router.patch('/users/{user_id}', response_model=UpdateResult)
@limiter.limit("60/minute")
def update_user(request: Request, user_id: str, changes: UserUpdate, db: Session = Depends(get_db), admin: DecodedAccessToken = Depends(admin_only)):
    """
    Update a user's name, phone, role or account status. Admin only.

    Raises:
    - HTTPException(404): If the user does not exist
    """
    try:
        user = get_user_by_id(db, user_id)
        modified = apply_changes(user, changes.model_dump(exclude_unset=True, exclude_none=True))
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to update user.")

    audit_logger.log_security_event("user_updated", admin.email, {"user_id": user_id, **changes.model_dump(exclude_none=True, mode="json")})
    return UpdateResult(matched_count=1, modified_count=modified)

@router.delete('/users/{user_id}', response_model=DeleteResult)
@limiter.limit("60/minute")
def delete_user(request: Request, user_id: str, db: Session = Depends(get_db), admin: DecodedAccessToken = Depends(admin_only)):
    """
    Delete a user account. Admin only.

    Raises:
    - HTTPException(404): If the user does not exist
    """
    try:
        user = get_user_by_id(db, user_id)
        email = user.email
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to delete user.")

    logger.info(f"User {user_id} deleted by admin {admin.email}")
    audit_logger.log_security_event("user_deleted", admin.email, {"user_id": user_id, "email": email})
    return DeleteResult(deleted_count=1)

@router.get('/student-profile/{email}')
def get_student_profile(email: str, db: Session = Depends(get_db)):
    """Return the student's account, or an empty object when unknown."""
    try:
        user = User.get_by_email(db, email)
    except SQLAlchemyError as e:
        raise store_error(db, e, "Error fetching student profile")
    return UserResponse.model_validate(user) if user else {}

@router.patch('/student-profile-update', response_model=UpdateResult)
def update_student_profile(profile: StudentProfileUpdate, db: Session = Depends(get_db)):
    """Update the contact details of the user with the given email."""
    try:
        user = User.get_by_email(db, profile.email)
        if not user:
            return UpdateResult(matched_count=0, modified_count=0)
        apply_changes(user, {
            "name": profile.name,
            "phone": profile.phone,
            "institution": profile.institution,
            "address": profile.address,
        })
        user.last_updated = datetime.now()
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Update failed")

    return UpdateResult(matched_count=1, modified_count=1)
