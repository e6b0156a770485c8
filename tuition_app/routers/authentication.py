"""
Authentication router issuing the JWT access tokens used by the frontend.
Tokens carry the user's email and role, read from the users collection.
Optionally requires an identity provider ID token proving the caller owns the email.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, Header
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Optional

from tuition_app.database.database import get_db, User, UserRole
from tuition_app.auth_tools import create_access_token
from tuition_app.identity import IdentityProvider, IdentityError, get_identity_provider
from tuition_app.schemas.authentication_schema import TokenRequest, TokenResponse
from tuition_app.utilities import store_error
from tuition_app.logger import logger
from tuition_app.config import get_settings

router = APIRouter(tags=['authentication'])

# Add rate limiting
limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)

def verify_localhost(request: Request):
    """Verify that the request is coming from localhost"""
    host = request.client.host
    if host not in ["127.0.0.1", "localhost", "::1", "testclient"]:
        raise HTTPException(status_code=403, detail="Forbidden. This endpoint can only be accessed from localhost.")

# Optional ID token dependency
def get_id_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if authorization:
        # Extract token from the Authorization header
        return authorization.split("Bearer ")[-1].strip()
    return None  # Return None if no token is provided

def check_identity(email: str, id_token: Optional[str], identity: IdentityProvider):
    """Require an ID token whose email matches the one a token is requested for"""
    if not id_token:
        raise HTTPException(status_code=401, detail="Identity token required.")
    try:
        claims = identity.verify_id_token(id_token)
    except IdentityError as e:
        logger.warning(f"Rejected identity token for {email}: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid identity token.")
    if claims.email != email:
        raise HTTPException(status_code=401, detail="Identity token does not match email.")

@router.post('/jwt', response_model=TokenResponse)
@limiter.limit("30/minute")
def issue_token(
    request: Request,
    body: TokenRequest,
    id_token: Optional[str] = Depends(get_id_token),
    identity: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
):
    """
    Issue an access token for the given email.

    The role claim comes from the stored user, unknown users get the Student role.
    The token expires after ACCESS_TOKEN_EXPIRE_MINUTES (one hour by default).
    """
    if get_settings().require_identity_token:
        check_identity(body.email, id_token, identity)

    try:
        user = User.get_by_email(db, body.email)
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to issue token.")

    role = user.role.value if user else UserRole.STUDENT.value
    token = create_access_token(body.email, role)
    logger.info(f"Issued token for {body.email} with role {role}.")
    return {"token": token}

@router.get('/auth/generate-admin-token', response_model=TokenResponse)
@limiter.limit("10/minute")
def generate_admin_token(request: Request, db: Session = Depends(get_db), _=Depends(verify_localhost)):
    """
    Generate a temporary admin token for development purposes.
    Creates the configured admin user if it does not exist.
    This endpoint is only available in development, and can only be accessed from localhost.
    """
    settings = get_settings()

    # Only allow this endpoint in development
    if not settings.local:
        raise HTTPException(status_code=403, detail="Forbidden")

    try:
        user = User.get_by_email(db, settings.admin_email)
        if not user:
            user = User(email=settings.admin_email, name=settings.admin_name)
            db.add(user)
        user.role = UserRole.ADMIN
        db.commit()
    except SQLAlchemyError as e:
        raise store_error(db, e, "Failed to create admin user.")

    logger.info(f"Generated temporary admin token for {settings.admin_email}.")
    return {"token": create_access_token(settings.admin_email, UserRole.ADMIN.value)}
