from typing import List, Any
from datetime import datetime, timedelta
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from tuition_app.logger import logger
from tuition_app.database.database import UserRole
from tuition_app.schemas.authentication_schema import DecodedAccessToken
from tuition_app.config import get_settings

# CONSTANTS
SECRET_KEY = get_settings().access_token_secret
ALGORITHM = get_settings().hash_algorithm
TOKEN_EXPIRE_MINUTES = get_settings().access_token_expire_minutes

# security scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="jwt")

######################
### TOKEN ISSUANCE ###
######################

def create_access_token(email: str, role: str, expires_in: int = TOKEN_EXPIRE_MINUTES) -> str:
    """Sign an access token carrying the user's email and role"""
    to_encode = {
        "email": email,
        "role": role,
        "exp": datetime.utcnow() + timedelta(minutes=expires_in)
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

##################################
### AUTHORIZATION DEPENDENCIES ###
##################################

def get_current_user(token: str = Depends(oauth2_scheme)) -> DecodedAccessToken:
    """
    Get the current user from the token.

    Args:
    - token (str): The user's token

    Returns:
    - DecodedAccessToken: The token's claims
    """
    try:
        payload : dict[str, Any] = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])

        if not payload.get("email"):
            raise HTTPException(status_code=401, detail="Invalid token. Missing user email.")

        if not payload.get("role"):
            raise HTTPException(status_code=401, detail="Invalid token. Missing user role.")

        return DecodedAccessToken(**payload)

    except JWTError as e:
        logger.error(f"Error decoding token: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token. Could not decode token.")

def verify_user_role(user: DecodedAccessToken, allowed_roles: List[UserRole]) -> DecodedAccessToken:
    """
    Verify that the user has the required role.

    Args:
    - user (DecodedAccessToken): The user's token claims
    - allowed_roles (list): List of allowed roles

    Returns:
    - DecodedAccessToken: The same claims, when the role is allowed
    """
    if not user or user.role not in [role.value for role in allowed_roles]:
        raise HTTPException(status_code=403,
                            detail=f"User must have one of these roles: {[role.value for role in allowed_roles]}")

    return user

def admin_only(current_user: DecodedAccessToken = Depends(get_current_user)) -> DecodedAccessToken:
    """Verify that the user is an admin """
    return verify_user_role(current_user, [UserRole.ADMIN])
