from pydantic import BaseModel
from typing import Optional

class TokenRequest(BaseModel):
    """Body of POST /jwt"""
    email: str

class TokenResponse(BaseModel):
    """Issued access token"""
    token: str

class DecodedAccessToken(BaseModel):
    """
    Decoded access token data
        Args:
        - email (str): User email
        - role (str): User role at the time the token was issued
        - exp (int): Token expiration time
    """
    email: str
    role: str
    exp: int

class IdentityClaims(BaseModel):
    """Subset of the identity provider's ID token claims we rely on"""
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
