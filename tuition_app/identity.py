import base64
import json
from typing import Optional

import firebase_admin
from firebase_admin import credentials, auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from tuition_app.config import get_settings
from tuition_app.logger import logger
from tuition_app.schemas.authentication_schema import IdentityClaims

class IdentityError(Exception):
    """Raised when an ID token cannot be verified."""

class IdentityProvider:
    """
    Firebase Admin wrapper used to verify ID tokens issued to the frontend.

    The provider is created empty at import time and initialised once at startup
    from a base64 encoded service account JSON (the FB_SERVICE_KEY setting).

    Attributes:
        app (firebase_admin.App): The initialised Firebase app, None until initialise() succeeds
    """

    APP_NAME = "tuition_app"

    def __init__(self):
        self.app = None

    @property
    def enabled(self) -> bool:
        return self.app is not None

    def initialize(self, service_key: Optional[str]):
        """
        Initialise the Firebase app from an encoded service account.

        Args:
            service_key (str): base64 encoded service account JSON. Nothing happens when empty.
        """
        if self.app is not None or not service_key:
            return
        decoded = base64.b64decode(service_key).decode("utf-8")
        service_account = json.loads(decoded)
        cred = credentials.Certificate(service_account)
        self.app = firebase_admin.initialize_app(cred, name=self.APP_NAME)
        logger.info("Identity provider initialized for project %s", service_account.get("project_id"))

    def verify_id_token(self, id_token: str) -> IdentityClaims:
        """
        Verify an ID token and return its claims.

        Raises:
            IdentityError: If the provider is not initialised or the token is invalid
        """
        if not self.enabled:
            raise IdentityError("Identity provider is not configured")
        try:
            decoded = firebase_auth.verify_id_token(id_token, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise IdentityError(str(e)) from e
        return IdentityClaims(uid=decoded["uid"], email=decoded.get("email"), name=decoded.get("name"))

# Global identity provider instance
identity_provider = IdentityProvider()

def init_identity_provider():
    """Startup hook. Failures are logged and leave the provider disabled."""
    try:
        identity_provider.initialize(get_settings().fb_service_key)
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.error(f"Failed to initialize identity provider: {str(e)}")

def get_identity_provider() -> IdentityProvider:
    """Dependency returning the shared identity provider."""
    return identity_provider
