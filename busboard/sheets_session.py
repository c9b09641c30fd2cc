# busboard/sheets_session.py
# Holds the Google credentials and Sheets service for one caller, as an explicit
# unauthenticated -> authenticated -> revoked session instead of process-wide globals.

import enum
import logging
import os

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from .config import GOOGLE_SA_FILE, GOOGLE_SCOPES, GOOGLE_TOKEN_FILE
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REVOKED = "revoked"


def load_credentials(token_file=GOOGLE_TOKEN_FILE, sa_file=GOOGLE_SA_FILE, scopes=GOOGLE_SCOPES):
    """
    Prefer the user's authorized token (written by the consent flow),
    refreshing it when it has expired; fall back to a service account.
    """
    if token_file and os.path.exists(token_file):
        creds = Credentials.from_authorized_user_file(token_file, scopes)
        if not creds.valid and creds.expired and creds.refresh_token:
            creds.refresh(Request())
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        return creds
    if sa_file:
        return service_account.Credentials.from_service_account_file(sa_file, scopes=scopes)
    raise AuthenticationError(
        "Google credentials are not configured: set GOOGLE_TOKEN_FILE or GOOGLE_SA_FILE"
    )


def build_sheets_service(credentials):
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


class SheetsSession:
    """
    Transitions:
      UNAUTHENTICATED --authenticate()--> AUTHENTICATED
      AUTHENTICATED   --revoke()-------->  REVOKED
      REVOKED         --authenticate()--> AUTHENTICATED
    A failed authenticate() leaves the state where it was.
    """

    def __init__(self, credentials_loader=load_credentials, service_factory=build_sheets_service):
        self._load_credentials = credentials_loader
        self._build_service = service_factory
        self.state = SessionState.UNAUTHENTICATED
        self._credentials = None
        self._service = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def authenticate(self) -> bool:
        if self.is_authenticated:
            return True
        try:
            creds = self._load_credentials()
            service = self._build_service(creds)
        except (AuthenticationError, GoogleAuthError, OSError, ValueError) as exc:
            logger.error("OAuth error: %s", exc)
            return False

        self._credentials = creds
        self._service = service
        self.state = SessionState.AUTHENTICATED
        logger.info("Google Sheets session authenticated")
        return True

    def service(self):
        if not self.is_authenticated:
            raise AuthenticationError("Not authenticated with Google")
        return self._service

    def revoke(self) -> None:
        self._credentials = None
        self._service = None
        if self.state is SessionState.AUTHENTICATED:
            self.state = SessionState.REVOKED
            logger.info("Google Sheets session revoked")
