"""Login gate for the drive: one configured credential pair."""

import secrets
from datetime import datetime
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ValidationError

from file_drive.config import DriveConfig
from file_drive.services.exceptions import AuthenticationError


class Session(BaseModel):
    email: str
    logged_in_at: datetime


def verify_credentials(email: str, password: str, config: DriveConfig) -> bool:
    """Compare against the configured pair without leaking timing."""
    email_ok = secrets.compare_digest(email.encode(), config.login_email.encode())
    password_ok = secrets.compare_digest(
        password.encode(), config.login_password.get_secret_value().encode()
    )
    return email_ok and password_ok


class AuthService:
    """Checks credentials and remembers a login between CLI invocations."""

    def __init__(self, config: DriveConfig):
        self.config = config

    def login(self, email: str, password: str, remember: bool = False) -> Session:
        """
        Log in with the configured credentials.

        Raises:
            AuthenticationError: If email or password do not match
        """
        if not verify_credentials(email, password, self.config):
            logger.info("Rejected login attempt")
            raise AuthenticationError("Incorrect email or password, please try again")

        session = Session(email=email, logged_in_at=datetime.now())
        if remember:
            self.config.session_path.write_text(session.model_dump_json(indent=2))
            logger.debug(f"Saved session to {self.config.session_path}")
        return session

    def logout(self) -> bool:
        """Forget a remembered login. Returns False if none was saved."""
        path = self.config.session_path
        if not path.exists():
            return False
        path.unlink()
        return True

    def current_session(self) -> Optional[Session]:
        path = self.config.session_path
        if not path.exists():
            return None
        try:
            session = Session.model_validate_json(path.read_text())
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return None
        # a session saved for another account is not valid
        if session.email != self.config.login_email:
            return None
        return session
