import secrets
from datetime import timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from flashcards_app.models.user import AuthSession, User
from flashcards_app.utils.clock import utcnow
from flashcards_app.utils.errors import AuthError, StorageError
from flashcards_app.utils.logging_config import get_logger

logger = get_logger("services.auth")

MIN_PASSWORD_LENGTH = 8


class AuthService:
    def __init__(self, session: Session, session_ttl_days: int = 7):
        self.session = session
        self.session_ttl = timedelta(days=session_ttl_days)

    def register(self, email: Optional[str], password: Optional[str], confirm_password: Optional[str]) -> User:
        if not email or not password:
            raise AuthError("Email and password are required")
        if password != confirm_password:
            raise AuthError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        email = email.strip().lower()
        if self._find_by_email(email) is not None:
            raise AuthError("User already registered")

        user = User(email=email, password_hash="")
        user.set_password(password)
        self._save(user)
        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        if not email or not password:
            raise AuthError("Email and password are required")

        user = self._find_by_email(email.strip().lower())
        if user is None or not user.check_password(password):
            raise AuthError("Invalid login credentials")

        auth_session = AuthSession(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            expires_at=utcnow() + self.session_ttl,
        )
        self._save(auth_session)
        return user, auth_session.token

    def logout(self, token: Optional[str]) -> None:
        auth_session = self._find_session(token)
        if auth_session is None:
            return
        try:
            self.session.delete(auth_session)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to end session: {e}") from e

    def get_user_for_token(self, token: Optional[str]) -> Optional[User]:
        """Usuário dono do token, ou None (token ausente, desconhecido ou expirado)."""
        auth_session = self._find_session(token)
        if auth_session is None:
            return None

        expires_at = auth_session.expires_at
        # SQLite devolve datetime sem tz
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= utcnow():
            return None
        try:
            return self.session.get(User, auth_session.user_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to fetch user: {e}") from e

    def _find_by_email(self, email: str) -> Optional[User]:
        try:
            return self.session.exec(select(User).where(User.email == email)).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to fetch user: {e}") from e

    def _find_session(self, token: Optional[str]) -> Optional[AuthSession]:
        if not token:
            return None
        try:
            return self.session.exec(select(AuthSession).where(AuthSession.token == token)).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to fetch session: {e}") from e

    def _save(self, obj) -> None:
        try:
            self.session.add(obj)
            self.session.commit()
            self.session.refresh(obj)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to save {type(obj).__name__}: {e}") from e
