from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from flashcards_app.db.session import get_session
from flashcards_app.models.user import User
from flashcards_app.services.auth_service import AuthService
from flashcards_app.services.openrouter_client import OpenRouterClient
from flashcards_app.utils.config import settings
from flashcards_app.utils.errors import ConfigurationError, StorageError
from flashcards_app.utils.logging_config import get_logger

logger = get_logger("api.deps")


def get_auth_token(request: Request) -> Optional[str]:
    # Header Bearer tem prioridade sobre o cookie de sessão
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(session, session_ttl_days=settings.SESSION_TTL_DAYS)


def get_current_user(
    token: Optional[str] = Depends(get_auth_token),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    try:
        return auth.get_user_for_token(token)
    except StorageError:
        logger.exception("Error resolving session token")
        raise HTTPException(
            status_code=500,
            detail={"error": "Internal server error", "message": "Failed to authenticate"},
        )


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


@lru_cache
def _build_openrouter_client() -> OpenRouterClient:
    return OpenRouterClient.from_settings(settings)


def get_openrouter_client() -> OpenRouterClient:
    # Client imutável: uma instância compartilhada entre requests.
    # Exceções não ficam no cache, então uma key configurada depois passa a valer.
    try:
        return _build_openrouter_client()
    except ConfigurationError as e:
        logger.error("AI gateway unavailable: %s", e)
        raise HTTPException(
            status_code=500,
            detail={"error": "Internal server error", "message": "Failed to generate flashcards"},
        )
