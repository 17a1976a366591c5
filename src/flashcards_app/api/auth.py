from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from flashcards_app.api.deps import get_auth_service, get_auth_token
from flashcards_app.schemas.auth_schemas import AuthResponse, LoginRequest, RegisterRequest, UserOut
from flashcards_app.services.auth_service import AuthService
from flashcards_app.utils.config import settings
from flashcards_app.utils.errors import AuthError, StorageError
from flashcards_app.utils.logging_config import get_logger

logger = get_logger("api.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _internal_error(message: str) -> HTTPException:
    return HTTPException(status_code=500, detail={"error": "Internal server error", "message": message})


@router.post("/register", status_code=201, response_model=AuthResponse)
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        user = auth.register(body.email, body.password, body.confirm_password)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        # ex: dois cadastros simultâneos com o mesmo e-mail (índice unique)
        logger.exception("Error registering user")
        raise _internal_error("Registration failed")
    return AuthResponse(message="Registration successful! You can now log in.", user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, response: Response, auth: AuthService = Depends(get_auth_service)):
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    try:
        user, token = auth.login(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except StorageError:
        logger.exception("Error logging in")
        raise _internal_error("Login failed")

    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_TTL_DAYS * 24 * 60 * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )
    return AuthResponse(message="Login successful", user=UserOut.model_validate(user))


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_auth_token),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.logout(token)
    except StorageError:
        logger.exception("Error logging out")
        raise _internal_error("Logout failed")
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return {"message": "Logout successful"}
