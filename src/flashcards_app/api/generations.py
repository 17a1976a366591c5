from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from flashcards_app.api.deps import get_openrouter_client, require_user
from flashcards_app.db.session import get_session
from flashcards_app.models.user import User
from flashcards_app.schemas.generation_schemas import GenerateFlashcardsRequest, GenerationResult
from flashcards_app.services.generation_service import GenerationService
from flashcards_app.services.openrouter_client import OpenRouterClient
from flashcards_app.utils.logging_config import get_logger
from flashcards_app.utils.text import SOURCE_TEXT_MAX, SOURCE_TEXT_MIN, validate_source_text

logger = get_logger("api.generations")

router = APIRouter(prefix="/api/generations", tags=["generations"])


@router.post("", status_code=201, response_model=GenerationResult)
def create_generation(
    body: GenerateFlashcardsRequest,
    user: User = Depends(require_user),
    session: Session = Depends(get_session),
    client: OpenRouterClient = Depends(get_openrouter_client),
):
    """
    Gera propostas de flashcards a partir do texto-fonte.
    As propostas NÃO são salvas; o usuário aceita e salva via POST /api/flashcards.
    """
    validation = validate_source_text(body.source_text)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail={
            "error": "Validation failed",
            "message": validation.error,
            "details": {
                "source_text_length": len(body.source_text),
                "min_length": SOURCE_TEXT_MIN,
                "max_length": SOURCE_TEXT_MAX,
            },
        })

    service = GenerationService(session, client)
    try:
        return service.generate_flashcards(body.source_text, user.id)
    except Exception:
        logger.exception("Error generating flashcards for user %s", user.id)
        raise HTTPException(
            status_code=500,
            detail={"error": "Internal server error", "message": "Failed to generate flashcards"},
        )
