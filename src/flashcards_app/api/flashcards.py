from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from flashcards_app.api.deps import require_user
from flashcards_app.db.session import get_session
from flashcards_app.models.user import User
from flashcards_app.schemas.flashcard_schemas import (
    FlashcardListResponse,
    FlashcardResponse,
    FlashcardsCreateRequest,
    FlashcardsCreateResponse,
    FlashcardUpdate,
    FlashcardUpdateResponse,
    Pagination,
)
from flashcards_app.services.flashcard_service import FlashcardService
from flashcards_app.utils.errors import StorageError
from flashcards_app.utils.logging_config import get_logger

logger = get_logger("api.flashcards")

router = APIRouter(prefix="/api/flashcards", tags=["flashcards"])

NOT_FOUND = "Flashcard not found or access denied"


def get_flashcard_service(session: Session = Depends(get_session)) -> FlashcardService:
    return FlashcardService(session)


def _internal_error(message: str) -> HTTPException:
    # Detalhe do banco fica só no log
    return HTTPException(status_code=500, detail={"error": "Internal server error", "message": message})


@router.get("", response_model=FlashcardListResponse)
def list_flashcards(
    user: User = Depends(require_user),
    service: FlashcardService = Depends(get_flashcard_service),
):
    try:
        flashcards = service.get_flashcards(user.id)
    except StorageError:
        logger.exception("Error fetching flashcards")
        raise _internal_error("Failed to fetch flashcards")

    return FlashcardListResponse(
        data=[FlashcardResponse.model_validate(f) for f in flashcards],
        pagination=Pagination(page=1, limit=len(flashcards), total=len(flashcards)),
    )


@router.post("", status_code=201, response_model=FlashcardsCreateResponse)
def create_flashcards(
    body: FlashcardsCreateRequest,
    user: User = Depends(require_user),
    service: FlashcardService = Depends(get_flashcard_service),
):
    # generation_id declarado pelo cliente só vale se a geração for do usuário
    checked = set()
    for flashcard in body.flashcards:
        generation_id = flashcard.generation_id
        if generation_id is None or generation_id in checked:
            continue
        if not service.verify_generation_ownership(generation_id, user.id):
            raise HTTPException(status_code=404, detail={
                "error": "Generation not found",
                "details": {"generation_id": generation_id},
            })
        checked.add(generation_id)

    try:
        created = service.create_flashcards(body.flashcards, user.id)
    except StorageError:
        logger.exception("Error creating flashcards")
        raise _internal_error("Failed to create flashcards")
    return FlashcardsCreateResponse(flashcards=[FlashcardResponse.model_validate(f) for f in created])


@router.put("/{flashcard_id}", response_model=FlashcardUpdateResponse)
def update_flashcard(
    flashcard_id: int,
    body: FlashcardUpdate,
    user: User = Depends(require_user),
    service: FlashcardService = Depends(get_flashcard_service),
):
    try:
        flashcard = service.update_flashcard(flashcard_id, user.id, front=body.front, back=body.back)
    except StorageError:
        logger.exception("Error updating flashcard %s", flashcard_id)
        raise _internal_error("Failed to update flashcard")

    if flashcard is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return FlashcardUpdateResponse(flashcard=FlashcardResponse.model_validate(flashcard))


@router.delete("/{flashcard_id}")
def delete_flashcard(
    flashcard_id: int,
    user: User = Depends(require_user),
    service: FlashcardService = Depends(get_flashcard_service),
):
    try:
        deleted = service.delete_flashcard(flashcard_id, user.id)
    except StorageError:
        logger.exception("Error deleting flashcard %s", flashcard_id)
        raise _internal_error("Failed to delete flashcard")

    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Flashcard deleted successfully"}
