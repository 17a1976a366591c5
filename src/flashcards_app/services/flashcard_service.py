from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from flashcards_app.models.flashcard import Flashcard, SOURCE_AI_EDITED, SOURCE_AI_FULL
from flashcards_app.models.generation import Generation
from flashcards_app.schemas.flashcard_schemas import FlashcardCreate
from flashcards_app.utils.clock import utcnow
from flashcards_app.utils.errors import StorageError
from flashcards_app.utils.logging_config import get_logger

logger = get_logger("services.flashcard")


class FlashcardService:
    """CRUD de flashcards. Toda leitura/escrita é filtrada pelo user_id do dono."""

    def __init__(self, session: Session):
        self.session = session

    def create_flashcards(self, flashcards: Sequence[FlashcardCreate], user_id: int) -> List[Flashcard]:
        rows = [Flashcard(**fc.model_dump(), user_id=user_id) for fc in flashcards]
        if not rows:
            raise StorageError("Failed to create flashcards: No data returned")

        # Um único commit para o lote inteiro
        try:
            self.session.add_all(rows)
            self.session.commit()
            for row in rows:
                self.session.refresh(row)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to create flashcards: {e}") from e

        logger.info("Created %s flashcard(s) for user %s", len(rows), user_id)
        return rows

    def verify_generation_ownership(self, generation_id: int, user_id: int) -> bool:
        """
        True só se a geração existe E pertence ao usuário.
        Inexistente e de outro usuário são indistinguíveis para o chamador.
        """
        statement = (
            select(Generation.id)
            .where(Generation.id == generation_id)
            .where(Generation.user_id == user_id)
        )
        try:
            return self.session.exec(statement).first() is not None
        except SQLAlchemyError:
            logger.exception("Ownership check failed for generation %s", generation_id)
            return False

    def get_flashcards(self, user_id: int) -> List[Flashcard]:
        statement = (
            select(Flashcard)
            .where(Flashcard.user_id == user_id)
            .order_by(Flashcard.created_at.desc(), Flashcard.id.desc())
        )
        try:
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to fetch flashcards: {e}") from e

    def get_flashcard_by_id(self, flashcard_id: int, user_id: int) -> Optional[Flashcard]:
        statement = (
            select(Flashcard)
            .where(Flashcard.id == flashcard_id)
            .where(Flashcard.user_id == user_id)
        )
        try:
            return self.session.exec(statement).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to fetch flashcard: {e}") from e

    def update_flashcard(
        self,
        flashcard_id: int,
        user_id: int,
        front: Optional[str] = None,
        back: Optional[str] = None,
    ) -> Optional[Flashcard]:
        flashcard = self.get_flashcard_by_id(flashcard_id, user_id)
        if flashcard is None:
            return None

        if front is not None:
            flashcard.front = front
        if back is not None:
            flashcard.back = back

        # Qualquer edição num card "ai-full" vira "ai-edited" (sem volta).
        # "manual" e "ai-edited" não mudam.
        if flashcard.source == SOURCE_AI_FULL and (front is not None or back is not None):
            flashcard.source = SOURCE_AI_EDITED
        flashcard.updated_at = utcnow()

        try:
            self.session.add(flashcard)
            self.session.commit()
            self.session.refresh(flashcard)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to update flashcard: {e}") from e
        return flashcard

    def delete_flashcard(self, flashcard_id: int, user_id: int) -> bool:
        flashcard = self.get_flashcard_by_id(flashcard_id, user_id)
        if flashcard is None:
            return False

        try:
            self.session.delete(flashcard)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to delete flashcard: {e}") from e
        return True
