from datetime import datetime
from typing import Literal, Optional

from sqlmodel import SQLModel, Field

from flashcards_app.utils.clock import utcnow

SOURCE_AI_FULL = "ai-full"
SOURCE_AI_EDITED = "ai-edited"
SOURCE_MANUAL = "manual"

FlashcardSource = Literal["ai-full", "ai-edited", "manual"]


class Flashcard(SQLModel, table=True):
    __tablename__ = "flashcards"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    front: str = Field(max_length=200)
    back: str = Field(max_length=500)

    # "ai-full" (IA sem edição), "ai-edited" (IA editada) ou "manual"
    source: str = Field(default=SOURCE_MANUAL, max_length=20)

    # Preenchido só para cards de IA
    generation_id: Optional[int] = Field(default=None, foreign_key="generations.id")

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
