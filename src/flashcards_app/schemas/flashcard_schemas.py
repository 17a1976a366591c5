from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from flashcards_app.models.flashcard import FlashcardSource, SOURCE_MANUAL
from flashcards_app.utils.text import FLASHCARD_BACK_MAX, FLASHCARD_FRONT_MAX

MAX_FLASHCARDS_PER_REQUEST = 50


# Input: um card a ser criado
class FlashcardCreate(BaseModel):
    front: str = Field(min_length=1, max_length=FLASHCARD_FRONT_MAX)
    back: str = Field(min_length=1, max_length=FLASHCARD_BACK_MAX)
    source: FlashcardSource
    generation_id: Optional[int]

    @model_validator(mode="after")
    def check_generation_id(self):
        # Cards de IA exigem generation_id; cards manuais não podem ter
        if (self.source == SOURCE_MANUAL) != (self.generation_id is None):
            raise ValueError(
                "generation_id is required for ai-full/ai-edited source "
                "and must be null for manual source"
            )
        return self


class FlashcardsCreateRequest(BaseModel):
    flashcards: List[FlashcardCreate] = Field(min_length=1, max_length=MAX_FLASHCARDS_PER_REQUEST)


class FlashcardUpdate(BaseModel):
    front: Optional[str] = Field(default=None, min_length=1, max_length=FLASHCARD_FRONT_MAX)
    back: Optional[str] = Field(default=None, min_length=1, max_length=FLASHCARD_BACK_MAX)

    @model_validator(mode="after")
    def check_not_empty(self):
        if self.front is None and self.back is None:
            raise ValueError("At least one of front or back is required")
        return self


# Output: o card que devolvemos para o Frontend
class FlashcardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    front: str
    back: str
    source: FlashcardSource
    generation_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class FlashcardsCreateResponse(BaseModel):
    flashcards: List[FlashcardResponse]


class FlashcardUpdateResponse(BaseModel):
    flashcard: FlashcardResponse


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class FlashcardListResponse(BaseModel):
    data: List[FlashcardResponse]
    pagination: Pagination
