from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from flashcards_app.utils.clock import utcnow

ERROR_MESSAGE_MAX = 1000


class GenerationErrorLog(SQLModel, table=True):
    __tablename__ = "generation_error_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    model: str
    source_text_hash: str = Field(max_length=64)
    source_text_length: int

    # Ex: API_TIMEOUT, HTTP_5XX, INVALID_JSON
    error_code: str = Field(max_length=50)
    error_message: str = Field(max_length=ERROR_MESSAGE_MAX)

    created_at: datetime = Field(default_factory=utcnow)
