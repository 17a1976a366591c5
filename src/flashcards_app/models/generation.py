from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from flashcards_app.utils.clock import utcnow


class Generation(SQLModel, table=True):
    __tablename__ = "generations"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    # Qual modelo foi usado (ex: openai/gpt-4.1-mini)
    model: str
    generated_count: int

    # Só hash + tamanho; o texto-fonte nunca é gravado
    source_text_hash: str = Field(max_length=64)
    source_text_length: int

    # Duração em milissegundos (relógio de parede)
    generation_duration: int

    created_at: datetime = Field(default_factory=utcnow)
