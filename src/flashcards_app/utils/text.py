import hashlib
from typing import Optional

from pydantic import BaseModel

SOURCE_TEXT_MIN = 1000
SOURCE_TEXT_MAX = 10000
FLASHCARD_FRONT_MAX = 200
FLASHCARD_BACK_MAX = 500


class TextValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None


def validate_source_text(text: str) -> TextValidationResult:
    """Valida o tamanho do texto-fonte (limites inclusivos)."""
    if len(text) < SOURCE_TEXT_MIN:
        return TextValidationResult(
            is_valid=False,
            error=f"Text must be at least {SOURCE_TEXT_MIN} characters (current: {len(text)})",
        )
    if len(text) > SOURCE_TEXT_MAX:
        return TextValidationResult(
            is_valid=False,
            error=f"Text must be no more than {SOURCE_TEXT_MAX} characters (current: {len(text)})",
        )
    return TextValidationResult(is_valid=True)


def hash_source_text(text: str) -> str:
    # SHA-256 usado para auditoria/deduplicação; o texto nunca é salvo
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
