from typing import List, Literal

from pydantic import BaseModel, Field, StrictStr


# Input
class GenerateFlashcardsRequest(BaseModel):
    # Limites checados em validate_source_text para devolver a mensagem certa
    source_text: str


# Formato esperado de cada item vindo do LLM (antes do truncamento)
class ProposalDraft(BaseModel):
    front: StrictStr = Field(min_length=1)
    back: StrictStr = Field(min_length=1)


class FlashcardProposal(BaseModel):
    front: str
    back: str


class GeneratedProposal(FlashcardProposal):
    source: Literal["ai-full"] = "ai-full"


# Output: propostas NÃO salvas + id da geração para o aceite posterior
class GenerationResult(BaseModel):
    generation_id: int
    flashcards_proposals: List[GeneratedProposal]
    generated_count: int
    generation_duration: int
    model: str
