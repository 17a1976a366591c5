import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from flashcards_app.schemas.flashcard_schemas import FlashcardCreate, FlashcardsCreateRequest
from flashcards_app.schemas.generation_schemas import GenerationResult
from flashcards_app.utils.text import FLASHCARD_BACK_MAX, FLASHCARD_FRONT_MAX


class ProposalViewModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    front: str
    back: str
    source: Literal["ai-full", "ai-edited"] = "ai-full"
    accepted: bool = False
    editing: bool = False


class ProposalStats(BaseModel):
    total: int
    accepted: int
    edited: int
    # Rejeitadas saem da lista, então é sempre 0
    rejected: int = 0


class ProposalReview:
    """
    Estado de revisão das propostas (o que o navegador guarda em memória):
    aceitar, editar, rejeitar e montar o payload de POST /api/flashcards.
    """

    def __init__(self, generation_id: Optional[int], proposals: List[ProposalViewModel]):
        self.generation_id = generation_id
        self.proposals = proposals

    @classmethod
    def from_generation(cls, result: GenerationResult) -> "ProposalReview":
        return cls(
            generation_id=result.generation_id,
            proposals=[ProposalViewModel(front=p.front, back=p.back) for p in result.flashcards_proposals],
        )

    def get(self, proposal_id: str) -> Optional[ProposalViewModel]:
        return next((p for p in self.proposals if p.id == proposal_id), None)

    def _replace(self, proposal_id: str, **changes) -> None:
        self.proposals = [
            p.model_copy(update=changes) if p.id == proposal_id else p
            for p in self.proposals
        ]

    def toggle_accept(self, proposal_id: str) -> None:
        proposal = self.get(proposal_id)
        if proposal is not None:
            self._replace(proposal_id, accepted=not proposal.accepted)

    def start_edit(self, proposal_id: str) -> None:
        self._replace(proposal_id, editing=True)

    def cancel_edit(self, proposal_id: str) -> None:
        self._replace(proposal_id, editing=False)

    def save_edit(self, proposal_id: str, front: str, back: str) -> None:
        if len(front) > FLASHCARD_FRONT_MAX:
            raise ValueError(f"Front text must be no more than {FLASHCARD_FRONT_MAX} characters")
        if len(back) > FLASHCARD_BACK_MAX:
            raise ValueError(f"Back text must be no more than {FLASHCARD_BACK_MAX} characters")

        # Editar já aceita a proposta
        self._replace(
            proposal_id, front=front, back=back, source="ai-edited", editing=False, accepted=True
        )

    def reject(self, proposal_id: str) -> None:
        self.proposals = [p for p in self.proposals if p.id != proposal_id]

    def stats(self) -> ProposalStats:
        return ProposalStats(
            total=len(self.proposals),
            accepted=sum(1 for p in self.proposals if p.accepted),
            edited=sum(1 for p in self.proposals if p.source == "ai-edited"),
        )

    def to_create_request(self, save_all: bool = False) -> FlashcardsCreateRequest:
        to_save = self.proposals if save_all else [p for p in self.proposals if p.accepted]
        if not to_save:
            raise ValueError("No flashcards to save")

        return FlashcardsCreateRequest(flashcards=[
            FlashcardCreate(
                front=p.front,
                back=p.back,
                source=p.source,
                generation_id=self.generation_id,
            )
            for p in to_save
        ])
