import pytest

from flashcards_app.schemas.generation_schemas import GeneratedProposal, GenerationResult
from flashcards_app.services.proposal_review import ProposalReview


@pytest.fixture
def review():
    result = GenerationResult(
        generation_id=42,
        flashcards_proposals=[
            GeneratedProposal(front="Q1", back="A1"),
            GeneratedProposal(front="Q2", back="A2"),
            GeneratedProposal(front="Q3", back="A3"),
        ],
        generated_count=3,
        generation_duration=1200,
        model="openai/gpt-4.1-mini",
    )
    return ProposalReview.from_generation(result)


def test_from_generation(review):
    assert review.generation_id == 42
    assert len({p.id for p in review.proposals}) == 3
    assert all(p.source == "ai-full" and not p.accepted and not p.editing for p in review.proposals)


def test_toggle_accept(review):
    first = review.proposals[0].id
    review.toggle_accept(first)
    assert review.get(first).accepted is True
    review.toggle_accept(first)
    assert review.get(first).accepted is False


def test_edit_cycle(review):
    pid = review.proposals[1].id
    review.start_edit(pid)
    assert review.get(pid).editing is True
    review.cancel_edit(pid)
    assert review.get(pid).editing is False
    assert review.get(pid).source == "ai-full"

    review.save_edit(pid, "Q2 edited", "A2 edited")
    edited = review.get(pid)
    assert (edited.front, edited.back, edited.source) == ("Q2 edited", "A2 edited", "ai-edited")
    assert edited.accepted is True
    assert edited.editing is False


def test_save_edit_rejects_oversized_text(review):
    pid = review.proposals[0].id
    with pytest.raises(ValueError, match="200"):
        review.save_edit(pid, "f" * 201, "ok")
    with pytest.raises(ValueError, match="500"):
        review.save_edit(pid, "ok", "b" * 501)
    assert review.get(pid).front == "Q1"


def test_rejected_proposal_never_comes_back(review):
    pid = review.proposals[0].id
    review.reject(pid)
    review.reject(pid)
    review.toggle_accept(pid)
    review.save_edit(pid, "again", "again")

    assert review.get(pid) is None
    assert [p.front for p in review.proposals] == ["Q2", "Q3"]
    assert review.stats().total == 2
    assert review.stats().rejected == 0


def test_stats(review):
    a, b, _ = (p.id for p in review.proposals)
    review.toggle_accept(a)
    review.save_edit(b, "Q", "A")
    stats = review.stats()
    assert (stats.total, stats.accepted, stats.edited) == (3, 2, 1)


def test_create_request_uses_accepted_proposals(review):
    a, b, _ = (p.id for p in review.proposals)
    review.toggle_accept(a)
    review.save_edit(b, "Q2 edited", "A2 edited")

    request = review.to_create_request()
    assert [(c.front, c.source, c.generation_id) for c in request.flashcards] == [
        ("Q1", "ai-full", 42),
        ("Q2 edited", "ai-edited", 42),
    ]
    assert len(review.to_create_request(save_all=True).flashcards) == 3


def test_nothing_to_save(review):
    with pytest.raises(ValueError, match="No flashcards to save"):
        review.to_create_request()
