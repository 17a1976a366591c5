from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from flashcards_app.models.generation_error_log import GenerationErrorLog
from flashcards_app.schemas.generation_schemas import GenerationResult
from flashcards_app.services.flashcard_service import FlashcardService
from flashcards_app.services.proposal_review import ProposalReview
from flashcards_app.utils.errors import HttpFailure, StorageError

from conftest import SOURCE_TEXT


def test_health(client):
    assert client.get("/").status_code == 200


def test_endpoints_require_authentication(client):
    assert client.post("/api/generations", json={"source_text": SOURCE_TEXT}).status_code == 401
    assert client.get("/api/flashcards").status_code == 401
    assert client.post("/api/flashcards", json={"flashcards": []}).status_code == 401
    assert client.put("/api/flashcards/1", json={"front": "x"}).status_code == 401
    r = client.delete("/api/flashcards/1")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


def test_full_flow(login_as, fake_gateway):
    c = login_as("alice@example.com")

    # 1. gerar propostas
    r = c.post("/api/generations", json={"source_text": SOURCE_TEXT})
    assert r.status_code == 201
    body = r.json()
    assert body["generated_count"] >= 1
    assert all(p["source"] == "ai-full" for p in body["flashcards_proposals"])
    generation_id = body["generation_id"]

    # 2. revisar: aceitar uma, rejeitar outra
    review = ProposalReview.from_generation(GenerationResult.model_validate(body))
    first, second = review.proposals[0].id, review.proposals[1].id
    review.toggle_accept(first)
    review.reject(second)

    r = c.post("/api/flashcards", json=review.to_create_request().model_dump())
    assert r.status_code == 201
    created = r.json()["flashcards"]
    assert len(created) == 1
    card = created[0]
    assert card["generation_id"] == generation_id
    assert card["source"] == "ai-full"

    # 3. listar
    r = c.get("/api/flashcards")
    assert r.status_code == 200
    assert [f["id"] for f in r.json()["data"]] == [card["id"]]
    assert r.json()["pagination"] == {"page": 1, "limit": 1, "total": 1}

    # 4. editar -> ai-edited
    r = c.put(f"/api/flashcards/{card['id']}", json={"front": "Edited question?", "back": "Edited answer."})
    assert r.status_code == 200
    assert r.json()["flashcard"]["source"] == "ai-edited"
    assert r.json()["flashcard"]["front"] == "Edited question?"

    # 5. apagar
    r = c.delete(f"/api/flashcards/{card['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Flashcard deleted successfully"}
    assert c.get("/api/flashcards").json()["data"] == []


def test_generation_validation_error(login_as, fake_gateway):
    c = login_as("alice@example.com")
    r = c.post("/api/generations", json={"source_text": "too short"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert "at least 1000" in body["message"]
    assert body["details"] == {"source_text_length": 9, "min_length": 1000, "max_length": 10000}
    assert fake_gateway.calls == []

    r = c.post("/api/generations", json={"source_text": "x" * 10001})
    assert r.status_code == 400
    assert "no more than 10000" in r.json()["message"]

    r = c.post("/api/generations", json={})
    assert r.status_code == 400
    assert r.json()["error"] == "Validation failed"


def test_generation_failure_returns_500_and_logs(login_as, fake_gateway, engine):
    fake_gateway.error = HttpFailure(503, "<html>upstream secret details</html>")
    c = login_as("alice@example.com")

    r = c.post("/api/generations", json={"source_text": SOURCE_TEXT})

    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "message": "Failed to generate flashcards"}
    assert "upstream" not in r.text
    with Session(engine) as session:
        assert session.exec(select(GenerationErrorLog.error_code)).all() == ["HTTP_5XX"]


def test_manual_card_round_trip(login_as):
    c = login_as("alice@example.com")
    r = c.post("/api/flashcards", json={"flashcards": [
        {"front": "Capital of France?", "back": "Paris", "source": "manual", "generation_id": None},
    ]})
    assert r.status_code == 201
    card = c.get("/api/flashcards").json()["data"][0]
    assert (card["front"], card["back"], card["source"], card["generation_id"]) == (
        "Capital of France?", "Paris", "manual", None,
    )

    r = c.put(f"/api/flashcards/{card['id']}", json={"back": "Paris, on the Seine"})
    assert r.json()["flashcard"]["source"] == "manual"


def test_create_rejects_foreign_or_missing_generation(login_as):
    alice = login_as("alice@example.com")
    bob = login_as("bob@example.com")
    generation_id = alice.post("/api/generations", json={"source_text": SOURCE_TEXT}).json()["generation_id"]

    payload = {"flashcards": [
        {"front": "Q", "back": "A", "source": "ai-full", "generation_id": generation_id},
    ]}
    r = bob.post("/api/flashcards", json=payload)
    assert r.status_code == 404
    assert r.json() == {"error": "Generation not found", "details": {"generation_id": generation_id}}

    payload["flashcards"][0]["generation_id"] = generation_id + 1000
    assert alice.post("/api/flashcards", json=payload).status_code == 404
    assert alice.get("/api/flashcards").json()["data"] == []


def test_create_validation_errors(login_as):
    c = login_as("alice@example.com")
    assert c.post("/api/flashcards", json={"flashcards": []}).status_code == 400
    r = c.post("/api/flashcards", json={"flashcards": [
        {"front": "Q", "back": "A", "source": "ai-full", "generation_id": None},
    ]})
    assert r.status_code == 400
    assert r.json()["error"] == "Validation failed"


def test_cannot_touch_other_users_cards(login_as):
    alice = login_as("alice@example.com")
    bob = login_as("bob@example.com")
    card = alice.post("/api/flashcards", json={"flashcards": [
        {"front": "Q", "back": "A", "source": "manual", "generation_id": None},
    ]}).json()["flashcards"][0]

    r = bob.put(f"/api/flashcards/{card['id']}", json={"front": "mine now"})
    assert r.status_code == 404
    assert r.json() == {"error": "Flashcard not found or access denied"}
    assert bob.delete(f"/api/flashcards/{card['id']}").status_code == 404
    assert bob.get("/api/flashcards").json()["data"] == []
    assert alice.get("/api/flashcards").json()["data"][0]["front"] == "Q"


def test_update_input_errors(login_as):
    c = login_as("alice@example.com")
    assert c.put("/api/flashcards/abc", json={"front": "x"}).status_code == 400
    assert c.put("/api/flashcards/1", json={}).status_code == 400
    assert c.put("/api/flashcards/1", json={"front": "f" * 201}).status_code == 400
    assert c.put("/api/flashcards/1", json={"front": "fine"}).status_code == 404


def test_storage_failure_returns_generic_500(login_as, monkeypatch):
    c = login_as("alice@example.com")

    def broken_commit(self):
        raise SQLAlchemyError("INSERT INTO flashcards (user_id, front) VALUES (1, 'secret-param')")

    monkeypatch.setattr(Session, "commit", broken_commit)
    r = c.post("/api/flashcards", json={"flashcards": [
        {"front": "Q", "back": "A", "source": "manual", "generation_id": None},
    ]})

    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "message": "Failed to create flashcards"}
    assert "INSERT" not in r.text
    assert "secret-param" not in r.text


def test_lookup_failure_on_update_and_delete_is_structured(login_as, monkeypatch):
    c = login_as("alice@example.com")

    def broken_lookup(self, flashcard_id, user_id):
        raise StorageError("Failed to fetch flashcard: db down")

    monkeypatch.setattr(FlashcardService, "get_flashcard_by_id", broken_lookup)

    r = c.delete("/api/flashcards/1")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "message": "Failed to delete flashcard"}

    r = c.put("/api/flashcards/1", json={"front": "x"})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "message": "Failed to update flashcard"}
    assert "db down" not in r.text
