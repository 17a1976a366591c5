from sqlmodel import SQLModel, Session, create_engine
from flashcards_app.utils.config import settings

# IMPORTANTE: Importe os modelos aqui para registrá-los no SQLModel
from flashcards_app.models.user import User, AuthSession
from flashcards_app.models.generation import Generation
from flashcards_app.models.generation_error_log import GenerationErrorLog
from flashcards_app.models.flashcard import Flashcard

# check_same_thread só existe no SQLite
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=False
)

def init_db():
    SQLModel.metadata.create_all(engine)

def get_session():
    with Session(engine) as session:
        yield session
