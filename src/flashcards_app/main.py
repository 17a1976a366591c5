from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flashcards_app.api import auth, flashcards, generations
from flashcards_app.db.session import init_db
from flashcards_app.utils.config import settings
from flashcards_app.utils.logging_config import setup_logging

# Evento para criar tabelas ao iniciar
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    init_db()
    yield

app = FastAPI(lifespan=lifespan)

app.include_router(auth.router)
app.include_router(generations.router)
app.include_router(flashcards.router)


# Erros sempre no formato {"error": ...}, nunca o {"detail": ...} padrão
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


# Validação de input é 400 (não o 422 do FastAPI)
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


@app.get("/")
def read_root():
    return {"status": "Flashcards API is running 🚀"}
