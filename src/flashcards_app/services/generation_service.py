import time

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from flashcards_app.models.generation import Generation
from flashcards_app.models.generation_error_log import ERROR_MESSAGE_MAX, GenerationErrorLog
from flashcards_app.schemas.generation_schemas import GeneratedProposal, GenerationResult
from flashcards_app.services.openrouter_client import OpenRouterClient
from flashcards_app.utils import errors
from flashcards_app.utils.errors import StorageError
from flashcards_app.utils.logging_config import get_logger
from flashcards_app.utils.text import hash_source_text

logger = get_logger("services.generation")


def classify_error(error: BaseException) -> str:
    """Mapeia uma falha para o código gravado em generation_error_logs."""
    code = getattr(error, "error_code", None)
    if code:
        return code

    # Exceções de fora do gateway: classificação pela mensagem
    message = str(error)
    if "timeout" in message:
        return errors.API_TIMEOUT
    if "rate limit" in message:
        return errors.API_RATE_LIMIT
    if "HTTP 401" in message:
        return errors.API_AUTH_ERROR
    if "HTTP 4" in message:
        return errors.HTTP_4XX
    if "HTTP 5" in message:
        return errors.HTTP_5XX
    if "parse" in message or "JSON" in message:
        return errors.INVALID_JSON
    if "Empty response" in message:
        return errors.EMPTY_RESPONSE
    if "Invalid response format" in message:
        return errors.INVALID_FORMAT
    return errors.UNKNOWN_ERROR


class GenerationService:
    """
    Orquestra o client de IA: grava a auditoria da geração (tabela generations)
    e, em caso de falha, um registro em generation_error_logs.

    As propostas são devolvidas SEM salvar flashcards; o aceite vai por
    POST /api/flashcards.
    """

    def __init__(self, session: Session, client: OpenRouterClient):
        self.session = session
        self.client = client

    @property
    def model(self) -> str:
        return self.client.config.model

    def generate_flashcards(self, source_text: str, user_id: int) -> GenerationResult:
        start_time = time.monotonic()

        # Hash e tamanho calculados antes: servem tanto para o sucesso quanto para o log de erro
        source_text_hash = hash_source_text(source_text)
        source_text_length = len(source_text)

        try:
            proposals = self.client.generate_flashcards(source_text)
            duration_ms = int((time.monotonic() - start_time) * 1000)

            generation = self._record_generation(
                user_id=user_id,
                generated_count=len(proposals),
                source_text_hash=source_text_hash,
                source_text_length=source_text_length,
                generation_duration=duration_ms,
            )
        except Exception as e:
            self._log_error(user_id, source_text_hash, source_text_length, e)
            raise

        logger.info(
            "Generation %s: %s proposal(s) in %sms (model=%s, user=%s)",
            generation.id, len(proposals), duration_ms, self.model, user_id,
        )
        return GenerationResult(
            generation_id=generation.id,
            flashcards_proposals=[GeneratedProposal(front=p.front, back=p.back) for p in proposals],
            generated_count=len(proposals),
            generation_duration=duration_ms,
            model=self.model,
        )

    def _record_generation(self, **fields) -> Generation:
        generation = Generation(model=self.model, **fields)
        try:
            self.session.add(generation)
            self.session.commit()
            self.session.refresh(generation)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Failed to create generation record: {e}") from e
        return generation

    def _log_error(self, user_id: int, source_text_hash: str, source_text_length: int, error: Exception) -> None:
        # Best-effort: falha ao gravar o log nunca chega ao chamador.
        # Sessão própria (abre e fecha rapidinho) para não depender do estado da principal.
        message = str(error) or type(error).__name__
        log = GenerationErrorLog(
            user_id=user_id,
            model=self.model,
            source_text_hash=source_text_hash,
            source_text_length=source_text_length,
            error_code=classify_error(error),
            error_message=message[:ERROR_MESSAGE_MAX],
        )
        try:
            with Session(self.session.get_bind()) as log_session:
                log_session.add(log)
                log_session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to log generation error (code=%s)", log.error_code)
