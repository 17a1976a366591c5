import json
import re
import time
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from flashcards_app.schemas.generation_schemas import FlashcardProposal, ProposalDraft
from flashcards_app.utils.errors import (
    EMPTY_RESPONSE,
    INVALID_FORMAT,
    INVALID_JSON,
    ConfigurationError,
    GatewayConnectionError,
    GatewayError,
    GatewayTimeout,
    HttpFailure,
    InvalidResponse,
)
from flashcards_app.utils.logging_config import get_logger
from flashcards_app.utils.text import FLASHCARD_BACK_MAX, FLASHCARD_FRONT_MAX

logger = get_logger("services.openrouter")

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "openai/gpt-4.1-mini"
PLACEHOLDER_API_KEY = "your_openrouter_api_key_here"

_CODE_FENCE = re.compile(r"```(?:json)?\n?")

# ---------------------------------------------------------
# CONFIGURAÇÃO (imutável; "setters" devolvem um client novo)
# ---------------------------------------------------------

class ModelParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float = 0.7
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    max_tokens: Optional[int] = None


class OpenRouterConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    timeout: float = Field(default=60.0, gt=0)  # segundos
    max_retries: int = Field(default=2, ge=1)  # total de tentativas
    retry_delay: float = Field(default=1.0, ge=0)  # base do backoff, segundos
    parameters: ModelParameters = ModelParameters()
    referer: str = "https://10xcards.app"
    title: str = "10xCards"


class OpenRouterClient:
    """
    Client do gateway OpenRouter: monta o prompt, faz o POST com retry e
    transforma a resposta do LLM em propostas de flashcard validadas.

    Só 5xx e 429 (e falhas de rede) são repetidos, com backoff exponencial
    (retry_delay * 2^(tentativa-1)). Timeout nunca é repetido.
    """

    def __init__(self, config: OpenRouterConfig):
        if not config.api_key or config.api_key == PLACEHOLDER_API_KEY:
            raise ConfigurationError("OPENROUTER_API_KEY not configured")
        self._config = config

    @classmethod
    def from_settings(cls, settings, model: Optional[str] = None) -> "OpenRouterClient":
        return cls(OpenRouterConfig(
            api_key=settings.OPENROUTER_API_KEY,
            api_url=settings.OPENROUTER_API_URL,
            model=model or settings.OPENROUTER_MODEL,
            timeout=settings.OPENROUTER_TIMEOUT,
            max_retries=settings.OPENROUTER_MAX_RETRIES,
            referer=settings.APP_URL,
            title=settings.APP_TITLE,
        ))

    @property
    def config(self) -> OpenRouterConfig:
        return self._config

    def with_model(self, model: str, **parameters: Any) -> "OpenRouterClient":
        merged = self._config.parameters.model_dump()
        merged.update(parameters)
        return self._reconfigured(model=model, parameters=ModelParameters.model_validate(merged))

    def with_timeout(self, seconds: float) -> "OpenRouterClient":
        return self._reconfigured(timeout=seconds)

    def with_max_retries(self, retries: int) -> "OpenRouterClient":
        return self._reconfigured(max_retries=retries)

    def _reconfigured(self, **changes: Any) -> "OpenRouterClient":
        # model_validate de novo para aplicar os limites (gt/ge) dos campos
        data = self._config.model_dump()
        data.update(changes)
        return type(self)(OpenRouterConfig.model_validate(data))

    # ---------------------------------------------------------
    # API pública
    # ---------------------------------------------------------

    def generate_flashcards(self, source_text: str) -> List[FlashcardProposal]:
        prompt = self.build_prompt(source_text)
        payload = self.build_payload(prompt)
        api_response = self._execute_request(payload)
        return parse_proposals(api_response)

    def build_prompt(self, source_text: str) -> str:
        return f"""Generate flashcards from the following text. Create 3-5 high-quality flashcards.

Requirements:
- Each flashcard must have a "front" (question) and "back" (answer)
- Front text must be {FLASHCARD_FRONT_MAX} characters or less
- Back text must be {FLASHCARD_BACK_MAX} characters or less
- Focus on key concepts, definitions, and important facts
- Make questions clear and specific
- Provide comprehensive but concise answers

Return ONLY a valid JSON array with this exact structure:
[
  {{"front": "question here", "back": "answer here"}},
  {{"front": "question here", "back": "answer here"}}
]

Source text:
{source_text}"""

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        params = self._config.parameters
        payload: Dict[str, Any] = {
            "model": self._config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": params.temperature,
            "top_p": params.top_p,
            "frequency_penalty": params.frequency_penalty,
            "presence_penalty": params.presence_penalty,
        }
        if params.max_tokens is not None:
            payload["max_tokens"] = params.max_tokens
        return payload

    # ---------------------------------------------------------
    # HTTP (com Retry)
    # ---------------------------------------------------------

    def _execute_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        attempt = 1
        while True:
            try:
                return self._send(payload)
            except GatewayError as e:
                e.attempts = attempt
                if attempt >= self._config.max_retries or not e.retryable:
                    raise
                delay = self._config.retry_delay * 2 ** (attempt - 1)
                logger.warning(
                    "OpenRouter attempt %s/%s failed (%s). Retrying in %.1fs...",
                    attempt, self._config.max_retries, e, delay,
                )
                time.sleep(delay)
                attempt += 1

    def _send(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Um único POST. O `timeout` do requests vale para cada espera de
        conexão/leitura, não para a requisição inteira: uma resposta que chega
        aos pouquinhos pode passar do total configurado.
        """
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._config.referer,
            "X-Title": self._config.title,
        }

        logger.debug("POST %s (model=%s)", self._config.api_url, self._config.model)
        try:
            response = requests.post(
                self._config.api_url,
                headers=headers,
                json=payload,
                timeout=self._config.timeout,
            )
        except requests.Timeout as e:
            raise GatewayTimeout(self._config.timeout) from e
        except requests.ConnectionError as e:
            raise GatewayConnectionError(str(e)) from e

        # `response.ok` aceita 3xx; aqui só 2xx conta como sucesso
        if not 200 <= response.status_code < 300:
            raise HttpFailure(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponse(
                "Failed to parse API response body as JSON", response.text, code=INVALID_JSON
            ) from e


# ---------------------------------------------------------
# Validação da resposta do LLM
# ---------------------------------------------------------

def strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = _CODE_FENCE.sub("", text).strip()
    return text


def _message_content(api_response: Any) -> Optional[str]:
    try:
        content = api_response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


def parse_proposals(api_response: Any) -> List[FlashcardProposal]:
    """
    Extrai o conteúdo da primeira choice e converte em propostas.

    Campos grandes demais são truncados (front 200 / back 500), não rejeitados.
    Qualquer item sem front/back não vazio invalida a resposta inteira, com o
    índice do item na mensagem.
    """
    content = _message_content(api_response)
    if not content:
        raise InvalidResponse("Empty response from OpenRouter API", code=EMPTY_RESPONSE)

    json_content = strip_code_fence(content)
    try:
        data = json.loads(json_content)
    except ValueError:
        raise InvalidResponse("Failed to parse AI response as JSON", json_content, code=INVALID_JSON)

    if not isinstance(data, list) or not data:
        raise InvalidResponse(
            "Invalid response format: expected non-empty array", json_content, code=INVALID_FORMAT
        )

    proposals = []
    for index, item in enumerate(data):
        try:
            draft = ProposalDraft.model_validate(item)
        except ValidationError:
            raise InvalidResponse(
                f"Invalid proposal at index {index}: missing front or back",
                json.dumps(item),
                code=INVALID_FORMAT,
            )
        proposals.append(FlashcardProposal(
            front=draft.front[:FLASHCARD_FRONT_MAX],
            back=draft.back[:FLASHCARD_BACK_MAX],
        ))
    return proposals
