from typing import Optional

# Códigos gravados em generation_error_logs.error_code
API_TIMEOUT = "API_TIMEOUT"
API_RATE_LIMIT = "API_RATE_LIMIT"
API_AUTH_ERROR = "API_AUTH_ERROR"
HTTP_4XX = "HTTP_4XX"
HTTP_5XX = "HTTP_5XX"
INVALID_JSON = "INVALID_JSON"
EMPTY_RESPONSE = "EMPTY_RESPONSE"
INVALID_FORMAT = "INVALID_FORMAT"
UNKNOWN_ERROR = "UNKNOWN_ERROR"

SNIPPET_LENGTH = 200


class FlashcardsAppError(Exception):
    pass


class ConfigurationError(FlashcardsAppError):
    """Configuração inválida (ex: API key ausente). Falha na construção, não no request."""


class StorageError(FlashcardsAppError):
    pass


class AuthError(FlashcardsAppError):
    pass


class GatewayError(FlashcardsAppError):
    """
    Base das falhas do gateway de IA.

    `retryable` diz se a falha é transitória; `attempts` é o total de chamadas
    HTTP feitas até a falha ser propagada. Com os dois o chamador distingue
    "retry esgotado" de "falha definitiva" sem depender da subclasse.
    """

    error_code = UNKNOWN_ERROR
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.attempts = 1


class GatewayTimeout(GatewayError):
    error_code = API_TIMEOUT

    def __init__(self, timeout: float):
        super().__init__(f"Request timeout after {int(timeout * 1000)}ms")
        self.timeout = timeout


class GatewayConnectionError(GatewayError):
    retryable = True

    def __init__(self, reason: str):
        super().__init__(f"Network error: {reason}")


class HttpFailure(GatewayError):
    def __init__(self, status: int, body: str):
        # O corpo completo fica em `body`; a mensagem carrega só um prefixo
        super().__init__(f"HTTP {status}: {body[:SNIPPET_LENGTH]}")
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status >= 500 or self.status == 429

    @property
    def error_code(self) -> str:
        if self.status == 429:
            return API_RATE_LIMIT
        if self.status == 401:
            return API_AUTH_ERROR
        if 400 <= self.status < 500:
            return HTTP_4XX
        if self.status >= 500:
            return HTTP_5XX
        return UNKNOWN_ERROR


class InvalidResponse(GatewayError):
    def __init__(self, message: str, response: Optional[str] = None, code: str = INVALID_FORMAT):
        super().__init__(message)
        self.response = response[:SNIPPET_LENGTH] if response is not None else None
        self.error_code = code
