from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./flashcards.db"

    # OpenRouter (gateway de LLM)
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    OPENROUTER_MODEL: str = "openai/gpt-4.1-mini"
    OPENROUTER_TIMEOUT: float = 60.0
    OPENROUTER_MAX_RETRIES: int = 2

    # Enviados nos headers HTTP-Referer / X-Title
    APP_URL: str = "https://10xcards.app"
    APP_TITLE: str = "10xCards"

    # Sessão (cookie)
    SESSION_COOKIE_NAME: str = "session"
    SESSION_TTL_DAYS: int = 7
    COOKIE_SECURE: bool = False

    LOG_LEVEL: str = "INFO"


settings = Settings()
