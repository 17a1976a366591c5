import logging

ROOT_LOGGER = "flashcards_app"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configura o handler raiz uma única vez, no startup da app."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger(ROOT_LOGGER).setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
