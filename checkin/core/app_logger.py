import logging

from checkin.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging() -> logging.Logger:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logger = logging.getLogger("checkin")
    logger.setLevel(level)

    # Evita handlers duplicados si se llama más de una vez
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        ch.setLevel(level)
        logger.addHandler(ch)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger("checkin")
    if not name:
        return base
    # "checkin.services.issuer" -> hijo "services.issuer"
    if name.startswith("checkin."):
        name = name[len("checkin."):]
    return base.getChild(name)
