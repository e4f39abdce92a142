import logging
import sys

from config import settings

# Third-party clients that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "deepgram")


def configure_logging() -> logging.Logger:
    """Sets up the application logger once; repeated calls return the same logger."""
    cfg = settings.config
    logger = logging.getLogger(cfg.APP_NAME)
    logger.setLevel(cfg.LOG_LEVEL)

    if logger.hasHandlers():
        return logger

    # Format: Time | Level | Module | Message
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(cfg.LOG_LEVEL)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging initialized at {cfg.LOG_LEVEL}")
    return logger


logger = configure_logging()
