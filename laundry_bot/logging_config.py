import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
# Third-party loggers kept at WARNING unless the bot runs at DEBUG.
NOISY_LOGGERS = ("discord", "discord.client", "discord.gateway", "httpx")


def resolve_level(name: str | int | None) -> int:
    """Map ``"debug"``/``"INFO"``/``10`` to a logging level, INFO by default."""
    if isinstance(name, int):
        return name
    if not name:
        return logging.INFO
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: str | int | None = logging.INFO) -> logging.Logger:
    logger = logging.getLogger("laundry")
    if logger.handlers:
        return logger  # already configured
    resolved = resolve_level(level)
    logger.setLevel(resolved)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    if resolved > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return logger
