import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure le logger racine de l'application (console uniquement).

    Les loggers uvicorn sont alignés sur le même niveau pour garder une
    sortie homogène en dev comme en prod.
    """
    level = getattr(logging, (log_level or "INFO").upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logger = logging.getLogger("learnlang")
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)

    # SQLAlchemy est très bavard en DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger
