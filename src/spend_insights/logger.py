import logging
import logging.config
import os
import re

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Pipeline stage tags that open a message, e.g. "[INGEST] chase.csv: ..."
STAGE_TAG = re.compile(r"\[[A-Z]+\]")


class ColourizedFormatter(logging.Formatter):
    """
    Colours the level name and the pipeline stage tag of each record.
    """
    GREY = "\x1b[90m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    BOLD_RED = "\x1b[31;1m"
    CYAN = "\x1b[36m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = record.message
        tag = STAGE_TAG.match(message)
        if tag:
            record.message = f"{self.CYAN}{tag.group(0)}{self.RESET}{message[tag.end():]}"
        try:
            return super().formatMessage(record)
        finally:
            record.message = message

    def format(self, record: logging.LogRecord) -> str:
        orig_levelname = record.levelname
        if record.levelno in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[record.levelno]}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = orig_levelname


def _server_logger(handlers: list[str]) -> dict:
    return {"handlers": handlers, "level": "INFO", "propagate": False}


def colour_enabled() -> bool:
    return os.getenv("LOG_COLOR", "1").strip().lower() not in {"0", "false", "no", "off"}


def get_logging_config() -> dict:
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir = os.getenv("LOG_DIR")
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "colour" if colour_enabled() else "plain",
        },
    }
    root_handlers = ["console"]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, "app.log"),
            "formatter": "plain",
        }
        root_handlers.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colour": {
                "()": "spend_insights.logger.ColourizedFormatter",
                "format": LOG_FORMAT,
            },
            "plain": {"format": LOG_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": root_handlers, "level": log_level_name},
            "uvicorn": _server_logger(root_handlers),
            "uvicorn.error": _server_logger(root_handlers),
            "uvicorn.access": _server_logger(root_handlers),
        },
    }


def setup_logging() -> None:
    logging.config.dictConfig(get_logging_config())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
