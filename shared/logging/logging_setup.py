from datetime import datetime
from pytz import timezone
import logging.config
import logging
import os


_ANSI_RESET = "\033[0m"
_COLOR_MAP: dict[str, str] = {
    "cyan":    "\033[36m",
    "green":   "\033[32m",
    "yellow":  "\033[33m",
    "red":     "\033[31m",
    "magenta": "\033[35m",
    "blue":    "\033[34m",
}

_LEVEL_PREFIX = {
    logging.CRITICAL: "⛔ ",
    logging.ERROR: "⛔ ",
    logging.WARNING: "⚠️ ",
}

# env vars whose values must never reach a log line
_SECRET_ENV_KEYS = ("EMBED_GEMINI_API_KEY", "LLM_GEMINI_API_KEY", "KNOWLEDGE_FIRESTORE_API_KEY", "APP_API_KEY")


def _get_loglevel() -> int:
    return logging.DEBUG if os.getenv("LOG_LEVEL", "info").lower() == "debug" else logging.INFO


class ApiKeyRedactFilter(logging.Filter):
    """Mask configured API keys, e.g. the ``key=`` parameter of Gemini and Firebase URLs."""

    def __init__(self, name: str = "") -> None:
        super().__init__(name)
        self._secrets = [value for value in (os.getenv(key) for key in _SECRET_ENV_KEYS) if value]

    def filter(self, record):
        if not self._secrets:
            return True
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        masked = message
        for secret in self._secrets:
            masked = masked.replace(secret, "***")
        if masked != message:
            record.msg = masked
            record.args = ()
        return True


class CustomFormatter(logging.Formatter):
    """Renders timestamps in a fixed timezone and prefixes warnings and errors with an emoji."""

    def __init__(self, tz_name, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()

    def format(self, record):
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # broken %-args from a third-party logger, drop the line
            return ""
        record.msg = _LEVEL_PREFIX.get(record.levelno, "") + message
        record.args = ()
        return super().format(record)


class ColoredFormatter(CustomFormatter):
    """Console formatter honouring the ``color`` attribute set by :class:`ColorLogger`."""

    def format(self, record) -> str:
        line = super().format(record)
        ansi = _COLOR_MAP.get(getattr(record, "color", None) or "", "")
        return f"{ansi}{line}{_ANSI_RESET}" if line and ansi else line


class ColorLogger(logging.LoggerAdapter):
    """Logger adapter accepting an optional ``color=`` keyword on every log call.

    Usage::

        logger.info("plain message")
        logger.info("sync finished", color="green")

    The color only reaches the console handler; the file handler writes plain text.
    """

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def process(self, msg, kwargs):
        color = kwargs.pop("color", None)
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        return msg, kwargs


def setup_logging(log_file_name: str = "app.log") -> ColorLogger:
    """Configure console and rotating file logging and return the application logger.

    Log files go to ``$ROOT_DIR/logs`` (current directory when ROOT_DIR is
    unset); timestamps are rendered in ``$TIMEZONE``.
    """
    log_dir = os.path.join(os.getenv("ROOT_DIR", os.getcwd()), "logs")
    tz_name = os.getenv("TIMEZONE", "Asia/Tokyo")
    loglevel = _get_loglevel()
    os.makedirs(log_dir, exist_ok=True)

    line_format = "%(asctime)s - %(levelname)s - %(message)s"
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "redact": {"()": ApiKeyRedactFilter},
        },
        "formatters": {
            "standard": {"()": CustomFormatter, "format": line_format, "datefmt": "%Y-%m-%d %H:%M:%S", "tz_name": tz_name},
            "colored": {"()": ColoredFormatter, "format": line_format, "datefmt": "%Y-%m-%d %H:%M:%S", "tz_name": tz_name},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "colored",
                "filters": ["redact"],
                "level": loglevel,
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filters": ["redact"],
                "level": loglevel,
                "filename": os.path.join(log_dir, log_file_name),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 3,
                "encoding": "utf-8",
            },
        },
        "root": {
            "handlers": ["console", "file"],
            "level": loglevel,
        },
    }

    logging.config.dictConfig(logging_config)

    # httpx logs every request URL, including the ?key= parameter
    logging.getLogger("httpx").setLevel(logging.DEBUG if loglevel == logging.DEBUG else logging.WARNING)

    return ColorLogger(logging.getLogger("blog_mentor"))
