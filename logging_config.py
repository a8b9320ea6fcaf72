"""
Structured logging configuration for the Elcorp quotation service.
Import and call setup_logging() once at app startup.
"""
import logging
import logging.handlers
import os
import json
from datetime import datetime, timezone

DATA_DIR = os.environ.get("QUOTEGEN_DATA_DIR") or os.path.join(os.path.dirname(__file__), "data")
LOG_DIR = os.path.join(DATA_DIR, "logs")
LOG_FILE = "quotegen.log"

EXTRA_KEYS = ("route", "method", "status", "duration_ms", "quote_id", "client", "items")


def _utcnow():
    return datetime.now(timezone.utc)


class JSONFormatter(logging.Formatter):
    """Structured JSON log lines for machine parsing."""
    def format(self, record):
        entry = {
            "ts": _utcnow().strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        # Merge extra fields
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Readable console format with color."""
    COLORS = {
        "DEBUG": "\033[36m", "INFO": "\033[32m",
        "WARNING": "\033[33m", "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, "")
        ts = _utcnow().strftime("%H:%M:%S")
        line = f"{color}{ts} [{record.levelname[0]}] {record.name}: {record.getMessage()}{self.RESET}"
        if record.exc_info and record.exc_info[0]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _env_true(name):
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def setup_logging(level=None, json_logs=None, log_dir=None):
    """
    Configure logging for the full application.

    Args:
        level: Override log level (default: from LOG_LEVEL env or INFO)
        json_logs: Force JSON format (default: QUOTEGEN_JSON_LOGS env)
        log_dir: Rotating log file directory (default: <data dir>/logs;
                 "" disables file logging)
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if json_logs is None:
        json_logs = _env_true("QUOTEGEN_JSON_LOGS")
    if log_dir is None:
        log_dir = LOG_DIR

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    # Console handler
    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs else HumanFormatter())
    root.addHandler(console)

    # File handler — rotates at 5MB, keeps 5 backups
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                os.path.join(log_dir, LOG_FILE),
                maxBytes=5_000_000, backupCount=5,
            )
            fh.setFormatter(JSONFormatter())
            root.addHandler(fh)
        except OSError:
            pass  # read-only deploys: console only

    # Quiet noisy libs
    for name in ("urllib3", "werkzeug", "PIL", "reportlab"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("quotegen").info("Logging initialized (level=%s, json=%s)",
                                       level, bool(json_logs))
