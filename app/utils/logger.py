import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.utils.prometheus_metrics import record_log

LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class PrometheusLogHandler(logging.Handler):
    """Counts log records per level in Prometheus."""

    def emit(self, record: logging.LogRecord) -> None:
        record_log(record.levelname)


def _build_logger() -> logging.Logger:
    log = logging.getLogger("arw")
    if log.handlers:
        return log

    log.setLevel(logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    log.addHandler(console)

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)
    except OSError as e:
        log.warning(f"Could not open log file {LOG_FILE}: {e}")

    log.addHandler(PrometheusLogHandler())
    log.propagate = False
    return log


logger = _build_logger()
