import logging
import sys
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler")


class ISO8601Formatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        dt: datetime = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.isoformat(timespec="seconds").replace("+00:00", "Z")


def setup_logging(
    log_level: int | str = logging.INFO,
    log_to_file: bool = False,
    log_dir: str = "logs",
    log_base_filename: str = "site_monitor",
    when: str = "midnight",
    backup_count: int = 7,
):
    if isinstance(log_level, str):
        log_level = LOG_LEVEL_MAP.get(log_level.upper(), logging.INFO)

    formatter = ISO8601Formatter(fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        # File handler (rotating daily)
        if log_to_file:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            file_path = f"{log_dir}/{log_base_filename}.log"

            rotating_handler = TimedRotatingFileHandler(
                filename=file_path,
                when=when,
                interval=1,
                backupCount=backup_count,
                encoding="utf-8",
                utc=True,
            )
            rotating_handler.setFormatter(formatter)
            root_logger.addHandler(rotating_handler)

    quiet_third_party_logs()


def quiet_third_party_logs(level: int = logging.WARNING):
    """Lower library loggers that log every request or scheduler tick."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)
