import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


def init_logger(home: Path, level: str = "INFO") -> Path:
    """
    Send log records to a rotating file under the application directory.

    The terminal belongs to the TUI, so nothing is logged to stdout/stderr.
    """
    log_dir = Path(home) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "l2chat.log"

    handler = RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )
    return log_path
