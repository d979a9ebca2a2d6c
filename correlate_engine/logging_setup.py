"""Loguru file sinks for debug and error logs."""

from pathlib import Path

from loguru import logger


def setup_logger(out_dir: Path) -> None:
    log_dir = Path(out_dir) / "log"
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(log_dir / "debug.log", rotation="100 MB", retention="7 days", level="DEBUG")
    logger.add(log_dir / "error.log", rotation="100 MB", retention="7 days", level="ERROR")
    logger.info("logger initialised")
