import sys
from pathlib import Path
from loguru import logger

# Local clock throughout: the daily file name, its midnight rotation and the line stamps agree.
FILE_FORMAT = "[{time:YYYY-MM-DD[T]HH:mm:ss.SSSZ}] [{level}] {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
LOG_FILE_PATTERN = "run-{time:YYYY-MM-DD}.log"


def setup_logging(log_dir: Path, level: str = "INFO") -> int:
    """
    Configure loguru: colored console on stderr + one append-only file per day.

    The file sink rotates at midnight, so a run crossing it continues in
    the new day's file. Returns the file sink id.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True,
    )

    return logger.add(
        str(log_dir / LOG_FILE_PATTERN),
        format=FILE_FORMAT,
        level=level,
        rotation="00:00",
        mode="a",
        encoding="utf-8",
    )
