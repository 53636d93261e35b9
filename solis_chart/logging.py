import logging
import sys


def setup_logging(level: str = "INFO", debug: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Configure the root logger once at process start.
    """
    resolved = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)
    if quiet:
        resolved = logging.WARNING

    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    return logging.getLogger("solis_chart")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
