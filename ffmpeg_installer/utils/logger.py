import logging
import sys

from ffmpeg_installer.utils.config import LOG_LEVEL


def setup_logger():
    """Sets up the installer logger that outputs to console."""
    logger = logging.getLogger("ffmpeg_installer")
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    # Avoid adding multiple handlers if setup is called multiple times
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        # Format: [TIME] [LEVEL] Message
        formatter = logging.Formatter('[%(asctime)s] [%(levelname)s] %(message)s', datefmt='%H:%M:%S')
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def set_verbose(enabled=True):
    log.setLevel(logging.DEBUG if enabled else getattr(logging, LOG_LEVEL, logging.INFO))


log = setup_logger()
