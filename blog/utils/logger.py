# ----------------------
# file   : blog/utils/logger.py
# function: logging setup and shared logger instance
# ----------------------

import logging
import sys

from blog.core.config import settings

# ----------------------
# function: log line format
# ----------------------
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# ----------------------
# param   : name - logger name
# param   : level - LOG_LEVEL setting (DEBUG, INFO, WARNING, ERROR, CRITICAL)
# function: logger with one stdout handler
# return  : logging.Logger
# ----------------------
def get_logger(name: str = "blog-server", level: str = settings.LOG_LEVEL) -> logging.Logger:
    log = logging.getLogger(name)
    log.setLevel(level)

    # avoid duplicate handlers on reload
    if not log.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        log.addHandler(console_handler)
    return log


logger = get_logger()
