# canteen/utils/logging.py
import logging

from canteen.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
_configured = False


def _configure():
    global _configured
    if _configured:
        return
    logging.basicConfig(level=LOG_LEVEL, format=_FORMAT)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    _configure()
    return logging.getLogger(name)
