import logging
import sys

from app.core.config import settings
from app.core.request_context import get_request_id


class RequestIDFilter(logging.Filter):
    def filter(self, record):
        record.request_id = get_request_id()
        return True


def configure_logging():
    handler = logging.StreamHandler(sys.stdout)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | request_id=%(request_id)s | %(message)s"
    )

    handler.setFormatter(formatter)
    handler.addFilter(RequestIDFilter())

    logger = logging.getLogger()
    logger.setLevel(settings.LOG_LEVEL)
    logger.handlers = [handler]
