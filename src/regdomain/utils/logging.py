"""JSON logging setup shared by the API and the build command."""
import logging
import sys
from pythonjsonlogger import jsonlogger
from regdomain.config import settings


def setup_logging() -> None:
    """Configure structured JSON logging on stdout."""
    logger = logging.getLogger()
    
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d',
        datefmt='%Y-%m-%dT%H:%M:%S%z',
        rename_fields={
            'asctime': 'timestamp',
            'levelname': 'level'
        },
        static_fields={'service': 'regdomain'}
    ))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper()))
    
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
