import logging
import os
from logging.config import dictConfig
from config import settings


def configure_logging(session_id_run, log_file=None):
    # Set the default logging level
    log_level = logging.INFO if settings.PROD else logging.DEBUG
    log_file = log_file or settings.LOG_FILE

    # Rotating file output only in production
    handlers = ['h', 'file'] if settings.PROD and log_file else ['h']

    LOGGING_CONFIG = dict(
        version=1,
        disable_existing_loggers=False,
        formatters={
            'f': {
                'format': f'%(asctime)s %(name)-12s %(levelname)-8s [SESSION_ID: {session_id_run}] %(message)s',
            },
        },
        handlers={
            'h': {
                'class': 'logging.StreamHandler',
                'formatter': 'f',
                'level': log_level,
            },
        },
        root={
            'handlers': handlers,
            'level': log_level,
        },
        loggers={
            # SQL echo is far too chatty next to per-frame logging
            'sqlalchemy.engine': {'level': logging.WARNING},
        },
    )

    if 'file' in handlers:
        os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
        LOGGING_CONFIG['handlers']['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': log_file,
            'formatter': 'f',
            'level': log_level,
            'maxBytes': 1024 * 1024 * 5,  # 5 MB
            'backupCount': 10,  # Keep up to 10 backup logs
        }

    dictConfig(LOGGING_CONFIG)
