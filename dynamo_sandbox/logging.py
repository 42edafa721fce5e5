import functools
import logging
import sys

QUIET_LOGGERS = ('botocore', 'urllib3', 'docker')


def configure_logging(level=logging.INFO, stream=None):
    "Send everything to stdout as human-readable lines"
    logger = logging.getLogger()
    logger.setLevel(level)
    for log_handler in list(logger.handlers):
        logger.removeHandler(log_handler)
    log_handler = logging.StreamHandler(stream or sys.stdout)
    log_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(log_handler)
    if level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return logger


def cli_logging(func):
    "Entrypoint decorator: log any uncaught error in our own format before it propagates"
    logger = logging.getLogger()

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as err:
            logger.exception(str(err))
            raise err

    return wrapper


# https://docs.python.org/3/howto/logging-cookbook.html#using-a-context-manager-for-selective-logging
class LogLevelContext:
    def __init__(self, logger, level):
        self.logger = logger
        self.level = level

    def __enter__(self):
        self.old_level = self.logger.level
        self.logger.setLevel(self.level)

    def __exit__(self, et, ev, tb):
        self.logger.setLevel(self.old_level)


class ConsoleFormatter(logging.Formatter):
    "Format records as `LEVEL message [key=value ...]`"

    extras = ('operation', 'attempt', 'endpoint', 'table')

    def format(self, record):
        parts = [f'{record.levelname:<7} {record.getMessage()}']
        context = [f'{extra}={getattr(record, extra)}' for extra in self.extras if hasattr(record, extra)]
        if context:
            parts.append('[' + ' '.join(context) + ']')
        line = ' '.join(parts)

        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
            line = f'{line}\n{record.exc_text}'
        if record.stack_info:
            line = f'{line}\n{self.formatStack(record.stack_info)}'
        return line
