"""Project-wide logger shared by the parser, the evaluator and the sampler workers."""
import logging
import sys

LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(processName)s | %(message)s"


def get_logger(name: str = "expression_mapper", level: int = logging.INFO) -> logging.Logger:
    """
    Return the named logger, attaching a stderr handler on first use.

    :param str name: Logger name
    :param int level: Logging level applied when the logger is first configured

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.setLevel(level)
        log.propagate = False
    return log


logger: logging.Logger = get_logger()
