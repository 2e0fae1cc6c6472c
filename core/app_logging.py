import logging

from pythonjsonlogger import jsonlogger


def setup_logger(level: str = "INFO", json: bool = True):
    """Install a single stream handler on the root logger.

    Calling it twice replaces the handler instead of stacking a second one.
    """
    handler = logging.StreamHandler()
    if json:
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'},
        )
    else:
        formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    handler.setFormatter(formatter)

    logger = logging.getLogger()
    for existing in list(logger.handlers):
        if getattr(existing, "_auth_api_handler", False):
            logger.removeHandler(existing)
    handler._auth_api_handler = True
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
