"""Console logging for the controller, switched on by its debug level."""

import logging

from termcolor import colored

LOGGER_NAME = "dlpc900ctl"

_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG, 3: logging.DEBUG}
_COLORS = {
    logging.DEBUG: "blue",
    logging.INFO: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        level = colored(f"[{record.levelname}]", _COLORS.get(record.levelno, "white"), attrs=["bold"])
        return f"{level} {super().format(record)}"


def level_for_debug(debug: int) -> int:
    return _LEVELS.get(debug, logging.DEBUG)


def configure_logging(debug: int = 1) -> logging.Logger:
    """
    Set the package logger level from debug and, for debug above 0, attach a coloured console handler once.

    The level is set on every call, so a debug 0 controller lowers the shared logger back to WARNING
    after a more verbose one raised it.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_for_debug(debug))
    if debug > 0 and not any(getattr(h, "_dlpc900ctl", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(ColorFormatter("%(message)s"))
        handler._dlpc900ctl = True
        logger.addHandler(handler)
    return logger
