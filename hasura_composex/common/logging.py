#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>


from __future__ import annotations

import logging as logthings
import sys


class MyFormatter(logthings.Formatter):
    default_format = "%(asctime)s [%(levelname)8s] %(message)s"
    debug_format = "%(asctime)s [%(levelname)8s] (%(filename)s.%(lineno)d , %(funcName)s,) %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    def format(self, record) -> str:
        if record.levelno == logthings.DEBUG:
            formatter = logthings.Formatter(self.debug_format, self.date_format)
        else:
            formatter = logthings.Formatter(self.default_format, self.date_format)
        return formatter.format(record)


class InfoFilter(logthings.Filter):
    """Only lets DEBUG and INFO records through"""

    def filter(self, rec):
        return rec.levelno in (logthings.DEBUG, logthings.INFO)


class ErrorFilter(logthings.Filter):
    """Only lets WARNING and above through"""

    def filter(self, rec):
        return rec.levelno not in (logthings.DEBUG, logthings.INFO)


def setup_logging(level: int = logthings.INFO):
    """
    Configures the hasura-compose-x logger. INFO and DEBUG go to stdout, anything above to stderr.
    """
    app_logger = logthings.getLogger("hasura-compose-x")

    for h in list(app_logger.handlers):
        app_logger.removeHandler(h)

    stdout_handler = logthings.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(MyFormatter())
    stdout_handler.setLevel(level)
    stdout_handler.addFilter(InfoFilter())

    stderr_handler = logthings.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(MyFormatter())
    stderr_handler.setLevel(logthings.WARNING)
    stderr_handler.addFilter(ErrorFilter())

    app_logger.addHandler(stdout_handler)
    app_logger.addHandler(stderr_handler)
    app_logger.setLevel(level)
    app_logger.propagate = False
    return app_logger


def set_log_level(level_name: str) -> bool:
    """
    Changes the level of LOG and of its stdout handler.

    :param str level_name: One of the logging level names, i.e. DEBUG
    :return: Whether the level was valid and applied
    """
    level = logthings.getLevelName(level_name.upper())
    if not isinstance(level, int):
        return False
    LOG.setLevel(level)
    LOG.handlers[0].setLevel(level)
    return True


LOG = setup_logging()
