# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Console logging for the launcher: '[timestamp] [LEVEL] message' lines.
"""
import logging
import sys
from typing import Optional, TextIO

import click

LOGGER_NAME = "so2local"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

LEVEL_NAMES = {
    logging.CRITICAL: "FATAL",
    logging.WARNING: "WARN",
}

class LauncherFormatter(logging.Formatter):
    """
    Renames CRITICAL to FATAL and colours serious levels red on a terminal.
    """
    def __init__(self, color: bool = False):
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so other handlers see the original level name
        record = logging.makeLogRecord(record.__dict__)
        level = LEVEL_NAMES.get(record.levelno, record.levelname)
        if self.color and record.levelno >= logging.ERROR:
            level = click.style(level, fg="red")
        record.levelname = level
        return super().format(record)

def configure_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Installs the launcher's console handler, replacing any previous one.

    :param verbose: Log DEBUG messages too.
    :param stream: Output stream, stdout by default.
    :return: The package logger.
    """
    stream = stream or sys.stdout
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(LauncherFormatter(color=bool(isatty and isatty())))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
