"""Logging setup for ServiceMap.

Console output always goes to stdout; ``--log-file`` adds a UTF-8 file
handler.  Qt's own diagnostics (``qWarning`` and friends, e.g. missing theme
icons or platform plugin notes) are routed into the ``qt`` logger so they
share the format and level filtering of the application's records.
"""

import logging
import os
import sys
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def setup_logging(log_level: int = logging.INFO,
                  log_file: Optional[str] = None) -> None:
    """Configure the root logger and forward Qt messages to it.

    Args:
        log_level: Root logging level.
        log_file: Optional log file path; its directory is created if needed.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    qInstallMessageHandler(qt_message_handler)
    root_logger.debug("Logging initialized (level=%s, file=%s)",
                      logging.getLevelName(log_level), log_file)


def qt_message_handler(msg_type, context, message: str) -> None:
    """Re-emit a Qt diagnostic on the ``qt`` logger at the matching level."""
    level = _QT_LEVELS.get(msg_type, logging.WARNING)
    category = getattr(context, "category", None)
    if category and category != "default":
        message = f"[{category}] {message}"
    logging.getLogger("qt").log(level, message)


def level_from_name(name: str) -> int:
    """Translate ``"debug"``/``"info"``/... into a :mod:`logging` constant.

    Unknown names fall back to ``logging.INFO``.
    """
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO
