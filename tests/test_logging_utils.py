import logging

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from servicemap_project.src.utils.logging_utils import level_from_name, qt_message_handler, setup_logging


def test_level_from_name():
    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name("WARNING") == logging.WARNING
    assert level_from_name("chatty") == logging.INFO


def test_setup_logging_writes_to_file_and_replaces_handlers(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "logs" / "servicemap.log"
    try:
        setup_logging(logging.DEBUG, str(log_file))
        setup_logging(logging.DEBUG, str(log_file))
        assert len(root.handlers) == 2

        logging.getLogger("servicemap.test").info("Area saved")
        for handler in root.handlers:
            handler.flush()
        assert "servicemap.test - INFO - Area saved" in log_file.read_text(encoding="utf-8")
    finally:
        qInstallMessageHandler(None)
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)


class _Context:
    category = "qt.svg"


def test_qt_messages_are_logged_at_matching_level(caplog):
    with caplog.at_level(logging.DEBUG, logger="qt"):
        qt_message_handler(QtMsgType.QtWarningMsg, _Context(), "icon not found")
        qt_message_handler(QtMsgType.QtDebugMsg, None, "painting")

    assert [(r.name, r.levelno, r.getMessage()) for r in caplog.records] == [
        ("qt", logging.WARNING, "[qt.svg] icon not found"),
        ("qt", logging.DEBUG, "painting"),
    ]
