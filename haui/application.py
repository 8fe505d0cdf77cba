"""Application factory — QCoreApplication creation, logging and language setup.

The presentation layer creates its own (GUI) application object; headless
callers and tests use ``create_application``. Either way
``configure_runtime`` wires logging, the Qt message handler and the
translation catalogue from the client configuration.
"""

from __future__ import annotations

import logging
import sys

from PyQt6.QtCore import QCoreApplication, QtMsgType, qInstallMessageHandler

from haui.config import ClientConfig, get_config
from haui.constants import APP_NAME, APP_ORGANIZATION, APP_VERSION, LOGGER_NAME
from haui.core.i18n import TranslationManager

_qt_logger = logging.getLogger(f"{LOGGER_NAME}.qt")


def _qt_message_handler(msg_type, context, message):
    """Route Qt diagnostics into the log; debug chatter is dropped."""
    if msg_type == QtMsgType.QtDebugMsg:
        return
    if msg_type == QtMsgType.QtWarningMsg:
        _qt_logger.warning(message)
    elif msg_type in (QtMsgType.QtCriticalMsg, QtMsgType.QtFatalMsg):
        _qt_logger.error(message)
    else:
        _qt_logger.info(message)


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Set up the package logger with a single console handler.

    Args:
        level: Logging level (name or number).

    Returns:
        Configured ``haui`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def configure_runtime(config: ClientConfig | None = None) -> ClientConfig:
    """Install logging, the Qt message handler and the UI language."""
    config = config if config is not None else get_config()
    setup_logging(config.log_level)
    qInstallMessageHandler(_qt_message_handler)
    TranslationManager.init(config.language)
    return config


def create_application(
    argv: list[str], config: ClientConfig | None = None,
) -> QCoreApplication:
    """Create and configure the QCoreApplication instance."""
    configure_runtime(config)

    app = QCoreApplication.instance() or QCoreApplication(argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_ORGANIZATION)
    app.setApplicationVersion(APP_VERSION)
    return app
