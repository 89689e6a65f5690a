"""Logging utility."""

import logging
import os
from typing import Optional

APP_LOGGER_NAME = "assistant_bridge"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Prevent duplicate handlers, but let a later call change the level
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# Application logger instance
app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """
    Initialize the application logger with settings.

    Debug mode forces the DEBUG level so subprocess stderr and argument
    lists become visible.

    Args:
        settings: Application settings instance

    Returns:
        Configured application logger
    """
    global app_logger

    log_level = "DEBUG" if settings.debug else settings.log_level
    app_logger = setup_logger(
        name=APP_LOGGER_NAME,
        log_level=log_level,
        log_file=settings.log_file
    )

    return app_logger


def get_app_logger() -> logging.Logger:
    """
    Get the application logger.

    Returns:
        Application logger instance
    """
    if app_logger is None:
        # Return a default logger if not initialized
        return setup_logger(APP_LOGGER_NAME)

    return app_logger


def get_component_logger(component: str) -> logging.Logger:
    """
    Get a child of the application logger for one component.

    Records propagate to the application logger's handlers, so the
    component name shows up in the %(name)s field.

    Args:
        component: Component name, e.g. "DirectoryStore"

    Returns:
        Logger named "assistant_bridge.<component>"
    """
    return get_app_logger().getChild(component)
