"""Logging utils"""

import os
import sys

from loguru import logger


def setup_logger(level: str = "INFO"):
    """Setup the logger"""

    def get_log_settings(name, default_color, default_icon):
        color = os.getenv(f"SERIES_TRACKER_LOGGER_{name}_FG", default_color)
        icon = os.getenv(f"SERIES_TRACKER_LOGGER_{name}_ICON", default_icon)
        return f"<fg #{color}>", icon

    debug_color, debug_icon = get_log_settings("DEBUG", "98C1D9", "🐞")
    info_color, info_icon = get_log_settings("INFO", "818589", "📰")
    warning_color, warning_icon = get_log_settings("WARNING", "ffcc00", "⚠️ ")
    error_color, error_icon = get_log_settings("ERROR", "ff6666", "❌")
    success_color, success_icon = get_log_settings("SUCCESS", "00ff00", "✔️ ")

    logger.level("DEBUG", color=debug_color, icon=debug_icon)
    logger.level("INFO", color=info_color, icon=info_icon)
    logger.level("WARNING", color=warning_color, icon=warning_icon)
    logger.level("ERROR", color=error_color, icon=error_icon)
    logger.level("SUCCESS", color=success_color, icon=success_icon)

    log_format = (
        "<fg #818589>{time:YY-MM-DD} {time:HH:mm:ss}</fg #818589> | "
        "<level>{level.icon}</level> <level>{level: <9}</level> | "
        "<fg #e7e7e7>{module}</fg #e7e7e7>.<fg #e7e7e7>{function}</fg #e7e7e7> - <level>{message}</level>"
    )

    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=log_format,
        colorize=True,
        backtrace=False,
        diagnose=False,
        enqueue=False,
    )
