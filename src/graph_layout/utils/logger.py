"""Global logging and error handling utilities"""
import sys
import logging
import traceback

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

logger = logging.getLogger('graph_layout')

_notice_handler = None


def set_notice_handler(handler):
    """Set the callable used to show user-facing notices

    Args:
        handler: Callable taking a message string, or None to fall back to logging
    """
    global _notice_handler
    _notice_handler = handler


def notify(message: str):
    """Show a short user-facing notice (status toast in the host UI)"""
    if _notice_handler:
        try:
            _notice_handler(message)
            return
        except Exception as e:
            logger.error(f"Notice handler failed: {e}")
    logger.info(f"NOTICE: {message}")


def loggerRaise(e: Exception, user_message: str = None):
    """Handle exceptions with an optional notice in release mode

    Args:
        e: The exception to handle
        user_message: User-friendly message to show (optional)

    In DEBUG_MODE:
        - Just raises the exception (shows full traceback)

    In RELEASE_MODE:
        - Logs the full traceback
        - Shows a notice with the user message or exception string
        - Then raises the exception
    """
    if DEBUG_MODE:
        raise e

    tb = traceback.format_exc()
    logger.error(f"ERROR: {tb}")
    notify(user_message if user_message else str(e))
    raise e
