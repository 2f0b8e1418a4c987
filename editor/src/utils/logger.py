"""Global logging and error handling utilities"""
import sys
import logging
import traceback

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_logger = logging.getLogger('LayerEditor')


def configure_logging(level=logging.WARNING):
    """Install the editor's console logging setup

    Args:
        level: Root log level (default WARNING - only warnings and errors)
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)  # Output to console
        ]
    )


def loggerRaise(e: Exception, user_message: str = None):
    """Handle exceptions raised for caller contract violations

    Args:
        e: The exception to handle
        user_message: Human-readable context to log alongside it (optional)

    In DEBUG_MODE:
        - Just raises the exception (shows full traceback)

    In RELEASE_MODE:
        - Logs the message and the full traceback
        - Then raises the exception
    """
    if DEBUG_MODE:
        raise e

    message = user_message if user_message else str(e)
    tb = ''.join(traceback.format_exception(type(e), e, e.__traceback__))
    _logger.error(f"{message}\n{tb}")

    # Re-raise so the caller can handle it appropriately
    raise e
