"""
Logging configuration for the DingTalk bot.
"""

import logging
import sys

def setup_logging():
    """Setup logging with proper format and handlers."""

    logger = logging.getLogger("dingtalk_bot")
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # QingLong client modules log through the same handler
    qinglong_logger = logging.getLogger("app.qinglong")
    qinglong_logger.setLevel(logging.INFO)
    qinglong_logger.handlers.clear()
    qinglong_logger.addHandler(handler)
    qinglong_logger.propagate = False

    # Prevent propagation to root logger
    logger.propagate = False

    return logger

# Global logger instance
bot_logger = setup_logging()
