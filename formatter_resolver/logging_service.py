"""Logging sink used by the resolver.

The resolver never builds user-facing output itself; everything it has to say
goes through these three calls.
"""

import logging


class LoggingService:
    """Thin adapter from resolver log calls to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("formatter_resolver")

    def log_info(self, message: str) -> None:
        self.logger.info(message)

    def log_debug(self, message: str) -> None:
        self.logger.debug(message)

    def log_error(self, message: str, error: BaseException | None = None) -> None:
        """Log an error, attaching the triggering exception when there is one."""
        if error is None:
            self.logger.error(message)
            return
        self.logger.error(f"{message} ({type(error).__name__}: {error})", exc_info=error)
