"""
Error reporting for action processing.

Rejected actions are expected outcomes and are logged as warnings; database
errors abort the execution and are logged as errors.
"""

from typing import Any, Dict

import structlog


class ErrorHandler:
    """Log rejected actions and storage failures"""

    def __init__(self):
        self.logger = structlog.get_logger()

    def handle_validation_error(self, error: Exception, action: Dict[str, Any]) -> None:
        """
        Handle a rejected ledger action.

        Args:
            error: The exception that aborted the action
            action: The action that was rejected
        """
        self.logger.warning(
            "Action rejected",
            error=str(error),
            error_code=getattr(error, "error_code", None),
            action=action,
        )

    def handle_database_error(self, error: Exception, context: Dict[str, Any]) -> None:
        """
        Handle database errors.

        Args:
            error: The exception that occurred
            context: Additional context about the error
        """
        self.logger.error("Database error occurred", error=str(error), context=context)
