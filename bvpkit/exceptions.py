import logging


# Library logger - no configuration, user controls output
logger = logging.getLogger(__name__)


class BVPKitError(Exception):
    """
    Base class for all bvpkit-specific errors.

    Args:
        message: The error message describing what went wrong
        context: Optional additional context about where the error occurred
    """

    def __init__(self, message: str, context: str | None = None) -> None:
        self.message = message
        self.context = context

        logger.debug("bvpkit exception: %s", self._format_message())
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with optional context."""
        if self.context:
            return f"{self.message} (Context: {self.context})"
        return self.message


class ConfigurationError(BVPKitError):
    """
    Raised when a problem or solver configuration is invalid.

    Always raised during setup, before any nonlinear solve is attempted.

    Examples:
        - Non-positive step size without an initial-guess trajectory
        - Unknown MIRK order
        - Two-point problem without a (bca, bcb) pair
    """

    pass


class DataIntegrityError(BVPKitError):
    """
    Raised when internal buffers become inconsistent.

    This indicates a bug in bvpkit rather than user error, e.g. a stage
    buffer count that no longer matches the number of mesh subintervals.
    """

    pass


class InterpolationError(BVPKitError):
    """Raised when a solution is queried outside its time domain."""

    pass
