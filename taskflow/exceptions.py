class ValidationError(Exception):
    """Raised when an enhancement request is missing required fields."""


class RateLimitExceeded(Exception):
    """Raised when the daily enhancement budget is used up."""


class EnhancementFailed(Exception):
    """Raised when the text-generation provider call fails."""


class TaskBusyError(Exception):
    """Raised when a task already has an enhancement in flight."""


class NotFoundError(Exception):
    """Raised by HTTP routes when a list or task id does not resolve."""
