"""Domain errors for updock."""


class UpdockError(RuntimeError):
    """Base class for errors raised by updock."""


class ConfigurationError(UpdockError):
    """Raised when a template or its settings cannot be used safely."""


class TemplateNotFoundError(UpdockError):
    """Raised when a template identifier does not resolve to an adapter."""


class RuntimeCommandError(UpdockError):
    """Raised when a container runtime or hook command fails."""


class PollTimeout(UpdockError):
    """Raised when the health predicate never succeeds within the attempt budget."""

    def __init__(self, attempts: int):
        super().__init__(f"Application did not become healthy after {attempts} attempt(s).")
        self.attempts = attempts


class NotificationError(UpdockError):
    """Raised when a notification cannot be delivered."""
