class DocChaserError(Exception):
    """Base class for errors raised by the reminder and notification core."""


class ConfigurationError(DocChaserError):
    """A required setting (credentials, sender identity, broker contact) is missing.

    Never retried automatically; an operator has to fix the configuration.
    """


class ValidationError(DocChaserError):
    """Input was rejected before any side effect took place."""


class SweepError(DocChaserError):
    """The reminder sweep could not load its work and was aborted."""


class SweepInProgressError(DocChaserError):
    """Another sweep is still running in this process."""
