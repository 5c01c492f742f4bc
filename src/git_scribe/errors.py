"""Exception types raised by git-scribe."""


class ScribeError(Exception):
    """Base class for all git-scribe errors."""


class NoChangesError(ScribeError):
    """The working tree has nothing pending."""

    def __init__(self, message: str = "No changes to commit") -> None:
        super().__init__(message)


class RepositoryAccessError(ScribeError):
    """Reading from or writing to the repository failed."""


class BackendError(ScribeError):
    """The generation backend failed or returned nothing usable."""


class ConfigError(ScribeError):
    """Invalid or incomplete configuration."""


class SelectionAborted(ScribeError):
    """The user dismissed a selection menu without choosing."""
