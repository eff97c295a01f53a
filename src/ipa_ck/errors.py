"""Error types shared by ipa-ck components.

Components raise these typed errors; the CLI layer catches them at the top of
each command and turns them into a single-line message and a non-zero exit.
"""


class IpaCkError(Exception):
    """Base exception for ipa-ck errors."""

    exit_code = 1


class InvalidVersionError(IpaCkError):
    """Raised when a template version is malformed or not bundled."""

    pass


class NotInitializedError(IpaCkError):
    """Raised when a command needs project state that does not exist."""

    pass


class InvalidConfigKeyError(IpaCkError):
    """Raised when setting a project state key outside the allow-list."""

    pass


class PermissionDeniedError(IpaCkError):
    """Raised when the filesystem refuses a read or write."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class NotFoundError(IpaCkError):
    """Raised when a required file or directory is missing."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class SettingsError(IpaCkError):
    """Raised when the tool settings file cannot be loaded."""

    pass


__all__ = [
    "InvalidConfigKeyError",
    "InvalidVersionError",
    "IpaCkError",
    "NotFoundError",
    "NotInitializedError",
    "PermissionDeniedError",
    "SettingsError",
]
