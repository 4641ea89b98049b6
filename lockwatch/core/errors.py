class LockwatchError(Exception):
    """Base class for every error raised by lockwatch."""


class LockfileError(LockwatchError):
    """The lockfile could not be read or has malformed package entries."""


class DependencyTreeError(LockwatchError):
    """The lockfile's dependency data is internally inconsistent."""


class ReportError(LockwatchError):
    """An audit report could not be decoded."""


class ConfigError(LockwatchError):
    """The output configuration file is unreadable or holds invalid values."""
