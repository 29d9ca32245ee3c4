"""
Tracestore Exceptions
=====================

Error kinds raised while configuring the store, talking to the cluster and
installing the span index template.

Hierarchy:
    StorageError
    ├── ConfigurationError        bad StorageConfig values
    ├── InvalidVersionError       cluster version has no usable major number
    │   └── UnsupportedVersionError
    ├── ConnectivityError         no configured host answered
    ├── TemplateSubmissionError   cluster rejected the index template
    └── ClientClosedError         get() on a closed LazyClient

Errors with extra constructor arguments define __reduce__ so that copies
(one per thread waiting on a failed initialization) keep their fields.
"""


class StorageError(Exception):
    """Base class for every error raised by tracestore."""


class ConfigurationError(StorageError, ValueError):
    """A StorageConfig field is missing or out of range."""


class InvalidVersionError(StorageError, ValueError):
    """The engine version string cannot be parsed into a major version."""

    def __init__(self, version, reason: str = "unparseable version"):
        self.version = version
        self.reason = reason
        super().__init__(f"{reason}: {version!r}")

    def __reduce__(self):
        return (type(self), (self.version, self.reason))


class UnsupportedVersionError(InvalidVersionError):
    """The major version is older than any known mapping dialect."""

    def __init__(self, version, major: int):
        self.major = major
        super().__init__(version, f"no mapping dialect for major version {major}")

    def __reduce__(self):
        return (type(self), (self.version, self.major))


class ConnectivityError(StorageError, ConnectionError):
    """None of the configured hosts could be reached."""

    def __init__(self, hosts, cause=None):
        self.hosts = list(hosts)
        self.cause = cause
        message = f"no node available: {', '.join(self.hosts)}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)

    def __reduce__(self):
        return (type(self), (self.hosts, self.cause))


class TemplateSubmissionError(StorageError):
    """The cluster refused or did not acknowledge the index template."""

    def __init__(self, name: str, reason):
        self.name = name
        self.reason = reason
        super().__init__(f"index template {name!r} was not installed: {reason}")

    def __reduce__(self):
        return (type(self), (self.name, self.reason))


class ClientClosedError(StorageError):
    """The client holder was closed and can no longer hand out clients."""
