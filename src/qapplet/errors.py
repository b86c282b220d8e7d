"""
Exception hierarchy for the applet SDK.

Setup errors (ConfigurationError) are fatal. TransportError and its subclasses
are expected operating conditions: the engine logs them and keeps running.
"""


class AppletError(Exception):
    """Base class for all SDK errors."""


class ConfigurationError(AppletError):
    """Root config could not be parsed, or apply_config() rejected it."""


class InvalidEffectError(AppletError, ValueError):
    """A point was built with an effect outside the closed Effect set."""


class TransportError(AppletError):
    """HTTP call to the host signal endpoint failed below the HTTP level."""

    def __init__(self, message: str, url: str = "", cause: BaseException = None):
        super().__init__(message)
        self.url = url
        self.cause = cause


class HostUnavailableError(TransportError):
    """Connection refused: the host desktop software is not running."""


class StorageQuotaError(AppletError):
    """Writing a value would exceed the local storage quota."""
