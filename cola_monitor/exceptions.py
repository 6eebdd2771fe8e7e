"""Exceptions raised by the monitor pipeline."""


class ColaMonitorError(Exception):
    """Base exception for all monitor errors."""


class ConfigError(ColaMonitorError):
    """Required configuration is missing."""


class SessionError(ColaMonitorError):
    """The browser-automation proxy could not provide a usable session."""


class RegistryError(ColaMonitorError):
    """The registry search could not be completed."""


class StorageError(ColaMonitorError):
    """The seen-labels state could not be written."""
